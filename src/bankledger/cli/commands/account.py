"""Chart-of-accounts commands."""

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.account import AccountService


@click.group("account")
def account_group():
    """Manage ledger accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="NAME")
@click.pass_context
def create_account(ctx, code: str, name: str):
    """Create a ledger account.

    The code range decides the account type: 1000-2999 asset,
    3000-4999 liability, 5000-5999 equity, 6000-7999 revenue,
    8000-9999 expense.

    Examples:
        bankledger account create 1000 "Bank"
        bankledger account create 8100 "Bank charges"
    """
    service = AccountService(ctx.obj["db"])

    try:
        account_id = service.create_account(code=code, name=name)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created account {code} '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all ledger accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        kind = acc.account_type.value if acc.account_type else "-"
        click.echo(f"{acc.code:10s} | {acc.name:30s} | {kind}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group)
