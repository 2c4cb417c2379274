"""Data reset command."""

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.transaction import TransactionService


@click.command("reset-transactions")
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, required=True, help="Fiscal period ID")
@click.confirmation_option(prompt="Delete all stored transactions for this period?")
@click.pass_context
def reset_transactions(ctx, company: int, period_id: int):
    """Delete every stored transaction of a company's fiscal period."""
    service = TransactionService(ctx.obj["db"])

    try:
        deleted = service.reset_transactions(company, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Deleted {deleted} transaction{'s' if deleted != 1 else ''}")


def register_commands(cli):
    """Register reset command with main CLI."""
    cli.add_command(reset_transactions)
