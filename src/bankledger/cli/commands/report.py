"""Trial balance and balance sheet commands."""

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.ledger import LedgerService


@click.command("trial-balance")
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, required=True, help="Fiscal period ID")
@click.pass_context
def trial_balance(ctx, company: int, period_id: int):
    """Show per-account totals and whether debits equal credits."""
    service = LedgerService(ctx.obj["db"])

    try:
        result = service.trial_balance(company, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{'Account':12s} {'Name':30s} {'Debit':>12s} {'Credit':>12s}")
    click.echo("-" * 70)
    for totals in result.accounts:
        click.echo(
            f"{totals.account_key:12s} {totals.account_name[:30]:30s} "
            f"{totals.debit_total:>12.2f} {totals.credit_total:>12.2f}"
        )
    click.echo("-" * 70)
    click.echo(f"{'Total':43s} {result.total_debits:>12.2f} {result.total_credits:>12.2f}")

    if result.balanced:
        click.echo("\nTrial balance is balanced")
    else:
        click.echo(f"\nWarning: {result.warning}")


@click.command("balance-sheet")
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, required=True, help="Fiscal period ID")
@click.pass_context
def balance_sheet(ctx, company: int, period_id: int):
    """Check assets = liabilities + equity (including net profit)."""
    service = LedgerService(ctx.obj["db"])

    try:
        result = service.balance_sheet(company, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTotal assets:      {result.total_assets:>12.2f}")
    click.echo(f"Total liabilities: {result.total_liabilities:>12.2f}")
    click.echo(f"Total equity:      {result.total_equity:>12.2f}")
    click.echo(f"Net profit:        {result.net_profit:>12.2f}")

    if result.balanced:
        click.echo("\nBalance sheet is balanced")
    else:
        click.echo(f"\nWarning: {result.warning}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(trial_balance)
    cli.add_command(balance_sheet)
