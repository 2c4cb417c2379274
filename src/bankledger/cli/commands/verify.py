"""Statement verification command."""

from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.reconciliation import ReconciliationService


def _describe(txn) -> str:
    amount = txn.debit_amount if txn.debit_amount is not None else txn.credit_amount
    side = "DR" if txn.debit_amount is not None else "CR"
    return f"{txn.transaction_date} | {txn.details[:40]:40s} | {amount:>12} {side}"


@click.command("verify")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, required=True, help="Fiscal period ID")
@click.option(
    "--tolerance",
    default="0.01",
    envvar="BANKLEDGER_TOLERANCE",
    show_default=True,
    help="Largest total difference treated as equal",
)
@click.pass_context
def verify_statement(ctx, statement_file: Path, company: int, period_id: int, tolerance: str):
    """Reconcile a bank statement against the stored transactions of a period."""
    try:
        tolerance_value = Decimal(tolerance)
    except InvalidOperation:
        handle_domain_error(ctx, ValueError(f"Invalid tolerance '{tolerance}'"))
        return

    service = ReconciliationService(ctx.obj["db"], tolerance=tolerance_value)
    try:
        report = service.verify_document(statement_file, company, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nStatement debits:  {report.total_debits:>12.2f}")
    click.echo(f"Statement credits: {report.total_credits:>12.2f}")
    click.echo(f"Final balance:     {report.final_balance:>12.2f}")

    for message in report.discrepancies:
        click.echo(f"  {message}")
    if report.missing_transactions:
        click.echo(f"\nMissing from store ({len(report.missing_transactions)}):")
        for txn in report.missing_transactions:
            click.echo(f"  {_describe(txn)}")
    if report.extra_transactions:
        click.echo(f"\nNot on statement ({len(report.extra_transactions)}):")
        for txn in report.extra_transactions:
            click.echo(f"  {_describe(txn)}")

    if report.is_valid:
        click.echo("\nVerification passed")
    else:
        click.echo("\nVerification failed")
        ctx.exit(2)


def register_commands(cli):
    """Register verify command with main CLI."""
    cli.add_command(verify_statement)
