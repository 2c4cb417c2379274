"""Transaction listing and classification commands."""

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.transaction import TransactionService


@click.command("transactions")
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, help="Fiscal period ID")
@click.pass_context
def list_transactions(ctx, company: int, period_id: int | None):
    """List stored transactions."""
    service = TransactionService(ctx.obj["db"])

    transactions = service.list_transactions(company, period_id)
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        debit = f"{txn.debit_amount:.2f}" if txn.debit_amount is not None else ""
        credit = f"{txn.credit_amount:.2f}" if txn.credit_amount is not None else ""
        fee = "##" if txn.service_fee else "  "
        click.echo(
            f"{txn.id:5d} | {txn.transaction_date} | {txn.details[:40]:40s} | "
            f"{debit:>12s} | {credit:>12s} {fee}"
        )


@click.command("classify")
@click.argument("transaction_id", type=int)
@click.argument("account_code", metavar="ACCOUNT_CODE")
@click.pass_context
def classify_transaction(ctx, transaction_id: int, account_code: str):
    """Classify a transaction into a ledger account.

    Examples:
        bankledger classify 12 8100
    """
    service = TransactionService(ctx.obj["db"])

    try:
        service.classify_transaction(transaction_id, account_code)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Classified transaction {transaction_id} as {account_code}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(list_transactions)
    cli.add_command(classify_transaction)
