"""Bank statement import command."""

from pathlib import Path

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.statement_import import StatementImportService


@click.command("import-statement")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, required=True, help="Fiscal period ID")
@click.pass_context
def import_statement(ctx, statement_file: Path, company: int, period_id: int):
    """Import transactions from a bank statement (PDF or text)."""
    service = StatementImportService(ctx.obj["db"])

    try:
        result = service.import_statement(statement_file, company, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nImport complete:")
    click.echo(f"  Imported: {result['imported']} transactions")
    click.echo(f"  Unmatched lines: {result['unmatched']}")
    if result["out_of_period"]:
        click.echo(f"  Outside period: {result['out_of_period']}")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register statement import command with main CLI."""
    cli.add_command(import_statement)
