"""CSV import command."""

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.csv_import import CSVImportService


@click.command("import-csv")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--period", "period_id", type=int, help="Only import rows of this fiscal period ID")
@click.pass_context
def import_csv(ctx, csv_file: str, company: int, period_id: int | None):
    """Import transactions from a CSV export."""
    service = CSVImportService(ctx.obj["db"])

    try:
        result = service.import_csv(csv_file_path=csv_file, company_id=company, fiscal_period_id=period_id)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nImport complete:")
    click.echo(f"  Imported: {result['imported']} transactions")
    click.echo(f"  Skipped: {result['skipped']} rows")
    for detail in result["skipped_details"]:
        click.echo(f"    {detail}")
    if result["errors"]:
        click.echo(f"  Errors: {len(result['errors'])}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register CSV import command with main CLI."""
    cli.add_command(import_csv)
