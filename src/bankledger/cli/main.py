"""Main CLI entry point."""

import click
from bankledger.database.factories import create_sqlite_database
from bankledger.logging_config import configure_logging

# Import and register all commands at module level
from bankledger.cli.commands import (
    account,
    import_csv,
    import_statement,
    period,
    report,
    reset,
    transaction,
    verify,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BANKLEDGER_DB_PATH environment variable)",
    envvar="BANKLEDGER_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Bankledger - bank statement import, reconciliation and ledger checks.

    Parse bank statements into transactions, reconcile them against CSV
    exports, classify them into a chart of accounts and check the trial
    balance and balance sheet.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
period.register_commands(cli)
account.register_commands(cli)
import_statement.register_commands(cli)
import_csv.register_commands(cli)
verify.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)
reset.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
