"""Fiscal period commands."""

import click

from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.fiscal_period import FiscalPeriodService
from bankledger.utils.date_parser import parse_date


@click.group("period")
def period_group():
    """Manage fiscal periods."""
    pass


@period_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--company", type=int, required=True, help="Company ID")
@click.option("--start", "start_str", required=True, help="First day of the period (YYYY-MM-DD)")
@click.option("--end", "end_str", required=True, help="Last day of the period (YYYY-MM-DD)")
@click.pass_context
def create_period(ctx, name: str, company: int, start_str: str, end_str: str):
    """Create a fiscal period.

    Examples:
        bankledger period create FY2024-2025 --company 1 --start 2024-03-01 --end 2025-02-28
    """
    service = FiscalPeriodService(ctx.obj["db"])

    try:
        start = parse_date(start_str, dayfirst=True)
        end = parse_date(end_str, dayfirst=True)
        period_id = service.create_period(company, name, start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created fiscal period '{name}' (ID: {period_id})")


@period_group.command("list")
@click.option("--company", type=int, required=True, help="Company ID")
@click.pass_context
def list_periods(ctx, company: int):
    """List a company's fiscal periods."""
    service = FiscalPeriodService(ctx.obj["db"])

    periods = service.list_periods(company)
    if not periods:
        click.echo("No fiscal periods found.")
        return

    click.echo("\nFiscal periods:")
    click.echo("-" * 60)
    for p in periods:
        status = "closed" if p.is_closed else "open"
        click.echo(f"ID: {p.id:3d} | {p.name:20s} | {p.start_date} to {p.end_date} | {status}")


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group)
