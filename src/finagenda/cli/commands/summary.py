"""Balance summary commands."""

from datetime import date

import click

from finagenda.cli.display import format_money, format_month
from finagenda.cli.input_parsing import resolve_cli_month
from finagenda.domain.ledger import LedgerService

MONTH_NAMES = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


@click.group()
def summary_group():
    """Show balances and reports."""
    pass


@summary_group.command("month")
@click.option("--month", "month_str", help="Month as YYYY-MM (defaults to this month)")
@click.pass_context
def month_summary(ctx, month_str: str | None):
    """Show income, expenses and balances for a month."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    year, month = resolve_cli_month(ctx, month_str)
    summary = service.month_summary(year, month)

    rows = [
        ("Previous balance", summary.previous_balance),
        ("Income", summary.total_income),
        ("Expenses", summary.total_expense),
        ("Received", summary.realized_income),
        ("Paid", summary.realized_expense),
        ("Current balance", summary.current_balance),
        ("End of month balance", summary.end_of_month_balance),
    ]
    click.echo(f"\nSummary for {format_month(year, month)}:")
    click.echo("-" * 60)
    for label, value in rows:
        click.echo(f"{label:<40} {format_money(value):>19}")


@summary_group.command("daily")
@click.option("--month", "month_str", help="Month as YYYY-MM (defaults to this month)")
@click.pass_context
def daily_summary(ctx, month_str: str | None):
    """Show the running balance for each day of a month."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    year, month = resolve_cli_month(ctx, month_str)
    balances = service.daily_balances(year, month)

    click.echo(f"\nDaily balance for {format_month(year, month)}:")
    click.echo("-" * 60)
    for item in balances:
        click.echo(f"{item.day:>3}  {format_money(item.balance):>19}")


@summary_group.command("year")
@click.option("--year", type=int, help="Year (defaults to this year)")
@click.pass_context
def year_summary(ctx, year: int | None):
    """Show income, expenses and balance for each month of a year."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    year = year or date.today().year
    report = service.yearly_report(year)

    click.echo(f"\nReport for {year}:")
    click.echo("-" * 60)
    click.echo(f"{'Month':<6} {'Income':>17} {'Expenses':>17} {'Balance':>17}")
    click.echo("-" * 60)
    for totals in report:
        click.echo(
            f"{MONTH_NAMES[totals.month]:<6} {format_money(totals.income):>17} "
            f"{format_money(totals.expense):>17} {format_money(totals.balance):>17}"
        )


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
