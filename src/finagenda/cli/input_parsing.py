"""CLI helpers for parsing dates, months and amounts."""

from datetime import date
from decimal import Decimal

import click

from finagenda.utils.amount_parser import parse_amount
from finagenda.utils.date_parser import parse_date, parse_month


def resolve_cli_date(ctx, value: str | None, label: str = "date") -> date:
    """Parse a date option, defaulting to today when it is not given."""
    if value is None:
        return date.today()
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_month(ctx, value: str | None) -> tuple[int, int]:
    """Parse a month option into (year, 0-based month), defaulting to this month."""
    if value is None:
        today = date.today()
        return today.year, today.month - 1
    try:
        return parse_month(value)
    except ValueError as e:
        click.echo(f"Error: Invalid month: {e}", err=True)
        ctx.exit(1)


def resolve_cli_amount(ctx, value: str) -> Decimal:
    """Parse an amount argument."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)
