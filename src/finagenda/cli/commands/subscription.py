"""Subscription commands."""

import click

from finagenda.cli.display import format_money
from finagenda.cli.error_handling import handle_domain_error
from finagenda.cli.input_parsing import resolve_cli_amount
from finagenda.domain.errors import DomainError, subscription_not_found
from finagenda.domain.ledger import LedgerService
from finagenda.utils.record_resolver import resolve_record


@click.group()
def subscription_group():
    """Manage recurring subscriptions."""
    pass


@subscription_group.command("add")
@click.argument("name")
@click.argument("amount")
@click.option("--day", "billing_day", type=int, required=True, help="Billing day of month")
@click.option("--category", default="Subscriptions", show_default=True, help="Category")
@click.pass_context
def add_subscription(ctx, name: str, amount: str, billing_day: int, category: str):
    """Add a subscription billed every month.

    Its charges are forecast for the next twelve months.

    Examples:
        finagenda subscription add Netflix 55.90 --day 12
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    value = resolve_cli_amount(ctx, amount)
    try:
        sub = service.add_subscription(name, value, billing_day, category=category)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created subscription '{sub.name}' (ID: {sub.id})")


@subscription_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include cancelled subscriptions")
@click.pass_context
def list_subscriptions(ctx, show_all: bool):
    """List subscriptions."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    subs = [s for s in service.list_subscriptions() if show_all or s.active]
    if not subs:
        click.echo("No subscriptions found.")
        return

    click.echo("\nSubscriptions:")
    click.echo("-" * 60)
    for sub in subs:
        status = "" if sub.active else " (cancelled)"
        click.echo(
            f"ID: {sub.id:10s} | {sub.name:20s} | day {sub.billing_day:2d} | "
            f"{format_money(sub.amount)}{status}"
        )


@subscription_group.command("cancel")
@click.argument("subscription", metavar="SUBSCRIPTION")
@click.pass_context
def cancel_subscription(ctx, subscription: str):
    """Cancel a subscription from this month on.

    SUBSCRIPTION can be a name or ID. Charges from earlier months are kept.
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    try:
        sub = resolve_record(service.list_subscriptions(), subscription, subscription_not_found)
        removed = service.cancel_subscription(sub.id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Cancelled '{sub.name}', removed {len(removed)} upcoming charge(s)")


def register_commands(cli):
    """Register subscription commands with main CLI."""
    cli.add_command(subscription_group, name="subscription")
