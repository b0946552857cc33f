"""Credit card commands."""

import click

from finagenda.cli.display import format_money, format_month
from finagenda.cli.error_handling import handle_domain_error
from finagenda.cli.input_parsing import resolve_cli_amount, resolve_cli_date
from finagenda.domain.errors import DomainError, card_not_found
from finagenda.domain.ledger import LedgerService
from finagenda.utils.record_resolver import resolve_record


@click.group()
def card_group():
    """Manage credit cards and card purchases."""
    pass


@card_group.command("add")
@click.argument("name", metavar="CARD_NAME")
@click.option("--closing-day", type=int, required=True, help="Day the invoice closes")
@click.option("--due-day", type=int, required=True, help="Day the invoice is due")
@click.option("--limit", "credit_limit", default="0", help="Credit limit")
@click.option("--color", default="slate", show_default=True, help="Display color")
@click.pass_context
def add_card(ctx, name: str, closing_day: int, due_day: int, credit_limit: str, color: str):
    """Add a credit card.

    Purchases made on or after the closing day go to the next month's invoice.

    Examples:
        finagenda card add "Nubank" --closing-day 3 --due-day 10
        finagenda card add "Visa Gold" --closing-day 25 --due-day 5 --limit 8000
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    limit = resolve_cli_amount(ctx, credit_limit)
    try:
        card = service.add_card(name, closing_day, due_day, credit_limit=limit, color=color)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created card '{card.name}' (ID: {card.id})")


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List all credit cards."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    cards = service.list_cards()
    if not cards:
        click.echo("No cards found.")
        return

    click.echo("\nCards:")
    click.echo("-" * 60)
    for card in cards:
        click.echo(
            f"ID: {card.id:10s} | {card.name:20s} | closes {card.closing_day:2d} | "
            f"due {card.due_day:2d} | limit {format_money(card.credit_limit)}"
        )


@card_group.command("remove")
@click.argument("card", metavar="CARD")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def remove_card(ctx, card: str, yes: bool):
    """Remove a card with all its purchases.

    CARD can be a card name or ID. Its open invoices disappear from the ledger;
    invoices already marked as paid are kept.
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    try:
        card_obj = resolve_record(service.list_cards(), card, card_not_found)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to remove card '{card_obj.name}'?"):
        click.echo("Removal cancelled.")
        return

    try:
        service.remove_card(card_obj.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Removed card '{card_obj.name}'")


@card_group.command("purchase")
@click.argument("card", metavar="CARD")
@click.argument("amount")
@click.argument("description")
@click.option("--installments", "-n", type=int, default=1, show_default=True, help="Number of installments")
@click.option("--date", "date_str", help="Purchase date (defaults to today)")
@click.option("--category", default="Other", show_default=True, help="Purchase category")
@click.pass_context
def add_purchase(
    ctx,
    card: str,
    amount: str,
    description: str,
    installments: int,
    date_str: str | None,
    category: str,
):
    """Record a purchase on a card.

    The total is split into INSTALLMENTS monthly parts, starting with the
    invoice the purchase date falls into.

    Examples:
        finagenda card purchase Nubank 300 "Headphones" -n 3 --date 2026-01-15
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    value = resolve_cli_amount(ctx, amount)
    purchase_date = resolve_cli_date(ctx, date_str, label="purchase date")

    try:
        card_obj = resolve_record(service.list_cards(), card, card_not_found)
        items = service.add_card_purchase(
            card_obj.id,
            description,
            value,
            installments=installments,
            purchase_date=purchase_date,
            category=category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    first = items[0]
    click.echo(
        f"Added {len(items)} installment(s) of {description} on '{card_obj.name}', "
        f"first invoice {format_month(first.year, first.month)}"
    )


@card_group.command("installments")
@click.argument("card", metavar="CARD", required=False)
@click.pass_context
def list_installments(ctx, card: str | None):
    """List card installments, optionally for one card."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    cards = service.list_cards()
    card_id = None
    if card is not None:
        try:
            card_id = resolve_record(cards, card, card_not_found).id
        except DomainError as e:
            handle_domain_error(ctx, e)

    items = service.list_card_installments(card_id)
    if not items:
        click.echo("No installments found.")
        return

    names = {c.id: c.name for c in cards}
    click.echo("\nInstallments:")
    click.echo("-" * 80)
    for item in items:
        click.echo(
            f"{format_month(item.year, item.month)} | {names.get(item.card_id, '?'):15s} | "
            f"{item.description[:24]:24s} | {item.installment_number}/{item.total_installments} | "
            f"{format_money(item.amount)}"
        )


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
