"""Debt account commands."""

import click

from finagenda.cli.display import format_money
from finagenda.cli.error_handling import handle_domain_error
from finagenda.cli.input_parsing import resolve_cli_amount, resolve_cli_date
from finagenda.domain.errors import DomainError, debt_not_found
from finagenda.domain.ledger import LedgerService
from finagenda.utils.record_resolver import resolve_record


@click.group()
def debt_group():
    """Manage debt accounts."""
    pass


@debt_group.command("add")
@click.argument("name", metavar="DEBT_NAME")
@click.pass_context
def add_debt(ctx, name: str):
    """Add a debt account with a zero balance."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    try:
        debt = service.add_debt(name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created debt account '{debt.name}' (ID: {debt.id})")


@debt_group.command("list")
@click.option("--history", is_flag=True, help="Show purchases and payments")
@click.pass_context
def list_debts(ctx, history: bool):
    """List debt accounts and their balances."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    debts = service.list_debts()
    if not debts:
        click.echo("No debt accounts found.")
        return

    click.echo("\nDebt accounts:")
    click.echo("-" * 60)
    for debt in debts:
        click.echo(f"ID: {debt.id:10s} | {debt.name:20s} | balance {format_money(debt.current_balance)}")
        if history:
            for event in debt.history:
                click.echo(
                    f"    {event.date} {event.kind.value:8s} {format_money(event.amount):>14s}  {event.description}"
                )


@debt_group.command("purchase")
@click.argument("debt", metavar="DEBT")
@click.argument("amount")
@click.option("--description", "-d", default="", help="What was bought")
@click.option("--date", "date_str", help="Purchase date (defaults to today)")
@click.pass_context
def add_purchase(ctx, debt: str, amount: str, description: str, date_str: str | None):
    """Add a purchase to a debt account's balance."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    value = resolve_cli_amount(ctx, amount)
    on_date = resolve_cli_date(ctx, date_str)

    try:
        debt_obj = resolve_record(service.list_debts(), debt, debt_not_found)
        updated = service.record_debt_purchase(debt_obj.id, value, description, on_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Balance of '{updated.name}' is now {format_money(updated.current_balance)}")


@debt_group.command("pay")
@click.argument("debt", metavar="DEBT")
@click.argument("amount")
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.pass_context
def schedule_payment(ctx, debt: str, amount: str, date_str: str | None):
    """Schedule a payment on a debt account.

    The payment is added to the ledger as a pending expense. The balance goes
    down when the entry is marked as completed with 'entry toggle'.
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    value = resolve_cli_amount(ctx, amount)
    on_date = resolve_cli_date(ctx, date_str)

    try:
        debt_obj = resolve_record(service.list_debts(), debt, debt_not_found)
        item = service.schedule_debt_payment(debt_obj.id, value, on_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Scheduled payment {item.id} of {format_money(value)} on {on_date}")


def register_commands(cli):
    """Register debt commands with main CLI."""
    cli.add_command(debt_group, name="debt")
