"""Synchronization command."""

import click

from finagenda.cli.display import format_money
from finagenda.cli.error_handling import handle_domain_error
from finagenda.cli.input_parsing import resolve_cli_amount
from finagenda.domain.errors import DomainError
from finagenda.domain.ledger import LedgerService


@click.command("sync")
@click.option("--starting-balance", help="Set the balance carried in before the first entry")
@click.pass_context
def sync(ctx, starting_balance: str | None):
    """Recompute card invoices and subscription forecasts.

    Every command that changes data already does this; run it after the
    month turns to extend the forecast window.
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    if starting_balance is not None:
        value = resolve_cli_amount(ctx, starting_balance)
        service.set_starting_balance(value)
        click.echo(f"Starting balance set to {format_money(value)}")

    try:
        state = service.synchronize()
    except DomainError as e:
        handle_domain_error(ctx, e)

    invoices = sum(1 for item in state.ledger if item.is_credit_card_invoice)
    forecasts = sum(1 for item in state.ledger if item.is_subscription)
    click.echo(
        f"Ledger synchronized: {len(state.ledger)} entries, "
        f"{invoices} invoice(s), {forecasts} subscription charge(s)"
    )


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync)
