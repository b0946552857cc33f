"""Ledger entry commands."""

import click

from finagenda.cli.display import format_entry, format_money, format_month
from finagenda.cli.error_handling import handle_domain_error
from finagenda.cli.input_parsing import resolve_cli_amount, resolve_cli_date, resolve_cli_month
from finagenda.domain.entities import EntryKind
from finagenda.domain.errors import DomainError, entry_not_found
from finagenda.domain.ledger import LedgerService
from finagenda.domain.months import from_date

KIND_CHOICES = [kind.value for kind in EntryKind]


@click.group()
def entry_group():
    """Manage ledger entries."""
    pass


@entry_group.command("add")
@click.argument("category")
@click.argument("amount")
@click.option(
    "--kind",
    type=click.Choice(KIND_CHOICES),
    default=EntryKind.EXPENSE.value,
    show_default=True,
    help="Entry kind",
)
@click.option("--date", "date_str", help="Date of the (first) entry (defaults to today)")
@click.option("--description", "-d", default="", help="Entry description")
@click.option("--sub-category", help="Optional sub-category")
@click.option("--installments", "-n", type=int, default=1, show_default=True, help="Split into N monthly installments")
@click.option("--fixed", is_flag=True, help="Repeat every month for a year")
@click.pass_context
def add_entry(
    ctx,
    category: str,
    amount: str,
    kind: str,
    date_str: str | None,
    description: str,
    sub_category: str | None,
    installments: int,
    fixed: bool,
):
    """Add an entry to the ledger.

    AMOUNT is always positive; the kind decides whether it adds or subtracts.
    Appointments carry no amount (pass 0).

    Examples:
        finagenda entry add Salary 5000 --kind income --fixed
        finagenda entry add Groceries 250.40 -d "Weekly market"
        finagenda entry add Electronics 1200 --installments 3 --date 2026-01-15
        finagenda entry add Dentist 0 --kind appointment --date "next week"
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    value = resolve_cli_amount(ctx, amount)
    on_date = resolve_cli_date(ctx, date_str)
    year, month, day = from_date(on_date)

    try:
        entries = service.add_entry(
            year=year,
            month=month,
            day=day,
            kind=EntryKind(kind),
            category=category,
            amount=value,
            description=description,
            sub_category=sub_category,
            installments=installments,
            is_fixed=fixed,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if len(entries) == 1:
        click.echo(f"Added entry {entries[0].id}")
    else:
        first, last = entries[0], entries[-1]
        click.echo(
            f"Added {len(entries)} entries from {format_month(first.year, first.month)} "
            f"to {format_month(last.year, last.month)}"
        )


@entry_group.command("list")
@click.option("--month", "month_str", help="Month to show as YYYY-MM (defaults to this month)")
@click.option("--all", "show_all", is_flag=True, help="Show every month")
@click.pass_context
def list_entries(ctx, month_str: str | None, show_all: bool):
    """List ledger entries for a month."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    if show_all:
        entries = service.list_entries()
        title = "All entries"
    else:
        year, month = resolve_cli_month(ctx, month_str)
        entries = service.list_entries(year=year, month=month)
        title = f"Entries for {format_month(year, month)}"

    if not entries:
        click.echo("No entries found.")
        return

    entries = sorted(entries, key=lambda e: (e.year, e.month, e.day))
    click.echo(f"\n{title}:")
    click.echo("-" * 100)
    for item in entries:
        click.echo(format_entry(item))


@entry_group.command("edit")
@click.argument("entry_id")
@click.option("--amount", help="New amount")
@click.option("--date", "date_str", help="New date")
@click.option("--day", type=int, help="New day of month")
@click.option("--kind", type=click.Choice(KIND_CHOICES), help="New kind")
@click.option("--category", help="New category")
@click.option("--sub-category", help="New sub-category")
@click.option("--description", "-d", help="New description")
@click.option("--future", is_flag=True, help="Apply to this and later entries of the series")
@click.pass_context
def edit_entry(
    ctx,
    entry_id: str,
    amount: str | None,
    date_str: str | None,
    day: int | None,
    kind: str | None,
    category: str | None,
    sub_category: str | None,
    description: str | None,
    future: bool,
):
    """Edit an entry.

    With --future the amount, day, description and categories are also
    applied to the later entries of the same fixed series, subscription or
    installment plan.

    Examples:
        finagenda entry edit a1b2c3d4e5 --amount 5500 --future
        finagenda entry edit a1b2c3d4e5 --day 10 -d "Rent"
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    changes = {}
    if amount is not None:
        changes["amount"] = resolve_cli_amount(ctx, amount)
    if date_str is not None:
        changes["year"], changes["month"], changes["day"] = from_date(
            resolve_cli_date(ctx, date_str)
        )
    if day is not None:
        changes["day"] = day
    if kind is not None:
        changes["kind"] = EntryKind(kind)
    if category is not None:
        changes["category"] = category
    if sub_category is not None:
        changes["sub_category"] = sub_category
    if description is not None:
        changes["description"] = description

    if not changes:
        click.echo("Error: Nothing to change; pass at least one option.", err=True)
        ctx.exit(1)

    try:
        updated = service.update_entry(entry_id, changes, apply_to_future=future)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if updated is None:
        click.echo(f"Error: {entry_not_found(entry_id)}", err=True)
        ctx.exit(1)
    click.echo(f"Updated entry {entry_id}")


@entry_group.command("delete")
@click.argument("entry_id")
@click.option("--future", is_flag=True, help="Also delete the later entries of the series")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: str, future: bool, yes: bool):
    """Delete an entry."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    item = db.get_entry(entry_id)
    if item is None:
        click.echo(f"Error: {entry_not_found(entry_id)}", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete '{item.description or item.category}' ({entry_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        removed = service.delete_entry(entry_id, apply_to_future=future)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted {len(removed)} entr{'y' if len(removed) == 1 else 'ies'}")


@entry_group.command("toggle")
@click.argument("entry_id")
@click.pass_context
def toggle_entry(ctx, entry_id: str):
    """Mark an entry as completed, or back to pending."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    try:
        item = service.toggle_completed(entry_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if item is None:
        click.echo(f"Error: {entry_not_found(entry_id)}", err=True)
        ctx.exit(1)
    state = "completed" if item.completed else "pending"
    click.echo(f"Entry {entry_id} is now {state}")


@entry_group.command("move")
@click.argument("entry_id")
@click.argument("day", type=int)
@click.pass_context
def move_entry(ctx, entry_id: str, day: int):
    """Move an entry to another day of its month."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    try:
        item = service.move_entry(entry_id, day)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if item is None:
        click.echo(f"Error: {entry_not_found(entry_id)}", err=True)
        ctx.exit(1)
    click.echo(f"Moved entry {entry_id} to day {item.day}")


@entry_group.command("pay")
@click.argument("entry_id")
@click.argument("amount")
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.pass_context
def pay_entry(ctx, entry_id: str, amount: str, date_str: str | None):
    """Record a partial payment on an open entry."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    value = resolve_cli_amount(ctx, amount)
    paid_on = resolve_cli_date(ctx, date_str)

    try:
        item = service.record_partial_payment(entry_id, value, paid_on)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if item is None:
        click.echo(f"Error: {entry_not_found(entry_id)}", err=True)
        ctx.exit(1)
    click.echo(f"Paid {format_money(value)}; {format_money(item.amount)} still open")


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
