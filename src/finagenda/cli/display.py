"""Formatting helpers shared by the CLI commands."""

from decimal import Decimal

from finagenda.domain.entities import EntryKind, LedgerEntry


def format_money(amount: Decimal) -> str:
    return f"R$ {amount:,.2f}"


def format_month(year: int, month: int) -> str:
    """Render a 0-based month as YYYY-MM."""
    return f"{year:04d}-{month + 1:02d}"


def entry_flags(entry: LedgerEntry) -> str:
    """Short markers for the kind of series an entry belongs to."""
    flags = []
    if entry.is_credit_card_invoice:
        flags.append("invoice")
    if entry.is_subscription:
        flags.append("subscription")
    elif entry.is_fixed:
        flags.append("fixed")
    if entry.total_installments and entry.total_installments > 1:
        flags.append(f"{entry.installment_number}/{entry.total_installments}")
    if entry.debt_id:
        flags.append("debt")
    if entry.partial_payments:
        flags.append("partial")
    return ", ".join(flags)


def format_entry(entry: LedgerEntry) -> str:
    """One table row for a ledger entry."""
    status = "x" if entry.completed else " "
    sign = {EntryKind.INCOME: "+", EntryKind.EXPENSE: "-"}.get(entry.kind, " ")
    when = f"{format_month(entry.year, entry.month)}-{entry.day:02d}"
    amount = f"{sign}{format_money(entry.amount)}"
    line = (
        f"[{status}] {entry.id:10s} | {when} | {entry.category[:14]:14s} | "
        f"{entry.description[:24]:24s} | {amount:>16s}"
    )
    flags = entry_flags(entry)
    if flags:
        line += f" ({flags})"
    return line
