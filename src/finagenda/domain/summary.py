"""Running balances and period totals over the ledger."""

from decimal import Decimal
from typing import Iterable, Sequence

from finagenda.domain.entities import (
    DailyBalance,
    EntryKind,
    LedgerEntry,
    MonthSummary,
    MonthTotals,
)
from finagenda.domain.months import days_in_month, month_key

ZERO = Decimal("0")


def _totals(entries: Iterable[LedgerEntry]) -> tuple[Decimal, Decimal]:
    income = expense = ZERO
    for entry in entries:
        if entry.kind == EntryKind.INCOME:
            income += entry.amount
        elif entry.kind == EntryKind.EXPENSE:
            expense += entry.amount
    return income, expense


def overall_balance(ledger: Sequence[LedgerEntry], starting_balance: Decimal = ZERO) -> Decimal:
    """Starting balance plus every income minus every expense."""
    income, expense = _totals(ledger)
    return starting_balance + income - expense


def summarize_month(
    ledger: Sequence[LedgerEntry],
    year: int,
    month: int,
    starting_balance: Decimal = ZERO,
) -> MonthSummary:
    """Summarize one month of the ledger.

    Args:
        ledger: Full ledger
        year: Year of the month
        month: Month (0..11)
        starting_balance: Balance before the first ledger entry

    Returns:
        MonthSummary where ``current_balance`` counts only completed entries
        of the month and ``end_of_month_balance`` counts all of them
    """
    key = month_key(year, month)
    previous_income, previous_expense = _totals(entry for entry in ledger if entry.key < key)
    current = [entry for entry in ledger if entry.key == key]
    total_income, total_expense = _totals(current)
    realized_income, realized_expense = _totals(entry for entry in current if entry.completed)

    previous_balance = starting_balance + previous_income - previous_expense
    return MonthSummary(
        previous_balance=previous_balance,
        total_income=total_income,
        total_expense=total_expense,
        realized_income=realized_income,
        realized_expense=realized_expense,
        current_balance=previous_balance + realized_income - realized_expense,
        end_of_month_balance=previous_balance + total_income - total_expense,
    )


def daily_balances(
    ledger: Sequence[LedgerEntry],
    year: int,
    month: int,
    previous_balance: Decimal = ZERO,
) -> list[DailyBalance]:
    """Running balance at the end of each day of a month."""
    key = month_key(year, month)
    by_day: dict[int, list[LedgerEntry]] = {}
    for entry in ledger:
        if entry.key == key:
            by_day.setdefault(entry.day, []).append(entry)

    balance = previous_balance
    result = []
    for day in range(1, days_in_month(year, month) + 1):
        income, expense = _totals(by_day.get(day, ()))
        balance = balance + income - expense
        result.append(DailyBalance(day=day, balance=balance))
    return result


def yearly_report(ledger: Sequence[LedgerEntry], year: int) -> list[MonthTotals]:
    """Income, expense and balance for each month of a year."""
    report = []
    for month in range(12):
        income, expense = _totals(
            entry for entry in ledger if entry.year == year and entry.month == month
        )
        report.append(
            MonthTotals(month=month, income=income, expense=expense, balance=income - expense)
        )
    return report
