"""Calendar arithmetic on the ledger's (year, month, day) grid.

Months are 0-based (January is 0). Every function here is total: overflow is
carried into the year and days are clamped to the target month's length.
"""

import calendar
from datetime import date
from typing import Optional

FORECAST_MONTHS = 12


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in a 0-based month."""
    return calendar.monthrange(year, month + 1)[1]


def add_months(year: int, month: int, count: int) -> tuple[int, int]:
    """Move a (year, month) pair by ``count`` months.

    Args:
        year: Starting year
        month: Starting month (0..11)
        count: Months to add, may be negative

    Returns:
        Tuple of (year, month) with month wrapped into 0..11
    """
    carry, wrapped = divmod(month + count, 12)
    return year + carry, wrapped


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp a day-of-month to the length of the given month."""
    return max(1, min(day, days_in_month(year, month)))


def month_key(year: int, month: int) -> int:
    """Absolute month index, ordered across years."""
    return year * 12 + month


def forecast_window(
    today: Optional[date] = None, months: int = FORECAST_MONTHS
) -> list[tuple[int, int]]:
    """Return the (year, month) pairs of the rolling forecast window.

    The window starts at the month of ``today`` and spans ``months`` months.
    """
    today = today or date.today()
    return [add_months(today.year, today.month - 1, offset) for offset in range(months)]


def to_date(year: int, month: int, day: int) -> date:
    """Convert a ledger position to a date, clamping the day."""
    return date(year, month + 1, clamp_day_to_month(year, month, day))


def from_date(value: date) -> tuple[int, int, int]:
    """Convert a date to a ledger (year, month, day) position."""
    return value.year, value.month - 1, value.day
