"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2026-01-15", "January 15, 2026", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next month", ...

    Args:
        date_str: Date string in various formats
        today: Reference date for relative forms (defaults to the real date)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # "last/this/next month" keep the day of month where it exists
    if date_str.startswith(("last ", "this ", "next ")):
        direction, _, period = date_str.partition(" ")
        step = {"last": -1, "this": 0, "next": 1}[direction]
        if period == "month":
            return today + relativedelta(months=step)
        elif period == "year":
            return today + relativedelta(years=step)
        elif period == "week":
            return today + timedelta(weeks=step)

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_month(month_str: str, today: Optional[date] = None) -> tuple[int, int]:
    """Parse a month string into a (year, month) pair with a 0-based month.

    Accepts "YYYY-MM" as well as "this month", "next month" and "last month".

    Raises:
        ValueError: If month string cannot be parsed
    """
    month_str = month_str.strip().lower()
    match = re.fullmatch(r"(\d{4})-(\d{1,2})", month_str)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12 in '{month_str}'")
        return year, month - 1

    if month_str.endswith(" month"):
        value = parse_date(month_str, today=today)
        return value.year, value.month - 1

    raise ValueError(f"Could not parse month '{month_str}', expected YYYY-MM")
