"""Tests for calendar arithmetic on 0-based months."""

from datetime import date

from finagenda.domain.months import (
    add_months,
    clamp_day_to_month,
    days_in_month,
    forecast_window,
    from_date,
    month_key,
    to_date,
)


def test_days_in_month():
    """Test month lengths, including leap years."""
    assert days_in_month(2026, 0) == 31
    assert days_in_month(2025, 1) == 28
    assert days_in_month(2024, 1) == 29
    assert days_in_month(2026, 3) == 30


def test_add_months_wraps_years():
    """Test that month overflow carries into the year."""
    assert add_months(2025, 11, 1) == (2026, 0)
    assert add_months(2026, 0, -1) == (2025, 11)
    assert add_months(2026, 3, 25) == (2028, 4)
    assert add_months(2026, 5, 0) == (2026, 5)


def test_clamp_day_to_month():
    """Test clamping days to the month length."""
    assert clamp_day_to_month(2026, 1, 31) == 28
    assert clamp_day_to_month(2024, 1, 31) == 29
    assert clamp_day_to_month(2026, 3, 31) == 30
    assert clamp_day_to_month(2026, 2, 31) == 31
    assert clamp_day_to_month(2026, 0, 0) == 1


def test_month_key_orders_across_years():
    """Test that month keys order December before the next January."""
    assert month_key(2025, 11) < month_key(2026, 0)
    assert month_key(2026, 0) - month_key(2025, 0) == 12


def test_forecast_window():
    """Test that the window starts at today's month and spans twelve months."""
    window = forecast_window(date(2026, 11, 5))
    assert len(window) == 12
    assert window[0] == (2026, 10)
    assert window[1] == (2026, 11)
    assert window[2] == (2027, 0)
    assert window[-1] == (2027, 9)


def test_forecast_window_custom_length():
    """Test a shorter forecast window."""
    assert forecast_window(date(2026, 1, 1), months=3) == [(2026, 0), (2026, 1), (2026, 2)]


def test_date_conversion():
    """Test conversion between dates and ledger positions."""
    assert from_date(date(2026, 3, 4)) == (2026, 2, 4)
    assert to_date(2026, 2, 4) == date(2026, 3, 4)
    assert to_date(2026, 1, 31) == date(2026, 2, 28)
