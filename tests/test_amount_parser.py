"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from finagenda.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "value, expected",
    [
        ("123.45", Decimal("123.45")),
        ("100", Decimal("100.00")),
        ("R$ 123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("250,4", Decimal("250.40")),
        ("€ 99,90", Decimal("99.90")),
        ("0", Decimal("0.00")),
    ],
)
def test_parse_amount(value, expected):
    """Test the supported amount formats."""
    assert parse_amount(value) == expected


def test_parse_amount_rounds_to_cents():
    """Test that amounts are rounded to cents."""
    assert parse_amount("10.005") == Decimal("10.00")
    assert parse_amount("10.015") == Decimal("10.02")


@pytest.mark.parametrize("value", ["", "   ", "abc", "12.3.4x"])
def test_parse_amount_invalid(value):
    """Test that unparsable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(value)


def test_parse_amount_negative():
    """Test that a sign is rejected."""
    with pytest.raises(ValueError, match="cannot be negative"):
        parse_amount("-50")
    with pytest.raises(ValueError, match="cannot be negative"):
        parse_amount("R$ -50")
