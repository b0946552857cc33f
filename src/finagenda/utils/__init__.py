"""Utility functions for finagenda."""

from finagenda.utils.date_parser import parse_date, parse_month
from finagenda.utils.amount_parser import parse_amount
from finagenda.utils.record_resolver import resolve_record

__all__ = ["parse_date", "parse_month", "parse_amount", "resolve_record"]
