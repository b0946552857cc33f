"""Domain layer for finagenda application."""

from finagenda.domain.cascade import apply_cascade_delete, apply_cascade_update
from finagenda.domain.entries import add_entry, move_entry, record_partial_payment
from finagenda.domain.installments import expand_installments, split_amount
from finagenda.domain.invoices import calculate_invoice_total, reconcile_card_invoices
from finagenda.domain.linkage import resolve_completion_toggle
from finagenda.domain.state import AppState, recompute
from finagenda.domain.subscriptions import forecast_subscriptions

__all__ = [
    "AppState",
    "add_entry",
    "apply_cascade_delete",
    "apply_cascade_update",
    "calculate_invoice_total",
    "expand_installments",
    "forecast_subscriptions",
    "move_entry",
    "recompute",
    "reconcile_card_invoices",
    "record_partial_payment",
    "resolve_completion_toggle",
    "split_amount",
]

