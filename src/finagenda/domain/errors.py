"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PersistenceError(DomainError):
    """A storage call failed part way through a ledger mutation.

    Members persisted before the failure stay persisted; the next
    synchronization pass reconciles the rest.
    """

    def __init__(self, operation: str, entry_id: Optional[str], cause: Exception):
        self.operation = operation
        self.entry_id = entry_id
        self.cause = cause
        target = f" {entry_id}" if entry_id else ""
        super().__init__(f"Could not {operation}{target}: {cause}")


def entry_not_found(entry_id: str) -> str:
    """Return message for missing ledger entry."""
    return f"Entry {entry_id} not found"


def card_not_found(card: str) -> str:
    """Return message for missing credit card."""
    return f"Card '{card}' not found"


def subscription_not_found(subscription: str) -> str:
    """Return message for missing subscription."""
    return f"Subscription '{subscription}' not found"


def debt_not_found(debt: str) -> str:
    """Return message for missing debt account."""
    return f"Debt account '{debt}' not found"


def invoice_is_derived(entry_id: str) -> str:
    """Return message when a synthetic invoice entry is edited by hand."""
    return (
        f"Entry {entry_id} is a credit card invoice; it is recomputed from the "
        "card purchases and cannot be edited directly"
    )


def non_positive_amount(amount) -> str:
    """Return message for an amount that must be positive."""
    return f"Amount must be greater than zero (got {amount})"


def invalid_installment_count(count: int) -> str:
    """Return message for an installment count below one."""
    return f"Installment count must be at least 1 (got {count})"


def duplicate_name(label: str, name: str) -> str:
    """Return message for a duplicate record name."""
    return f"{label} with name '{name}' already exists"
