"""Domain model entities for finagenda.

These are pure data classes representing ledger concepts, independent of the
database schema. The reconciliation engine only ever consumes and produces
these records, so the storage layer can change without touching it.

Months are 0-based (January is 0) on every entity.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntryKind(str, Enum):
    """Classification of a ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"
    APPOINTMENT = "appointment"


class DebtEventKind(str, Enum):
    """Kind of movement recorded on a debt account."""

    PURCHASE = "purchase"
    PAYMENT = "payment"


@dataclass(frozen=True)
class PartialPayment:
    """Partial payment applied to an open ledger entry."""

    id: str
    paid_on: date
    amount: Decimal


@dataclass(frozen=True)
class LedgerEntry:
    """Ledger entry domain entity.

    At most one recurrence linkage is populated: a fixed series, a
    subscription, a debt account or a credit card invoice.
    """

    id: str
    day: int
    month: int
    year: int
    kind: EntryKind
    category: str
    description: str
    amount: Decimal
    sub_category: Optional[str] = None
    completed: bool = False
    is_fixed: bool = False
    fixed_series_id: Optional[str] = None
    installment_id: Optional[str] = None
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    is_subscription: bool = False
    subscription_id: Optional[str] = None
    debt_id: Optional[str] = None
    is_credit_card_invoice: bool = False
    related_card_id: Optional[str] = None
    original_amount: Optional[Decimal] = None
    partial_payments: tuple[PartialPayment, ...] = ()

    @property
    def key(self) -> int:
        """Absolute month index used to order and scope series members."""
        return self.year * 12 + self.month

    @property
    def linkage(self) -> Optional[str]:
        """Name of the populated recurrence linkage, if any."""
        if self.is_credit_card_invoice:
            return "invoice"
        if self.subscription_id is not None:
            return "subscription"
        if self.fixed_series_id is not None:
            return "fixed"
        if self.debt_id is not None:
            return "debt"
        return None


@dataclass(frozen=True)
class CreditCard:
    """Credit card domain entity."""

    id: str
    name: str
    closing_day: int
    due_day: int
    credit_limit: Decimal = Decimal("0")
    color: str = "slate"


@dataclass(frozen=True)
class CardInstallment:
    """One installment of a card purchase, assigned to an invoice month."""

    id: str
    card_id: str
    description: str
    amount: Decimal
    month: int
    year: int
    installment_number: int
    total_installments: int
    category: str
    original_purchase_date: date


@dataclass(frozen=True)
class Subscription:
    """Recurring subscription domain entity."""

    id: str
    name: str
    amount: Decimal
    billing_day: int
    category: str
    active: bool = True


@dataclass(frozen=True)
class DebtEvent:
    """Purchase or payment recorded on a debt account."""

    id: str
    date: date
    description: str
    amount: Decimal
    kind: DebtEventKind
    linked_ledger_entry_id: Optional[str] = None


@dataclass(frozen=True)
class DebtAccount:
    """Informal debt ("crediario") account.

    History is kept most recent first.
    """

    id: str
    name: str
    current_balance: Decimal = Decimal("0")
    history: tuple[DebtEvent, ...] = ()


@dataclass(frozen=True)
class DebtAdjustment:
    """Balance change the host must persist on a debt account."""

    debt_id: str
    balance_delta: Decimal
    removed_entry_id: Optional[str] = None


@dataclass(frozen=True)
class SideEffects:
    """Changes to source records produced by a ledger mutation."""

    debt_adjustments: tuple[DebtAdjustment, ...] = ()
    deactivated_subscription_ids: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.debt_adjustments or self.deactivated_subscription_ids)

    def merge(self, other: "SideEffects") -> "SideEffects":
        """Combine two side effect records, keeping order."""
        deactivated = list(self.deactivated_subscription_ids)
        for subscription_id in other.deactivated_subscription_ids:
            if subscription_id not in deactivated:
                deactivated.append(subscription_id)
        return SideEffects(
            debt_adjustments=self.debt_adjustments + other.debt_adjustments,
            deactivated_subscription_ids=tuple(deactivated),
        )


@dataclass(frozen=True)
class OperationFailure:
    """Structured description of a rejected operation."""

    operation: str
    reason: str
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a ledger mutation.

    On failure the ledger is the unchanged input ledger.
    """

    ledger: tuple[LedgerEntry, ...]
    side_effects: SideEffects = field(default_factory=SideEffects)
    failure: Optional[OperationFailure] = None
    affected_ids: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a completion toggle."""

    ledger: tuple[LedgerEntry, ...]
    debts: tuple[DebtAccount, ...]
    failure: Optional[OperationFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class MonthSummary:
    """Balances for one month of the ledger."""

    previous_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    realized_income: Decimal
    realized_expense: Decimal
    current_balance: Decimal
    end_of_month_balance: Decimal


@dataclass(frozen=True)
class DailyBalance:
    """Running balance at the end of one calendar day."""

    day: int
    balance: Decimal


@dataclass(frozen=True)
class MonthTotals:
    """Income and expense totals for one month of a yearly report."""

    month: int
    income: Decimal
    expense: Decimal
    balance: Decimal
