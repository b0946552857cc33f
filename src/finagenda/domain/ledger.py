"""Ledger domain service.

Loads the application state from a ``Database``, runs the pure engine over it
and writes back whatever changed.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from finagenda.database.base import Database
from finagenda.domain.cascade import apply_cascade_delete, apply_cascade_update
from finagenda.domain.entities import (
    CardInstallment,
    CreditCard,
    DailyBalance,
    DebtAccount,
    EntryKind,
    LedgerEntry,
    MonthSummary,
    MonthTotals,
    MutationResult,
    Subscription,
)
from finagenda.domain.entries import add_entry, move_entry, record_partial_payment
from finagenda.domain.errors import (
    ConflictError,
    PersistenceError,
    ValidationError,
    duplicate_name,
    non_positive_amount,
)
from finagenda.domain.ids import IdFactory, ensure_factory
from finagenda.domain.installments import expand_card_purchase
from finagenda.domain.linkage import (
    apply_side_effects,
    create_debt_account,
    record_debt_purchase,
    resolve_completion_toggle,
    schedule_debt_payment,
)
from finagenda.domain.state import AppState, recompute
from finagenda.domain.subscriptions import cancel_subscription
from finagenda.domain.summary import daily_balances, summarize_month, yearly_report

logger = logging.getLogger(__name__)


def _check_day(day: int, label: str) -> None:
    if not 1 <= day <= 31:
        raise ValidationError(f"{label} must be between 1 and 31 (got {day})")


def _check_name(name: str, label: str) -> str:
    if not name or not name.strip():
        raise ValidationError(f"{label} name cannot be empty")
    return name.strip()


class LedgerService:
    """Service for managing the ledger and its source records."""

    def __init__(
        self,
        db: Database,
        id_factory: Optional[IdFactory] = None,
        today: Optional[date] = None,
    ):
        """Initialize ledger service.

        Args:
            db: Database instance
            id_factory: Optional id factory for new records (random ids by default)
            today: Optional fixed "today" for the forecast window (real date by default)
        """
        self.db = db
        self.id_factory = ensure_factory(id_factory)
        self._fixed_today = today

    @property
    def today(self) -> date:
        return self._fixed_today or date.today()

    # State handling
    def load_state(self) -> AppState:
        """Read the ledger and every source record from the database."""
        return AppState(
            ledger=tuple(self.db.list_entries()),
            cards=tuple(self.db.list_cards()),
            card_installments=tuple(self.db.list_card_installments()),
            subscriptions=tuple(self.db.list_subscriptions()),
            debts=tuple(self.db.list_debts()),
            starting_balance=self.db.get_starting_balance(),
        )

    def synchronize(self) -> AppState:
        """Reconcile invoices and forecast subscriptions, then persist the result.

        Returns:
            The state after reconciliation
        """
        state = self.load_state()
        new_state, changed = recompute(state, today=self.today, id_factory=self.id_factory)
        if changed:
            self._persist_ledger(state.ledger, new_state.ledger)
            logger.info("Synchronized ledger (%d entries)", len(new_state.ledger))
        return new_state

    def _store(self, operation: str, entry_id: Optional[str], call: Callable, *args) -> None:
        try:
            call(*args)
        except SQLAlchemyError as e:
            logger.exception("Storage call failed: %s %s", operation, entry_id or "")
            raise PersistenceError(operation, entry_id, e) from e

    def _persist_ledger(
        self, before: Sequence[LedgerEntry], after: Sequence[LedgerEntry]
    ) -> None:
        """Write the difference between two ledgers: deletes, updates, creates."""
        old_by_id = {entry.id: entry for entry in before}
        new_ids = {entry.id for entry in after}

        for entry in before:
            if entry.id not in new_ids:
                self._store("delete entry", entry.id, self.db.delete_entry, entry.id)
        for entry in after:
            previous = old_by_id.get(entry.id)
            if previous is not None and previous != entry:
                self._store("update entry", entry.id, self.db.update_entry, entry)
        for entry in after:
            if entry.id not in old_by_id:
                self._store("create entry", entry.id, self.db.create_entry, entry)

    def _persist_sources(
        self,
        state: AppState,
        debts: Sequence[DebtAccount],
        subscriptions: Sequence[Subscription],
    ) -> None:
        old_debts = {debt.id: debt for debt in state.debts}
        for debt in debts:
            if old_debts.get(debt.id) != debt:
                self._store("update debt", None, self.db.update_debt, debt)

        old_subscriptions = {sub.id: sub for sub in state.subscriptions}
        for sub in subscriptions:
            if old_subscriptions.get(sub.id) != sub:
                self._store("update subscription", None, self.db.update_subscription, sub)

    def _apply(self, state: AppState, result: MutationResult) -> MutationResult:
        """Persist a mutation and its side effects, then resynchronize.

        Raises:
            ValidationError: If the engine rejected the mutation
            PersistenceError: If a storage call failed
        """
        if result.failure is not None:
            raise ValidationError(result.failure.reason)
        debts, subscriptions = apply_side_effects(
            state.debts, state.subscriptions, result.side_effects
        )
        self._persist_ledger(state.ledger, result.ledger)
        self._persist_sources(state, debts, subscriptions)
        self.synchronize()
        return result

    # Ledger entries
    def add_entry(
        self,
        year: int,
        month: int,
        day: int,
        kind: EntryKind,
        category: str,
        amount: Decimal,
        description: str = "",
        sub_category: Optional[str] = None,
        installments: int = 1,
        is_fixed: bool = False,
    ) -> list[LedgerEntry]:
        """Add an entry, an installment series or a fixed series.

        Args:
            year: Year of the (first) entry
            month: Month of the (first) entry, 0-based
            day: Day of month; clamped to short months
            kind: Income, expense or appointment
            category: Category name
            amount: Amount, positive except for appointments
            description: Optional description
            sub_category: Optional sub-category
            installments: Number of monthly installments
            is_fixed: Whether to create a 12-month fixed series

        Returns:
            The new entries

        Raises:
            ValidationError: If the entry is invalid
        """
        template = LedgerEntry(
            id="",
            day=day,
            month=month,
            year=year,
            kind=EntryKind(kind),
            category=category,
            sub_category=sub_category,
            description=description,
            amount=Decimal(amount),
        )
        state = self.load_state()
        result = add_entry(
            state.ledger,
            template,
            installments=installments,
            is_fixed=is_fixed,
            id_factory=self.id_factory,
        )
        self._apply(state, result)
        return [self.db.get_entry(entry_id) for entry_id in result.affected_ids]

    def update_entry(
        self,
        entry_id: str,
        changes: Mapping[str, Any],
        apply_to_future: bool = False,
    ) -> Optional[LedgerEntry]:
        """Edit an entry, optionally cascading to the rest of its series.

        Returns:
            The edited entry, or None if it does not exist
        """
        state = self.load_state()
        self._apply(state, apply_cascade_update(state.ledger, entry_id, changes, apply_to_future))
        return self.db.get_entry(entry_id)

    def delete_entry(self, entry_id: str, apply_to_future: bool = False) -> tuple[str, ...]:
        """Delete an entry, optionally with the rest of its series.

        Returns:
            Ids of the removed entries (empty if the entry does not exist)
        """
        state = self.load_state()
        result = self._apply(
            state, apply_cascade_delete(state.ledger, entry_id, apply_to_future)
        )
        return result.affected_ids

    def toggle_completed(self, entry_id: str) -> Optional[LedgerEntry]:
        """Flip an entry between pending and completed.

        Completing a debt payment lowers the debt balance; reverting it
        restores the balance.
        """
        state = self.load_state()
        toggled = resolve_completion_toggle(
            state.ledger, entry_id, state.debts, id_factory=self.id_factory
        )
        self._persist_ledger(state.ledger, toggled.ledger)
        self._persist_sources(state, toggled.debts, state.subscriptions)
        self.synchronize()
        return self.db.get_entry(entry_id)

    def move_entry(self, entry_id: str, day: int) -> Optional[LedgerEntry]:
        """Move an entry to another day of its month."""
        state = self.load_state()
        self._apply(state, move_entry(state.ledger, entry_id, day))
        return self.db.get_entry(entry_id)

    def record_partial_payment(
        self, entry_id: str, amount: Decimal, paid_on: Optional[date] = None
    ) -> Optional[LedgerEntry]:
        """Pay part of an open entry (on today's date by default)."""
        state = self.load_state()
        result = record_partial_payment(
            state.ledger,
            entry_id,
            Decimal(amount),
            paid_on or self.today,
            id_factory=self.id_factory,
        )
        self._apply(state, result)
        return self.db.get_entry(entry_id)

    def list_entries(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> list[LedgerEntry]:
        """List entries in ledger order, optionally for one year or month."""
        return self.db.list_entries(year=year, month=month)

    def set_starting_balance(self, value: Decimal) -> None:
        """Set the balance carried in before the first entry."""
        self.db.set_starting_balance(Decimal(value))

    # Credit cards
    def add_card(
        self,
        name: str,
        closing_day: int,
        due_day: int,
        credit_limit: Decimal = Decimal("0"),
        color: str = "slate",
    ) -> CreditCard:
        """Create a credit card.

        Raises:
            ValidationError: If a day is outside 1..31 or the name is empty
            ConflictError: If a card with that name already exists
        """
        name = _check_name(name, "Card")
        _check_day(closing_day, "Closing day")
        _check_day(due_day, "Due day")
        if any(card.name == name for card in self.db.list_cards()):
            raise ConflictError(duplicate_name("Card", name))

        card = CreditCard(
            id=self.id_factory(),
            name=name,
            closing_day=closing_day,
            due_day=due_day,
            credit_limit=Decimal(credit_limit),
            color=color,
        )
        self._store("create card", None, self.db.create_card, card)
        return card

    def list_cards(self) -> list[CreditCard]:
        """List all credit cards."""
        return self.db.list_cards()

    def remove_card(self, card_id: str) -> bool:
        """Delete a card with its installments; its invoices go on the next sync.

        Returns:
            False if the card does not exist
        """
        if self.db.get_card(card_id) is None:
            return False
        self._store("delete card", None, self.db.delete_card, card_id)
        logger.info("Removed card %s", card_id)
        self.synchronize()
        return True

    def add_card_purchase(
        self,
        card_id: str,
        description: str,
        amount: Decimal,
        installments: int = 1,
        purchase_date: Optional[date] = None,
        category: str = "Other",
    ) -> list[CardInstallment]:
        """Record a purchase on a card, split into monthly installments.

        Returns:
            The installments (empty if the card does not exist)

        Raises:
            ValidationError: If the amount or installment count is invalid
        """
        card = self.db.get_card(card_id)
        if card is None:
            return []
        items = expand_card_purchase(
            card,
            description,
            Decimal(amount),
            installments,
            purchase_date or self.today,
            category,
            id_factory=self.id_factory,
        )
        self._store("create card installments", None, self.db.create_card_installments, items)
        self.synchronize()
        return items

    def list_card_installments(self, card_id: Optional[str] = None) -> list[CardInstallment]:
        """List card installments, optionally for one card."""
        return self.db.list_card_installments(card_id)

    # Subscriptions
    def add_subscription(
        self, name: str, amount: Decimal, billing_day: int, category: str = "Subscriptions"
    ) -> Subscription:
        """Create a subscription and forecast its occurrences.

        Raises:
            ValidationError: If the name, amount or billing day is invalid
        """
        name = _check_name(name, "Subscription")
        _check_day(billing_day, "Billing day")
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError(non_positive_amount(amount))

        subscription = Subscription(
            id=self.id_factory(),
            name=name,
            amount=amount,
            billing_day=billing_day,
            category=category,
        )
        self._store("create subscription", None, self.db.create_subscription, subscription)
        self.synchronize()
        return subscription

    def list_subscriptions(self) -> list[Subscription]:
        """List all subscriptions."""
        return self.db.list_subscriptions()

    def cancel_subscription(self, subscription_id: str) -> tuple[str, ...]:
        """Stop a subscription from the current month on.

        Returns:
            Ids of the removed occurrences (empty if it does not exist)
        """
        state = self.load_state()
        result, subscriptions = cancel_subscription(
            state.ledger, state.subscriptions, subscription_id, today=self.today
        )
        if result.failure is not None:
            logger.debug("Cancel ignored: %s", result.failure.reason)
            return ()
        self._persist_ledger(state.ledger, result.ledger)
        self._persist_sources(state, state.debts, subscriptions)
        self.synchronize()
        return result.affected_ids

    # Debt accounts
    def add_debt(self, name: str) -> DebtAccount:
        """Create an empty debt account.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a debt account with that name already exists
        """
        debt = create_debt_account(name, id_factory=self.id_factory)
        if any(existing.name == debt.name for existing in self.db.list_debts()):
            raise ConflictError(duplicate_name("Debt account", debt.name))
        self._store("create debt", None, self.db.create_debt, debt)
        return debt

    def list_debts(self) -> list[DebtAccount]:
        """List all debt accounts."""
        return self.db.list_debts()

    def record_debt_purchase(
        self,
        debt_id: str,
        amount: Decimal,
        description: str = "",
        on_date: Optional[date] = None,
    ) -> Optional[DebtAccount]:
        """Add a purchase to a debt account's balance."""
        state = self.load_state()
        debts = record_debt_purchase(
            state.debts,
            debt_id,
            Decimal(amount),
            description,
            on_date or self.today,
            id_factory=self.id_factory,
        )
        self._persist_sources(state, debts, state.subscriptions)
        return self.db.get_debt(debt_id)

    def schedule_debt_payment(
        self, debt_id: str, amount: Decimal, on_date: Optional[date] = None
    ) -> Optional[LedgerEntry]:
        """Add a pending ledger expense paying down a debt account.

        Returns:
            The new entry, or None if the debt account does not exist
        """
        debt = self.db.get_debt(debt_id)
        if debt is None:
            return None
        state = self.load_state()
        result = schedule_debt_payment(
            state.ledger, debt, Decimal(amount), on_date or self.today, id_factory=self.id_factory
        )
        self._apply(state, result)
        return self.db.get_entry(result.affected_ids[0])

    # Reports
    def month_summary(self, year: int, month: int) -> MonthSummary:
        """Summarize one month (0-based) of the ledger."""
        return summarize_month(
            self.db.list_entries(), year, month, self.db.get_starting_balance()
        )

    def daily_balances(self, year: int, month: int) -> list[DailyBalance]:
        """Running balance for each day of one month (0-based)."""
        summary = self.month_summary(year, month)
        return daily_balances(self.db.list_entries(), year, month, summary.previous_balance)

    def yearly_report(self, year: int) -> list[MonthTotals]:
        """Income, expense and balance for each month of a year."""
        return yearly_report(self.db.list_entries(), year)
