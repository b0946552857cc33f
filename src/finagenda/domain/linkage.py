"""Debt accounts and reverse linkage from ledger entries to their sources.

A ledger entry linked to a debt account moves the account's balance when it is
completed, reverted, resized or deleted. A subscription entry deleted with
cascade deactivates its subscription. All transitions happen in the same call
that changes the ledger entry.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from finagenda.domain.entities import (
    DebtAccount,
    DebtAdjustment,
    DebtEvent,
    DebtEventKind,
    EntryKind,
    LedgerEntry,
    MutationResult,
    OperationFailure,
    SideEffects,
    Subscription,
    ToggleResult,
)
from finagenda.domain.errors import (
    ValidationError,
    debt_not_found,
    entry_not_found,
    non_positive_amount,
)
from finagenda.domain.ids import IdFactory, ensure_factory
from finagenda.domain.months import from_date, to_date
from finagenda.domain.subscriptions import deactivate_subscriptions

logger = logging.getLogger(__name__)

DEBT_CATEGORY = "DEBTS"


def create_debt_account(name: str, id_factory: Optional[IdFactory] = None) -> DebtAccount:
    """Create an empty debt account."""
    if not name or not name.strip():
        raise ValidationError("Debt account name cannot be empty")
    return DebtAccount(id=ensure_factory(id_factory)(), name=name.strip())


def record_debt_purchase(
    debts: Sequence[DebtAccount],
    debt_id: str,
    amount: Decimal,
    description: str,
    on_date: date,
    id_factory: Optional[IdFactory] = None,
) -> tuple[DebtAccount, ...]:
    """Record a purchase on a debt account.

    The balance increases immediately and a purchase event is put at the top
    of the history. Unknown accounts are left untouched.

    Raises:
        ValidationError: If amount is not positive
    """
    if amount <= 0:
        raise ValidationError(non_positive_amount(amount))
    new_id = ensure_factory(id_factory)

    updated = []
    for debt in debts:
        if debt.id == debt_id:
            event = DebtEvent(
                id=new_id(),
                date=on_date,
                description=description or "New purchase",
                amount=amount,
                kind=DebtEventKind.PURCHASE,
            )
            debt = replace(
                debt,
                current_balance=debt.current_balance + amount,
                history=(event,) + debt.history,
            )
        updated.append(debt)
    return tuple(updated)


def schedule_debt_payment(
    ledger: Sequence[LedgerEntry],
    debt: DebtAccount,
    amount: Decimal,
    on_date: date,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """Add a pending expense that pays down a debt account when completed.

    The balance does not move until the entry is completed.
    """
    if amount <= 0:
        failure = OperationFailure(
            operation="schedule_debt_payment", reason=non_positive_amount(amount)
        )
        return MutationResult(ledger=tuple(ledger), failure=failure)

    year, month, day = from_date(on_date)
    entry = LedgerEntry(
        id=ensure_factory(id_factory)(),
        day=day,
        month=month,
        year=year,
        kind=EntryKind.EXPENSE,
        category=DEBT_CATEGORY,
        description=f"Payment: {debt.name}",
        amount=amount,
        debt_id=debt.id,
    )
    return MutationResult(ledger=tuple(ledger) + (entry,), affected_ids=(entry.id,))


def _find_entry(ledger: Sequence[LedgerEntry], entry_id: str) -> Optional[LedgerEntry]:
    for entry in ledger:
        if entry.id == entry_id:
            return entry
    return None


def _record_payment(debt: DebtAccount, entry: LedgerEntry, event_id: str) -> DebtAccount:
    event = DebtEvent(
        id=event_id,
        date=to_date(entry.year, entry.month, entry.day),
        description=entry.description,
        amount=entry.amount,
        kind=DebtEventKind.PAYMENT,
        linked_ledger_entry_id=entry.id,
    )
    return replace(
        debt,
        current_balance=debt.current_balance - entry.amount,
        history=(event,) + debt.history,
    )


def _drop_payment(debt: DebtAccount, entry_id: str) -> tuple[DebtEvent, ...]:
    return tuple(
        event
        for event in debt.history
        if not (
            event.kind == DebtEventKind.PAYMENT
            and event.linked_ledger_entry_id == entry_id
        )
    )


def resolve_completion_toggle(
    ledger: Sequence[LedgerEntry],
    entry_id: str,
    debts: Sequence[DebtAccount],
    id_factory: Optional[IdFactory] = None,
) -> ToggleResult:
    """Flip an entry's ``completed`` flag and update its linked debt.

    Completing a debt-linked entry records a payment event and lowers the
    balance by the entry's amount. Reverting restores the balance and drops
    the payment event recorded for that entry. An entry id missing from the
    ledger is a no-op; a debt id with no live account only toggles the entry.

    Args:
        ledger: Current ledger
        entry_id: Entry to toggle
        debts: Debt accounts
        id_factory: Optional id factory for the payment event

    Returns:
        ToggleResult with the updated ledger and debts
    """
    entry = _find_entry(ledger, entry_id)
    if entry is None:
        logger.debug("Toggle ignored: %s", entry_not_found(entry_id))
        return ToggleResult(ledger=tuple(ledger), debts=tuple(debts))

    toggled = replace(entry, completed=not entry.completed)
    new_ledger = tuple(toggled if item.id == entry_id else item for item in ledger)

    if entry.debt_id is None:
        return ToggleResult(ledger=new_ledger, debts=tuple(debts))

    new_id = ensure_factory(id_factory)
    new_debts = []
    linked = False
    for debt in debts:
        if debt.id == entry.debt_id:
            linked = True
            if toggled.completed:
                debt = _record_payment(debt, toggled, new_id())
            else:
                debt = replace(
                    debt,
                    current_balance=debt.current_balance + entry.amount,
                    history=_drop_payment(debt, entry.id),
                )
            logger.debug(
                "Debt %s balance now %s after toggling entry %s",
                debt.id,
                debt.current_balance,
                entry.id,
            )
        new_debts.append(debt)

    if not linked:
        logger.warning("Entry %s links to missing %s", entry.id, debt_not_found(entry.debt_id))
    return ToggleResult(ledger=new_ledger, debts=tuple(new_debts))


def resolve_amount_change(before: LedgerEntry, after: LedgerEntry) -> SideEffects:
    """Balance adjustment for a resized debt payment.

    Only a completed payment has moved the balance, so only a completed
    payment is adjusted: a smaller payment raises the balance, a larger one
    lowers it. History is left as is.
    """
    if before.debt_id is None or not before.completed or before.amount == after.amount:
        return SideEffects()
    return SideEffects(
        debt_adjustments=(
            DebtAdjustment(
                debt_id=before.debt_id,
                balance_delta=before.amount - after.amount,
            ),
        )
    )


def resolve_entry_deletion(entry: LedgerEntry, cascade: bool = False) -> SideEffects:
    """Side effects of deleting one ledger entry.

    A completed debt payment gives its amount back to the balance and its
    payment event is dropped. A subscription entry deleted with cascade
    deactivates the subscription so the forecast stops regenerating it.
    """
    adjustments: tuple[DebtAdjustment, ...] = ()
    deactivated: tuple[str, ...] = ()
    if entry.debt_id is not None and entry.completed:
        adjustments = (
            DebtAdjustment(
                debt_id=entry.debt_id,
                balance_delta=entry.amount,
                removed_entry_id=entry.id,
            ),
        )
    if cascade and entry.subscription_id is not None:
        deactivated = (entry.subscription_id,)
    return SideEffects(debt_adjustments=adjustments, deactivated_subscription_ids=deactivated)


def apply_side_effects(
    debts: Sequence[DebtAccount],
    subscriptions: Sequence[Subscription],
    side_effects: SideEffects,
) -> tuple[tuple[DebtAccount, ...], tuple[Subscription, ...]]:
    """Apply a mutation's side effects to the source records."""
    by_id = {debt.id: debt for debt in debts}
    for adjustment in side_effects.debt_adjustments:
        debt = by_id.get(adjustment.debt_id)
        if debt is None:
            continue
        history = debt.history
        if adjustment.removed_entry_id is not None:
            history = _drop_payment(debt, adjustment.removed_entry_id)
        by_id[debt.id] = replace(
            debt,
            current_balance=debt.current_balance + adjustment.balance_delta,
            history=history,
        )

    new_debts = tuple(by_id[debt.id] for debt in debts)
    new_subscriptions = deactivate_subscriptions(
        subscriptions, side_effects.deactivated_subscription_ids
    )
    return new_debts, new_subscriptions

