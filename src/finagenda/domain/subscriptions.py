"""Subscription forecasting and cancellation."""

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from finagenda.domain.entities import (
    EntryKind,
    LedgerEntry,
    MutationResult,
    OperationFailure,
    SideEffects,
    Subscription,
)
from finagenda.domain.errors import subscription_not_found
from finagenda.domain.ids import IdFactory, ensure_factory
from finagenda.domain.months import (
    FORECAST_MONTHS,
    clamp_day_to_month,
    forecast_window,
    month_key,
)

logger = logging.getLogger(__name__)


def forecast_subscriptions(
    ledger: Sequence[LedgerEntry],
    subscriptions: Sequence[Subscription],
    today: Optional[date] = None,
    months: int = FORECAST_MONTHS,
    id_factory: Optional[IdFactory] = None,
) -> tuple[LedgerEntry, ...]:
    """Materialize missing subscription occurrences in the forecast window.

    Existing occurrences are never overwritten or removed, so a month the user
    edited keeps its edit. Inactive subscriptions generate nothing, and their
    already materialized entries stay where they are.

    Args:
        ledger: Current ledger
        subscriptions: All subscriptions
        today: Reference date for the forecast window (defaults to today)
        months: Length of the forecast window
        id_factory: Optional id factory for new entries

    Returns:
        The ledger with missing occurrences appended
    """
    new_id = ensure_factory(id_factory)
    window = forecast_window(today, months)
    existing = {
        (entry.subscription_id, entry.year, entry.month)
        for entry in ledger
        if entry.subscription_id is not None
    }

    added: list[LedgerEntry] = []
    for subscription in subscriptions:
        if not subscription.active:
            continue
        for year, month in window:
            if (subscription.id, year, month) in existing:
                continue
            added.append(
                LedgerEntry(
                    id=new_id(),
                    day=clamp_day_to_month(year, month, subscription.billing_day),
                    month=month,
                    year=year,
                    kind=EntryKind.EXPENSE,
                    category=subscription.category,
                    description=subscription.name,
                    amount=subscription.amount,
                    completed=False,
                    is_fixed=True,
                    installment_number=1,
                    total_installments=1,
                    is_subscription=True,
                    subscription_id=subscription.id,
                )
            )
            existing.add((subscription.id, year, month))

    if added:
        logger.info("Subscription forecast added %d entries", len(added))
    return tuple(ledger) + tuple(added)


def deactivate_subscriptions(
    subscriptions: Sequence[Subscription], subscription_ids: Sequence[str]
) -> tuple[Subscription, ...]:
    """Flip the ``active`` flag off for the given subscriptions."""
    targets = set(subscription_ids)
    return tuple(
        replace(sub, active=False) if sub.id in targets and sub.active else sub
        for sub in subscriptions
    )


def cancel_subscription(
    ledger: Sequence[LedgerEntry],
    subscriptions: Sequence[Subscription],
    subscription_id: str,
    today: Optional[date] = None,
) -> tuple[MutationResult, tuple[Subscription, ...]]:
    """Cancel a subscription from the current month forward.

    Occurrences before the month of ``today`` are kept as history.

    Returns:
        Tuple of (mutation result, updated subscriptions)
    """
    today = today or date.today()
    if not any(sub.id == subscription_id for sub in subscriptions):
        failure = OperationFailure(
            operation="cancel_subscription",
            reason=subscription_not_found(subscription_id),
        )
        return MutationResult(ledger=tuple(ledger), failure=failure), tuple(subscriptions)

    start_key = month_key(today.year, today.month - 1)
    kept = []
    removed = []
    for entry in ledger:
        if entry.subscription_id == subscription_id and entry.key >= start_key:
            removed.append(entry.id)
        else:
            kept.append(entry)

    logger.info(
        "Cancelled subscription %s, removed %d future entries",
        subscription_id,
        len(removed),
    )
    result = MutationResult(
        ledger=tuple(kept),
        side_effects=SideEffects(deactivated_subscription_ids=(subscription_id,)),
        affected_ids=tuple(removed),
    )
    return result, deactivate_subscriptions(subscriptions, [subscription_id])
