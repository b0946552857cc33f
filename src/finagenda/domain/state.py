"""Application state container and the recompute step."""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional

from finagenda.domain.entities import (
    CardInstallment,
    CreditCard,
    DebtAccount,
    LedgerEntry,
    Subscription,
)
from finagenda.domain.ids import IdFactory
from finagenda.domain.invoices import reconcile_card_invoices
from finagenda.domain.months import FORECAST_MONTHS
from finagenda.domain.subscriptions import forecast_subscriptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    """Everything the engine reads: the ledger and its source records."""

    ledger: tuple[LedgerEntry, ...] = ()
    cards: tuple[CreditCard, ...] = ()
    card_installments: tuple[CardInstallment, ...] = ()
    subscriptions: tuple[Subscription, ...] = ()
    debts: tuple[DebtAccount, ...] = ()
    starting_balance: Decimal = Decimal("0")


def recompute(
    state: AppState,
    today: Optional[date] = None,
    id_factory: Optional[IdFactory] = None,
    months: int = FORECAST_MONTHS,
) -> tuple[AppState, bool]:
    """Run one reconciliation pass over the derived ledger entries.

    Card invoices are reconciled first, then subscriptions are forecast. The
    pass runs once per source mutation; it is not retried until stable.

    Returns:
        Tuple of (new state, changed). When nothing changed the original state
        object is returned so callers can skip persisting it.
    """
    ledger = reconcile_card_invoices(
        state.ledger,
        state.card_installments,
        state.cards,
        today=today,
        months=months,
        id_factory=id_factory,
    )
    ledger = forecast_subscriptions(
        ledger,
        state.subscriptions,
        today=today,
        months=months,
        id_factory=id_factory,
    )
    if ledger == state.ledger:
        return state, False

    logger.debug("Recompute changed the ledger (%d -> %d entries)", len(state.ledger), len(ledger))
    return replace(state, ledger=ledger), True
