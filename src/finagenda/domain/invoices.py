"""Credit card invoice reconciliation.

Card installments are aggregated into one synthetic expense entry per card
per month. The synthetic entries are derived state: they are created, resized
and removed here and nowhere else.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from finagenda.domain.entities import (
    CardInstallment,
    CreditCard,
    EntryKind,
    LedgerEntry,
)
from finagenda.domain.ids import IdFactory, ensure_factory
from finagenda.domain.months import FORECAST_MONTHS, clamp_day_to_month, forecast_window

logger = logging.getLogger(__name__)

INVOICE_CATEGORY = "CREDIT CARD"


def calculate_invoice_total(
    installments: Iterable[CardInstallment], card_id: str, year: int, month: int
) -> Decimal:
    """Sum the installments billed on one card's invoice for one month."""
    return sum(
        (
            item.amount
            for item in installments
            if item.card_id == card_id and item.month == month and item.year == year
        ),
        Decimal("0"),
    )


def invoice_description(card: CreditCard) -> str:
    """Description used for a card's synthetic invoice entry."""
    return f"Invoice {card.name}"


def remove_card(
    cards: Sequence[CreditCard],
    installments: Sequence[CardInstallment],
    card_id: str,
) -> tuple[list[CreditCard], list[CardInstallment]]:
    """Drop a card together with its installments.

    Its synthetic invoice entries are left for orphan cleanup on the next
    reconciliation pass.
    """
    return (
        [card for card in cards if card.id != card_id],
        [item for item in installments if item.card_id != card_id],
    )


def reconcile_card_invoices(
    ledger: Sequence[LedgerEntry],
    installments: Sequence[CardInstallment],
    cards: Sequence[CreditCard],
    today: Optional[date] = None,
    months: int = FORECAST_MONTHS,
    id_factory: Optional[IdFactory] = None,
) -> tuple[LedgerEntry, ...]:
    """Bring the synthetic invoice entries in line with the card installments.

    For every card and every month of the forecast window:

    - a positive total creates the invoice entry (due on the card's due day,
      open) or updates only the amount of the existing one;
    - a zero total removes the invoice entry unless it is completed, since
      realized history must not vanish.

    Invoice entries whose card no longer exists are removed regardless of
    completion. Surplus duplicates for the same card and month are removed
    when open. Running the function again on its own output changes nothing.

    Args:
        ledger: Current ledger
        installments: All card installments
        cards: Live credit cards
        today: Reference date for the forecast window (defaults to today)
        months: Length of the forecast window
        id_factory: Optional id factory for new invoice entries

    Returns:
        The reconciled ledger
    """
    new_id = ensure_factory(id_factory)
    live_card_ids = {card.id for card in cards}
    window = forecast_window(today, months)

    totals: dict[tuple[str, int, int], Decimal] = {}
    for item in installments:
        slot = (item.card_id, item.year, item.month)
        totals[slot] = totals.get(slot, Decimal("0")) + item.amount

    result: list[Optional[LedgerEntry]] = []
    invoice_index: dict[tuple[str, int, int], int] = {}
    removed = 0
    for entry in ledger:
        if entry.is_credit_card_invoice:
            if entry.related_card_id not in live_card_ids:
                logger.debug("Removing invoice %s of deleted card", entry.id)
                removed += 1
                continue
            slot = (entry.related_card_id, entry.year, entry.month)
            if slot in invoice_index:
                if not entry.completed:
                    logger.debug("Removing duplicate invoice %s", entry.id)
                    removed += 1
                    continue
            else:
                invoice_index[slot] = len(result)
        result.append(entry)

    created = updated = 0
    for card in cards:
        for year, month in window:
            slot = (card.id, year, month)
            total = totals.get(slot, Decimal("0"))
            position = invoice_index.get(slot)

            if total > 0:
                if position is None:
                    invoice_index[slot] = len(result)
                    result.append(
                        LedgerEntry(
                            id=new_id(),
                            day=clamp_day_to_month(year, month, card.due_day),
                            month=month,
                            year=year,
                            kind=EntryKind.EXPENSE,
                            category=INVOICE_CATEGORY,
                            description=invoice_description(card),
                            amount=total,
                            completed=False,
                            is_credit_card_invoice=True,
                            related_card_id=card.id,
                        )
                    )
                    created += 1
                elif result[position].amount != total:
                    result[position] = replace(result[position], amount=total)
                    updated += 1
            elif position is not None and not result[position].completed:
                logger.debug("Removing empty invoice %s", result[position].id)
                result[position] = None
                del invoice_index[slot]
                removed += 1

    if created or updated or removed:
        logger.info(
            "Invoice reconciliation: %d created, %d updated, %d removed",
            created,
            updated,
            removed,
        )
    return tuple(entry for entry in result if entry is not None)
