"""Expansion of one purchase or recurring bill into dated entries.

Nothing here touches a ledger: the functions return freshly minted records and
are safe to call speculatively. Invalid input raises ``ValidationError``.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import Optional, Union

from finagenda.domain.entities import (
    CardInstallment,
    CreditCard,
    EntryKind,
    LedgerEntry,
)
from finagenda.domain.errors import (
    ValidationError,
    invalid_installment_count,
    non_positive_amount,
)
from finagenda.domain.ids import IdFactory, ensure_factory
from finagenda.domain.months import add_months, clamp_day_to_month, from_date

logger = logging.getLogger(__name__)

FIXED_SERIES_LENGTH = 12
CENT = Decimal("0.01")


def split_amount(total: Decimal, count: int) -> list[Decimal]:
    """Split ``total`` into ``count`` shares of whole cents.

    Every share but the last is ``total / count`` rounded down to the cent;
    the last share absorbs the remainder so the shares sum to ``total``.

    Examples:
        split_amount(Decimal("100"), 3) -> [33.33, 33.33, 33.34]
    """
    if count < 1:
        raise ValidationError(invalid_installment_count(count))
    share = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    shares = [share] * (count - 1)
    shares.append(total - share * (count - 1))
    return shares


def invoice_month_for(card: CreditCard, purchase_date: date) -> tuple[int, int]:
    """Return the (year, month) of the invoice a purchase lands on.

    Purchases made on or after the card's closing day roll to the next
    month's invoice.
    """
    year, month, day = from_date(purchase_date)
    if day >= card.closing_day:
        return add_months(year, month, 1)
    return year, month


def _validate(amount: Decimal, count: int) -> None:
    if count < 1:
        raise ValidationError(invalid_installment_count(count))
    if amount <= 0:
        raise ValidationError(non_positive_amount(amount))


def expand_card_purchase(
    card: CreditCard,
    description: str,
    amount: Decimal,
    count: int,
    purchase_date: date,
    category: str,
    id_factory: Optional[IdFactory] = None,
) -> list[CardInstallment]:
    """Expand a card purchase into one installment per invoice month.

    Args:
        card: Card the purchase was made on
        description: Purchase description
        amount: Total purchase amount
        count: Number of installments (at least 1)
        purchase_date: Date of the purchase
        category: Category of the purchase
        id_factory: Optional id factory

    Returns:
        Installments ordered by installment number

    Raises:
        ValidationError: If the amount is not positive or count is below 1
    """
    _validate(amount, count)
    new_id = ensure_factory(id_factory)
    first_year, first_month = invoice_month_for(card, purchase_date)

    installments = []
    for number, share in enumerate(split_amount(amount, count), start=1):
        year, month = add_months(first_year, first_month, number - 1)
        installments.append(
            CardInstallment(
                id=new_id(),
                card_id=card.id,
                description=description,
                amount=share,
                month=month,
                year=year,
                installment_number=number,
                total_installments=count,
                category=category,
                original_purchase_date=purchase_date,
            )
        )
    logger.debug(
        "Expanded card purchase %r on card %s into %d installments",
        description,
        card.id,
        count,
    )
    return installments


def expand_ledger_installments(
    template: LedgerEntry,
    count: int,
    id_factory: Optional[IdFactory] = None,
) -> list[LedgerEntry]:
    """Expand a ledger purchase into ``count`` monthly installments.

    The template's amount is the purchase total. Members share a new
    ``installment_id`` and keep the template's day, clamped to each month.
    """
    _validate(template.amount, count)
    new_id = ensure_factory(id_factory)
    group_id = new_id()

    entries = []
    for number, share in enumerate(split_amount(template.amount, count), start=1):
        year, month = add_months(template.year, template.month, number - 1)
        entries.append(
            replace(
                template,
                id=new_id(),
                day=clamp_day_to_month(year, month, template.day),
                month=month,
                year=year,
                amount=share,
                installment_id=group_id,
                installment_number=number,
                total_installments=count,
            )
        )
    return entries


def expand_fixed_series(
    template: LedgerEntry,
    id_factory: Optional[IdFactory] = None,
    length: int = FIXED_SERIES_LENGTH,
) -> list[LedgerEntry]:
    """Expand a fixed monthly bill into a linked series.

    Every member repeats the template's amount and carries the same newly
    minted ``fixed_series_id``. The day is clamped per month, so a series
    started on the 31st lands on the 28th/29th in February and returns to
    the 31st in March.
    """
    if template.amount <= 0:
        raise ValidationError(non_positive_amount(template.amount))
    new_id = ensure_factory(id_factory)
    series_id = new_id()

    entries = []
    for offset in range(length):
        year, month = add_months(template.year, template.month, offset)
        entries.append(
            replace(
                template,
                id=new_id(),
                day=clamp_day_to_month(year, month, template.day),
                month=month,
                year=year,
                is_fixed=True,
                fixed_series_id=series_id,
            )
        )
    logger.debug("Created fixed series %s with %d members", series_id, length)
    return entries


def expand_installments(
    card: Optional[CreditCard],
    description: str,
    amount: Decimal,
    count: int,
    purchase_date: date,
    category: str,
    kind: EntryKind = EntryKind.EXPENSE,
    is_fixed: bool = False,
    id_factory: Optional[IdFactory] = None,
) -> Union[list[CardInstallment], list[LedgerEntry]]:
    """Expand one purchase into its dated series.

    With a card the result is card installments grouped by invoice month.
    Without one it is ledger entries: a 12-member fixed series when
    ``is_fixed`` is set (``count`` is ignored), otherwise ``count`` monthly
    installments.
    """
    if card is not None:
        return expand_card_purchase(
            card, description, amount, count, purchase_date, category, id_factory
        )

    year, month, day = from_date(purchase_date)
    template = LedgerEntry(
        id="",
        day=day,
        month=month,
        year=year,
        kind=kind,
        category=category,
        description=description,
        amount=amount,
    )
    if is_fixed:
        return expand_fixed_series(template, id_factory)
    return expand_ledger_installments(template, count, id_factory)
