"""Adding, moving and partially paying ledger entries."""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from finagenda.domain.entities import (
    EntryKind,
    LedgerEntry,
    MutationResult,
    OperationFailure,
    PartialPayment,
)
from finagenda.domain.errors import (
    ValidationError,
    invalid_installment_count,
    invoice_is_derived,
    non_positive_amount,
)
from finagenda.domain.ids import IdFactory, ensure_factory
from finagenda.domain.installments import expand_fixed_series, expand_ledger_installments
from finagenda.domain.months import clamp_day_to_month

logger = logging.getLogger(__name__)


def _validate_template(template: LedgerEntry, installments: int) -> Optional[str]:
    if installments < 1:
        return invalid_installment_count(installments)
    if not 0 <= template.month <= 11:
        return f"Month must be between 0 and 11 (got {template.month})"
    if not 1 <= template.day <= 31:
        return f"Day must be between 1 and 31 (got {template.day})"
    if template.kind != EntryKind.APPOINTMENT and template.amount <= 0:
        return non_positive_amount(template.amount)
    return None


def add_entry(
    ledger: Sequence[LedgerEntry],
    template: LedgerEntry,
    installments: int = 1,
    is_fixed: bool = False,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """Append an entry, a fixed series or an installment series to the ledger.

    Appointments carry amount 0 and are never expanded. ``is_fixed`` takes
    precedence over ``installments``. The template's own id is ignored; new
    ids come from ``id_factory``.

    Returns:
        MutationResult listing the new entry ids
    """
    ledger = tuple(ledger)
    error = _validate_template(template, installments)
    if error is not None:
        return MutationResult(ledger=ledger, failure=OperationFailure("add", error))

    new_id = ensure_factory(id_factory)
    if template.kind == EntryKind.APPOINTMENT:
        template = replace(template, amount=Decimal("0"))
        new_entries = [replace(template, id=new_id())]
    else:
        try:
            if is_fixed:
                new_entries = expand_fixed_series(template, new_id)
            elif installments > 1:
                new_entries = expand_ledger_installments(template, installments, new_id)
            else:
                new_entries = [replace(template, id=new_id())]
        except ValidationError as exc:
            return MutationResult(ledger=ledger, failure=OperationFailure("add", str(exc)))

    new_entries = [
        replace(entry, day=clamp_day_to_month(entry.year, entry.month, entry.day))
        for entry in new_entries
    ]
    logger.debug("Added %d entries", len(new_entries))
    return MutationResult(
        ledger=ledger + tuple(new_entries),
        affected_ids=tuple(entry.id for entry in new_entries),
    )


def move_entry(ledger: Sequence[LedgerEntry], entry_id: str, day: int) -> MutationResult:
    """Move an entry to another day of its month."""
    ledger = tuple(ledger)
    entry = next((item for item in ledger if item.id == entry_id), None)
    if entry is None:
        return MutationResult(ledger=ledger)
    if entry.is_credit_card_invoice:
        return MutationResult(
            ledger=ledger, failure=OperationFailure("move", invoice_is_derived(entry_id), entry_id)
        )
    if not 1 <= day <= 31:
        return MutationResult(
            ledger=ledger,
            failure=OperationFailure("move", f"Day must be between 1 and 31 (got {day})", entry_id),
        )

    moved = replace(entry, day=clamp_day_to_month(entry.year, entry.month, day))
    return MutationResult(
        ledger=tuple(moved if item.id == entry_id else item for item in ledger),
        affected_ids=(entry_id,) if moved != entry else (),
    )


def record_partial_payment(
    ledger: Sequence[LedgerEntry],
    entry_id: str,
    amount: Decimal,
    paid_on: date,
    id_factory: Optional[IdFactory] = None,
) -> MutationResult:
    """Pay part of an open entry.

    The entry's amount becomes what is still open; ``original_amount`` keeps
    the amount before the first partial payment. Paying the whole open amount
    is a completion, not a partial payment, and is rejected here.
    """
    ledger = tuple(ledger)
    entry = next((item for item in ledger if item.id == entry_id), None)
    if entry is None:
        return MutationResult(ledger=ledger)

    reason = None
    if entry.is_credit_card_invoice:
        reason = invoice_is_derived(entry_id)
    elif entry.kind == EntryKind.APPOINTMENT:
        reason = "Appointments cannot be paid"
    elif entry.debt_id is not None:
        reason = "Debt payments cannot be split; schedule a separate payment instead"
    elif entry.completed:
        reason = f"Entry {entry_id} is already completed"
    elif amount <= 0:
        reason = non_positive_amount(amount)
    elif amount >= entry.amount:
        reason = (
            f"Partial payment {amount} must be smaller than the open amount "
            f"{entry.amount}; complete the entry instead"
        )
    if reason is not None:
        return MutationResult(
            ledger=ledger, failure=OperationFailure("partial_payment", reason, entry_id)
        )

    payment = PartialPayment(id=ensure_factory(id_factory)(), paid_on=paid_on, amount=amount)
    paid = replace(
        entry,
        amount=entry.amount - amount,
        original_amount=entry.original_amount if entry.original_amount is not None else entry.amount,
        partial_payments=entry.partial_payments + (payment,),
    )
    logger.debug("Recorded partial payment of %s on entry %s", amount, entry_id)
    return MutationResult(
        ledger=tuple(paid if item.id == entry_id else item for item in ledger),
        affected_ids=(entry_id,),
    )
