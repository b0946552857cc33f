"""Scoped cascade edits and deletes across a recurring series.

A series is every ledger entry sharing the edited entry's fixed series id,
subscription id or installment group. With ``apply_to_future`` the operation
reaches every member in the same month as the edited entry or later; members
in earlier months are never touched.
"""

import logging
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Sequence

from finagenda.domain.entities import (
    EntryKind,
    LedgerEntry,
    MutationResult,
    OperationFailure,
    SideEffects,
)
from finagenda.domain.errors import invoice_is_derived, non_positive_amount
from finagenda.domain.linkage import resolve_amount_change, resolve_entry_deletion
from finagenda.domain.months import clamp_day_to_month

logger = logging.getLogger(__name__)

# Fields a single-entry edit may change.
EDITABLE_FIELDS = frozenset(
    {"day", "month", "year", "kind", "category", "sub_category", "description", "amount"}
)

# Fields carried over to the other members of a series. Month and year stay
# put so the series keeps one member per month.
CASCADE_FIELDS = frozenset({"day", "category", "sub_category", "description", "amount"})


def series_members(
    ledger: Sequence[LedgerEntry], entry: LedgerEntry
) -> list[LedgerEntry]:
    """Return every member of the series ``entry`` belongs to.

    An entry outside any series is its own single member.
    """
    if entry.fixed_series_id is not None:
        return [item for item in ledger if item.fixed_series_id == entry.fixed_series_id]
    if entry.subscription_id is not None:
        return [item for item in ledger if item.subscription_id == entry.subscription_id]
    if entry.installment_id is not None:
        return [item for item in ledger if item.installment_id == entry.installment_id]
    return [entry]


def _find(ledger: Sequence[LedgerEntry], entry_id: str) -> Optional[LedgerEntry]:
    return next((entry for entry in ledger if entry.id == entry_id), None)


def _scope(
    ledger: Sequence[LedgerEntry], entry: LedgerEntry, apply_to_future: bool
) -> set[str]:
    if not apply_to_future:
        return {entry.id}
    start_key = entry.key
    return {member.id for member in series_members(ledger, entry) if member.key >= start_key}


def _normalize_changes(
    entry: LedgerEntry, changes: Mapping[str, Any]
) -> tuple[dict[str, Any], Optional[str]]:
    """Coerce and validate edit values. Returns (changes, error reason)."""
    unknown = sorted(set(changes) - EDITABLE_FIELDS)
    if unknown:
        return {}, f"Fields cannot be edited: {', '.join(unknown)}"

    normalized = dict(changes)
    if "kind" in normalized:
        try:
            normalized["kind"] = EntryKind(normalized["kind"])
        except ValueError:
            return {}, f"Unknown entry kind '{normalized['kind']}'"
    kind = normalized.get("kind", entry.kind)

    if "amount" in normalized:
        try:
            normalized["amount"] = Decimal(str(normalized["amount"]))
        except InvalidOperation:
            return {}, f"Invalid amount '{changes['amount']}'"
    if kind == EntryKind.APPOINTMENT:
        normalized["amount"] = Decimal("0")
    elif normalized.get("amount", entry.amount) <= 0:
        return {}, non_positive_amount(normalized.get("amount", entry.amount))

    for name in ("day", "month", "year"):
        if name in normalized:
            try:
                normalized[name] = int(normalized[name])
            except (TypeError, ValueError):
                return {}, f"Invalid {name} '{changes[name]}'"

    if "day" in normalized and not 1 <= normalized["day"] <= 31:
        return {}, f"Day must be between 1 and 31 (got {normalized['day']})"
    if "month" in normalized and not 0 <= normalized["month"] <= 11:
        return {}, f"Month must be between 0 and 11 (got {normalized['month']})"
    return normalized, None


def _edit(entry: LedgerEntry, changes: Mapping[str, Any]) -> LedgerEntry:
    edited = replace(entry, **changes)
    return replace(edited, day=clamp_day_to_month(edited.year, edited.month, edited.day))


def apply_cascade_update(
    ledger: Sequence[LedgerEntry],
    entry_id: str,
    changes: Mapping[str, Any],
    apply_to_future: bool = False,
) -> MutationResult:
    """Edit an entry and, optionally, the rest of its series from there on.

    The edited entry receives every change. With ``apply_to_future`` the
    members in the same month or later also receive the non-date fields
    (amount, day, description, category, sub-category); the day is clamped
    to each member's month. Resizing a completed debt payment reports the
    balance adjustment in ``side_effects``.

    Args:
        ledger: Current ledger
        entry_id: Entry being edited
        changes: Field name to new value
        apply_to_future: Whether to cascade to later series members

    Returns:
        MutationResult; on failure the ledger is returned unchanged
    """
    ledger = tuple(ledger)
    entry = _find(ledger, entry_id)
    if entry is None:
        logger.debug("Update ignored, entry %s not in ledger", entry_id)
        return MutationResult(ledger=ledger)

    if entry.is_credit_card_invoice:
        return MutationResult(
            ledger=ledger,
            failure=OperationFailure("update", invoice_is_derived(entry_id), entry_id),
        )

    normalized, error = _normalize_changes(entry, changes)
    if error is not None:
        return MutationResult(
            ledger=ledger, failure=OperationFailure("update", error, entry_id)
        )

    scope = _scope(ledger, entry, apply_to_future)
    cascaded = {name: value for name, value in normalized.items() if name in CASCADE_FIELDS}
    if "kind" in normalized and normalized["kind"] == EntryKind.APPOINTMENT:
        cascaded.pop("amount", None)

    side_effects = SideEffects()
    updated = []
    affected = []
    for item in ledger:
        if item.id not in scope:
            updated.append(item)
            continue
        new_item = _edit(item, normalized if item.id == entry_id else cascaded)
        if new_item != item:
            affected.append(item.id)
            side_effects = side_effects.merge(resolve_amount_change(item, new_item))
        updated.append(new_item)

    logger.debug(
        "Updated %d entries from %s (apply_to_future=%s)",
        len(affected),
        entry_id,
        apply_to_future,
    )
    return MutationResult(
        ledger=tuple(updated),
        side_effects=side_effects,
        affected_ids=tuple(affected),
    )


def apply_cascade_delete(
    ledger: Sequence[LedgerEntry],
    entry_id: str,
    apply_to_future: bool = False,
) -> MutationResult:
    """Delete an entry and, optionally, the rest of its series from there on.

    With ``apply_to_future`` every series member in the same month or later is
    removed; deleting a subscription occurrence this way also deactivates the
    subscription. Completed debt payments give their amount back to the debt
    balance. Earlier members stay as history.

    Returns:
        MutationResult listing the removed ids and side effects for the host
    """
    ledger = tuple(ledger)
    entry = _find(ledger, entry_id)
    if entry is None:
        logger.debug("Delete ignored, entry %s not in ledger", entry_id)
        return MutationResult(ledger=ledger)

    if entry.is_credit_card_invoice:
        return MutationResult(
            ledger=ledger,
            failure=OperationFailure("delete", invoice_is_derived(entry_id), entry_id),
        )

    scope = _scope(ledger, entry, apply_to_future)
    side_effects = SideEffects()
    kept = []
    removed = []
    for item in ledger:
        if item.id in scope:
            removed.append(item.id)
            side_effects = side_effects.merge(
                resolve_entry_deletion(item, cascade=apply_to_future)
            )
        else:
            kept.append(item)

    logger.debug(
        "Deleted %d entries from %s (apply_to_future=%s)",
        len(removed),
        entry_id,
        apply_to_future,
    )
    return MutationResult(
        ledger=tuple(kept),
        side_effects=side_effects,
        affected_ids=tuple(removed),
    )
