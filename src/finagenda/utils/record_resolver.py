"""Utility for resolving card, subscription and debt names to IDs."""

from typing import Callable, Sequence, TypeVar

from finagenda.domain.errors import NotFoundError

Record = TypeVar("Record")


def resolve_record(
    records: Sequence[Record], reference: str, not_found: Callable[[str], str]
) -> Record:
    """Find a record by ID or by name.

    Names are matched exactly first, then case-insensitively.

    Args:
        records: Records with ``id`` and ``name`` attributes
        reference: Record ID or name
        not_found: Message helper used when nothing matches

    Returns:
        The matching record

    Raises:
        NotFoundError: If no record matches
    """
    reference = reference.strip()
    for record in records:
        if record.id == reference or record.name == reference:
            return record

    lowered = reference.lower()
    for record in records:
        if record.name.lower() == lowered:
            return record

    raise NotFoundError(not_found(reference))
