"""Identifier factories for records minted by the engine."""

import itertools
import uuid
from typing import Callable, Optional

IdFactory = Callable[[], str]


def random_ids(length: int = 10) -> IdFactory:
    """Return a factory producing short random hexadecimal ids."""

    def new_id() -> str:
        return uuid.uuid4().hex[:length]

    return new_id


class SequentialIds:
    """Deterministic id factory: ``prefix1``, ``prefix2``, ..."""

    def __init__(self, prefix: str = "id-", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"


def ensure_factory(id_factory: Optional[IdFactory]) -> IdFactory:
    """Return ``id_factory`` or a random factory when none is given."""
    return id_factory if id_factory is not None else random_ids()
