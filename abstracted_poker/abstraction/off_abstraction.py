"""
Custom raise sizes keyed by information state string.

A game carries a read-only table of pre-registered amounts; each state layers a
private, write-once table on top of it. Lookups consult the state entries first.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, Mapping

from abstracted_poker.shared.errors import DuplicateOffAbstractionError

logger = logging.getLogger(__name__)


def freeze_raises(raises: Mapping[str, int] | None) -> Mapping[str, int]:
    """Read-only copy of a game-scope raise table."""
    return MappingProxyType(dict(raises or {}))


class OffAbstractionTable:
    """
    Layered information-state -> raise-to amount table.

    Args:
        shared: Game-scope entries; never modified through this table.
    """

    def __init__(self, shared: Mapping[str, int] | None = None):
        self._shared = shared if isinstance(shared, MappingProxyType) else freeze_raises(shared)
        self._private: dict[str, int] = {}

    def __contains__(self, info_state: object) -> bool:
        return info_state in self._private or info_state in self._shared

    def __len__(self) -> int:
        return len(self._private) + sum(key not in self._private for key in self._shared)

    def __iter__(self) -> Iterator[str]:
        yield from self._private
        yield from (key for key in self._shared if key not in self._private)

    def get(self, info_state: str) -> int | None:
        if info_state in self._private:
            return self._private[info_state]
        return self._shared.get(info_state)

    @property
    def shared(self) -> Mapping[str, int]:
        return self._shared

    @property
    def private(self) -> Mapping[str, int]:
        return MappingProxyType(self._private)

    def register(self, info_state: str, amount: int) -> None:
        """
        Record ``amount`` for ``info_state`` in the private layer.

        A private entry shadows a shared entry for the same information state.

        Raises:
            DuplicateOffAbstractionError: If the private layer already has an
                entry for ``info_state``; the existing amount is kept.
            ValueError: If ``amount`` is not a positive integer.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValueError(f"Raise amount must be a positive integer, got {amount!r}")
        if info_state in self._private:
            raise DuplicateOffAbstractionError(
                f"Information state already has raise {self._private[info_state]}: {info_state}"
            )
        self._private[info_state] = amount
        logger.debug(f"Registered off-abstraction raise {amount} for {info_state}")

    def copy(self) -> "OffAbstractionTable":
        clone = OffAbstractionTable(self._shared)
        clone._private = dict(self._private)
        return clone
