"""Bounded, append-only buffers for log entries and cluster events."""

from __future__ import annotations

import logging
from collections import deque
from typing import Generic, Iterator, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_MAX_EVENTS = 500


class _HasId(Protocol):
    id: str


T = TypeVar("T", bound=_HasId)


class DuplicateIdError(ValueError):
    """Raised when an item's id is already present in the buffer."""


class EntryBuffer(Generic[T]):
    """Ordered collection of records with a retention cap.

    Records keep their arrival order. When the buffer is full the oldest
    record is evicted before the new one is appended, so the length never
    exceeds ``max_size`` at any observable point. Ids are unique among the
    records currently held.

    Args:
        max_size: Capacity, or None for an unbounded buffer.
    """

    def __init__(self, max_size: Optional[int] = DEFAULT_MAX_ENTRIES):
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._items: deque[T] = deque()
        self._ids: set[str] = set()
        self.evicted = 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def append(self, item: T) -> None:
        """Append a record, evicting the oldest one if at capacity.

        Raises:
            DuplicateIdError: If a record with the same id is held.
        """
        if item.id in self._ids:
            raise DuplicateIdError(f"Duplicate id: {item.id}")

        if self.max_size is not None and len(self._items) >= self.max_size:
            oldest = self._items.popleft()
            self._ids.discard(oldest.id)
            self.evicted += 1
            logger.debug("Evicted %s to stay within %d records", oldest.id, self.max_size)

        self._items.append(item)
        self._ids.add(item.id)

    def snapshot(self) -> list[T]:
        """Return the records in arrival order."""
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._ids.clear()
