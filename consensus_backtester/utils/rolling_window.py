"""Bounded FIFO history used by indicators and adapters."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar, overload

T = TypeVar("T")


class RollingWindow(Generic[T]):
    """Fixed-capacity ring buffer ordered oldest to newest.

    Appending to a full window evicts the oldest element. Indexing follows list
    semantics, so ``window[0]`` is the oldest retained item and ``window[-1]`` the
    newest.
    """

    def __init__(self, capacity: int, items: Iterable[T] | None = None) -> None:
        """Initialise the window.

        Args:
            capacity: Maximum number of retained elements (must be positive)
            items: Optional initial contents, oldest first
        """
        if capacity <= 0:
            raise ValueError(f"RollingWindow capacity must be positive, got {capacity}")
        self._items: deque[T] = deque(items or (), maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of retained elements."""
        return self._items.maxlen or 0

    def append(self, item: T) -> T | None:
        """Append ``item`` and return the evicted element, if any."""
        evicted: T | None = None
        if len(self._items) == self.capacity:
            evicted = self._items[0]
        self._items.append(item)
        return evicted

    def is_full(self) -> bool:
        """Return True once the window holds ``capacity`` elements."""
        return len(self._items) == self.capacity

    def oldest(self) -> T:
        """Return the oldest retained element."""
        if not self._items:
            raise IndexError("RollingWindow is empty")
        return self._items[0]

    def newest(self) -> T:
        """Return the most recently appended element."""
        if not self._items:
            raise IndexError("RollingWindow is empty")
        return self._items[-1]

    def clear(self) -> None:
        """Drop every retained element."""
        self._items.clear()

    def to_list(self) -> list[T]:
        """Return a snapshot of the contents, oldest first."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> list[T]: ...

    def __getitem__(self, index: int | slice) -> T | list[T]:
        if isinstance(index, slice):
            return list(self._items)[index]
        return self._items[index]

    def __repr__(self) -> str:
        return f"RollingWindow(capacity={self.capacity}, items={list(self._items)!r})"
