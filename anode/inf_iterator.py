"""Iterators that never run out of values."""

from __future__ import annotations

from collections.abc import Iterator


class RangeCycle:
    """Cycles endlessly through the half-open range ``[start, end)``."""

    __slots__ = ("start", "end", "_item")

    def __init__(self, start: int, end: int) -> None:
        self.start = start
        self.end = end
        self._item = start

    @classmethod
    def starting_at(cls, start: int, end: int, item: int) -> RangeCycle:
        """Create a cycle over ``[start, end)`` whose first value is ``item``."""
        cycle = cls(start, end)
        cycle._item = item
        return cycle

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        current = self._item
        following = current + 1
        self._item = self.start if following == self.end else following
        return current

    def __repr__(self) -> str:
        return f"RangeCycle(start={self.start}, end={self.end}, item={self._item})"