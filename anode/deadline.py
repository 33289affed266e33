"""Deadlines expressed as a remaining duration that counts down."""

from __future__ import annotations

import enum
import math
import time


class _State(enum.Enum):
    UNINITIALIZED = enum.auto()
    POINT = enum.auto()
    FOREVER = enum.auto()
    ELAPSED = enum.auto()


class Deadline:
    """A point in time by which something should happen.

    Durations are in seconds; ``math.inf`` means "never expires" and ``0``
    means "already expired". A lazily created deadline starts counting only
    when ``remaining()`` is first called.
    """

    __slots__ = ("_state", "_duration", "_point")

    def __init__(self, duration: float) -> None:
        if duration < 0:
            raise ValueError(f"duration must not be negative, got {duration}")
        self._state = _State.UNINITIALIZED
        self._duration = duration
        self._point = 0.0

    @classmethod
    def lazy_after(cls, duration: float) -> Deadline:
        """Create a deadline that starts counting on first use."""
        return cls(duration)

    @classmethod
    def after(cls, duration: float) -> Deadline:
        """Create a deadline that starts counting now."""
        deadline = cls(duration)
        deadline._ensure_initialized()
        return deadline

    def _ensure_initialized(self) -> None:
        if self._state is not _State.UNINITIALIZED:
            return
        if math.isinf(self._duration):
            self._state = _State.FOREVER
        elif self._duration == 0:
            self._state = _State.ELAPSED
        else:
            point = time.monotonic() + self._duration
            if math.isinf(point):
                self._state = _State.FOREVER
            else:
                self._state = _State.POINT
                self._point = point

    def remaining(self) -> float:
        """Return the seconds left before the deadline, never negative."""
        self._ensure_initialized()
        if self._state is _State.FOREVER:
            return math.inf
        if self._state is _State.ELAPSED:
            return 0.0
        return max(0.0, self._point - time.monotonic())

    def __repr__(self) -> str:
        if self._state is _State.UNINITIALIZED:
            return f"Deadline(lazy={self._duration!r})"
        return f"Deadline({self._state.name.lower()})"