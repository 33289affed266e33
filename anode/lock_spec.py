"""A uniform interface over locks so that a benchmark can drive any of them.

A lock specification hands out guards. A guard exposes the protected value
through its ``value`` attribute and gives the lock back on ``release()`` or
at the end of a ``with`` block. Durations are in seconds and ``math.inf``
means "block until acquired".
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Generic, Protocol, TypeVar

T = TypeVar("T")


class _Holder(Protocol):
    value: Any


@dataclass
class _Cell:
    value: Any


@dataclass(frozen=True)
class UpgradeOutcome:
    """Result of an upgrade attempt.

    If ``upgraded`` is true, ``guard`` is the new write guard; otherwise it is
    the original read guard, which is still held.
    """

    guard: Any
    upgraded: bool


class WriteGuard(Generic[T]):
    """Exclusive access to a value held by ``holder``, released through ``release``."""

    __slots__ = ("_holder", "_release")

    def __init__(self, holder: _Holder, release: Callable[[], None]) -> None:
        self._holder = holder
        self._release: Callable[[], None] | None = release

    def _check(self) -> None:
        if self._release is None:
            raise RuntimeError("guard has already been released")

    @property
    def value(self) -> T:
        self._check()
        return self._holder.value

    @value.setter
    def value(self, value: T) -> None:
        self._check()
        self._holder.value = value

    def release(self) -> None:
        """Give the lock back; releasing twice has no further effect."""
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> WriteGuard[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.release()
        return False


class LockSpec:
    """Base for lock specifications.

    By default a lock supports only write locking; the read, downgrade and
    upgrade operations raise ``RuntimeError`` unless a subclass provides them.
    """

    def supports_read(self) -> bool:
        return False

    def supports_downgrade(self) -> bool:
        return False

    def supports_upgrade(self) -> bool:
        return False

    def try_read(self, duration: float) -> Any:
        """Return a read guard, or ``None`` if not acquired within ``duration``."""
        raise RuntimeError(f"{type(self).__name__} does not support read locking")

    def try_write(self, duration: float) -> Any:
        """Return a write guard, or ``None`` if not acquired within ``duration``."""
        raise RuntimeError(f"{type(self).__name__} does not support write locking")

    def downgrade(self, guard: Any) -> Any:
        """Turn a write guard into a read guard without releasing the lock."""
        raise RuntimeError(f"{type(self).__name__} does not support downgrading")

    def try_upgrade(self, guard: Any, duration: float) -> UpgradeOutcome:
        """Try to turn a read guard into a write guard within ``duration``."""
        raise RuntimeError(f"{type(self).__name__} does not support upgrading")


class MutexSpec(LockSpec):
    """A plain mutual-exclusion lock; only write locking is supported.

    An infinite duration blocks; any finite duration makes a single
    non-blocking attempt.
    """

    def __init__(self, value: Any) -> None:
        self._cell = _Cell(value)
        self._lock = threading.Lock()

    def supports_read(self) -> bool:
        return False

    def supports_downgrade(self) -> bool:
        return False

    def supports_upgrade(self) -> bool:
        return False

    def try_read(self, duration: float) -> Any:
        raise RuntimeError("MutexSpec does not support read locking")

    def try_write(self, duration: float) -> WriteGuard[Any] | None:
        if math.isinf(duration):
            acquired = self._lock.acquire()
        else:
            acquired = self._lock.acquire(blocking=False)
        if not acquired:
            return None
        return WriteGuard(self._cell, self._lock.release)

    def downgrade(self, guard: Any) -> Any:
        raise RuntimeError("MutexSpec does not support downgrading")

    def try_upgrade(self, guard: Any, duration: float) -> UpgradeOutcome:
        raise RuntimeError("MutexSpec does not support upgrading")