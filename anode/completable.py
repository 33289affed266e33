"""A value that is assigned at most once and can be awaited by other threads."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from anode.deadline import Deadline
from anode.monitor import Directive, MonitorGuard, SpeculativeMonitor

T = TypeVar("T")

_INCOMPLETE: Any = object()


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either an abort or a successful result carrying a value."""

    aborted: bool = True
    value: Any = None

    @classmethod
    def abort(cls) -> Outcome[Any]:
        return cls()

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(aborted=False, value=value)

    def is_abort(self) -> bool:
        return self.aborted

    def is_success(self) -> bool:
        return not self.aborted

    def into_option(self) -> T | None:
        """Return the value on success, ``None`` on abort."""
        return None if self.aborted else self.value


class Completable(Generic[T]):
    """Holds a value that may be completed once; later completions are rejected.

    ``Completable()`` starts incomplete; ``Completable(value)`` starts
    complete. Durations are in seconds.
    """

    def __init__(self, *args: T) -> None:
        if len(args) > 1:
            raise TypeError(f"Completable takes at most one value, got {len(args)}")
        initial = args[0] if args else _INCOMPLETE
        self._monitor: SpeculativeMonitor[Any] = SpeculativeMonitor(initial)

    def complete_exclusive(self, f: Callable[[], T]) -> bool:
        """Complete with the result of ``f`` if incomplete, invoking ``f`` at most once.

        No other thread can complete this instance while ``f`` runs. Returns
        ``True`` if and only if ``f`` was invoked.
        """
        invoked = False

        def attempt(state: MonitorGuard[Any]) -> Directive:
            nonlocal invoked
            if state.value is _INCOMPLETE and not invoked:
                state.value = f()
                invoked = True
            return Directive.NOTIFY_ALL if invoked else Directive.RETURN

        self._monitor.enter(attempt)
        return invoked

    def complete(self, value: T) -> bool:
        """Assign ``value`` if incomplete; return ``True`` if it was stored."""
        stored = False

        def attempt(state: MonitorGuard[Any]) -> Directive:
            nonlocal stored
            if state.value is _INCOMPLETE and not stored:
                state.value = value
                stored = True
            return Directive.NOTIFY_ALL if stored else Directive.RETURN

        self._monitor.enter(attempt)
        return stored

    def is_complete(self) -> bool:
        return self._monitor.compute(lambda state: state is not _INCOMPLETE)

    def get(self) -> T:
        """Wait for completion and return the value."""
        return self._try_get(math.inf)

    def peek(self) -> T | None:
        """Return the value if complete, otherwise ``None``, without waiting."""
        return self._try_get(0)

    def try_get(self, duration: float) -> T | None:
        """Wait up to ``duration`` seconds; return the value or ``None``."""
        return self._try_get(duration)

    def _try_get(self, duration: float) -> Any:
        if duration != 0:
            deadline = Deadline.lazy_after(duration)
            self._monitor.enter(
                lambda state: Directive.wait(deadline.remaining())
                if state.value is _INCOMPLETE
                else Directive.RETURN
            )
        value = self._monitor.compute(lambda state: state)
        return None if value is _INCOMPLETE else value

    def into_inner(self) -> T | None:
        """Return the value if complete, otherwise ``None``."""
        value = self._monitor.into_inner()
        return None if value is _INCOMPLETE else value

    def __repr__(self) -> str:
        value = self.peek() if self.is_complete() else "<incomplete>"
        return f"Completable({value!r})"