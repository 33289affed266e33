"""A monitor that evaluates its state speculatively before blocking.

A closure inspects and alters the guarded state, then returns a
:class:`Directive` saying whether to return, to wait or to notify other
threads. The state is first examined under a lightweight lock only; the
heavier mutex used for waiting and notification is taken only when a
directive actually needs it, after which the closure is evaluated again.
"""

from __future__ import annotations

import enum
import math
import threading
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import ClassVar, Generic, TypeVar

S = TypeVar("S")
R = TypeVar("R")


class DirectiveKind(enum.Enum):
    RETURN = "return"
    WAIT = "wait"
    NOTIFY_ONE = "notify_one"
    NOTIFY_ALL = "notify_all"


@dataclass(frozen=True)
class Directive:
    """What :meth:`SpeculativeMonitor.enter` should do after evaluating the closure.

    Wait durations are in seconds; ``math.inf`` waits without a time limit
    and ``0`` returns at once.
    """

    kind: DirectiveKind
    duration: float = 0.0

    RETURN: ClassVar[Directive]
    NOTIFY_ONE: ClassVar[Directive]
    NOTIFY_ALL: ClassVar[Directive]

    @classmethod
    def wait(cls, duration: float) -> Directive:
        if duration < 0:
            raise ValueError(f"wait duration must not be negative, got {duration}")
        return cls(DirectiveKind.WAIT, duration)


Directive.RETURN = Directive(DirectiveKind.RETURN)
Directive.NOTIFY_ONE = Directive(DirectiveKind.NOTIFY_ONE)
Directive.NOTIFY_ALL = Directive(DirectiveKind.NOTIFY_ALL)


def _timeout(duration: float) -> float | None:
    if math.isinf(duration):
        return None
    return min(duration, threading.TIMEOUT_MAX)


class MonitorGuard(Generic[S]):
    """Access to a monitor's state through its ``value`` attribute.

    A guard returned by :meth:`SpeculativeMonitor.lock` holds the monitor's
    lock until it is released or its ``with`` block ends.
    """

    __slots__ = ("_monitor", "_owned")

    def __init__(self, monitor: SpeculativeMonitor[S], owned: bool) -> None:
        self._monitor = monitor
        self._owned = owned

    @property
    def value(self) -> S:
        return self._monitor._state

    @value.setter
    def value(self, value: S) -> None:
        self._monitor._state = value

    def __enter__(self) -> MonitorGuard[S]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.release()
        return False

    def release(self) -> None:
        """Release the monitor's lock if this guard holds it."""
        if self._owned:
            self._owned = False
            self._monitor._tracker.release()


class SpeculativeMonitor(Generic[S]):
    """Guards a piece of state and lets threads wait for changes to it."""

    def __init__(self, state: S) -> None:
        self._state = state
        self._waiting = 0
        self._tracker = threading.Lock()
        self._mutex = threading.Lock()
        self._cond = threading.Condition(self._mutex)

    def enter(self, f: Callable[[MonitorGuard[S]], Directive]) -> None:
        """Evaluate ``f`` over the state until its directive lets the call return.

        ``f`` may be invoked several times and must tolerate re-evaluation.
        """
        view: MonitorGuard[S] = MonitorGuard(self, owned=False)
        mutex_held = False
        woken = False
        try:
            while True:
                self._tracker.acquire()
                tracker_held = True
                try:
                    if woken:
                        woken = False
                        self._waiting -= 1
                    directive = f(view)
                    kind = directive.kind
                    if kind is DirectiveKind.RETURN:
                        return
                    if kind is DirectiveKind.WAIT:
                        if directive.duration <= 0:
                            return
                        if not mutex_held:
                            self._tracker.release()
                            tracker_held = False
                            self._mutex.acquire()
                            mutex_held = True
                            continue
                        self._waiting += 1
                        self._tracker.release()
                        tracker_held = False
                        notified = self._cond.wait(_timeout(directive.duration))
                        if not notified:
                            with self._tracker:
                                self._waiting -= 1
                            return
                        woken = True
                        continue
                    if self._waiting == 0:
                        return
                    self._tracker.release()
                    tracker_held = False
                    if not mutex_held:
                        self._mutex.acquire()
                        mutex_held = True
                        continue
                    if kind is DirectiveKind.NOTIFY_ONE:
                        self._cond.notify()
                    else:
                        self._cond.notify_all()
                    return
                finally:
                    if tracker_held:
                        self._tracker.release()
        finally:
            if mutex_held:
                self._mutex.release()

    def lock(self) -> MonitorGuard[S]:
        """Acquire the state's lock and return a guard holding it."""
        self._tracker.acquire()
        return MonitorGuard(self, owned=True)

    def alter(self, f: Callable[[MonitorGuard[S]], object]) -> None:
        """Invoke ``f`` exactly once with the locked state, without waiting or notifying."""
        with self.lock() as guard:
            f(guard)

    def compute(self, f: Callable[[S], R]) -> R:
        """Return ``f`` applied to the locked state."""
        with self.lock() as guard:
            return f(guard.value)

    def num_waiting(self) -> int:
        """Return how many threads are currently waiting in the monitor."""
        with self._tracker:
            return self._waiting

    def into_inner(self) -> S:
        """Return the guarded state."""
        return self._state

    def __repr__(self) -> str:
        if self._tracker.acquire(blocking=False):
            try:
                data = repr(self._state)
            finally:
                self._tracker.release()
        else:
            data = "<locked>"
        return f"SpeculativeMonitor(data={data}, ..)"