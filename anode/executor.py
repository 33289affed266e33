"""A thread pool that runs submitted callables and reports their outcomes."""

from __future__ import annotations

import queue as _queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any, TypeVar

from anode.completable import Completable, Outcome

G = TypeVar("G")

_STOP: Any = object()


@dataclass(frozen=True)
class Queue:
    """The kind of task queue a :class:`ThreadPool` uses.

    ``bound`` is ``None`` for an unbounded queue, otherwise the number of
    tasks that may wait in the queue.
    """

    bound: int | None = None

    @classmethod
    def unbounded(cls) -> Queue:
        return cls(None)

    @classmethod
    def bounded(cls, size: int) -> Queue:
        if size < 1:
            raise ValueError(f"queue size must be at least 1, got {size}")
        return cls(size)

    def __repr__(self) -> str:
        return "Unbounded" if self.bound is None else f"Bounded({self.bound})"


class _Shared:
    """State shared between a pool, its submitters and its workers."""

    def __init__(self, queue: Queue) -> None:
        self.tasks: _queue.Queue[Any] = _queue.Queue(maxsize=queue.bound or 0)
        self.running = True
        self.in_flight = 0
        self.cond = threading.Condition()

    def begin_enqueue(self) -> bool:
        with self.cond:
            if not self.running:
                return False
            self.in_flight += 1
            return True

    def end_enqueue(self) -> None:
        with self.cond:
            self.in_flight -= 1
            if self.in_flight == 0:
                self.cond.notify_all()


def _prepare_task(
    shared: _Shared, f: Callable[[], G]
) -> tuple[Completable[Outcome[G]], Callable[[], None]]:
    comp: Completable[Outcome[G]] = Completable()

    def task() -> None:
        outcome: Outcome[Any] = Outcome.abort()
        if shared.running:
            try:
                outcome = Outcome.success(f())
            except Exception:
                outcome = Outcome.abort()
        comp.complete(outcome)

    return comp, task


class Submitter:
    """Submits callables to a :class:`ThreadPool`.

    Each submission returns a :class:`Completable` that is eventually
    completed with an :class:`Outcome`: a success holding the callable's
    result, or an abort if the pool was shut down before the task ran, or
    if the callable raised.
    """

    __slots__ = ("_shared",)

    def __init__(self, shared: _Shared) -> None:
        self._shared = shared

    def submit(self, f: Callable[[], G]) -> Completable[Outcome[G]]:
        """Enqueue ``f``, blocking while a bounded queue is full."""
        comp, task = _prepare_task(self._shared, f)
        if not self._shared.begin_enqueue():
            comp.complete(Outcome.abort())
            return comp
        try:
            self._shared.tasks.put(task)
        finally:
            self._shared.end_enqueue()
        return comp

    def try_submit(self, f: Callable[[], G]) -> Completable[Outcome[G]] | None:
        """Enqueue ``f`` without blocking; return ``None`` if the queue is full."""
        comp, task = _prepare_task(self._shared, f)
        if not self._shared.begin_enqueue():
            comp.complete(Outcome.abort())
            return comp
        try:
            self._shared.tasks.put_nowait(task)
        except _queue.Full:
            return None
        finally:
            self._shared.end_enqueue()
        return comp


def _worker(tasks: _queue.Queue[Any]) -> None:
    while True:
        task = tasks.get()
        if task is _STOP:
            return
        task()


class ThreadPool:
    """A fixed number of worker threads consuming a shared task queue.

    After :meth:`shutdown`, tasks still queued are completed with an abort
    outcome rather than run.
    """

    def __init__(self, threads: int, queue: Queue) -> None:
        if threads <= 0:
            raise ValueError(f"thread count must be positive, got {threads}")
        self._shared = _Shared(queue)
        self._closer: threading.Thread | None = None
        self._threads = [
            threading.Thread(target=_worker, args=(self._shared.tasks,), daemon=True)
            for _ in range(threads)
        ]
        for thread in self._threads:
            thread.start()

    def submitter(self) -> Submitter:
        return Submitter(self._shared)

    def shutdown(self) -> None:
        """Stop accepting work and let the workers drain the queue and exit.

        Returns without waiting for the workers; tasks that have not started
        yet are aborted.
        """
        shared = self._shared
        with shared.cond:
            if not shared.running:
                return
            shared.running = False

        workers = len(self._threads)

        def close() -> None:
            with shared.cond:
                shared.cond.wait_for(lambda: shared.in_flight == 0)
            for _ in range(workers):
                shared.tasks.put(_STOP)

        self._closer = threading.Thread(target=close, daemon=True)
        self._closer.start()

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.shutdown()
        if self._closer is not None:
            self._closer.join()
        for thread in self._threads:
            thread.join()
        return False