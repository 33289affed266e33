"""A benchmark driving readers, writers, downgraders and upgraders against one lock."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from anode.lock_spec import LockSpec
from anode.rate import Rate


@dataclass(frozen=True)
class IntValue:
    """A plain integer counter."""

    value: int

    @classmethod
    def initial(cls) -> IntValue:
        return cls(0)

    def get(self) -> int:
        return self.value

    def add(self, amount: int) -> IntValue:
        return IntValue(self.value + amount)


@dataclass(frozen=True)
class BoxedInt:
    """An integer counter held in a separately allocated object."""

    inner: IntValue

    @classmethod
    def initial(cls) -> BoxedInt:
        return cls(IntValue(0))

    def get(self) -> int:
        return self.inner.value

    def add(self, amount: int) -> BoxedInt:
        return BoxedInt(IntValue(self.get() + amount))


@dataclass(frozen=True)
class StringValue:
    """An integer counter kept as decimal text."""

    text: str

    @classmethod
    def initial(cls) -> StringValue:
        return cls("0")

    def get(self) -> int:
        return int(self.text)

    def add(self, amount: int) -> StringValue:
        return StringValue(str(self.get() + amount))


def _format_duration(seconds: float) -> str:
    if math.isinf(seconds):
        return "inf"
    nanos = round(seconds * 1_000_000_000)
    for scale, digits, unit in ((10**9, 9, "s"), (10**6, 6, "ms"), (10**3, 3, "µs")):
        if nanos >= scale:
            whole, frac = divmod(nanos, scale)
            if frac == 0:
                return f"{whole}{unit}"
            return f"{whole}.{frac:0{digits}d}".rstrip("0") + unit
    return f"{nanos}ns"


@dataclass(frozen=True)
class Options:
    """Thread counts per role and the run duration in seconds."""

    readers: int
    writers: int
    downgraders: int
    upgraders: int
    duration: float

    def __str__(self) -> str:
        rows = (
            ("readers", self.readers, "writers", self.writers),
            ("downgraders", self.downgraders, "upgraders", self.upgraders),
            ("duration", _format_duration(self.duration), "", ""),
        )
        return "\n".join(
            f"|{a:>45}|{str(b):>20}|{'':20}|{c:>20}|{str(d):>20}|" for a, b, c, d in rows
        )


@dataclass(frozen=True)
class ExtendedOptions:
    """Fine-tuning of the benchmark; timeouts are in seconds."""

    time_check_interval: int = 100
    read_timeout: float = math.inf
    write_timeout: float = math.inf
    upgrade_timeout: float = 0.0
    debug_locks: bool = False
    debug_exits: bool = False
    spin_inside_critical: int = 0
    spin_outside_critical: int = 0
    yields_inside_critical: int = 0
    yields_outside_critical: int = 0
    asserts_enabled: bool = True


@dataclass(frozen=True)
class BenchmarkResult:
    """Operation counts per kind (``None`` where not exercised) and elapsed seconds."""

    reads: int | None
    writes: int | None
    downgrades: int | None
    upgrades: int | None
    elapsed: float

    def __str__(self) -> str:
        cells = []
        for ops in (self.reads, self.writes, self.downgrades, self.upgrades):
            rate = Rate.maybe(self.elapsed, ops)
            cells.append("-" if rate is None else f"{rate.khz():.3f}")
        return "".join(f"{cell:>20}|" for cell in cells)


def separator() -> str:
    return f"|{'':->45}|" + f"{'':->20}|" * 4


def header() -> str:
    titles = ("reads (kHz)", "writes (kHz)", "downgrades (kHz)", "upgrades (kHz)")
    return f"|{'':45}|" + "".join(f"{title:>20}|" for title in titles)


def _spin_a_while(count: int) -> None:
    total = 1
    for i in range(count):
        total += i


def _yield_a_while(count: int) -> None:
    for _ in range(count):
        time.sleep(0)


def _read_eventually(lock: LockSpec, duration: float) -> Any:
    while True:
        guard = lock.try_read(duration)
        if guard is not None:
            return guard


def _write_eventually(lock: LockSpec, duration: float) -> Any:
    while True:
        guard = lock.try_write(duration)
        if guard is not None:
            return guard


def run(
    lock_factory: Callable[[Any], LockSpec],
    value_type: Any,
    opts: Options,
    ext_opts: ExtendedOptions | None = None,
) -> BenchmarkResult:
    """Run the benchmark against a lock made by ``lock_factory``.

    ``value_type`` supplies ``initial()``; its values support ``get()`` and
    ``add(amount)``. Roles the lock cannot serve get no threads. Raises
    ``RuntimeError`` if a thread observes the value going backwards.
    """
    ext = ext_opts if ext_opts is not None else ExtendedOptions()
    lock = lock_factory(value_type.initial())

    readers = opts.readers if lock.supports_read() else 0
    writers = opts.writers
    downgraders = opts.downgraders if lock.supports_downgrade() else 0
    upgraders = opts.upgraders if lock.supports_upgrade() else 0
    total = readers + writers + downgraders + upgraders

    stop = threading.Event()
    interval = ext.time_check_interval
    barrier = threading.Barrier(total) if total else None

    def keep_going(iterations: int) -> bool:
        return iterations % interval != 0 or not stop.is_set()

    def debug(message: str) -> None:
        if ext.debug_locks:
            print(message)

    def check(role: str, i: int, last: int, current: int) -> None:
        if ext.asserts_enabled and current < last:
            raise RuntimeError(f"error in {role} {i}: value went from {last} to {current}")

    def inside() -> None:
        _spin_a_while(ext.spin_inside_critical)
        _yield_a_while(ext.yields_inside_critical)

    def outside() -> None:
        _spin_a_while(ext.spin_outside_critical)
        _yield_a_while(ext.yields_outside_critical)

    def exited(role: str, i: int) -> None:
        if ext.debug_exits:
            print(f"{role} {i} exited")

    def reader(i: int) -> int:
        barrier.wait()
        iterations = 0
        last = 0
        while keep_going(iterations):
            guard = _read_eventually(lock, ext.read_timeout)
            try:
                debug(f"reader {i} read-locked")
                inside()
                current = guard.value.get()
                check("reader", i, last, current)
                last = current
            finally:
                guard.release()
            debug(f"reader {i} read-unlocked")
            iterations += 1
            outside()
        exited("reader", i)
        return iterations

    def writer(i: int) -> int:
        barrier.wait()
        iterations = 0
        while keep_going(iterations):
            with _write_eventually(lock, ext.write_timeout) as guard:
                debug(f"writer {i} write-locked")
                inside()
                guard.value = guard.value.add(1)
            debug(f"writer {i} write-unlocked")
            iterations += 1
            outside()
        exited("writer", i)
        return iterations

    def downgrader(i: int) -> int:
        barrier.wait()
        iterations = 0
        last = 0
        while keep_going(iterations):
            guard = _write_eventually(lock, ext.write_timeout)
            try:
                debug(f"downgrader {i} write-locked")
                inside()
                guard.value = guard.value.add(1)
                guard = lock.downgrade(guard)
                debug(f"downgrader {i} downgraded")
                current = guard.value.get()
                check("downgrader", i, last, current)
                last = current
            finally:
                guard.release()
            debug(f"downgrader {i} read-unlocked")
            iterations += 1
            outside()
        exited("downgrader", i)
        return iterations

    def upgrader(i: int) -> tuple[int, int]:
        barrier.wait()
        iterations = 0
        last = 0
        missed = 0
        while keep_going(iterations):
            guard = _read_eventually(lock, ext.read_timeout)
            try:
                debug(f"upgrader {i} read-locked")
                inside()
                current = guard.value.get()
                check("upgrader", i, last, current)
                last = current
                outcome = lock.try_upgrade(guard, ext.upgrade_timeout)
                guard = outcome.guard
                if outcome.upgraded:
                    debug(f"upgrader {i} upgraded")
                    inside()
                    guard.value = guard.value.add(1)
                    guard.release()
                    debug(f"upgrader {i} write-unlocked")
                else:
                    debug(f"upgrader {i} upgrade timed out")
                    guard.release()
                    missed += 1
                    debug(f"upgrader {i} read-unlocked")
            finally:
                guard.release()
            iterations += 1
            outside()
        exited("upgrader", i)
        return iterations, iterations - missed

    start_time = time.monotonic()
    if total == 0:
        return BenchmarkResult(None, None, None, None, time.monotonic() - start_time)

    with ThreadPoolExecutor(max_workers=total) as pool:
        reader_futures = [pool.submit(reader, i) for i in range(readers)]
        writer_futures = [pool.submit(writer, i) for i in range(writers)]
        downgrader_futures = [pool.submit(downgrader, i) for i in range(downgraders)]
        upgrader_futures = [pool.submit(upgrader, i) for i in range(upgraders)]
        start_time = time.monotonic()
        try:
            time.sleep(opts.duration)
            if ext.debug_exits:
                print("terminating threads")
        finally:
            stop.set()

        reader_iterations = sum(f.result() for f in reader_futures)
        writer_iterations = sum(f.result() for f in writer_futures)
        downgrader_iterations = sum(f.result() for f in downgrader_futures)
        upgrader_results = [f.result() for f in upgrader_futures]

    upgrader_reads = sum(reads for reads, _ in upgrader_results)
    upgrader_upgrades = sum(upgrades for _, upgrades in upgrader_results)

    return BenchmarkResult(
        reads=reader_iterations + upgrader_reads if readers > 0 else None,
        writes=writer_iterations + downgrader_iterations if writers > 0 else None,
        downgrades=downgrader_iterations if downgraders > 0 else None,
        upgrades=upgrader_upgrades if upgraders > 0 else None,
        elapsed=time.monotonic() - start_time,
    )