"""A benchmark that floods an executor with trivial tasks and measures throughput."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from anode.quad_harness import _format_duration
from anode.rate import Rate


@dataclass(frozen=True)
class Options:
    """How long to run the benchmark, in seconds."""

    duration: float

    def __str__(self) -> str:
        return f"|{'duration':>70}|{_format_duration(self.duration):>20}|"


@dataclass(frozen=True)
class ExtendedOptions:
    """Fine-tuning of the benchmark."""

    time_check_interval: int = 1_000
    debug_exits: bool = False


@dataclass(frozen=True)
class BenchmarkResult:
    """Number of tasks run and the elapsed seconds."""

    iterations: int
    elapsed: float

    def __str__(self) -> str:
        if self.elapsed > 0:
            khz = Rate.from_ops(self.elapsed, self.iterations).khz()
        else:
            khz = float("nan")
        return f"{f'{khz:.3f}':>20}|"


def separator() -> str:
    return f"|{'':->70}|{'':->20}|"


def header() -> str:
    return f"|{'':70}|{'rate (kHz)':>20}|"


def run(
    executor: Any, opts: Options, ext_opts: ExtendedOptions | None = None
) -> BenchmarkResult:
    """Submit tasks to ``executor`` for ``opts.duration`` seconds and wait for them all.

    ``executor`` must provide ``submitter()``, whose result has ``submit(f)``.
    The load thread checks the clock only every ``time_check_interval``
    submissions, so the task count is always a multiple of that interval.
    The executor must stay open until every submitted task has run.
    """
    ext = ext_opts if ext_opts is not None else ExtendedOptions()
    interval = ext.time_check_interval
    stop = threading.Event()
    cond = threading.Condition()
    completed = 0
    target: int | None = None

    def task() -> None:
        nonlocal completed
        with cond:
            completed += 1
            if completed == target:
                cond.notify_all()

    submitter = executor.submitter()

    def load() -> int:
        iterations = 0
        while iterations % interval != 0 or not stop.is_set():
            submitter.submit(task)
            iterations += 1
        if ext.debug_exits:
            print(f"load thread exited, expect {iterations} iterations")
        return iterations

    start_time = time.monotonic()
    with ThreadPoolExecutor(max_workers=1) as loader:
        future = loader.submit(load)
        try:
            time.sleep(opts.duration)
            if ext.debug_exits:
                print("terminating threads")
        finally:
            stop.set()
        iterations = future.result()

    with cond:
        target = iterations
        cond.wait_for(lambda: completed == iterations)

    return BenchmarkResult(iterations=iterations, elapsed=time.monotonic() - start_time)