"""Concurrency primitives (deadlines, backoff, monitors, completables, a thread pool) and lock and executor benchmarks."""

__version__ = "0.1.0"

__all__ = [
    "args",
    "backoff",
    "chalice",
    "completable",
    "deadline",
    "exec_bench",
    "exec_harness",
    "executor",
    "inf_iterator",
    "lock_spec",
    "monitor",
    "quad_bench",
    "quad_harness",
    "rate",
]