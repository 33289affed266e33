# anode

Small building blocks for threaded Python code, plus two command-line
benchmarks that exercise them. Durations are given in seconds throughout;
`math.inf` means "no time limit".

## What is inside

- `anode.deadline.Deadline` – a deadline built from a duration.
  `Deadline.after(d)` starts counting now, `Deadline.lazy_after(d)` on the
  first call to `remaining()`. An infinite duration never expires; zero has
  already expired.
- `anode.inf_iterator.RangeCycle` – an endless iterator cycling through the
  half-open integer range `[start, end)`; `RangeCycle.starting_at` picks the
  first value.
- `anode.backoff.ExpBackoff` – an exponential backoff policy. Iterating it
  yields `ExpBackoffAction`s: `spin_iters` no-ops, then `yield_iters` yields,
  then sleeps that start at `min_sleep` and double up to `max_sleep`.
  `ExpBackoffAction.act(rng)` carries an action out, sleeping a random time
  below its duration. Ready-made policies are `ExpBackoff.spinny()`,
  `ExpBackoff.yieldy()` and `ExpBackoff.sleepy()`.
- `anode.chalice.Chalice` – a value that becomes poisoned when an exception
  escapes a `with chalice.borrow_mut() as guard:` block. `borrow()` and
  `borrow_mut()` raise `PoisonedError` (its `inner` holds what was borrowed)
  on a poisoned chalice unless called with `ignore_poison=True`;
  `clear_poison()` resets the flag.
- `anode.monitor.SpeculativeMonitor` – a monitor whose `enter(f)` calls `f`
  with a guard (read and write the state through `guard.value`) until `f`
  returns a `Directive` that lets it leave: `Directive.RETURN`,
  `Directive.wait(seconds)`, `Directive.NOTIFY_ONE` or `Directive.NOTIFY_ALL`.
  `lock()`, `alter(f)`, `compute(f)` and `num_waiting()` give direct access.
- `anode.completable.Completable` – a value set at most once and awaited by
  other threads with `get()`, `try_get(seconds)` or `peek()`.
  `complete(value)` returns `True` if the value was stored and `False` if the
  instance was already complete. `complete_exclusive(f)` runs `f` only if
  the instance is still incomplete. `Outcome` tells a successful result
  (`Outcome.success(value)`) apart from an abort (`Outcome.abort()`).
- `anode.executor.ThreadPool` – a fixed pool of worker threads fed by a
  `Queue.bounded(size)` or `Queue.unbounded()` queue. `pool.submitter()`
  returns a `Submitter`; each submission yields a `Completable` holding an
  `Outcome`.
- `anode.rate.Rate` – an operation rate; formatting picks Hz, kHz or MHz,
  `#` forces kHz and a number sets a right-aligned width.
- `anode.args` – parsing of benchmark arguments written as `n`, `start:end`
  or `start:end:step` into iterable `ArgRange`s; malformed input raises
  `UsageError`.
- `anode.lock_spec` – the `LockSpec` interface a lock benchmark drives, and
  `MutexSpec`, a plain `threading.Lock` that supports write locking only.
- `anode.quad_harness` and `anode.exec_harness` – the benchmark runners behind
  the two commands, usable directly through their `run` functions.

## Example

```python
from anode.completable import Completable
from anode.executor import Queue, ThreadPool

with ThreadPool(4, Queue.unbounded()) as pool:
    submitter = pool.submitter()
    result = submitter.submit(lambda: 6 * 7)
    outcome = result.get()
    assert outcome.is_success()
    assert outcome.into_option() == 42

cell = Completable()
assert cell.complete("first") is True    # stored
assert cell.complete("second") is False  # already complete
assert cell.get() == "first"
```

A bounded queue rejects work when it is full: `try_submit` then returns
`None` instead of blocking, while `submit` waits for room. A task whose
callable raises is completed with an aborted outcome. `shutdown()` stops the
pool without waiting: tasks still queued and tasks submitted afterwards are
completed with an aborted outcome. Leaving the `with` block shuts the pool
down and waits for the workers to exit.

## Benchmarks

Two commands are installed with the package. Every argument is either a
single number or a range written `start:end` or `start:end:step`; the
benchmark runs once for each combination.

Lock benchmark, with reader, writer, downgrader and upgrader threads sharing
one counter, run for a number of seconds:

```
anode-quad-bench <readers> <writers> <downgraders> <upgraders> <duration>
anode-quad-bench 4 1:4 0 0 1
```

Thread-pool benchmark, submitting tasks as fast as possible to pools with a
bounded and an unbounded queue:

```
anode-exec-bench <workers> <duration>
anode-exec-bench 1:8:2 1
```

Both print a table of operation rates in kHz. Invalid arguments print a usage
message and exit with status 1.

## What it does not do

The package has no reader-writer lock of its own. The lock benchmark
therefore measures only `threading.Lock` (through `MutexSpec`); since that
lock supports neither shared reading nor downgrading nor upgrading, the
reader, downgrader and upgrader counts are accepted but start no threads,
and their columns show `-`. Other locks can be measured by passing a
`LockSpec` factory to `anode.quad_harness.run`.

## Running the tests

```
pip install -e ".[test]"
pytest
```