"""Exponential backoff that moves from spinning to yielding to sleeping."""

from __future__ import annotations

import enum
import random
import time
from collections.abc import Iterator
from dataclasses import dataclass, field

U64_MAX = 2**64 - 1
_MIN_DURATION = 1e-9


def nonzero_duration(duration: float) -> float:
    """Return ``duration`` after checking that it is strictly positive."""
    if not duration > 0:
        raise ValueError(f"duration must be greater than zero, got {duration}")
    return duration


class ActionKind(enum.Enum):
    NOP = "nop"
    YIELD = "yield"
    SLEEP = "sleep"


@dataclass(frozen=True)
class ExpBackoffAction:
    """One step of a backoff sequence."""

    kind: ActionKind
    duration: float = 0.0

    @classmethod
    def nop(cls) -> ExpBackoffAction:
        return cls(ActionKind.NOP)

    @classmethod
    def yield_now(cls) -> ExpBackoffAction:
        return cls(ActionKind.YIELD)

    @classmethod
    def sleep(cls, duration: float) -> ExpBackoffAction:
        return cls(ActionKind.SLEEP, duration)

    def act(self, rng: random.Random | None = None) -> None:
        """Carry out the action; sleeps last a random time below ``duration``."""
        if self.kind is ActionKind.YIELD:
            time.sleep(0)
        elif self.kind is ActionKind.SLEEP:
            source = rng if rng is not None else random
            time.sleep(source.random() * self.duration)


@dataclass
class ExpBackoff:
    """Spins, then yields, then sleeps for exponentially growing periods.

    Sleep durations are in seconds and must be positive.
    """

    spin_iters: int
    yield_iters: int
    min_sleep: float = field(default=_MIN_DURATION)
    max_sleep: float = field(default=_MIN_DURATION)

    def __post_init__(self) -> None:
        if self.spin_iters < 0 or self.yield_iters < 0:
            raise ValueError("iteration counts must not be negative")
        nonzero_duration(self.min_sleep)
        nonzero_duration(self.max_sleep)

    @classmethod
    def spinny(cls) -> ExpBackoff:
        return cls(spin_iters=U64_MAX, yield_iters=0)

    @classmethod
    def yieldy(cls) -> ExpBackoff:
        return cls(spin_iters=0, yield_iters=U64_MAX)

    @classmethod
    def sleepy(cls) -> ExpBackoff:
        return cls(spin_iters=0, yield_iters=0, min_sleep=100e-6, max_sleep=10e-3)

    def __iter__(self) -> Iterator[ExpBackoffAction]:
        spin_limit = self.spin_iters
        yield_limit = min(self.spin_iters + self.yield_iters, U64_MAX)
        max_sleep = self.max_sleep
        current_sleep = self.min_sleep
        iterations = 0
        nop = ExpBackoffAction.nop()
        yield_action = ExpBackoffAction.yield_now()
        while True:
            iterations += 1
            if iterations <= spin_limit:
                yield nop
            elif iterations <= yield_limit:
                yield yield_action
            else:
                action = ExpBackoffAction.sleep(current_sleep)
                current_sleep = min(current_sleep * 2, max_sleep)
                yield action