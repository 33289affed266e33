from itertools import islice
from unittest import mock

import pytest

from anode.backoff import (
    ActionKind,
    ExpBackoff,
    ExpBackoffAction,
    nonzero_duration,
)


def test_nonzero_duration_rejects_zero():
    with pytest.raises(ValueError):
        nonzero_duration(0)


def test_nonzero_duration_round_trip():
    assert nonzero_duration(10e-6) == 10e-6


def test_exp_backoff_rejects_zero_sleep():
    with pytest.raises(ValueError):
        ExpBackoff(spin_iters=1, yield_iters=1, min_sleep=0, max_sleep=1.0)


def test_exp_backoff_sequence():
    eb = ExpBackoff(spin_iters=2, yield_iters=3, min_sleep=1e-6, max_sleep=30e-6)
    it = iter(eb)
    assert next(it) == ExpBackoffAction.nop()
    assert next(it) == ExpBackoffAction.nop()
    assert next(it) == ExpBackoffAction.yield_now()
    assert next(it) == ExpBackoffAction.yield_now()
    assert next(it) == ExpBackoffAction.yield_now()
    expected = [1e-6, 2e-6, 4e-6, 8e-6, 16e-6, 30e-6, 30e-6]
    for micros in expected:
        action = next(it)
        assert action.kind is ActionKind.SLEEP
        assert action.duration == pytest.approx(micros)

    assert next(iter(eb)) == ExpBackoffAction.nop()


def test_spinny_only_spins():
    actions = list(islice(ExpBackoff.spinny(), 100))
    assert all(action == ExpBackoffAction.nop() for action in actions)


def test_yieldy_only_yields():
    actions = list(islice(ExpBackoff.yieldy(), 100))
    assert all(action == ExpBackoffAction.yield_now() for action in actions)


def test_sleepy_starts_sleeping():
    first, second = islice(ExpBackoff.sleepy(), 2)
    assert first.kind is ActionKind.SLEEP
    assert first.duration == pytest.approx(100e-6)
    assert second.duration == pytest.approx(200e-6)


def test_sleepy_caps_at_max_sleep():
    actions = list(islice(ExpBackoff.sleepy(), 20))
    assert max(action.duration for action in actions) == pytest.approx(10e-3)


class _FixedRng:
    def random(self):
        return 0.5


def test_act_nop_does_not_sleep():
    action = next(iter(ExpBackoff.spinny()))
    with mock.patch("anode.backoff.time.sleep") as sleep:
        action.act(_FixedRng())
    assert action == ExpBackoffAction.nop()
    assert sleep.call_count == 0


def test_act_yield_yields():
    action = next(iter(ExpBackoff.yieldy()))
    with mock.patch("anode.backoff.time.sleep") as sleep:
        action.act(_FixedRng())
    assert action == ExpBackoffAction.yield_now()
    assert sleep.call_args_list == [mock.call(0)]


def test_act_sleep_is_randomised_within_duration():
    action = next(iter(ExpBackoff.sleepy()))
    with mock.patch("anode.backoff.time.sleep") as sleep:
        action.act(_FixedRng())
    (slept,), _ = sleep.call_args
    assert action.duration == pytest.approx(100e-6)
    assert slept == pytest.approx(action.duration / 2)


def test_act_sleep_default_rng_stays_below_duration():
    action = next(iter(ExpBackoff.sleepy()))
    with mock.patch("anode.backoff.time.sleep") as sleep:
        action.act()
    (slept,), _ = sleep.call_args
    assert 0 <= slept < action.duration