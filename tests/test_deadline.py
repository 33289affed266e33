import math
import time

import pytest

from anode.deadline import Deadline


def test_lazy_forever_never_expires():
    deadline = Deadline.lazy_after(math.inf)
    assert deadline.remaining() == math.inf
    assert deadline.remaining() == math.inf


def test_after_forever_never_expires():
    assert Deadline.after(math.inf).remaining() == math.inf


def test_zero_is_already_elapsed():
    assert Deadline.lazy_after(0).remaining() == 0
    assert Deadline.after(0).remaining() == 0


def test_remaining_is_bounded_by_duration():
    deadline = Deadline.after(10.0)
    remaining = deadline.remaining()
    assert 0 < remaining <= 10.0


def test_remaining_decreases():
    deadline = Deadline.after(10.0)
    first = deadline.remaining()
    time.sleep(0.01)
    second = deadline.remaining()
    assert second < first


def test_short_deadline_saturates_at_zero():
    deadline = Deadline.after(0.001)
    time.sleep(0.02)
    assert deadline.remaining() == 0


def test_lazy_deadline_starts_on_first_use():
    deadline = Deadline.lazy_after(0.05)
    time.sleep(0.1)
    # the countdown only begins now, so time remains
    assert deadline.remaining() > 0


def test_negative_duration_rejected():
    with pytest.raises(ValueError):
        Deadline.lazy_after(-1.0)