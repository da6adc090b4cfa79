from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from routine.holders import SlotPool
from routine.timeslots import DayTimeSlot, WeekGrid


def _pool(days: int = 2, periods: int = 3, rng=None) -> SlotPool:
    return SlotPool(WeekGrid(days=tuple(f"D{i}" for i in range(days)), periods_per_day=periods).whole_week(), rng=rng)


def test_pop_returns_first_consecutive_run() -> None:
    pool = _pool()
    run = pool.pop_consecutive_slots(2)
    assert run == [DayTimeSlot(0, 0), DayTimeSlot(0, 1)]
    assert len(pool) == 4

    # next run of 2 does not wrap across days
    assert pool.pop_consecutive_slots(2) == [DayTimeSlot(1, 0), DayTimeSlot(1, 1)]


def test_pop_too_long_run_returns_none_without_mutation() -> None:
    pool = _pool(days=2, periods=3)
    before = pool.snapshot()
    assert pool.pop_consecutive_slots(4) is None
    assert pool.snapshot() == before


def test_pop_skips_gaps() -> None:
    pool = SlotPool([DayTimeSlot(0, 0), DayTimeSlot(0, 2), DayTimeSlot(0, 3)])
    assert pool.pop_consecutive_slots(2) == [DayTimeSlot(0, 2), DayTimeSlot(0, 3)]
    with pytest.raises(ValueError):
        pool.pop_consecutive_slots(0)


def test_put_back_restores_exact_pool() -> None:
    pool = _pool(days=3, periods=4, rng=random.Random(5))
    before = pool.snapshot()
    run = pool.pop_consecutive_slots(3)
    assert run is not None
    assert len(pool) == len(before) - 3

    pool.put_back_slots(run)
    assert pool.snapshot() == before

    with pytest.raises(ValueError):
        pool.put_back_slots(run)


def test_random_pop_is_always_contiguous() -> None:
    pool = _pool(days=5, periods=6, rng=random.Random(1))
    for _ in range(7):
        run = pool.pop_consecutive_slots(4)
        if run is None:
            break
        assert all(a.is_followed_by(b) for a, b in zip(run, run[1:]))


def test_discard_is_idempotent() -> None:
    pool = _pool()
    drop = {DayTimeSlot(0, 1), DayTimeSlot(9, 9)}
    assert pool.discard_slots(drop) == 1
    once = pool.snapshot()
    assert pool.discard_slots(drop) == 0
    assert pool.snapshot() == once
    assert DayTimeSlot(0, 1) not in pool


def test_pop_after_put_back_starts_past_the_returned_run() -> None:
    pool = _pool(days=2, periods=3)

    run = pool.pop_consecutive_slots(2)
    assert run == [DayTimeSlot(0, 0), DayTimeSlot(0, 1)]
    pool.put_back_slots(run)

    run = pool.pop_consecutive_slots(2)
    assert run == [DayTimeSlot(0, 1), DayTimeSlot(0, 2)]
    pool.put_back_slots(run)

    run = pool.pop_consecutive_slots(3)
    assert run == [DayTimeSlot(1, 0), DayTimeSlot(1, 1), DayTimeSlot(1, 2)]
    pool.put_back_slots(run)

    # nothing later fits, so the pop wraps to the front of the week
    run = pool.pop_consecutive_slots(3)
    assert run == [DayTimeSlot(0, 0), DayTimeSlot(0, 1), DayTimeSlot(0, 2)]
    pool.put_back_slots(run)

    pool.rewind()
    assert pool.pop_consecutive_slots(1) == [DayTimeSlot(0, 0)]
