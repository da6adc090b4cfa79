import random
import sys
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH when tests are run via `pytest`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from greedy.rounds import (
    STRATEGIES,
    ReservationConflictError,
    RoundOutcome,
    SolveStatus,
    make_selector,
    random_selector,
    run_rounds,
    serial_selector,
)


def test_serial_selector_cycles_catalog_in_order():
    select = serial_selector()
    assert [select(i) for i in range(len(STRATEGIES) + 2)] == list(STRATEGIES) + [STRATEGIES[0], STRATEGIES[1]]


def test_random_selector_draws_from_catalog_reproducibly():
    a = random_selector(rng=random.Random(3))
    b = random_selector(rng=random.Random(3))
    draws = [a(i) for i in range(50)]
    assert draws == [b(i) for i in range(50)]
    assert set(draws) <= set(STRATEGIES)


def test_make_selector_rejects_unknown_mode():
    with pytest.raises(ValueError):
        make_selector("greedy")
    with pytest.raises(ValueError):
        serial_selector([(2, 0)])


def test_budget_exhaustion_traverses_catalog_twice():
    seen = []

    def attempt(strategy):
        seen.append(strategy)
        return RoundOutcome.failed("nothing fits")

    result = run_rounds(16, serial_selector(), attempt, is_done=lambda: False)

    assert result.status is SolveStatus.NOT_SOLVED
    assert not result.solved
    assert seen == list(STRATEGIES) * 2
    assert result.rounds_used == 16
    assert result.failed_rounds == 16


def test_stops_as_soon_as_done_even_with_budget_left():
    remaining = [3]

    def attempt(strategy):
        remaining[0] -= 1
        return RoundOutcome.success([f"item-{remaining[0]}"])

    result = run_rounds(100, serial_selector(), attempt, is_done=lambda: remaining[0] <= 0)

    assert result.status is SolveStatus.SOLVED
    assert result.rounds_used == 3
    assert result.items == frozenset({"item-2", "item-1", "item-0"})


def test_done_is_checked_after_failed_rounds_too():
    result = run_rounds(5, serial_selector(), lambda s: RoundOutcome.failed("x"), is_done=lambda: True)
    assert result.status is SolveStatus.SOLVED
    assert result.items == frozenset()
    assert result.rounds_used == 1


def test_zero_budget_is_not_solved():
    result = run_rounds(0, serial_selector(), lambda s: RoundOutcome.success(["a"]), is_done=lambda: True)
    assert result.status is SolveStatus.NOT_SOLVED
    with pytest.raises(ValueError):
        run_rounds(-1, serial_selector(), lambda s: RoundOutcome.success([]), is_done=lambda: True)


def test_fatal_round_halts_the_run():
    calls = []

    def attempt(strategy):
        calls.append(strategy)
        if len(calls) == 2:
            return RoundOutcome.fatal("room refused")
        return RoundOutcome.success([len(calls)])

    result = run_rounds(10, serial_selector(), attempt, is_done=lambda: False)

    assert result.status is SolveStatus.FATAL
    assert len(calls) == 2
    assert result.reason == "room refused"
    with pytest.raises(ReservationConflictError):
        result.raise_for_status()


def test_callback_sees_every_round():
    log = []
    run_rounds(
        3,
        serial_selector(),
        lambda s: RoundOutcome.failed("x"),
        is_done=lambda: False,
        callback=lambda i, s, o: log.append((i, s, o.status.value)),
    )
    assert [entry[0] for entry in log] == [0, 1, 2]
    assert all(entry[2] == "failed" for entry in log)
