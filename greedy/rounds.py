"""Bounded-round greedy search engine.

This module provides the problem-agnostic loop used by the routine solver:

- run at most N rounds
- each round picks a *strategy* via a pure selector `f(round_index) -> strategy`
- each round is an all-or-nothing attempt reported as a tagged `RoundOutcome`
- stop as soon as the problem reports it is done, or when the budget runs out

Outcomes
--------
A round is one of:
1) SUCCESS: it produced items, which are merged into the accumulator
2) FAILED: an ordinary failure; the attempt must have left no trace
3) FATAL: an internal consistency violation; the whole run stops

The run itself ends as SOLVED, NOT_SOLVED (budget exhausted) or FATAL. An empty
SOLVED result is a valid plan and is never confused with NOT_SOLVED.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Generic, Optional, Protocol, Sequence, Tuple, TypeVar

import logging
import random


logger = logging.getLogger(__name__)

TItem = TypeVar("TItem")

Strategy = Tuple[int, ...]

# Period-group sizes tried by each round, in serial order.
STRATEGIES: Tuple[Strategy, ...] = (
    (1, 3),
    (2, 2),
    (1, 2, 1),
    (1, 1, 2),
    (2, 1, 1),
    (3,),
    (2,),
    (1,),
)

SELECTION_MODES = ("serial", "random")


class ReservationConflictError(RuntimeError):
    """A resource rejected a reservation that selection had reported as free."""


class RoundStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    FATAL = "fatal"


class SolveStatus(str, Enum):
    SOLVED = "solved"
    NOT_SOLVED = "not_solved"
    FATAL = "fatal"


@dataclass(frozen=True)
class RoundOutcome(Generic[TItem]):
    status: RoundStatus
    items: Tuple[TItem, ...] = ()
    reason: str = ""

    @classmethod
    def success(cls, items: Sequence[TItem]) -> "RoundOutcome[TItem]":
        return cls(status=RoundStatus.SUCCESS, items=tuple(items))

    @classmethod
    def failed(cls, reason: str) -> "RoundOutcome[TItem]":
        return cls(status=RoundStatus.FAILED, reason=reason)

    @classmethod
    def fatal(cls, reason: str) -> "RoundOutcome[TItem]":
        return cls(status=RoundStatus.FATAL, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is RoundStatus.SUCCESS


class StrategySelector(Protocol):
    def __call__(self, round_idx: int) -> Strategy:  # pragma: no cover
        """Return the strategy to use for round `round_idx` (0-based)."""


class AttemptFn(Protocol[TItem]):
    def __call__(self, strategy: Strategy) -> RoundOutcome[TItem]:  # pragma: no cover
        """Run one transactional round with `strategy`."""


class CallbackFn(Protocol):
    def __call__(self, round_idx: int, strategy: Strategy, outcome: RoundOutcome) -> None:  # pragma: no cover
        """Optional progress callback called after each round."""


@dataclass(frozen=True)
class RoundConfig:
    """Configuration for a bounded-round run.

    Attributes:
        rounds: Round budget. Each attempt, successful or not, consumes one unit.
        mode: "serial" cycles through the strategy catalog, "random" draws from it.
        seed: RNG seed for the random mode (and for random run picking in the pool).
    """

    rounds: int = 2_000
    mode: str = "serial"
    seed: Optional[int] = None


@dataclass
class RoundsResult(Generic[TItem]):
    status: SolveStatus
    items: FrozenSet[TItem] = field(default_factory=frozenset)
    rounds_used: int = 0
    successful_rounds: int = 0
    failed_rounds: int = 0
    reason: str = ""
    strategies: Tuple[Strategy, ...] = ()

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    def raise_for_status(self) -> None:
        """Raise `ReservationConflictError` if the run ended on a fatal violation."""

        if self.status is SolveStatus.FATAL:
            raise ReservationConflictError(self.reason)


def validate_strategy(strategy: Sequence[int]) -> Strategy:
    out = tuple(int(p) for p in strategy)
    if not out or any(p <= 0 for p in out):
        raise ValueError(f"strategy must be a non-empty list of positive sizes, got {strategy!r}")
    return out


def serial_selector(catalog: Sequence[Strategy] = STRATEGIES) -> StrategySelector:
    """Cycle through `catalog` in order: round i uses catalog[i % len(catalog)]."""

    strategies = tuple(validate_strategy(s) for s in catalog)
    if not strategies:
        raise ValueError("strategy catalog is empty")

    def select(round_idx: int) -> Strategy:
        return strategies[round_idx % len(strategies)]

    return select


def random_selector(
    catalog: Sequence[Strategy] = STRATEGIES,
    rng: Optional[random.Random] = None,
) -> StrategySelector:
    """Draw uniformly (with replacement) from `catalog` each round."""

    strategies = tuple(validate_strategy(s) for s in catalog)
    if not strategies:
        raise ValueError("strategy catalog is empty")
    rng = rng or random.Random()

    def select(round_idx: int) -> Strategy:
        return rng.choice(strategies)

    return select


def make_selector(
    mode: str,
    *,
    catalog: Sequence[Strategy] = STRATEGIES,
    rng: Optional[random.Random] = None,
) -> StrategySelector:
    if mode == "serial":
        return serial_selector(catalog)
    if mode == "random":
        return random_selector(catalog, rng=rng)
    raise ValueError(f"mode must be one of: {', '.join(SELECTION_MODES)}")


def run_rounds(
    budget: int,
    select: StrategySelector,
    attempt: AttemptFn[TItem],
    is_done: Callable[[], bool],
    callback: Optional[CallbackFn] = None,
) -> RoundsResult[TItem]:
    """Run up to `budget` rounds.

    Contract:
    - `attempt` must leave no trace when it reports FAILED
    - `is_done` is checked after every attempt, successful or not

    Returns:
        RoundsResult with status SOLVED, NOT_SOLVED or FATAL.
    """

    if budget < 0:
        raise ValueError("round budget must be >= 0")

    items: set = set()
    used_strategies = []
    successful = 0
    failed = 0

    for round_idx in range(budget):
        strategy = select(round_idx)
        used_strategies.append(strategy)
        outcome = attempt(strategy)

        if callback is not None:
            callback(round_idx, strategy, outcome)

        if outcome.status is RoundStatus.FATAL:
            logger.error("round %d aborted the run: %s", round_idx, outcome.reason)
            return RoundsResult(
                status=SolveStatus.FATAL,
                items=frozenset(items),
                rounds_used=round_idx + 1,
                successful_rounds=successful,
                failed_rounds=failed,
                reason=outcome.reason,
                strategies=tuple(used_strategies),
            )

        if outcome.ok:
            successful += 1
            items.update(outcome.items)
        else:
            failed += 1
            logger.debug("round %d with %s failed: %s", round_idx, strategy, outcome.reason)

        if is_done():
            return RoundsResult(
                status=SolveStatus.SOLVED,
                items=frozenset(items),
                rounds_used=round_idx + 1,
                successful_rounds=successful,
                failed_rounds=failed,
                strategies=tuple(used_strategies),
            )

    return RoundsResult(
        status=SolveStatus.NOT_SOLVED,
        rounds_used=budget,
        successful_rounds=successful,
        failed_rounds=failed,
        reason=f"not solved within {budget} rounds",
        strategies=tuple(used_strategies),
    )
