"""Search engines used by the routine solver."""

from .rounds import (
    STRATEGIES,
    ReservationConflictError,
    RoundConfig,
    RoundOutcome,
    RoundsResult,
    RoundStatus,
    SolveStatus,
    make_selector,
    random_selector,
    run_rounds,
    serial_selector,
)

__all__ = [
    "STRATEGIES",
    "ReservationConflictError",
    "RoundConfig",
    "RoundOutcome",
    "RoundsResult",
    "RoundStatus",
    "SolveStatus",
    "make_selector",
    "random_selector",
    "run_rounds",
    "serial_selector",
]
