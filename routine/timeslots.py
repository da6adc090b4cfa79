"""Weekly grid and time slots.

An atomic slot is one (day, period) cell of the weekly grid. A composed slot is
a run of strictly consecutive periods on the same day; the solver treats it as
one unit when picking a subject, teacher and room.

Both kinds expose `atoms()` so overlap checks work across any mix of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Set, Tuple, Union


DEFAULT_DAYS: Tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu")


@dataclass(frozen=True, order=True)
class DayTimeSlot:
    # both 0-indexed
    day: int
    period: int

    def atoms(self) -> Tuple["DayTimeSlot", ...]:
        return (self,)

    def __len__(self) -> int:
        return 1

    def is_followed_by(self, other: "DayTimeSlot") -> bool:
        return other.day == self.day and other.period == self.period + 1

    def __str__(self) -> str:
        return f"D{self.day}P{self.period + 1}"


@dataclass(frozen=True)
class ComposedSlot:
    slots: Tuple[DayTimeSlot, ...]

    def __post_init__(self) -> None:
        if not self.slots:
            raise ValueError("a composed slot needs at least one atomic slot")
        for a, b in zip(self.slots, self.slots[1:]):
            if not a.is_followed_by(b):
                raise ValueError(f"slots are not consecutive periods of one day: {a} -> {b}")

    @property
    def day(self) -> int:
        return self.slots[0].day

    @property
    def start(self) -> int:
        return self.slots[0].period

    @property
    def end(self) -> int:
        """Last period covered (inclusive)."""

        return self.slots[-1].period

    def atoms(self) -> Tuple[DayTimeSlot, ...]:
        return self.slots

    def __len__(self) -> int:
        return len(self.slots)

    def __str__(self) -> str:
        if len(self.slots) == 1:
            return str(self.slots[0])
        return f"D{self.day}P{self.start + 1}-{self.end + 1}"


AnySlot = Union[DayTimeSlot, ComposedSlot]


def compose(slots: Iterable[DayTimeSlot]) -> ComposedSlot:
    """Compose atomic slots into one contiguous run.

    The input is sorted first; it must then be strictly consecutive periods
    of a single day, otherwise `ValueError` is raised.
    """

    return ComposedSlot(slots=tuple(sorted(slots)))


def overlaps(a: AnySlot, b: AnySlot) -> bool:
    return not set(a.atoms()).isdisjoint(b.atoms())


def atoms_of(slots: Iterable[AnySlot]) -> List[DayTimeSlot]:
    out: List[DayTimeSlot] = []
    for s in slots:
        out.extend(s.atoms())
    return out


@dataclass(frozen=True)
class WeekGrid:
    """The weekly slot universe.

    Attributes:
        days: Day labels, index = day number used by `DayTimeSlot`.
        periods_per_day: Number of teaching periods per day.
        period_minutes: Length of one period; converts slot counts to minutes.
    """

    days: Tuple[str, ...] = DEFAULT_DAYS
    periods_per_day: int = 8
    period_minutes: int = 45

    def __post_init__(self) -> None:
        if not self.days:
            raise ValueError("grid needs at least one day")
        if self.periods_per_day < 1:
            raise ValueError("periods_per_day must be >= 1")
        if self.period_minutes < 1:
            raise ValueError("period_minutes must be >= 1")

    def whole_week(self) -> Set[DayTimeSlot]:
        return {
            DayTimeSlot(day=d, period=p)
            for d in range(len(self.days))
            for p in range(self.periods_per_day)
        }

    def contains(self, slot: DayTimeSlot) -> bool:
        return 0 <= slot.day < len(self.days) and 0 <= slot.period < self.periods_per_day

    def minutes(self, slot: AnySlot) -> int:
        return len(slot) * self.period_minutes

    def slot_from_labels(self, day: str, period1: int) -> DayTimeSlot:
        """Build a slot from a day label and a 1-indexed period number."""

        if day not in self.days:
            raise ValueError(f"unknown day {day!r}; expected one of: {', '.join(self.days)}")
        slot = DayTimeSlot(day=self.days.index(day), period=int(period1) - 1)
        if not self.contains(slot):
            raise ValueError(f"period {period1} is outside 1..{self.periods_per_day}")
        return slot
