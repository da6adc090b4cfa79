"""Reservable resources: subjects, teachers and rooms.

Each resource keeps two disjoint sets of atomic slots: the ones still free and
the ones already assigned. `assign_for` is the only way to move slots from one
to the other and it is all-or-nothing.

Resources compare by identity. Two teachers with the same name are still two
different calendars.
"""

from __future__ import annotations

from typing import Collection, FrozenSet, Iterable, List, Optional, Set, Tuple

from .timeslots import AnySlot, DayTimeSlot, WeekGrid, atoms_of, overlaps


class Reservable:
    def __init__(self, grid: WeekGrid) -> None:
        self.grid = grid
        self._free: Set[DayTimeSlot] = grid.whole_week()
        self._assigned: Set[DayTimeSlot] = set()

    @property
    def free_slots(self) -> FrozenSet[DayTimeSlot]:
        return frozenset(self._free)

    @property
    def assigned_slots(self) -> Tuple[DayTimeSlot, ...]:
        """Assigned slots in (day, period) order."""

        return tuple(sorted(self._assigned))

    def is_free_during(self, slot: AnySlot) -> bool:
        return not any(overlaps(slot, taken) for taken in self._assigned)

    def assign_for(self, slots: Iterable[AnySlot]) -> bool:
        """Reserve every atomic slot in `slots`, or none of them.

        Returns False (and changes nothing) if any slot is not currently free.
        """

        wanted = set(atoms_of(slots))
        if not wanted.issubset(self._free):
            return False
        self._free -= wanted
        self._assigned |= wanted
        return True

    def no_of_assigned_slots(self) -> int:
        return len(self._assigned)

    def assigned_on_day(self, day: int) -> List[DayTimeSlot]:
        return sorted(s for s in self._assigned if s.day == day)


def common_assigned_slots(reservables: Collection[Reservable]) -> Set[DayTimeSlot]:
    """Slots assigned in *every* resource of the collection (empty for none)."""

    it = iter(reservables)
    first = next(it, None)
    if first is None:
        return set()
    common = set(first.assigned_slots)
    for r in it:
        common &= set(r.assigned_slots)
    return common


class Subject(Reservable):
    """A subject taught to one group, with a weekly duration budget in minutes."""

    def __init__(
        self,
        grid: WeekGrid,
        code: str,
        name: str,
        required_minutes: int,
        *,
        group: Optional[str] = None,
        room_type: Optional[str] = None,
    ) -> None:
        super().__init__(grid)
        self.code = code
        self.name = name
        self.required_minutes = int(required_minutes)
        self.remaining_minutes = int(required_minutes)
        self.group = group
        self.room_type = room_type

    def assign_for(self, slots: Iterable[AnySlot]) -> bool:
        slots = list(slots)
        if not super().assign_for(slots):
            return False
        self.remaining_minutes -= self.grid.period_minutes * len(atoms_of(slots))
        return True

    def is_satisfied(self) -> bool:
        return self.remaining_minutes <= 0

    def lessons_on_day(self, day: int) -> int:
        """Number of separate runs already assigned on `day`."""

        periods = [s.period for s in self.assigned_on_day(day)]
        return sum(1 for i, p in enumerate(periods) if i == 0 or periods[i - 1] != p - 1)

    def __repr__(self) -> str:
        return f"Subject({self.code!r}, remaining={self.remaining_minutes})"

    def __str__(self) -> str:
        return self.code


class Teacher(Reservable):
    def __init__(self, grid: WeekGrid, teacher_id: str, name: str, subject_codes: Iterable[str] = ()) -> None:
        super().__init__(grid)
        self.teacher_id = teacher_id
        self.name = name
        self.subject_codes: FrozenSet[str] = frozenset(subject_codes)

    def can_teach(self, subject: Subject) -> bool:
        return subject.code in self.subject_codes

    def __repr__(self) -> str:
        return f"Teacher({self.teacher_id!r})"

    def __str__(self) -> str:
        return self.teacher_id


class Room(Reservable):
    def __init__(self, grid: WeekGrid, room_id: str, room_type: str = "Classroom") -> None:
        super().__init__(grid)
        self.room_id = room_id
        self.room_type = room_type

    def __repr__(self) -> str:
        return f"Room({self.room_id!r})"

    def __str__(self) -> str:
        return self.room_id
