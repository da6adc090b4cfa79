"""Slot pool and candidate-selection catalogs.

These are the collaborators the round solver talks to:

- `SlotPool` owns the atomic slots still open for lessons of one group and hands
  out runs of consecutive periods.
- `SubjectCatalog`, `TeacherCatalog` and `RoomCatalog` answer "who fits this
  composed slot?" with simple, explainable default policies.

The solver only depends on the method names, so any of them can be swapped for
a smarter policy object with the same interface.
"""

from __future__ import annotations

from bisect import bisect_left, insort
from dataclasses import dataclass
from typing import Collection, Iterable, List, Optional, Sequence, Set, Tuple

import random

from .reservation import Room, Subject, Teacher, common_assigned_slots
from .timeslots import ComposedSlot, DayTimeSlot


# ----------------------------
# Settings
# ----------------------------


@dataclass(frozen=True)
class SelectionSettings:
    # A subject gets at most this many separate lessons per day (None = no limit).
    max_lessons_per_day: Optional[int] = 1
    # When False a subject is only offered slots that fit in its remaining budget.
    allow_overshoot: bool = False
    # Spread work across teachers: prefer whoever has the fewest assigned slots.
    prefer_least_loaded_teacher: bool = True


# ----------------------------
# Slot pool
# ----------------------------


class SlotPool:
    """Sorted pool of open atomic slots.

    Without an RNG runs are popped in (day, period) order, except that a run
    which was just put back is skipped: the next pop starts after it and wraps
    around to the front when nothing later fits. `rewind` goes back to plain
    (day, period) order. With an RNG a viable run is picked uniformly at random.
    """

    def __init__(self, slots: Iterable[DayTimeSlot], rng: Optional[random.Random] = None) -> None:
        self._slots: List[DayTimeSlot] = sorted(set(slots))
        self._rng = rng
        self._resume_after: Optional[DayTimeSlot] = None

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot: object) -> bool:
        i = bisect_left(self._slots, slot)  # type: ignore[arg-type]
        return i < len(self._slots) and self._slots[i] == slot

    def snapshot(self) -> Tuple[DayTimeSlot, ...]:
        return tuple(self._slots)

    def discard_slots(self, slots: Iterable[DayTimeSlot]) -> int:
        """Permanently remove `slots`; unknown slots are ignored. Returns how many were removed."""

        drop = set(slots)
        before = len(self._slots)
        self._slots = [s for s in self._slots if s not in drop]
        return before - len(self._slots)

    def _run_starts(self, n: int) -> List[int]:
        starts: List[int] = []
        run_len = 0
        for i, s in enumerate(self._slots):
            if i > 0 and self._slots[i - 1].is_followed_by(s):
                run_len += 1
            else:
                run_len = 1
            if run_len >= n:
                starts.append(i - n + 1)
        return starts

    def _next_start(self, starts: List[int]) -> int:
        if self._resume_after is not None:
            for i in starts:
                if self._slots[i] > self._resume_after:
                    return i
        return starts[0]

    def pop_consecutive_slots(self, n: int) -> Optional[List[DayTimeSlot]]:
        """Remove and return `n` consecutive periods of one day, or None if no such run exists."""

        if n < 1:
            raise ValueError("n must be >= 1")
        starts = self._run_starts(n)
        if not starts:
            return None
        start = self._rng.choice(starts) if self._rng is not None else self._next_start(starts)
        run = self._slots[start:start + n]
        del self._slots[start:start + n]
        return run

    def put_back_slots(self, slots: Sequence[DayTimeSlot]) -> None:
        """Reinsert a previously popped run exactly as it was."""

        for s in slots:
            if s in self:
                raise ValueError(f"slot {s} is already in the pool")
        for s in slots:
            insort(self._slots, s)
        if slots:
            self._resume_after = min(slots)

    def rewind(self) -> None:
        """Forget put-back runs; the next pop starts from the earliest run again."""

        self._resume_after = None


# ----------------------------
# Catalogs
# ----------------------------


class SubjectCatalog:
    """Subjects of one group.

    Without an RNG the subject with the largest remaining budget wins. With an
    RNG the pick is weighted by remaining budget. Subjects in `exclude` (the
    ones already picked for earlier groups of the same round) are never offered.
    """

    def __init__(
        self,
        subjects: Iterable[Subject],
        settings: SelectionSettings = SelectionSettings(),
        rng: Optional[random.Random] = None,
    ) -> None:
        self.subjects: List[Subject] = list(subjects)
        self.settings = settings
        self._rng = rng

    def total_remaining_minutes(self) -> int:
        # overshoot on one subject must not hide another's shortfall
        return sum(max(0, s.remaining_minutes) for s in self.subjects)

    def _fits(self, subject: Subject, slot: ComposedSlot) -> bool:
        if subject.is_satisfied() or not subject.is_free_during(slot):
            return False
        if not self.settings.allow_overshoot and subject.remaining_minutes < subject.grid.minutes(slot):
            return False
        limit = self.settings.max_lessons_per_day
        return limit is None or subject.lessons_on_day(slot.day) < limit

    def get_subject_suitable_for(self, slot: ComposedSlot, exclude: Collection[Subject] = ()) -> Optional[Subject]:
        taken = {id(s) for s in exclude}
        candidates = [s for s in self.subjects if id(s) not in taken and self._fits(s, slot)]
        if not candidates:
            return None
        if self._rng is not None:
            weights = [s.remaining_minutes for s in candidates]
            return self._rng.choices(candidates, weights=weights, k=1)[0]
        # largest remaining budget first; code keeps ties deterministic
        return min(candidates, key=lambda s: (-s.remaining_minutes, s.code))


class TeacherCatalog:
    def __init__(self, teachers: Iterable[Teacher], settings: SelectionSettings = SelectionSettings()) -> None:
        self.teachers: List[Teacher] = list(teachers)
        self.settings = settings

    def get_common_slots(self) -> Set[DayTimeSlot]:
        return common_assigned_slots(self.teachers)

    def get_suitable_teacher_for(self, subject: Subject, slot: ComposedSlot) -> Optional[Teacher]:
        candidates = [t for t in self.teachers if t.can_teach(subject) and t.is_free_during(slot)]
        if not candidates:
            return None
        if self.settings.prefer_least_loaded_teacher:
            return min(candidates, key=lambda t: (t.no_of_assigned_slots(), t.teacher_id))
        return candidates[0]


class RoomCatalog:
    def __init__(self, rooms: Iterable[Room]) -> None:
        self.rooms: List[Room] = sorted(rooms, key=lambda r: r.room_id)

    def get_common_slots(self) -> Set[DayTimeSlot]:
        return common_assigned_slots(self.rooms)

    def get_free_room_during(self, subject: Subject, slot: ComposedSlot) -> Optional[Room]:
        for room in self.rooms:
            if subject.room_type and room.room_type != subject.room_type:
                continue
            if room.is_free_during(slot):
                return room
        return None
