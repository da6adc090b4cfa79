"""Round-based greedy routine solver.

Each round:
1. pops one run of consecutive periods from the slot pool (size = sum of the
   strategy, e.g. (2, 1, 1) needs 4 periods)
2. splits it into the strategy's groups, in order
3. asks the catalogs for a subject (not one already picked this round), then
   a teacher, then a room for each group
4. commits every group, or puts the whole run back and reports failure

A round never leaves a partial trace: ordinary failures are undone by putting
the popped run back, and nothing is reserved until every group has a full
(subject, teacher, room) triple. The one exception is a resource refusing a
reservation at commit time. Selection only proposes free resources, so that is
reported as FATAL and stops the run.

The loop itself lives in `greedy.rounds`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import logging
import random

from greedy.rounds import (
    RoundConfig,
    RoundOutcome,
    RoundsResult,
    Strategy,
    StrategySelector,
    make_selector,
    random_selector,
    run_rounds,
    serial_selector,
    validate_strategy,
)

from .holders import RoomCatalog, SlotPool, SubjectCatalog, TeacherCatalog
from .reservation import Room, Subject, Teacher
from .timeslots import ComposedSlot, DayTimeSlot, compose


logger = logging.getLogger(__name__)

SolveResult = RoundsResult


@dataclass(frozen=True)
class Lesson:
    combined_slot: ComposedSlot
    slots: Tuple[DayTimeSlot, ...]
    subject: Subject
    teacher: Teacher
    room: Room
    group: Optional[str] = None

    @property
    def periods(self) -> int:
        return len(self.slots)

    def __str__(self) -> str:
        return f"{self.combined_slot} {self.subject} / {self.teacher} @ {self.room}"


def partition(run: Sequence[DayTimeSlot], strategy: Strategy) -> List[List[DayTimeSlot]]:
    """Split `run` into consecutive chunks with the strategy's sizes."""

    if sum(strategy) != len(run):
        raise ValueError(f"strategy {strategy} needs {sum(strategy)} slots, run has {len(run)}")
    out: List[List[DayTimeSlot]] = []
    start = 0
    for size in strategy:
        out.append(list(run[start:start + size]))
        start += size
    return out


class RoutineSolver:
    def __init__(
        self,
        slot_pool: SlotPool,
        subjects: SubjectCatalog,
        teachers: TeacherCatalog,
        rooms: RoomCatalog,
    ) -> None:
        self.slot_pool = slot_pool
        self.subjects = subjects
        self.teachers = teachers
        self.rooms = rooms

    # ----------------------------
    # Public entry points
    # ----------------------------

    def evaluate_solution_serially(self, rounds: int) -> SolveResult:
        return self.evaluate_solution(rounds, serial_selector())

    def evaluate_solution_randomly(self, rounds: int, seed: Optional[int] = None) -> SolveResult:
        return self.evaluate_solution(rounds, random_selector(rng=random.Random(seed)))

    def solve(self, config: RoundConfig = RoundConfig()) -> SolveResult:
        select = make_selector(config.mode, rng=random.Random(config.seed))
        return self.evaluate_solution(config.rounds, select)

    def evaluate_solution(self, rounds: int, select: StrategySelector) -> SolveResult:
        self.discard_slots_reserved_by_all()
        logger.info(
            "solving with %d rounds, %d open slots, %d minutes to place",
            rounds,
            len(self.slot_pool),
            self.subjects.total_remaining_minutes(),
        )
        result = run_rounds(
            rounds,
            select,
            self.attempt,
            is_done=lambda: self.subjects.total_remaining_minutes() <= 0,
        )
        logger.info(
            "finished: %s after %d rounds (%d lessons)",
            result.status.value,
            result.rounds_used,
            len(result.items),
        )
        return result

    def discard_slots_reserved_by_all(self) -> None:
        """Drop slots no teacher (or no room) can ever take."""

        self.slot_pool.discard_slots(self.teachers.get_common_slots())
        self.slot_pool.discard_slots(self.rooms.get_common_slots())

    # ----------------------------
    # One round
    # ----------------------------

    def attempt(self, strategy: Strategy) -> RoundOutcome[Lesson]:
        strategy = validate_strategy(strategy)
        total = sum(strategy)

        run = self.slot_pool.pop_consecutive_slots(total)
        if run is None:
            return RoundOutcome.failed(f"no run of {total} consecutive slots")

        lessons: List[Lesson] = []
        for group in partition(run, strategy):
            lesson = self.arrange_resources(group, exclude=[x.subject for x in lessons])
            if lesson is None:
                self.slot_pool.put_back_slots(run)
                return RoundOutcome.failed(f"no subject/teacher/room for {compose(group)}")
            lessons.append(lesson)

        if len({id(x.subject) for x in lessons}) != len(lessons):
            self.slot_pool.put_back_slots(run)
            return RoundOutcome.failed("same subject picked twice in one round")

        for lesson in lessons:
            rejected = self._allocate(lesson)
            if rejected:
                return RoundOutcome.fatal(rejected)

        self.slot_pool.rewind()
        return RoundOutcome.success(lessons)

    def arrange_resources(self, slots: Sequence[DayTimeSlot], exclude: Sequence[Subject] = ()) -> Optional[Lesson]:
        combined = compose(slots)

        # order matters: teacher and room suitability depend on the subject
        subject = self.subjects.get_subject_suitable_for(combined, exclude)
        if subject is None:
            return None

        teacher = self.teachers.get_suitable_teacher_for(subject, combined)
        if teacher is None:
            return None

        room = self.rooms.get_free_room_during(subject, combined)
        if room is None:
            return None

        return Lesson(
            combined_slot=combined,
            slots=tuple(slots),
            subject=subject,
            teacher=teacher,
            room=room,
            group=subject.group,
        )

    def _allocate(self, lesson: Lesson) -> Optional[str]:
        """Reserve the lesson's resources; return a reason string if one refused."""

        if not lesson.subject.assign_for([lesson.combined_slot]):
            return f"subject {lesson.subject} can't be assigned at {lesson.combined_slot}"
        if not lesson.teacher.assign_for(lesson.slots):
            return f"teacher {lesson.teacher} can't be assigned at {lesson.combined_slot}"
        if not lesson.room.assign_for(lesson.slots):
            return f"room {lesson.room} can't be assigned at {lesson.combined_slot}"
        return None


# ----------------------------
# Metrics
# ----------------------------


def _double_bookings(lessons, key) -> int:
    occ: Dict[Tuple[int, DayTimeSlot], int] = {}
    for lesson in lessons:
        owner = id(key(lesson))
        for s in lesson.slots:
            occ[(owner, s)] = occ.get((owner, s), 0) + 1
    return sum(c - 1 for c in occ.values() if c > 1)


def compute_metrics(solver: RoutineSolver, result: SolveResult) -> Dict[str, float]:
    lessons = list(result.items)
    return {
        "solved": float(result.solved),
        "lessons": float(len(lessons)),
        "scheduled_periods": float(sum(x.periods for x in lessons)),
        "teacher_conflicts": float(_double_bookings(lessons, lambda x: x.teacher)),
        "room_conflicts": float(_double_bookings(lessons, lambda x: x.room)),
        "remaining_minutes": float(solver.subjects.total_remaining_minutes()),
        "rounds_used": float(result.rounds_used),
        "successful_rounds": float(result.successful_rounds),
        "failed_rounds": float(result.failed_rounds),
        "open_slots": float(len(solver.slot_pool)),
    }
