"""Routine problem input: JSON loading and solver wiring.

A `RoutineProblem` is plain, immutable input data. Solving mutates resources,
so every call to `build_solver` creates fresh subjects, teachers, rooms and a
fresh slot pool from it.

JSON schema (see `data/sample_routine.json`)::

    {
      "grid": {"days": ["Sun", ...], "periods_per_day": 6, "period_minutes": 45},
      "group": "Y1-A",
      "subjects": [{"code": "MATH", "name": "Mathematics", "periods": 5, "room_type": null}],
      "teachers": [{"teacher_id": "T01", "name": "...", "subjects": ["MATH"],
                    "unavailable": [{"day": "Thu", "periods": [6]}]}],
      "rooms": [{"room_id": "R101", "room_type": "Classroom", "unavailable": []}]
    }

A subject gives either "periods" or "minutes" per week.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import json
import os
import random

from .holders import RoomCatalog, SelectionSettings, SlotPool, SubjectCatalog, TeacherCatalog
from .reservation import Room, Subject, Teacher
from .solver import RoutineSolver
from .timeslots import DayTimeSlot, WeekGrid


DEFAULT_SAMPLE_PATH = Path(__file__).resolve().parents[1] / "data" / "sample_routine.json"


def default_sample_path() -> Path:
    """Resolve the sample problem path.

    Uses `ROUTINE_SAMPLE_DATA` env var if set, else the bundled sample.
    """

    override = os.getenv("ROUTINE_SAMPLE_DATA")
    if override:
        return Path(override).expanduser().resolve()
    return DEFAULT_SAMPLE_PATH


@dataclass(frozen=True)
class SubjectSpec:
    code: str
    name: str
    minutes: int
    room_type: Optional[str] = None


@dataclass(frozen=True)
class TeacherSpec:
    teacher_id: str
    name: str
    subject_codes: Tuple[str, ...]
    unavailable: Tuple[DayTimeSlot, ...] = ()


@dataclass(frozen=True)
class RoomSpec:
    room_id: str
    room_type: str = "Classroom"
    unavailable: Tuple[DayTimeSlot, ...] = ()


@dataclass(frozen=True)
class RoutineProblem:
    grid: WeekGrid
    subjects: Tuple[SubjectSpec, ...]
    teachers: Tuple[TeacherSpec, ...]
    rooms: Tuple[RoomSpec, ...]
    group: Optional[str] = None

    def required_periods(self) -> int:
        return sum(-(-s.minutes // self.grid.period_minutes) for s in self.subjects)

    def build_solver(
        self,
        *,
        seed: Optional[int] = None,
        randomize: bool = False,
        settings: SelectionSettings = SelectionSettings(),
    ) -> RoutineSolver:
        """Create a solver over fresh resources.

        With `randomize=True` both the slot pool and the subject policy draw from
        an RNG seeded with `seed`; otherwise every choice is deterministic.
        """

        rng = random.Random(seed) if randomize else None

        subjects = [
            Subject(self.grid, s.code, s.name, s.minutes, group=self.group, room_type=s.room_type)
            for s in self.subjects
        ]

        teachers = []
        for t in self.teachers:
            teacher = Teacher(self.grid, t.teacher_id, t.name, t.subject_codes)
            teacher.assign_for(t.unavailable)
            teachers.append(teacher)

        rooms = []
        for r in self.rooms:
            room = Room(self.grid, r.room_id, r.room_type)
            room.assign_for(r.unavailable)
            rooms.append(room)

        return RoutineSolver(
            slot_pool=SlotPool(self.grid.whole_week(), rng=rng),
            subjects=SubjectCatalog(subjects, settings=settings, rng=rng),
            teachers=TeacherCatalog(teachers, settings=settings),
            rooms=RoomCatalog(rooms),
        )


def _parse_slots(grid: WeekGrid, raw: List[Dict[str, Any]]) -> Tuple[DayTimeSlot, ...]:
    # Stored as: [{"day": "Sun", "periods": [1, 2]}]  (1-indexed periods)
    out = []
    for item in raw or []:
        for p in item.get("periods") or []:
            out.append(grid.slot_from_labels(str(item["day"]), int(p)))
    return tuple(sorted(set(out)))


def _subject_minutes(grid: WeekGrid, raw: Dict[str, Any]) -> int:
    if "minutes" in raw:
        return int(raw["minutes"])
    if "periods" in raw:
        return int(raw["periods"]) * grid.period_minutes
    raise ValueError(f"subject {raw.get('code')!r} needs 'periods' or 'minutes'")


def routine_problem_from_dict(raw: Dict[str, Any]) -> RoutineProblem:
    g = raw.get("grid") or {}
    grid = WeekGrid(
        days=tuple(g.get("days") or WeekGrid().days),
        periods_per_day=int(g.get("periods_per_day", WeekGrid().periods_per_day)),
        period_minutes=int(g.get("period_minutes", WeekGrid().period_minutes)),
    )

    subjects = tuple(
        SubjectSpec(
            code=str(s["code"]),
            name=str(s.get("name") or s["code"]),
            minutes=_subject_minutes(grid, s),
            room_type=s.get("room_type"),
        )
        for s in raw.get("subjects") or []
    )

    codes = [s.code for s in subjects]
    if len(codes) != len(set(codes)):
        raise ValueError("subject codes contain duplicates")

    teachers = tuple(
        TeacherSpec(
            teacher_id=str(t["teacher_id"]),
            name=str(t.get("name") or t["teacher_id"]),
            subject_codes=tuple(t.get("subjects") or ()),
            unavailable=_parse_slots(grid, t.get("unavailable")),
        )
        for t in raw.get("teachers") or []
    )

    rooms = tuple(
        RoomSpec(
            room_id=str(r["room_id"]),
            room_type=str(r.get("room_type") or "Classroom"),
            unavailable=_parse_slots(grid, r.get("unavailable")),
        )
        for r in raw.get("rooms") or []
    )

    return RoutineProblem(grid=grid, subjects=subjects, teachers=teachers, rooms=rooms, group=raw.get("group"))


def load_routine_problem_from_json(path: Union[str, Path]) -> RoutineProblem:
    """Load a `RoutineProblem` from a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return routine_problem_from_dict(raw)
