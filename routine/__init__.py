"""Weekly routine scheduling: slots, resources, catalogs and the round solver."""

from .timeslots import (
	ComposedSlot,
	DayTimeSlot,
	WeekGrid,
	compose,
	overlaps,
)

from .reservation import Reservable, Room, Subject, Teacher, common_assigned_slots

from .holders import (
	RoomCatalog,
	SelectionSettings,
	SlotPool,
	SubjectCatalog,
	TeacherCatalog,
)

from .solver import Lesson, RoutineSolver, SolveResult, compute_metrics

from .samples import (
	RoutineProblem,
	default_sample_path,
	load_routine_problem_from_json,
	routine_problem_from_dict,
)

__all__ = [
	"ComposedSlot",
	"DayTimeSlot",
	"WeekGrid",
	"compose",
	"overlaps",
	"Reservable",
	"Room",
	"Subject",
	"Teacher",
	"common_assigned_slots",
	"RoomCatalog",
	"SelectionSettings",
	"SlotPool",
	"SubjectCatalog",
	"TeacherCatalog",
	"Lesson",
	"RoutineSolver",
	"SolveResult",
	"compute_metrics",
	"RoutineProblem",
	"default_sample_path",
	"load_routine_problem_from_json",
	"routine_problem_from_dict",
]
