from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import pandas as pd

from routine.solver import Lesson
from routine.timeslots import WeekGrid


# Marks the later periods of a multi-period lesson in grid views.
CONTINUATION = "▸"


def lessons_to_df(lessons: Iterable[Lesson], grid: WeekGrid) -> pd.DataFrame:
    """Lesson-level table, one row per committed lesson, in (day, period) order."""

    rows = []
    for lesson in sorted(lessons, key=lambda x: x.slots[0]):
        slot = lesson.combined_slot
        rows.append(
            {
                "day": grid.days[slot.day],
                "start_period": slot.start + 1,
                "end_period": slot.end + 1,
                "periods": lesson.periods,
                "minutes": grid.minutes(slot),
                "subject_code": lesson.subject.code,
                "subject_name": lesson.subject.name,
                "teacher_id": lesson.teacher.teacher_id,
                "room_id": lesson.room.room_id,
                "group": lesson.group,
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "day",
            "start_period",
            "end_period",
            "periods",
            "minutes",
            "subject_code",
            "subject_name",
            "teacher_id",
            "room_id",
            "group",
        ],
    )


def _format_timetable(
    lessons: Iterable[Lesson],
    grid: WeekGrid,
    *,
    include: Callable[[Lesson], bool],
    label: Callable[[Lesson], str],
) -> List[List[str]]:
    table = [["" for _ in range(grid.periods_per_day)] for _ in range(len(grid.days))]
    for lesson in lessons:
        if not include(lesson):
            continue
        # Full label on the first period of the lesson; continuation marker after it.
        first = lesson.slots[0]
        for s in lesson.slots:
            if grid.contains(s):
                table[s.day][s.period] = label(lesson) if s == first else CONTINUATION
    return table


def format_group_timetable(lessons: Iterable[Lesson], grid: WeekGrid, group: Optional[str]) -> List[List[str]]:
    """Return a table (rows=days, cols=periods) with 'SUBJECT (TEACHER, ROOM)' or ''."""

    return _format_timetable(
        lessons,
        grid,
        include=lambda x: x.group == group,
        label=lambda x: f"{x.subject.code} ({x.teacher.teacher_id}, {x.room.room_id})",
    )


def format_teacher_timetable(lessons: Iterable[Lesson], grid: WeekGrid, teacher_id: str) -> List[List[str]]:
    return _format_timetable(
        lessons,
        grid,
        include=lambda x: x.teacher.teacher_id == teacher_id,
        label=lambda x: f"{x.subject.code} ({x.room.room_id})",
    )


def format_room_timetable(lessons: Iterable[Lesson], grid: WeekGrid, room_id: str) -> List[List[str]]:
    return _format_timetable(
        lessons,
        grid,
        include=lambda x: x.room.room_id == room_id,
        label=lambda x: f"{x.subject.code} ({x.teacher.teacher_id})",
    )


def timetable_df(grid: WeekGrid, table: List[List[str]]) -> pd.DataFrame:
    """Convert a (days x periods) table into a spreadsheet-style DataFrame."""

    columns = [str(p) for p in range(1, grid.periods_per_day + 1)]
    df = pd.DataFrame(table, columns=columns)
    df.insert(0, "DAY", list(grid.days))
    return df


def teacher_workload_df(lessons: Iterable[Lesson]) -> pd.DataFrame:
    """Periods and lessons per teacher, heaviest first."""

    df = pd.DataFrame(
        [
            {"teacher_id": x.teacher.teacher_id, "name": x.teacher.name, "subject_code": x.subject.code, "periods": x.periods}
            for x in lessons
        ],
        columns=["teacher_id", "name", "subject_code", "periods"],
    )
    if df.empty:
        return pd.DataFrame(columns=["teacher_id", "name", "lessons", "periods", "subjects"])

    out = (
        df.groupby(["teacher_id", "name"])
        .agg(
            lessons=("periods", "size"),
            periods=("periods", "sum"),
            subjects=("subject_code", lambda s: ", ".join(sorted(set(s)))),
        )
        .reset_index()
    )
    return out.sort_values(["periods", "teacher_id"], ascending=[False, True]).reset_index(drop=True)


def _safe_sheet_name(name: str) -> str:
    """Excel sheet names: max 31 chars, cannot contain: `: \\ / ? * [ ]`."""

    bad = [":", "\\", "/", "?", "*", "[", "]"]
    out = str(name or "Sheet")
    for b in bad:
        out = out.replace(b, "-")
    out = out.strip() or "Sheet"
    return out[:31]


def routine_workbook_bytes(lessons: Iterable[Lesson], grid: WeekGrid) -> bytes:
    """Build a multi-sheet Excel workbook.

    Includes:
    - Lesson list
    - Teacher workload
    - One sheet per group, per teacher and per room
    """

    lessons = list(lessons)
    groups = sorted({x.group for x in lessons if x.group is not None})
    teacher_ids = sorted({x.teacher.teacher_id for x in lessons})
    room_ids = sorted({x.room.room_id for x in lessons})

    # Pandas uses openpyxl to write .xlsx by default.
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        lessons_to_df(lessons, grid).to_excel(writer, sheet_name="Lessons", index=False)
        teacher_workload_df(lessons).to_excel(writer, sheet_name=_safe_sheet_name("Teacher Workload"), index=False)

        for group in groups:
            df = timetable_df(grid, format_group_timetable(lessons, grid, group))
            df.to_excel(writer, sheet_name=_safe_sheet_name(f"Group-{group}"), index=False)

        for tid in teacher_ids:
            df = timetable_df(grid, format_teacher_timetable(lessons, grid, tid))
            df.to_excel(writer, sheet_name=_safe_sheet_name(f"Teacher-{tid}"), index=False)

        for rid in room_ids:
            df = timetable_df(grid, format_room_timetable(lessons, grid, rid))
            df.to_excel(writer, sheet_name=_safe_sheet_name(f"Room-{rid}"), index=False)

    return out.getvalue()


def df_to_markdown(df: pd.DataFrame, *, title: Optional[str] = None) -> str:
    """Render a DataFrame as a GitHub-flavored Markdown table, optionally under a heading.

    Empty cells become "-" so a free period still shows up as a column.
    """

    # no tabulate dependency, so no DataFrame.to_markdown
    def cell(v) -> str:
        text = str(v).replace("\n", " ").replace("|", "\\|").strip()
        return text or "-"

    lines = []
    if title:
        lines += [f"### {title}", ""]
    lines.append("| " + " | ".join(cell(c) for c in df.columns) + " |")
    lines.append("|" + "|".join(" --- " for _ in df.columns) + "|")
    for row in df.itertuples(index=False):
        lines.append("| " + " | ".join(cell(v) for v in row) + " |")
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class ImageExportOptions:
    title: Optional[str] = None
    font_size: int = 9
    cell_width: float = 1.3
    cell_height: float = 0.45
    dpi: int = 150
    # lesson cells are shaded, continuation cells lighter, free periods left white
    lesson_color: str = "#dbe8f6"
    continuation_color: str = "#eef4fb"


def timetable_png_bytes(df: pd.DataFrame, *, options: ImageExportOptions = ImageExportOptions()) -> bytes:
    """Draw a `timetable_df` grid (DAY column + one column per period) as a PNG image."""

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    values = df.fillna("").astype(str).values
    nrows, ncols = values.shape

    fig, ax = plt.subplots(
        figsize=(max(4.0, options.cell_width * ncols), max(1.5, options.cell_height * (nrows + 1)))
    )
    ax.axis("off")
    if options.title:
        ax.set_title(options.title, fontsize=options.font_size + 3, fontweight="bold")

    tbl = ax.table(cellText=values, colLabels=[str(c) for c in df.columns], cellLoc="center", loc="center")
    tbl.auto_set_font_size(False)
    tbl.set_fontsize(options.font_size)
    tbl.scale(1.0, 1.6)

    for (r, c), artist in tbl.get_celld().items():
        artist.set_linewidth(0.5)
        if r == 0 or c == 0:
            artist.set_text_props(weight="bold")
            continue
        text = values[r - 1][c]
        if text == CONTINUATION:
            artist.set_facecolor(options.continuation_color)
        elif text:
            artist.set_facecolor(options.lesson_color)

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=options.dpi, bbox_inches="tight")
    plt.close(fig)
    return buf.getvalue()
