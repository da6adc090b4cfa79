"""Streamlit app: run the routine solver and browse the result.

Run:
    streamlit run ui/app.py

"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import pandas as pd
import streamlit as st

# Ensure project root is on PYTHONPATH when Streamlit runs this file
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from greedy import RoundConfig
from reports.timetable_export import (
    ImageExportOptions,
    format_group_timetable,
    format_room_timetable,
    format_teacher_timetable,
    lessons_to_df,
    routine_workbook_bytes,
    teacher_workload_df,
    timetable_df,
    timetable_png_bytes,
)
from routine import (
    RoutineProblem,
    RoutineSolver,
    SolveResult,
    compute_metrics,
    default_sample_path,
    load_routine_problem_from_json,
)


def run_routine(
    problem: RoutineProblem,
    *,
    mode: str,
    rounds: int,
    seed: Optional[int],
) -> Tuple[RoutineSolver, SolveResult, Dict[str, float]]:
    solver = problem.build_solver(seed=seed, randomize=mode == "random")
    result = solver.solve(RoundConfig(rounds=rounds, mode=mode, seed=seed))
    return solver, result, compute_metrics(solver, result)


def _problem_summary_df(problem: RoutineProblem) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "code": s.code,
                "name": s.name,
                "weekly_minutes": s.minutes,
                "room_type": s.room_type or "Any",
                "teachers": ", ".join(t.teacher_id for t in problem.teachers if s.code in t.subject_codes),
            }
            for s in problem.subjects
        ]
    )


def _png_download(df: pd.DataFrame, title: str, file_name: str) -> None:
    st.download_button(
        "Download PNG",
        data=timetable_png_bytes(df, options=ImageExportOptions(title=title)),
        file_name=file_name,
        mime="image/png",
        key=f"png_{file_name}",
    )


def main() -> None:
    st.set_page_config(page_title="Routine Scheduler", page_icon="🗓️", layout="wide")
    st.sidebar.title("Routine Scheduler")
    st.sidebar.caption("Round-based greedy timetable generation")

    data_path = st.sidebar.text_input("Problem JSON", value=str(default_sample_path()))
    mode = st.sidebar.radio("Strategy selection", ["serial", "random"], horizontal=True)
    rounds = int(st.sidebar.number_input("Round budget", min_value=1, max_value=200_000, value=RoundConfig().rounds, step=100))
    seed_raw = st.sidebar.text_input("Seed (random mode)", value="42")
    seed = int(seed_raw) if seed_raw.strip().lstrip("-").isdigit() else None

    try:
        problem = load_routine_problem_from_json(data_path)
    except (OSError, ValueError, KeyError) as e:
        st.error(f"Could not load problem: {e}")
        return

    st.title("Weekly Routine")
    st.caption(
        f"{len(problem.grid.days)} days x {problem.grid.periods_per_day} periods, "
        f"{problem.required_periods()} periods to place"
    )
    st.dataframe(_problem_summary_df(problem), use_container_width=True, hide_index=True)

    if st.button("Generate routine", type="primary"):
        with st.spinner("Solving..."):
            _solver, result, metrics = run_routine(problem, mode=mode, rounds=rounds, seed=seed)
        # Widgets below rerun the script; keep the last run across reruns.
        st.session_state["routine_run"] = (result, metrics)

    if "routine_run" not in st.session_state:
        return
    result, metrics = st.session_state["routine_run"]

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Status", result.status.value)
    c2.metric("Lessons", int(metrics["lessons"]))
    c3.metric("Rounds used", int(metrics["rounds_used"]))
    c4.metric("Minutes left", int(metrics["remaining_minutes"]))

    if not result.solved:
        st.warning(result.reason or "No routine found within the round budget.")
        return

    lessons = list(result.items)
    grid = problem.grid

    tab_group, tab_teacher, tab_room, tab_list = st.tabs(["Group", "Teachers", "Rooms", "Lessons"])
    with tab_group:
        df = timetable_df(grid, format_group_timetable(lessons, grid, problem.group))
        st.dataframe(df, hide_index=True)
        _png_download(df, f"Group {problem.group} Routine" if problem.group else "Routine", "routine_group.png")
    with tab_teacher:
        tid = st.selectbox("Teacher", [t.teacher_id for t in problem.teachers])
        df = timetable_df(grid, format_teacher_timetable(lessons, grid, tid))
        st.dataframe(df, hide_index=True)
        _png_download(df, f"Teacher {tid} Routine", f"routine_teacher_{tid}.png")
        st.dataframe(teacher_workload_df(lessons), hide_index=True)
    with tab_room:
        rid = st.selectbox("Room", [r.room_id for r in problem.rooms])
        df = timetable_df(grid, format_room_timetable(lessons, grid, rid))
        st.dataframe(df, hide_index=True)
        _png_download(df, f"Room {rid} Routine", f"routine_room_{rid}.png")
    with tab_list:
        st.dataframe(lessons_to_df(lessons, grid), hide_index=True)

    st.download_button(
        "Download Excel",
        data=routine_workbook_bytes(lessons, grid),
        file_name="routine.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


if __name__ == "__main__":
    main()
