"""Demo runner: build a weekly routine from sample JSON.

Usage:
    python scripts/run_routine_demo.py --mode random --rounds 3000 --seed 7

"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH when running as a script
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from greedy import RoundConfig
from reports.timetable_export import df_to_markdown, format_group_timetable, lessons_to_df, teacher_workload_df, timetable_df
from routine import compute_metrics, default_sample_path, load_routine_problem_from_json


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the greedy routine solver on a JSON problem.")
    parser.add_argument("--data", type=Path, default=None, help="problem JSON (default: bundled sample)")
    parser.add_argument("--mode", choices=["serial", "random"], default="serial")
    parser.add_argument("--rounds", type=int, default=RoundConfig().rounds)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--markdown", type=Path, default=None, help="also write the routine as Markdown tables to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every failed round")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    problem = load_routine_problem_from_json(args.data or default_sample_path())
    solver = problem.build_solver(seed=args.seed, randomize=args.mode == "random")

    result = solver.solve(RoundConfig(rounds=args.rounds, mode=args.mode, seed=args.seed))
    metrics = compute_metrics(solver, result)

    if result.solved:
        lessons = list(result.items)
        routine_df = timetable_df(problem.grid, format_group_timetable(lessons, problem.grid, problem.group))
        workload_df = teacher_workload_df(lessons)
        print("\n=== Routine (solved) ===")
        print(routine_df.to_string(index=False))
        print("\n=== Lessons ===")
        print(lessons_to_df(lessons, problem.grid).to_string(index=False))
        print("\n=== Teacher workload ===")
        print(workload_df.to_string(index=False))

        if args.markdown is not None:
            md = df_to_markdown(routine_df, title=f"Routine {problem.group or ''}".strip())
            md += "\n" + df_to_markdown(workload_df, title="Teacher workload")
            args.markdown.write_text(md, encoding="utf-8")
            print(f"\nWrote {args.markdown}")
    else:
        print(f"\nNo routine: {result.status.value} ({result.reason})")

    print("\n=== Metrics ===")
    for k, v in metrics.items():
        print(f"{k}: {v}")

    return 0 if result.solved else 1


if __name__ == "__main__":
    sys.exit(main())
