import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from greedy import SolveStatus
from routine import load_routine_problem_from_json
from ui.app import run_routine


def test_run_routine_smoke():
    problem = load_routine_problem_from_json(ROOT / "data" / "sample_routine.json")

    solver, result, metrics = run_routine(problem, mode="serial", rounds=100, seed=None)

    assert result.status is SolveStatus.SOLVED
    assert metrics["solved"] == 1.0
    assert metrics["scheduled_periods"] == 20.0
    assert metrics["rounds_used"] <= 100
    assert metrics["room_conflicts"] == 0.0
    assert result.rounds_used == int(metrics["rounds_used"])
    assert solver.subjects.total_remaining_minutes() == metrics["remaining_minutes"] == 0
