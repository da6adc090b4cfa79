import sys
from pathlib import Path

# Ensure project root is on PYTHONPATH
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scripts.run_routine_demo import main, parse_args


def test_demo_defaults():
    args = parse_args([])
    assert args.mode == "serial"
    assert args.rounds == 2000
    assert args.data is None
    assert args.markdown is None


def test_demo_solves_sample(capsys):
    code = main(["--mode", "serial", "--rounds", "300", "--seed", "3"])
    out = capsys.readouterr().out

    assert code == 0
    assert "=== Routine (solved) ===" in out
    assert "=== Metrics ===" in out
    assert "solved: 1.0" in out
    assert "remaining_minutes: 0.0" in out
    assert "teacher_conflicts: 0.0" in out


def test_demo_writes_markdown(tmp_path, capsys):
    md_path = tmp_path / "routine.md"

    code = main(["--rounds", "300", "--markdown", str(md_path)])
    capsys.readouterr()

    assert code == 0
    md = md_path.read_text(encoding="utf-8")
    assert "### Routine Y2-A" in md
    assert "### Teacher workload" in md
    assert "| DAY | 1 | 2 | 3 | 4 | 5 | 6 |" in md
    assert "| Sun |" in md


def test_demo_reports_unsolved_budget(capsys):
    code = main(["--rounds", "1"])
    out = capsys.readouterr().out

    assert code == 1
    assert "No routine: not_solved" in out
