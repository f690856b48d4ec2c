"""
Minimal smoke tests for the liftlog CLI.

Tests basic functionality:
- App runs without errors
- Data directory and set log are created
- Sets can be logged, listed, edited and deleted
- Analysis commands render and emit JSON
"""

import json
import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from liftlog.cli.main import app


runner = CliRunner()


def _today() -> date:
    """Today in the default (UTC) calendar the CLI uses."""
    return datetime.now(timezone.utc).date()


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def initialized(temp_data_dir):
    """Data directory with an empty set log."""
    result = runner.invoke(app, ["init", "--data-dir", str(temp_data_dir)])
    assert result.exit_code == 0
    return temp_data_dir


def _log(data_dir: Path, exercise: str, sets: str, day: date, *extra: str):
    return runner.invoke(app, [
        "log",
        "--exercise", exercise,
        "--sets", sets,
        "--date", day.isoformat(),
        "--data-dir", str(data_dir),
        *extra,
    ])


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "liftlog" in result.output.lower() or "progression" in result.output.lower()

    def test_init_creates_log(self, temp_data_dir):
        """Test init creates the set log."""
        result = runner.invoke(app, ["init", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 0
        assert (temp_data_dir / "sets.jsonl").exists()

    def test_init_saves_calendar(self, temp_data_dir):
        """Test init writes calendar settings to config.yaml."""
        result = runner.invoke(app, [
            "init", "--data-dir", str(temp_data_dir), "--first-weekday", "sunday",
        ])
        assert result.exit_code == 0
        assert "sunday" in (temp_data_dir / "config.yaml").read_text()

    def test_init_rejects_bad_timezone(self, temp_data_dir):
        result = runner.invoke(app, [
            "init", "--data-dir", str(temp_data_dir), "--timezone", "Mars/Olympus",
        ])
        assert result.exit_code == 1

    def test_commands_require_init(self, temp_data_dir):
        """Test analysis without a log fails cleanly."""
        result = runner.invoke(app, ["summary", "--data-dir", str(temp_data_dir)])
        assert result.exit_code == 1
        assert "init" in result.output

    def test_log_adds_sets(self, initialized):
        """Test log writes one line per set."""
        result = _log(initialized, "bench_press", "8x3@100", _today())
        assert result.exit_code == 0

        lines = (initialized / "sets.jsonl").read_text().strip().splitlines()
        assert len(lines) == 3
        assert json.loads(lines[0])["weight"] == 100

    def test_relog_replaces_day(self, initialized):
        """Test logging the same exercise and day twice keeps only the second entry."""
        day = _today()
        _log(initialized, "bench_press", "8x3@100", day)
        _log(initialized, "bench_press", "10@100,9@100", day)

        lines = (initialized / "sets.jsonl").read_text().strip().splitlines()
        assert [json.loads(l)["reps"] for l in lines] == [10, 9]

    def test_log_unknown_exercise(self, initialized):
        result = _log(initialized, "underwater_basket", "8@10", _today())
        assert result.exit_code == 1
        assert "Unknown exercise" in result.output

    def test_log_bad_sets(self, initialized):
        result = _log(initialized, "bench_press", "lots@heavy", _today())
        assert result.exit_code == 1

    def test_log_json_reports_progression(self, initialized):
        """Test two matching sessions yield a ready-to-progress verdict."""
        today = _today()
        _log(initialized, "bench_press", "10x3@100", today - timedelta(days=3))
        result = _log(initialized, "bench_press", "10x3@100", today, "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["progression"]["status"] == "ready_to_progress"
        assert data["progression"]["recommended_weight"] == pytest.approx(102.5)

    def test_history_edit_delete(self, initialized):
        """Test history lists sets and edit/delete address them by id prefix."""
        _log(initialized, "squat", "5@120,5@120", _today())

        result = runner.invoke(app, ["history", "--data-dir", str(initialized), "--json"])
        assert result.exit_code == 0
        sets = json.loads(result.output)
        assert len(sets) == 2
        first_id = sets[0]["id"]

        result = runner.invoke(app, [
            "edit-set", first_id[:8], "--reps", "6", "--data-dir", str(initialized),
        ])
        assert result.exit_code == 0

        result = runner.invoke(app, [
            "delete-set", first_id[:8], "--force", "--data-dir", str(initialized),
        ])
        assert result.exit_code == 0

        remaining = json.loads(
            runner.invoke(app, ["history", "--data-dir", str(initialized), "--json"]).output
        )
        assert [s["id"] for s in remaining] == [sets[1]["id"]]

    def test_delete_unknown_id(self, initialized):
        result = runner.invoke(app, [
            "delete-set", "ffffffff", "--force", "--data-dir", str(initialized),
        ])
        assert result.exit_code == 1

    def test_exercises_list(self, temp_data_dir):
        result = runner.invoke(app, ["exercises", "--data-dir", str(temp_data_dir), "--json"])
        assert result.exit_code == 0
        ids = {e["exercise_id"] for e in json.loads(result.output)}
        assert {"bench_press", "squat", "deadlift"} <= ids

    def test_add_exercise(self, initialized):
        """Test a custom exercise becomes available for logging."""
        result = runner.invoke(app, [
            "add-exercise", "cable_fly",
            "--name", "Cable Fly",
            "--category", "Chest",
            "--target-min", "12",
            "--target-max", "15",
            "--data-dir", str(initialized),
        ])
        assert result.exit_code == 0
        assert (initialized / "exercises" / "cable_fly.yaml").exists()

        result = _log(initialized, "cable_fly", "12x3@15", _today())
        assert result.exit_code == 0


class TestAnalysisCommands:
    """Analysis commands on a small log."""

    @pytest.fixture
    def populated(self, initialized):
        today = _today()
        _log(initialized, "bench_press", "10x3@100", today - timedelta(days=7))
        _log(initialized, "bench_press", "10x3@100", today - timedelta(days=3))
        _log(initialized, "squat", "5x3@140", today - timedelta(days=1))
        _log(initialized, "lat_pulldown", "10x3@60", today)
        return initialized

    @pytest.mark.parametrize("command", [
        ["progression"],
        ["progression", "--exercise", "bench_press", "--explain"],
        ["prs"],
        ["trend"],
        ["weekly"],
        ["breakdown"],
        ["summary"],
        ["streak"],
        ["recovery"],
        ["stats", "--exercise", "bench_press"],
    ])
    def test_command_renders(self, populated, command):
        result = runner.invoke(app, [*command, "--data-dir", str(populated)])
        assert result.exit_code == 0, result.output

    def test_progression_json(self, populated):
        result = runner.invoke(app, [
            "progression", "--exercise", "bench_press", "--data-dir", str(populated), "--json",
        ])
        data = json.loads(result.output)
        assert data["status"] == "ready_to_progress"
        assert len(data["sessions"]) == 2

    def test_trend_json_has_one_point_per_day(self, populated):
        result = runner.invoke(app, [
            "trend", "--days", "7", "--data-dir", str(populated), "--json",
        ])
        points = json.loads(result.output)
        assert len(points) == 7
        assert points[-1]["date"] == _today().isoformat()

    def test_summary_json(self, populated):
        result = runner.invoke(app, ["summary", "--data-dir", str(populated), "--json"])
        data = json.loads(result.output)
        assert data["sets"]["current"] == 12
        assert data["days_since_last_workout"] == 0

    def test_prs_json_with_window(self, populated):
        result = runner.invoke(app, [
            "prs", "--days", "30", "--data-dir", str(populated), "--json",
        ])
        data = json.loads(result.output)
        assert data["pr_count"] == 3
        assert {r["exercise_id"] for r in data["records"]} == {
            "bench_press", "squat", "lat_pulldown",
        }

    def test_stats_json(self, populated):
        result = runner.invoke(app, [
            "stats", "--exercise", "bench_press", "--data-dir", str(populated), "--json",
        ])
        data = json.loads(result.output)
        assert data["times_performed"] == 2
        assert data["best_weight"] == 100

    def test_one_rep_max(self):
        result = runner.invoke(app, ["1rm", "--weight", "100", "--reps", "10", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["estimated_one_rep_max"] == pytest.approx(133.33)

    def test_one_rep_max_too_many_reps(self):
        result = runner.invoke(app, ["1rm", "--weight", "100", "--reps", "15"])
        assert result.exit_code == 0
        assert "1–10" in result.output
