"""
Integration tests: set log on disk → exercise catalog → analytics.

Covers:
- JSONL round trip, day replacement, edits and deletes
- Sets-string parsing
- Exercise catalog loading with user overrides
- YAML config loading (progression settings, calendar)
- End-to-end progression and insights from stored sets
"""

import json
import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

from liftlog.core.engine.config_loader import (
    get_data_dir,
    load_calendar_policy,
    load_progression_settings,
    parse_first_weekday,
    progression_settings_from_dict,
    update_user_config,
)
from liftlog.core.exercises.base import Exercise
from liftlog.core.exercises.loader import load_exercises_from_yaml, save_user_exercise
from liftlog.core.exercises.registry import get_exercise, load_registry
from liftlog.core.insights import get_total_volume
from liftlog.core.models import LoggedSet, ProgressionKind
from liftlog.core.progression import classify_progression
from liftlog.core.records import detect_recent_prs
from liftlog.core.sessions import sessions_for_exercise
from liftlog.io.serializers import (
    ValidationError,
    dict_to_logged_set,
    json_line_to_set,
    parse_date,
    parse_sets_string,
    set_to_json_line,
)
from liftlog.io.set_store import SetStore


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_data_dir):
    s = SetStore(temp_data_dir / "sets.jsonl")
    s.init()
    return s


def _sets(exercise_id: str, day: date, sets_str: str) -> list[LoggedSet]:
    return [
        LoggedSet(exercise_id=exercise_id, order=i, weight=w, reps=r, date=day)
        for i, (r, w) in enumerate(parse_sets_string(sets_str), 1)
    ]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

class TestSerializers:
    """JSON lines and the sets shorthand."""

    def test_json_line_round_trip(self):
        logged = LoggedSet(
            exercise_id="bench_press",
            order=2,
            weight=102.5,
            reps=8,
            date=datetime(2026, 3, 2, 18, 30, tzinfo=timezone.utc),
            unit="kg",
            rpe=8,
        )
        restored = json_line_to_set(set_to_json_line(logged))
        assert restored == logged

    def test_optional_fields_omitted(self):
        line = set_to_json_line(LoggedSet("squat", 1, None, 5, date(2026, 3, 2)))
        data = json.loads(line)
        assert "rpe" not in data
        assert data["weight"] is None

    def test_missing_field_rejected(self):
        with pytest.raises(ValidationError, match="order"):
            dict_to_logged_set({"id": "x", "exercise_id": "squat", "date": "2026-03-02"})

    def test_bad_json_rejected(self):
        with pytest.raises(ValidationError):
            json_line_to_set("{not json")

    def test_parse_date(self):
        assert parse_date("2026-03-02") == date(2026, 3, 2)
        assert isinstance(parse_date("2026-03-02T18:30:00+01:00"), datetime)
        with pytest.raises(ValidationError):
            parse_date("02/03/2026")

    def test_parse_sets_string(self):
        assert parse_sets_string("8@100, 5x3@120, 8 60, 12x2, 10") == [
            (8, 100.0),
            (5, 120.0),
            (5, 120.0),
            (5, 120.0),
            (8, 60.0),
            (12, None),
            (12, None),
            (10, None),
        ]

    def test_parse_sets_string_rejects_garbage(self):
        with pytest.raises(ValidationError):
            parse_sets_string("eight@100")
        with pytest.raises(ValidationError):
            parse_sets_string("")
        with pytest.raises(ValidationError):
            parse_sets_string("5x0@100")


# ---------------------------------------------------------------------------
# Set store
# ---------------------------------------------------------------------------

class TestSetStore:
    """JSONL persistence."""

    def test_init_creates_empty_log(self, store):
        assert store.exists()
        assert store.load_sets() == []

    def test_missing_log(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            SetStore(temp_data_dir / "nope" / "sets.jsonl").load_sets()

    def test_append_and_fetch(self, store):
        store.append_sets(_sets("bench_press", date(2026, 3, 2), "8@100,8@100"))
        store.append_sets(_sets("squat", date(2026, 3, 3), "5@120"))

        assert len(store.fetch_sets()) == 3
        assert len(store.fetch_sets(exercise_id="squat")) == 1
        in_range = store.fetch_sets(date_range=(date(2026, 3, 3), date(2026, 3, 9)))
        assert [s.exercise_id for s in in_range] == ["squat"]

    def test_fetch_completed_only(self, store):
        store.append_sets([
            LoggedSet("bench_press", 1, 100, 8, date(2026, 3, 2)),
            LoggedSet("bench_press", 2, 100, 6, date(2026, 3, 2), is_completed=False),
        ])
        assert len(store.fetch_sets(completed_only=True)) == 1

    def test_replace_day_supersedes_previous_entry(self, store):
        day = date(2026, 3, 2)
        store.append_sets(_sets("bench_press", day, "8@100,8@100,8@100"))
        store.append_sets(_sets("squat", day, "5@120"))

        stored = store.replace_day("bench_press", day, _sets("bench_press", day, "10@100,9@100"))

        bench = store.fetch_sets(exercise_id="bench_press")
        assert [s.reps for s in bench] == [10, 9]
        assert [s.order for s in stored] == [1, 2]
        assert len(store.fetch_sets(exercise_id="squat")) == 1

    def test_update_set(self, store):
        store.append_sets(_sets("bench_press", date(2026, 3, 2), "8@100"))
        set_id = store.load_sets()[0].set_id

        updated = store.update_set(set_id, reps=9, is_completed=False)

        assert updated.reps == 9
        assert store.load_sets()[0].is_completed is False

    def test_update_rejects_unknown_field(self, store):
        store.append_sets(_sets("bench_press", date(2026, 3, 2), "8@100"))
        set_id = store.load_sets()[0].set_id
        with pytest.raises(ValidationError):
            store.update_set(set_id, exercise_id="squat")

    def test_update_and_delete_unknown_id(self, store):
        with pytest.raises(KeyError):
            store.update_set("missing", reps=5)
        with pytest.raises(KeyError):
            store.delete_set("missing")

    def test_delete_set(self, store):
        store.append_sets(_sets("bench_press", date(2026, 3, 2), "8@100,8@100"))
        first = store.load_sets()[0]
        removed = store.delete_set(first.set_id)
        assert removed.set_id == first.set_id
        assert len(store.load_sets()) == 1

    def test_corrupt_line_names_line_number(self, store):
        store.append_sets(_sets("bench_press", date(2026, 3, 2), "8@100"))
        with open(store.sets_path, "a", encoding="utf-8") as f:
            f.write("{broken\n")
        with pytest.raises(ValidationError, match="line 2"):
            store.load_sets()


# ---------------------------------------------------------------------------
# Exercise catalog
# ---------------------------------------------------------------------------

class TestExerciseCatalog:
    """Bundled YAML definitions and user overrides."""

    def test_bundled_catalog(self):
        registry = load_registry()
        bench = registry["bench_press"]
        assert bench.primary_category == "Chest"
        assert (bench.target_rep_min, bench.target_rep_max) == (8, 12)
        assert registry["squat"].use_warmup_set is True
        assert registry["pull_up"].has_target_range is False

    def test_get_exercise_unknown(self):
        with pytest.raises(ValueError, match="Unknown exercise"):
            get_exercise("underwater_basket")

    def test_user_override_merges_over_bundled(self, temp_data_dir):
        (temp_data_dir / "bench_press.yaml").write_text("target_rep_min: 5\ntarget_rep_max: 8\n")
        registry = load_exercises_from_yaml(user_dir=temp_data_dir)
        bench = registry["bench_press"]
        assert (bench.target_rep_min, bench.target_rep_max) == (5, 8)
        assert bench.name == "Bench Press"

    def test_user_only_exercise_added(self, temp_data_dir):
        custom = Exercise("cable_fly", "Cable Fly", "Chest", equipment="Cable",
                          target_rep_min=12, target_rep_max=15)
        save_user_exercise(custom, temp_data_dir)
        registry = load_registry(temp_data_dir)
        assert registry["cable_fly"] == custom

    def test_invalid_user_file_warns_and_is_skipped(self, temp_data_dir):
        (temp_data_dir / "broken.yaml").write_text("name: Missing Fields\n")
        with pytest.warns(UserWarning, match="liftlog: skipping exercise"):
            registry = load_exercises_from_yaml(user_dir=temp_data_dir)
        assert "broken" not in registry

    def test_unparseable_yaml_warns(self, temp_data_dir):
        (temp_data_dir / "bench_press.yaml").write_text("target_rep_min: [unclosed\n")
        with pytest.warns(UserWarning, match="liftlog: ignoring"):
            registry = load_exercises_from_yaml(user_dir=temp_data_dir)
        assert registry["bench_press"].target_rep_min == 8


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfigLoader:
    """config.yaml defaults and user overrides."""

    def test_defaults(self, temp_data_dir):
        settings = load_progression_settings(temp_data_dir)
        assert settings.window == 4
        assert settings.required_hits == 2
        assert settings.upper_body_increment["kg"] == 2.5
        calendar = load_calendar_policy(temp_data_dir)
        assert calendar.first_weekday == 0

    def test_user_override(self, temp_data_dir):
        update_user_config(
            {"progression": {"window": 6, "lower_body_increment": {"kg": 2.5}},
             "calendar": {"first_weekday": "sunday"}},
            temp_data_dir,
        )
        settings = load_progression_settings(temp_data_dir)
        assert settings.window == 6
        assert settings.lower_body_increment == {"kg": 2.5, "lbs": 10.0}
        assert load_calendar_policy(temp_data_dir).first_weekday == 6

    def test_invalid_settings_rejected(self):
        with pytest.raises(ValidationError):
            progression_settings_from_dict({"window": 1})
        with pytest.raises(ValidationError):
            progression_settings_from_dict({"window": 3, "required_hits": 4})

    def test_parse_first_weekday(self):
        assert parse_first_weekday("Monday") == 0
        assert parse_first_weekday(None) == 0
        with pytest.raises(ValidationError):
            parse_first_weekday("someday")

    def test_data_dir_from_environment(self, temp_data_dir, monkeypatch):
        monkeypatch.setenv("LIFTLOG_HOME", str(temp_data_dir))
        assert get_data_dir() == temp_data_dir


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------

class TestPipeline:
    """Stored sets flow through the analytics unchanged."""

    def test_progression_from_store(self, store):
        bench = get_exercise("bench_press")
        store.append_sets(_sets("bench_press", date(2026, 3, 2), "10@100,10@100,10@100"))
        store.append_sets(_sets("bench_press", date(2026, 3, 5), "10@100,10@100,10@100"))

        sessions = sessions_for_exercise(bench, store.load_sets(), calendar=store.calendar)
        status = classify_progression(bench, sessions, load_progression_settings(store.data_dir))

        assert status.kind is ProgressionKind.READY_TO_PROGRESS
        assert status.recommended_weight == pytest.approx(102.5)

    def test_warmup_set_excluded_for_squat(self, store):
        squat = get_exercise("squat")
        store.append_sets(_sets("squat", date(2026, 3, 2), "10@60,8@120,8@120"))
        [session] = sessions_for_exercise(squat, store.load_sets())
        assert session.total_volume == pytest.approx(1920)

    def test_insights_and_records_from_store(self, store):
        today = date(2026, 3, 11)
        store.append_sets(_sets("bench_press", today - timedelta(days=10), "8@90"))
        store.append_sets(_sets("bench_press", today, "8@100"))
        store.append_sets(_sets("squat", today, "5@140"))

        sets = store.load_sets()
        assert get_total_volume(7, sets, today=today) == pytest.approx(800 + 700)

        records = detect_recent_prs(sets, store.fetch_exercises(), limit=5)
        assert {(r.exercise_id, r.date) for r in records} == {
            ("bench_press", today),
            ("bench_press", today - timedelta(days=10)),
            ("squat", today),
        }
