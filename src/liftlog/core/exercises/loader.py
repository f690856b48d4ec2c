"""
YAML → Exercise loader.

Loads exercise definitions from individual YAML files in the bundled
``src/liftlog/exercises/`` directory.  Each file (e.g. bench_press.yaml)
contains a flat exercise definition matching the Exercise schema.

User overrides: place matching files in ``~/.liftlog/exercises/``.
A user file is deep-merged over the bundled definition, so only changed
keys need to be listed.  A user file whose stem does not match any
bundled file is treated as a new exercise and added to the catalog.
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Any

import yaml

from .base import Exercise

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {
        "exercise_id",
        "name",
        "primary_category",
    }
)


def _optional_int(d: dict, key: str) -> int | None:
    value = d.get(key)
    return int(value) if value is not None else None


def exercise_from_dict(d: dict[str, Any]) -> Exercise:
    """Convert a raw dict (from YAML) to an Exercise.

    Raises ValueError if any required field is absent or a value is invalid.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"Exercise missing fields: {sorted(missing)}")

    secondary = d.get("secondary_categories") or []
    if isinstance(secondary, str):
        secondary = [secondary]

    return Exercise(
        exercise_id=str(d["exercise_id"]),
        name=str(d["name"]),
        primary_category=str(d["primary_category"]),
        secondary_categories=[str(c) for c in secondary],
        equipment=str(d.get("equipment", "")),
        unit=str(d.get("unit", "kg")),
        effort_mode=d.get("effort_mode"),
        rest_seconds=_optional_int(d, "rest_seconds"),
        target_rep_min=_optional_int(d, "target_rep_min"),
        target_rep_max=_optional_int(d, "target_rep_max"),
        use_warmup_set=bool(d.get("use_warmup_set", False)),
        progression_set_count=_optional_int(d, "progression_set_count"),
    )


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert an Exercise to a YAML/JSON-friendly dict, omitting unset options."""
    data: dict[str, Any] = {
        "exercise_id": exercise.exercise_id,
        "name": exercise.name,
        "primary_category": exercise.primary_category,
        "secondary_categories": list(exercise.secondary_categories),
        "equipment": exercise.equipment,
        "unit": exercise.unit,
    }
    for key in (
        "effort_mode",
        "rest_seconds",
        "target_rep_min",
        "target_rep_max",
        "progression_set_count",
    ):
        value = getattr(exercise, key)
        if value is not None:
            data[key] = value
    if exercise.use_warmup_set:
        data["use_warmup_set"] = True
    return data


def load_yaml_file(path: Path) -> dict:
    """Load a YAML mapping; an unreadable or non-mapping file warns and yields {}."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"liftlog: ignoring unreadable YAML file {path} ({exc})", stacklevel=2)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        warnings.warn(f"liftlog: ignoring {path}: expected a mapping", stacklevel=2)
        return {}
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_exercises_dir() -> Path:
    """Return path to the bundled exercises/ data directory."""
    # loader.py lives at src/liftlog/core/exercises/loader.py
    return Path(__file__).parent.parent.parent / "exercises"


def _try_build(raw: dict, label: str) -> Exercise | None:
    try:
        return exercise_from_dict(raw)
    except (ValueError, TypeError) as exc:
        warnings.warn(f"liftlog: skipping exercise '{label}': {exc}", stacklevel=3)
        return None


def load_exercises_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> dict[str, Exercise]:
    """Return {exercise_id: Exercise} loaded from per-exercise YAML files.

    Loads each ``<exercise_id>.yaml`` from the bundled exercises/ directory.
    If a matching file exists in *user_dir* it is deep-merged over the
    bundled definition (user can override any field).  User-only files (no
    bundled counterpart) are loaded as new exercises.  Invalid definitions
    are skipped with a warning.

    Args:
        bundled_dir: Directory of bundled definitions (default: package data)
        user_dir: Directory of user overrides; ignored when missing

    Returns:
        Mapping of exercise id to Exercise, in file-name order
    """
    if bundled_dir is None:
        bundled_dir = get_bundled_exercises_dir()

    stems: dict[str, Path] = {}
    if bundled_dir.is_dir():
        for p in sorted(bundled_dir.glob("*.yaml")):
            stems[p.stem] = p

    user_files: dict[str, Path] = {}
    if user_dir is not None and user_dir.is_dir():
        for p in sorted(user_dir.glob("*.yaml")):
            user_files[p.stem] = p

    result: dict[str, Exercise] = {}

    for stem, bundled_path in stems.items():
        raw = load_yaml_file(bundled_path)
        if not raw:
            continue
        if stem in user_files:
            raw = deep_merge(raw, load_yaml_file(user_files[stem]))
        ex = _try_build(raw, stem)
        if ex is not None:
            result[ex.exercise_id] = ex

    for stem, user_path in user_files.items():
        if stem in stems:
            continue
        raw = load_yaml_file(user_path)
        if not raw:
            continue
        ex = _try_build(raw, stem)
        if ex is not None:
            result[ex.exercise_id] = ex

    return result


def save_user_exercise(exercise: Exercise, user_dir: Path) -> Path:
    """Write *exercise* to ``<user_dir>/<exercise_id>.yaml`` and return the path."""
    user_dir.mkdir(parents=True, exist_ok=True)
    path = user_dir / f"{exercise.exercise_id}.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(exercise_to_dict(exercise), fh, sort_keys=False)
    return path
