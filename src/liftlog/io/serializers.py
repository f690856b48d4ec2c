"""
JSON serialization for logged sets.

Handles conversion between LoggedSet and JSON-compatible dicts, plus the
sets-string shorthand accepted by the CLI.
"""

import json
import math
import re
from datetime import date, datetime
from typing import Any

from ..core.models import DateLike, LoggedSet, ValidationError

__all__ = [
    "ValidationError",
    "date_to_str",
    "dict_to_logged_set",
    "json_line_to_set",
    "logged_set_to_dict",
    "parse_date",
    "parse_sets_string",
    "set_to_json_line",
]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: str) -> DateLike:
    """
    Parse an ISO date or datetime string.

    "2026-03-01" gives a date; anything with a time part gives a datetime
    (aware if it carries an offset).

    Raises:
        ValidationError: If the string is not ISO-8601
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid date: {value!r}")
    text = value.strip()
    try:
        if _DATE_RE.match(text):
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {text}. Expected YYYY-MM-DD or ISO datetime") from e


def date_to_str(value: DateLike) -> str:
    """ISO string for a date or datetime."""
    return value.isoformat()


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != int(value):
        raise ValidationError(f"{key} must be an integer, got {value!r}")
    return int(value)


def _optional_float(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"{key} must be finite, got {value!r}")
    return float(value)


def logged_set_to_dict(logged_set: LoggedSet) -> dict[str, Any]:
    """
    Convert LoggedSet to JSON-compatible dict.

    Optional fields that are unset are omitted to keep lines short.
    """
    data: dict[str, Any] = {
        "id": logged_set.set_id,
        "exercise_id": logged_set.exercise_id,
        "date": date_to_str(logged_set.date),
        "order": logged_set.order,
        "weight": logged_set.weight,
        "reps": logged_set.reps,
        "unit": logged_set.unit,
        "completed": logged_set.is_completed,
    }
    if logged_set.rpe is not None:
        data["rpe"] = logged_set.rpe
    if logged_set.rir is not None:
        data["rir"] = logged_set.rir
    if logged_set.created_at is not None:
        data["created_at"] = logged_set.created_at.isoformat()
    return data


def dict_to_logged_set(data: dict[str, Any]) -> LoggedSet:
    """
    Convert dict to LoggedSet.

    Args:
        data: Dict representation

    Returns:
        LoggedSet instance

    Raises:
        ValidationError: If a required field is missing or a value is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    for key in ("id", "exercise_id", "date", "order"):
        if key not in data:
            raise ValidationError(f"Missing field: {key}")

    created_at = data.get("created_at")
    created = parse_date(created_at) if created_at else None
    if created is not None and not isinstance(created, datetime):
        created = datetime.combine(created, datetime.min.time())

    order = _optional_int(data, "order")
    return LoggedSet(
        set_id=str(data["id"]),
        exercise_id=str(data["exercise_id"]),
        date=parse_date(data["date"]),
        order=order if order is not None else 0,
        weight=_optional_float(data, "weight"),
        reps=_optional_int(data, "reps"),
        unit=str(data.get("unit", "kg")),
        is_completed=bool(data.get("completed", True)),
        rpe=_optional_int(data, "rpe"),
        rir=_optional_int(data, "rir"),
        created_at=created,
    )


def set_to_json_line(logged_set: LoggedSet) -> str:
    """
    Serialize a set to a single JSON line.

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(logged_set_to_dict(logged_set), separators=(",", ":"))


def json_line_to_set(line: str) -> LoggedSet:
    """
    Deserialize a JSON line to a LoggedSet.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_logged_set(data)


# ---------------------------------------------------------------------------
# Sets-string shorthand
# ---------------------------------------------------------------------------

_NUM = r"(\d+(?:\.\d+)?)"
_GROUP_PATTERNS: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(rf"^(\d+)\s*[xX×]\s*(\d+)\s*@\s*{_NUM}$"), "reps_sets_weight"),
    (re.compile(r"^(\d+)\s*[xX×]\s*(\d+)$"), "reps_sets"),
    (re.compile(rf"^(\d+)\s*@\s*{_NUM}$"), "reps_weight"),
    (re.compile(rf"^(\d+)\s+{_NUM}$"), "reps_weight"),
    (re.compile(r"^(\d+)$"), "reps"),
)


def _parse_group(part: str) -> list[tuple[int, float | None]]:
    for pattern, kind in _GROUP_PATTERNS:
        m = pattern.match(part)
        if m is None:
            continue
        if kind == "reps_sets_weight":
            reps, n_sets, weight = int(m.group(1)), int(m.group(2)), float(m.group(3))
            return [(reps, weight)] * n_sets
        if kind == "reps_sets":
            return [(int(m.group(1)), None)] * int(m.group(2))
        if kind == "reps_weight":
            return [(int(m.group(1)), float(m.group(2)))]
        return [(int(m.group(1)), None)]
    raise ValidationError(
        f"Invalid set format: '{part}'.\n"
        "Use: reps@weight (e.g. 8@100), repsxsets@weight (e.g. 5x3@100),\n"
        "     reps weight (e.g. 8 100), or bare reps (e.g. 12)."
    )


def parse_sets_string(sets_str: str) -> list[tuple[int, float | None]]:
    """
    Parse a sets string.

    Comma-separated groups, each one of:
        reps@weight        e.g. "8@100"      one set of 8 at 100
        repsxsets@weight   e.g. "5x3@100"    three sets of 5 at 100
        reps weight        e.g. "8 100"      space-separated
        repsxsets          e.g. "12x3"       three sets of 12, no weight
        reps               e.g. "12"         one set, no weight

    Weights are in the exercise's unit.

    Args:
        sets_str: Sets string to parse

    Returns:
        List of (reps, weight) tuples in logging order

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    sets: list[tuple[int, float | None]] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        group = _parse_group(part)
        if not group:
            raise ValidationError(f"Set count must be at least 1: '{part}'")
        sets.extend(group)

    if not sets:
        raise ValidationError("No valid sets found in sets string")

    return sets
