"""
Personal-record detection.

Two distinct notions of "PR" are used and kept apart:

- Lifetime records (detect_personal_records / detect_recent_prs): walking
  an exercise's history day by day, a day sets a record when its best
  single-set volume beats everything logged before it.
- Window PR count (pr_count_in_window): how many exercises beat, inside a
  recent window, their best single-set volume from before the window.

Only completed sets with both weight and reps take part, and volumes are
compared in kg so a change of unit does not fake a record.
"""

from collections import defaultdict
from datetime import date, timedelta

from .calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from .config import DEFAULT_RECENT_PR_LIMIT
from .exercises.base import Exercise
from .max_estimator import estimate_one_rep_max
from .models import LoggedSet, PersonalRecord, ValidationError
from .units import volume_in_canonical_unit


def _eligible(s: LoggedSet) -> bool:
    return s.is_completed and s.weight is not None and s.reps is not None


def set_volume(s: LoggedSet) -> float:
    """Volume of one set in kg (0 when weight or reps is missing)."""
    if s.weight is None or s.reps is None:
        return 0.0
    return volume_in_canonical_unit(s.weight, s.reps, s.unit)


def best_set(sets: list[LoggedSet]) -> LoggedSet | None:
    """
    Best set by volume; ties go to the heavier set, then to more reps.

    Sets without weight or reps are ignored.
    """
    candidates = [s for s in sets if s.weight is not None and s.reps is not None]
    if not candidates:
        return None
    return max(candidates, key=lambda s: (set_volume(s), s.weight, s.reps))


def detect_personal_records(
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    calendar: CalendarPolicy | None = None,
) -> list[PersonalRecord]:
    """
    Every lifetime record event, per exercise in chronological order.

    Each exercise gets at most one record per day, and its record volumes
    strictly increase.  Sets of exercises missing from *exercises* are
    skipped.

    Args:
        sets: Logged sets (incomplete ones are ignored)
        exercises: Catalog keyed by exercise id
        calendar: Day-boundary policy

    Returns:
        Record events, grouped by exercise id, oldest first within each
    """
    calendar = calendar or DEFAULT_CALENDAR

    by_exercise: dict[str, dict[date, list[LoggedSet]]] = defaultdict(lambda: defaultdict(list))
    for s in sets:
        if _eligible(s) and s.exercise_id in exercises:
            by_exercise[s.exercise_id][calendar.local_day(s.date)].append(s)

    records: list[PersonalRecord] = []
    for exercise_id in sorted(by_exercise):
        exercise = exercises[exercise_id]
        running_max = 0.0
        days = by_exercise[exercise_id]
        for day in sorted(days):
            top = best_set(days[day])
            if top is None:
                continue
            volume = set_volume(top)
            if volume <= running_max:
                continue
            running_max = volume
            records.append(
                PersonalRecord(
                    exercise_id=exercise_id,
                    exercise_name=exercise.name,
                    weight=top.weight,
                    reps=top.reps,
                    unit=top.unit,
                    date=day,
                    volume=volume,
                    estimated_one_rep_max=estimate_one_rep_max(top.weight, top.reps),
                )
            )
    return records


def detect_recent_prs(
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    limit: int = DEFAULT_RECENT_PR_LIMIT,
    calendar: CalendarPolicy | None = None,
) -> list[PersonalRecord]:
    """
    Most recent lifetime records across all exercises, newest first.

    Args:
        sets: Logged sets
        exercises: Catalog keyed by exercise id
        limit: Maximum number of records returned
        calendar: Day-boundary policy

    Returns:
        At most *limit* records, each annotated with its estimated 1RM
        (None when the set had more than 10 reps)
    """
    if limit < 0:
        raise ValidationError(f"limit must be non-negative, got {limit}")
    records = detect_personal_records(sets, exercises, calendar)
    records.sort(key=lambda r: (r.date, r.volume), reverse=True)
    return records[:limit]


def pr_count_in_window(
    days: int,
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> int:
    """
    Count exercises whose best set volume inside the window beats their
    best set volume from before it.

    The window is [today − days, today].  An exercise trained in the window
    but never before it counts as a PR.  Sets of exercises missing from
    *exercises* are skipped, as in detect_personal_records.

    Args:
        days: Window length in days (>= 0)
        sets: Logged sets (incomplete ones are ignored)
        exercises: Catalog keyed by exercise id
        today: Reference day (default: today in the policy's timezone)
        calendar: Day-boundary policy

    Returns:
        Number of exercises with a PR in the window
    """
    if days < 0:
        raise ValidationError(f"days must be non-negative, got {days}")
    calendar = calendar or DEFAULT_CALENDAR
    today = today or calendar.today()
    start = today - timedelta(days=days)

    inside: dict[str, float] = {}
    before: dict[str, float] = {}
    for s in sets:
        if not _eligible(s) or s.exercise_id not in exercises:
            continue
        day = calendar.local_day(s.date)
        volume = set_volume(s)
        if start <= day <= today:
            inside[s.exercise_id] = max(volume, inside.get(s.exercise_id, volume))
        elif day < start:
            before[s.exercise_id] = max(volume, before.get(s.exercise_id, volume))

    return sum(
        1
        for exercise_id, best in inside.items()
        if exercise_id not in before or best > before[exercise_id]
    )
