"""
Session aggregation.

Groups logged sets by (exercise, local calendar day) and summarises each
group into a Session.  Session metrics follow these rules:

- top_weight: heaviest set that has both weight and reps, in kg; 0 if none
- total_volume: Σ weight × reps in kg over sets with both fields,
  completed or not (in-progress work still counts toward the day)
- estimated_one_rep_max: first completed set by order (pre-fatigue), in kg
- hit_target_reps: every set completed with reps inside the target range

When an exercise marks its first set as a warm-up, or limits progression to
its first N working sets, only those working sets feed the metrics;
Session.sets always keeps every set of the day.
"""

from collections import Counter
from datetime import date

from .calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from .exercises.base import Exercise
from .max_estimator import one_rep_max_from_session
from .models import LoggedSet, Session
from .units import to_canonical, volume_in_canonical_unit


def select_working_sets(
    sets: list[LoggedSet],
    use_warmup_set: bool = False,
    progression_set_count: int | None = None,
) -> list[LoggedSet]:
    """
    Pick the sets that count toward progression metrics.

    Args:
        sets: Sets of one session (any order)
        use_warmup_set: Drop the first set by order
        progression_set_count: Keep only the first N remaining sets

    Returns:
        Working sets ordered by ``order``
    """
    working = sorted(sets, key=lambda s: s.order)
    if use_warmup_set and working:
        working = working[1:]
    if progression_set_count is not None and progression_set_count > 0:
        working = working[:progression_set_count]
    return working


def session_top_weight(sets: list[LoggedSet]) -> float:
    """Heaviest weight in kg among sets with both weight and reps; 0 if none."""
    weights = [
        to_canonical(s.weight, s.unit)
        for s in sets
        if s.weight is not None and s.reps is not None
    ]
    return max(weights) if weights else 0.0


def session_total_volume(sets: list[LoggedSet]) -> float:
    """Volume in kg over sets with both weight and reps, regardless of completion."""
    return sum(
        volume_in_canonical_unit(s.weight, s.reps, s.unit)
        for s in sets
        if s.weight is not None and s.reps is not None
    )


def session_hit_target_reps(
    sets: list[LoggedSet],
    target_rep_min: int | None,
    target_rep_max: int | None,
) -> bool:
    """
    True if every set was completed within [target_rep_min, target_rep_max].

    Weight is irrelevant.  Without both bounds, or without sets, this is False.
    """
    if target_rep_min is None or target_rep_max is None or not sets:
        return False
    return all(
        s.is_completed and s.reps is not None and target_rep_min <= s.reps <= target_rep_max
        for s in sets
    )


def session_typical_reps(sets: list[LoggedSet]) -> int | None:
    """Most common rep count among completed sets (ties go to the higher count)."""
    counts = Counter(s.reps for s in sets if s.is_completed and s.reps is not None)
    if not counts:
        return None
    return max(counts.items(), key=lambda kv: (kv[1], kv[0]))[0]


def summarize_session(
    exercise_id: str,
    day: date,
    sets: list[LoggedSet],
    target_rep_min: int | None = None,
    target_rep_max: int | None = None,
    use_warmup_set: bool = False,
    progression_set_count: int | None = None,
) -> Session:
    """Build a Session from the sets of one exercise on one day."""
    ordered = sorted(sets, key=lambda s: s.order)
    working = select_working_sets(ordered, use_warmup_set, progression_set_count)
    return Session(
        exercise_id=exercise_id,
        date=day,
        sets=ordered,
        top_weight=session_top_weight(working),
        total_volume=session_total_volume(working),
        estimated_one_rep_max=one_rep_max_from_session(working),
        hit_target_reps=session_hit_target_reps(working, target_rep_min, target_rep_max),
        typical_reps=session_typical_reps(working),
    )


def build_sessions(
    sets: list[LoggedSet],
    target_rep_min: int | None = None,
    target_rep_max: int | None = None,
    *,
    calendar: CalendarPolicy | None = None,
    newest_first: bool = True,
    use_warmup_set: bool = False,
    progression_set_count: int | None = None,
) -> list[Session]:
    """
    Group sets into per-exercise, per-day sessions.

    Args:
        sets: Logged sets, possibly of several exercises, in any order
        target_rep_min: Lower bound of the target rep range
        target_rep_max: Upper bound of the target rep range
        calendar: Day-boundary policy (default: UTC, Monday weeks)
        newest_first: Sort sessions by date descending (True) or ascending
        use_warmup_set: Exclude each session's first set from metrics
        progression_set_count: Limit metrics to the first N working sets

    Returns:
        One Session per (exercise, local day).  Same-day sessions of
        different exercises are ordered by exercise id.
    """
    calendar = calendar or DEFAULT_CALENDAR

    groups: dict[tuple[str, date], list[LoggedSet]] = {}
    for s in sets:
        key = (s.exercise_id, calendar.local_day(s.date))
        groups.setdefault(key, []).append(s)

    sessions = [
        summarize_session(
            exercise_id,
            day,
            group,
            target_rep_min,
            target_rep_max,
            use_warmup_set,
            progression_set_count,
        )
        for (exercise_id, day), group in groups.items()
    ]

    sessions.sort(key=lambda s: s.exercise_id)
    sessions.sort(key=lambda s: s.date, reverse=newest_first)
    return sessions


def sessions_for_exercise(
    exercise: Exercise,
    sets: list[LoggedSet],
    *,
    calendar: CalendarPolicy | None = None,
    newest_first: bool = True,
    completed_only: bool = False,
) -> list[Session]:
    """
    Sessions of one exercise, using its target range and working-set options.

    Sets of other exercises are ignored.
    """
    own = [
        s
        for s in sets
        if s.exercise_id == exercise.exercise_id and (s.is_completed or not completed_only)
    ]
    return build_sessions(
        own,
        exercise.target_rep_min,
        exercise.target_rep_max,
        calendar=calendar,
        newest_first=newest_first,
        use_warmup_set=exercise.use_warmup_set,
        progression_set_count=exercise.progression_set_count,
    )
