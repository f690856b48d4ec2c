"""
Windowed volume and activity insights.

A window of N days covers [today − N, today], both ends inclusive; the
daily series instead returns exactly N points ending today.  Unlike the
per-session progression volume, every insight counts completed sets only,
and volume is Σ weight × reps in kg over sets that have both fields.
Empty windows produce zeros and empty lists, never errors.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, timedelta

from .calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from .config import (
    CANONICAL_UNIT,
    DEFAULT_TOP_EXERCISES_LIMIT,
    EXERCISE_HISTORY_DAYS,
    MUSCLE_BREAKDOWN_TOP_N,
    OTHER_CATEGORY,
    REP_RECORD_TARGETS,
)
from .exercises.base import Exercise
from .max_estimator import estimate_one_rep_max
from .models import (
    BestSet,
    CategoryShare,
    ComparisonStats,
    ExerciseHistoryEntry,
    ExerciseStats,
    LoggedSet,
    PeriodComparison,
    ValidationError,
    VolumePoint,
    WeeklyVolumePoint,
)
from .records import best_set, pr_count_in_window, set_volume
from .units import from_canonical, to_canonical


@dataclass(frozen=True)
class InsightWindow:
    """Inclusive range of local days."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def insight_window(days: int, today: date) -> InsightWindow:
    """Window of the last *days* days: [today − days, today]."""
    if days < 0:
        raise ValidationError(f"days must be non-negative, got {days}")
    return InsightWindow(start=today - timedelta(days=days), end=today)


def _completed(sets: list[LoggedSet]) -> list[LoggedSet]:
    return [s for s in sets if s.is_completed]


def _in_window(
    sets: list[LoggedSet],
    window: InsightWindow,
    calendar: CalendarPolicy,
) -> list[tuple[date, LoggedSet]]:
    """Completed sets inside *window*, paired with their local day."""
    pairs = []
    for s in _completed(sets):
        day = calendar.local_day(s.date)
        if window.contains(day):
            pairs.append((day, s))
    return pairs


def _resolve(today: date | None, calendar: CalendarPolicy | None) -> tuple[date, CalendarPolicy]:
    calendar = calendar or DEFAULT_CALENDAR
    return today or calendar.today(), calendar


# ---------------------------------------------------------------------------
# Volume series
# ---------------------------------------------------------------------------

def get_volume_trend(
    days: int,
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> list[VolumePoint]:
    """
    Daily completed volume for the *days* days ending today.

    Always returns exactly *days* points in ascending date order, with 0
    for days without training.
    """
    if days < 0:
        raise ValidationError(f"days must be non-negative, got {days}")
    today, calendar = _resolve(today, calendar)
    first = today - timedelta(days=days - 1)

    totals: dict[date, float] = defaultdict(float)
    for s in _completed(sets):
        day = calendar.local_day(s.date)
        if first <= day <= today:
            totals[day] += set_volume(s)

    return [
        VolumePoint(date=day, volume=totals.get(day, 0.0))
        for day in (first + timedelta(days=i) for i in range(days))
    ]


def get_weekly_volume_trend(
    weeks: int,
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> list[WeeklyVolumePoint]:
    """
    Weekly completed volume for the *weeks* calendar weeks ending with the
    current one.

    Weeks begin on the policy's first weekday.  Always returns exactly
    *weeks* points, oldest first; the current week only counts up to today.
    """
    if weeks < 0:
        raise ValidationError(f"weeks must be non-negative, got {weeks}")
    today, calendar = _resolve(today, calendar)
    current = calendar.week_start(today)
    starts = [current - timedelta(weeks=weeks - 1 - i) for i in range(weeks)]

    totals: dict[date, float] = defaultdict(float)
    if starts:
        for s in _completed(sets):
            day = calendar.local_day(s.date)
            if starts[0] <= day <= today:
                totals[calendar.week_start(day)] += set_volume(s)

    return [WeeklyVolumePoint(week_start=w, volume=totals.get(w, 0.0)) for w in starts]


# ---------------------------------------------------------------------------
# Window counts
# ---------------------------------------------------------------------------

def get_workout_count(
    days: int,
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> int:
    """Number of distinct local days with at least one completed set."""
    today, calendar = _resolve(today, calendar)
    window = insight_window(days, today)
    return len({day for day, _ in _in_window(sets, window, calendar)})


def get_set_count(
    days: int,
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> int:
    """Number of completed sets in the window."""
    today, calendar = _resolve(today, calendar)
    window = insight_window(days, today)
    return len(_in_window(sets, window, calendar))


def get_total_volume(
    days: int,
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> float:
    """Completed volume (kg) in the window."""
    today, calendar = _resolve(today, calendar)
    window = insight_window(days, today)
    return sum((set_volume(s) for _, s in _in_window(sets, window, calendar)), 0.0)


# ---------------------------------------------------------------------------
# Muscle groups
# ---------------------------------------------------------------------------

def get_muscle_group_breakdown(
    days: int,
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> list[CategoryShare]:
    """
    Share of completed volume per primary muscle group.

    The six largest groups are listed individually, largest first; the
    remainder is merged into a single "Other" entry.  Sets of exercises
    missing from *exercises* are skipped.  Returns an empty list when the
    window holds no volume.
    """
    today, calendar = _resolve(today, calendar)
    window = insight_window(days, today)

    by_category: dict[str, float] = defaultdict(float)
    for _, s in _in_window(sets, window, calendar):
        exercise = exercises.get(s.exercise_id)
        if exercise is None:
            continue
        by_category[exercise.primary_category] += set_volume(s)

    total = sum(by_category.values())
    if total <= 0:
        return []

    ranked = sorted(by_category.items(), key=lambda kv: (-kv[1], kv[0]))
    top = dict(ranked[:MUSCLE_BREAKDOWN_TOP_N])
    rest = sum(v for _, v in ranked[MUSCLE_BREAKDOWN_TOP_N:])
    if len(ranked) > MUSCLE_BREAKDOWN_TOP_N:
        top[OTHER_CATEGORY] = top.get(OTHER_CATEGORY, 0.0) + rest

    return [
        CategoryShare(category=category, volume=volume, percentage=volume / total * 100)
        for category, volume in top.items()
    ]


# ---------------------------------------------------------------------------
# Period comparison
# ---------------------------------------------------------------------------

def get_comparison_stats(
    days: int,
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> ComparisonStats:
    """
    Compare the current window with the same-length window before it.

    Both windows span days + 1 local days; the previous one ends the day
    before the current one starts.
    """
    today, calendar = _resolve(today, calendar)
    window = insight_window(days, today)
    previous_today = window.start - timedelta(days=1)

    def measure(fn, ref: date, span: int) -> float:
        return float(fn(span, sets, today=ref, calendar=calendar))

    return ComparisonStats(
        days=days,
        workouts=PeriodComparison(
            current=measure(get_workout_count, today, days),
            previous=measure(get_workout_count, previous_today, days),
        ),
        sets=PeriodComparison(
            current=measure(get_set_count, today, days),
            previous=measure(get_set_count, previous_today, days),
        ),
        volume=PeriodComparison(
            current=measure(get_total_volume, today, days),
            previous=measure(get_total_volume, previous_today, days),
        ),
        personal_records=PeriodComparison(
            current=float(
                pr_count_in_window(days, sets, exercises, today=today, calendar=calendar)
            ),
            previous=float(
                pr_count_in_window(days, sets, exercises, today=previous_today, calendar=calendar)
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Per-exercise statistics
# ---------------------------------------------------------------------------

def get_exercise_stats(
    exercise_id: str,
    sets: list[LoggedSet],
    *,
    calendar: CalendarPolicy | None = None,
    unit: str = CANONICAL_UNIT,
) -> ExerciseStats:
    """
    Lifetime statistics for one exercise from its completed sets.

    Sets are compared in kg whatever unit they were logged in.  best_weight,
    the e1RM figures and rep_records are reported in *unit*; best sets keep
    the unit they were logged in, and total_volume is in kg.  The current
    e1RM comes from the most recent set that can be estimated (1–10 reps).
    """
    calendar = calendar or DEFAULT_CALENDAR
    own = sorted(
        (s for s in _completed(sets) if s.exercise_id == exercise_id),
        key=lambda s: (calendar.local_datetime(s.date), s.order),
    )
    stats = ExerciseStats(exercise_id=exercise_id)
    if not own:
        return stats

    loaded = [s for s in own if s.has_load]

    def weight_in(s: LoggedSet) -> float:
        return from_canonical(to_canonical(s.weight, s.unit), unit)

    if loaded:
        stats.best_weight = max(weight_in(s) for s in loaded)
    top = best_set(own)
    if top is not None:
        stats.best_volume_set = BestSet(weight=top.weight, reps=top.reps, unit=top.unit)
    stats.total_volume = sum((set_volume(s) for s in own), 0.0)

    days: dict[date, list[LoggedSet]] = defaultdict(list)
    for s in own:
        days[calendar.local_day(s.date)].append(s)
    stats.times_performed = len(days)

    daily_best: dict[date, float] = {}
    for s in loaded:
        e1rm = estimate_one_rep_max(weight_in(s), s.reps)
        if e1rm is None:
            continue
        stats.current_one_rep_max = e1rm  # sets are ascending, so the last one wins
        day = calendar.local_day(s.date)
        daily_best[day] = max(e1rm, daily_best.get(day, e1rm))
    stats.one_rep_max_progression = sorted(daily_best.items())

    for s in loaded:
        if s.reps in REP_RECORD_TARGETS:
            weight = weight_in(s)
            stats.rep_records[s.reps] = max(weight, stats.rep_records.get(s.reps, weight))

    for day in sorted(days, reverse=True)[:EXERCISE_HISTORY_DAYS]:
        top_of_day = best_set(days[day])
        stats.recent_history.append(
            ExerciseHistoryEntry(
                date=day,
                set_count=len(days[day]),
                best_set=(
                    BestSet(weight=top_of_day.weight, reps=top_of_day.reps, unit=top_of_day.unit)
                    if top_of_day is not None
                    else None
                ),
            )
        )
    return stats


def get_top_exercises(
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    limit: int = DEFAULT_TOP_EXERCISES_LIMIT,
) -> list[tuple[Exercise, int]]:
    """Exercises with the most completed sets, most first (ties by name)."""
    counts = Counter(s.exercise_id for s in _completed(sets) if s.exercise_id in exercises)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], exercises[kv[0]].name))
    return [(exercises[exercise_id], count) for exercise_id, count in ranked[:limit]]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_volume(volume: float) -> str:
    """Compact volume label: 950 → "950", 12500 → "12.5K", 3.2e6 → "3.2M"."""
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if volume >= threshold:
            return f"{volume / threshold:.1f}{suffix}"
    return f"{volume:.0f}"
