"""
Training consistency and muscle recovery.

Streaks are counted in weeks: a week is active when at least one completed
set was logged in it.  Recovery is a simple time-since-last-trained curve
per muscle group:

    0–24 h → 0–40 %,  24–48 h → 40–80 %,  48–72 h → 80–100 %,  72 h+ → 100 %
"""

from datetime import date, datetime, timedelta

from .calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from .config import (
    RECOVERY_CURVE,
    RECOVERY_FULL_HOURS,
    RECOVERY_LOOKBACK_DAYS,
    RECOVERY_MUSCLE_GROUPS,
    STREAK_LOOKBACK_WEEKS,
    STREAK_MAX_WEEKS,
)
from .exercises.base import Exercise
from .models import LoggedSet, MuscleRecoveryStatus, StreakData


def _workout_days(sets: list[LoggedSet], calendar: CalendarPolicy, today: date) -> set[date]:
    return {
        day
        for day in (calendar.local_day(s.date) for s in sets if s.is_completed)
        if day <= today
    }


def _longest_run(week_starts: list[date]) -> int:
    """Longest run of consecutive weeks in an ascending list of week starts."""
    best = run = 0
    previous: date | None = None
    for week in week_starts:
        run = run + 1 if previous is not None and week - previous == timedelta(weeks=1) else 1
        best = max(best, run)
        previous = week
    return best


def get_streak_data(
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> StreakData:
    """
    Weekly training streaks.

    The current streak counts consecutive active weeks back from this week.
    A week without training yet does not break it until the week is over:
    the count then starts from last week and the streak is reported at risk.

    Args:
        sets: Logged sets (incomplete ones are ignored)
        today: Reference day (default: today in the policy's timezone)
        calendar: Day-boundary and week-start policy

    Returns:
        StreakData with a 12-week consistency history, oldest first
    """
    calendar = calendar or DEFAULT_CALENDAR
    today = today or calendar.today()
    days = _workout_days(sets, calendar, today)
    active_weeks = {calendar.week_start(d) for d in days}

    this_week = calendar.week_start(today)
    trained_this_week = this_week in active_weeks

    week = this_week if trained_this_week else this_week - timedelta(weeks=1)
    current = 0
    while week in active_weeks and current < STREAK_MAX_WEEKS:
        current += 1
        week -= timedelta(weeks=1)

    lookback_start = this_week - timedelta(weeks=STREAK_LOOKBACK_WEEKS - 1)
    recent_activity = any(d >= lookback_start for d in days)

    consistency: list[tuple[date, int]] = []
    for offset in range(STREAK_LOOKBACK_WEEKS - 1, -1, -1):
        start = this_week - timedelta(weeks=offset)
        end = start + timedelta(weeks=1)
        consistency.append((start, sum(1 for d in days if start <= d < end)))

    return StreakData(
        current_streak=current,
        best_streak=_longest_run(sorted(active_weeks)),
        is_at_risk=not trained_this_week and recent_activity,
        last_workout_date=max(days) if days else None,
        weekly_consistency=consistency,
    )


def days_since_last_workout(
    sets: list[LoggedSet],
    *,
    today: date | None = None,
    calendar: CalendarPolicy | None = None,
) -> int | None:
    """Whole days since the most recent completed set, or None if never trained."""
    calendar = calendar or DEFAULT_CALENDAR
    today = today or calendar.today()
    days = _workout_days(sets, calendar, today)
    if not days:
        return None
    return (today - max(days)).days


def recovery_percentage(hours_since: float) -> float:
    """Piecewise-linear recovery estimate in percent."""
    if hours_since >= RECOVERY_FULL_HOURS:
        return 100.0
    if hours_since <= 0:
        return 0.0
    for (h0, p0), (h1, p1) in zip(RECOVERY_CURVE, RECOVERY_CURVE[1:]):
        if h0 <= hours_since < h1:
            return p0 + (hours_since - h0) / (h1 - h0) * (p1 - p0)
    return 100.0


def get_muscle_recovery_status(
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    *,
    now: datetime | None = None,
    calendar: CalendarPolicy | None = None,
) -> dict[str, MuscleRecoveryStatus]:
    """
    Recovery estimate for each standard muscle group.

    Only completed sets from the last 7 days are considered; a group not
    trained in that time is fully recovered.  Sets logged as plain dates
    count from local midnight of that day.

    Args:
        sets: Logged sets
        exercises: Catalog used to map sets to primary muscle groups
        now: Reference instant (default: now in the policy's timezone)
        calendar: Timezone policy

    Returns:
        {muscle group: MuscleRecoveryStatus} for every standard group
    """
    calendar = calendar or DEFAULT_CALENDAR
    now = calendar.local_datetime(now) if now is not None else calendar.now()
    cutoff = now - timedelta(days=RECOVERY_LOOKBACK_DAYS)

    last_trained: dict[str, datetime] = {}
    set_counts: dict[str, int] = {}
    for s in sets:
        if not s.is_completed:
            continue
        exercise = exercises.get(s.exercise_id)
        if exercise is None:
            continue
        when = calendar.local_datetime(s.date)
        if not cutoff <= when <= now:
            continue
        category = exercise.primary_category
        set_counts[category] = set_counts.get(category, 0) + 1
        if category not in last_trained or when > last_trained[category]:
            last_trained[category] = when

    statuses: dict[str, MuscleRecoveryStatus] = {}
    for group in RECOVERY_MUSCLE_GROUPS:
        when = last_trained.get(group)
        if when is None:
            statuses[group] = MuscleRecoveryStatus(
                category=group,
                last_trained=None,
                hours_since=None,
                recovery_percent=100.0,
            )
            continue
        hours = (now - when).total_seconds() / 3600
        statuses[group] = MuscleRecoveryStatus(
            category=group,
            last_trained=when,
            hours_since=hours,
            recovery_percent=recovery_percentage(hours),
            sets_completed=set_counts[group],
        )
    return statuses
