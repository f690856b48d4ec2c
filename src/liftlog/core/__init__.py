"""
Progression and insights analytics engine.

Pure functions over snapshots of logged sets.  Nothing here touches
storage, the clock (except as a default for "today") or the console.
"""

from .calendar_policy import CalendarPolicy
from .consistency import days_since_last_workout, get_muscle_recovery_status, get_streak_data
from .insights import (
    get_comparison_stats,
    get_exercise_stats,
    get_muscle_group_breakdown,
    get_set_count,
    get_top_exercises,
    get_total_volume,
    get_volume_trend,
    get_weekly_volume_trend,
    get_workout_count,
)
from .max_estimator import estimate_one_rep_max
from .models import LoggedSet, ProgressionKind, ProgressionStatus, Session, ValidationError
from .progression import classify_progression
from .records import detect_personal_records, detect_recent_prs, pr_count_in_window
from .sessions import build_sessions
from .units import from_canonical, to_canonical, volume_in_canonical_unit

__all__ = [
    "CalendarPolicy",
    "LoggedSet",
    "ProgressionKind",
    "ProgressionStatus",
    "Session",
    "ValidationError",
    "build_sessions",
    "classify_progression",
    "days_since_last_workout",
    "detect_personal_records",
    "detect_recent_prs",
    "estimate_one_rep_max",
    "from_canonical",
    "get_comparison_stats",
    "get_exercise_stats",
    "get_muscle_group_breakdown",
    "get_muscle_recovery_status",
    "get_set_count",
    "get_streak_data",
    "get_top_exercises",
    "get_total_volume",
    "get_volume_trend",
    "get_weekly_volume_trend",
    "get_workout_count",
    "pr_count_in_window",
    "to_canonical",
    "volume_in_canonical_unit",
]
