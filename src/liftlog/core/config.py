"""
Configuration constants for the progression and insights engine.

All adjustable parameters are centralized here for easy tuning.
Progression tolerances and calendar settings can additionally be
overridden per user through ~/.liftlog/config.yaml (see
core/engine/config_loader.py).
"""

from typing import Final

# =============================================================================
# UNIT CONVERSION
# =============================================================================

CANONICAL_UNIT: Final[str] = "kg"
LBS_TO_KG: Final[float] = 0.453592
KG_TO_LBS: Final[float] = 1.0 / LBS_TO_KG  # Exact reciprocal keeps round trips stable
LBS_UNIT_ALIASES: Final[frozenset[str]] = frozenset({"lbs", "lb"})

# =============================================================================
# ONE-REP-MAX ESTIMATION (Epley)
# =============================================================================

EPLEY_DIVISOR: Final[float] = 30.0
ONE_RM_MIN_REPS: Final[int] = 1  # Below this the estimate is meaningless
ONE_RM_MAX_REPS: Final[int] = 10  # Above this Epley over-estimates badly

# =============================================================================
# PROGRESSION CLASSIFIER
# =============================================================================

PROGRESSION_WINDOW: Final[int] = 4  # Most recent sessions considered
REQUIRED_CONSECUTIVE_HITS: Final[int] = 2  # Sessions that must hit target reps
VOLUME_TOLERANCE: Final[float] = 0.10  # ±10 % volume counts as "flat"
ONE_RM_TOLERANCE: Final[float] = 0.05  # ±5 % e1RM counts as "flat"
WEIGHT_TOLERANCE: Final[float] = 0.1  # Absolute, in the logged unit
REGRESSION_MIN_SESSIONS: Final[int] = 3

UPPER_BODY_CATEGORIES: Final[frozenset[str]] = frozenset(
    {"chest", "back", "shoulders", "arms", "biceps", "triceps"}
)

# Weight increments recommended when an exercise is ready to progress,
# keyed by the exercise's unit.
UPPER_BODY_INCREMENT: Final[dict[str, float]] = {"kg": 2.5, "lbs": 5.0}
LOWER_BODY_INCREMENT: Final[dict[str, float]] = {"kg": 5.0, "lbs": 10.0}

# =============================================================================
# INSIGHTS
# =============================================================================

MUSCLE_BREAKDOWN_TOP_N: Final[int] = 6
OTHER_CATEGORY: Final[str] = "Other"
DEFAULT_RECENT_PR_LIMIT: Final[int] = 10
DEFAULT_TOP_EXERCISES_LIMIT: Final[int] = 5
REP_RECORD_TARGETS: Final[tuple[int, ...]] = (1, 3, 5, 8, 10, 12)
EXERCISE_HISTORY_DAYS: Final[int] = 10  # Recent history rows in exercise stats

# =============================================================================
# CONSISTENCY (weekly streaks)
# =============================================================================

STREAK_LOOKBACK_WEEKS: Final[int] = 12  # Window for consistency and at-risk check
STREAK_MAX_WEEKS: Final[int] = 520  # Safety bound when walking back in time

# =============================================================================
# MUSCLE RECOVERY
# =============================================================================

RECOVERY_LOOKBACK_DAYS: Final[int] = 7
RECOVERY_FULL_HOURS: Final[float] = 72.0

# Piecewise-linear recovery curve: (hours, percent recovered)
RECOVERY_CURVE: Final[tuple[tuple[float, float], ...]] = (
    (0.0, 0.0),
    (24.0, 40.0),
    (48.0, 80.0),
    (72.0, 100.0),
)

RECOVERY_MUSCLE_GROUPS: Final[tuple[str, ...]] = (
    "Chest",
    "Back",
    "Shoulders",
    "Arms",
    "Biceps",
    "Triceps",
    "Legs",
    "Quads",
    "Hamstrings",
    "Glutes",
    "Core",
    "Abs",
    "Cardio",
)

# =============================================================================
# CALENDAR
# =============================================================================

DEFAULT_TIMEZONE: Final[str] = "UTC"
DEFAULT_FIRST_WEEKDAY: Final[int] = 0  # Monday, ISO-8601

# =============================================================================
# STORAGE
# =============================================================================

APP_DIR_NAME: Final[str] = ".liftlog"
APP_HOME_ENV: Final[str] = "LIFTLOG_HOME"
SETS_FILE_NAME: Final[str] = "sets.jsonl"
USER_CONFIG_FILE_NAME: Final[str] = "config.yaml"
USER_EXERCISES_DIR_NAME: Final[str] = "exercises"
