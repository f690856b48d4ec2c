"""
Data models for liftlog.

Logged sets are the raw input to every analysis; everything else here is
a derived, immutable value object returned by the core query functions.
Exercise definitions live in core/exercises/base.py.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal

EffortMode = Literal["rpe", "rir"]

# Logged dates may be plain calendar days or timestamps.
DateLike = date | datetime


class ValidationError(ValueError):
    """Raised when data validation fails."""

    pass


def _check_effort(value: int | None, name: str) -> None:
    if value is None:
        return
    if not 0 <= value <= 10:
        raise ValidationError(f"{name} must be between 0 and 10, got {value}")


@dataclass(frozen=True)
class LoggedSet:
    """
    A single logged set.

    weight and reps are independently optional: a set can be logged with
    reps only (bodyweight work) or left blank and filled in later.  Each
    aggregation documents whether it skips such sets or treats them as zero.
    """

    exercise_id: str
    order: int  # 1-based position within the exercise's day
    weight: float | None
    reps: int | None
    date: DateLike
    unit: str = "kg"  # Unit captured at log time
    is_completed: bool = True
    rpe: int | None = None
    rir: int | None = None
    set_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate set data."""
        if not self.exercise_id:
            raise ValidationError("exercise_id must be a non-empty string")
        if self.order < 1:
            raise ValidationError(f"order must be >= 1, got {self.order}")
        if self.reps is not None and self.reps < 0:
            raise ValidationError(f"reps must be non-negative, got {self.reps}")
        if self.weight is not None:
            if not math.isfinite(self.weight):
                raise ValidationError(f"weight must be finite, got {self.weight}")
            if self.weight < 0:
                raise ValidationError(f"weight must be non-negative, got {self.weight}")
        _check_effort(self.rpe, "rpe")
        _check_effort(self.rir, "rir")
        if self.rpe is not None and self.rir is not None:
            raise ValidationError("a set records either rpe or rir, not both")

    @property
    def has_load(self) -> bool:
        """True when both weight and reps are present."""
        return self.weight is not None and self.reps is not None


@dataclass(frozen=True)
class Session:
    """
    All sets of one exercise performed on one local calendar day.

    sets always holds every set of the day ordered by ``order``; the
    metrics are computed from the working sets only (see
    core/sessions.py for warm-up handling).
    """

    exercise_id: str
    date: date
    sets: list[LoggedSet]
    top_weight: float  # kg; 0 when no set has weight and reps
    total_volume: float  # kg, completed or not
    estimated_one_rep_max: float | None  # kg
    hit_target_reps: bool
    typical_reps: int | None = None


class ProgressionKind(str, Enum):
    """The six possible progression verdicts."""

    READY_TO_PROGRESS = "ready_to_progress"
    PROGRESSING_TOWARD_TARGET = "progressing_toward_target"
    MAINTAINING_BELOW_TARGET = "maintaining_below_target"
    DECLINING_PERFORMANCE = "declining_performance"
    RECENTLY_REGRESSED = "recently_regressed"
    INSUFFICIENT_DATA = "insufficient_data"


_TITLES: dict[ProgressionKind, str] = {
    ProgressionKind.READY_TO_PROGRESS: "Ready to Progress!",
    ProgressionKind.PROGRESSING_TOWARD_TARGET: "Progressing Toward Target",
    ProgressionKind.MAINTAINING_BELOW_TARGET: "Maintaining Below Target",
    ProgressionKind.DECLINING_PERFORMANCE: "Performance Declining",
    ProgressionKind.RECENTLY_REGRESSED: "Building Confidence",
    ProgressionKind.INSUFFICIENT_DATA: "Insufficient Data",
}

_COLORS: dict[ProgressionKind, str] = {
    ProgressionKind.READY_TO_PROGRESS: "green",
    ProgressionKind.PROGRESSING_TOWARD_TARGET: "blue",
    ProgressionKind.MAINTAINING_BELOW_TARGET: "white",
    ProgressionKind.DECLINING_PERFORMANCE: "dark_orange",
    ProgressionKind.RECENTLY_REGRESSED: "yellow",
    ProgressionKind.INSUFFICIENT_DATA: "grey50",
}


@dataclass(frozen=True)
class ProgressionStatus:
    """
    Result of classifying an exercise's recent sessions.

    Only READY_TO_PROGRESS carries recommended_weight and only
    DECLINING_PERFORMANCE carries percent_drop (a negative percentage).
    """

    kind: ProgressionKind
    recommended_weight: float | None = None
    percent_drop: float | None = None

    def __post_init__(self) -> None:
        if (self.recommended_weight is not None) != (
            self.kind is ProgressionKind.READY_TO_PROGRESS
        ):
            raise ValidationError("recommended_weight belongs to READY_TO_PROGRESS only")
        if (self.percent_drop is not None) != (
            self.kind is ProgressionKind.DECLINING_PERFORMANCE
        ):
            raise ValidationError("percent_drop belongs to DECLINING_PERFORMANCE only")

    @classmethod
    def ready_to_progress(cls, recommended_weight: float) -> "ProgressionStatus":
        return cls(ProgressionKind.READY_TO_PROGRESS, recommended_weight=recommended_weight)

    @classmethod
    def declining(cls, percent_drop: float) -> "ProgressionStatus":
        return cls(ProgressionKind.DECLINING_PERFORMANCE, percent_drop=percent_drop)

    @classmethod
    def of(cls, kind: ProgressionKind) -> "ProgressionStatus":
        """Build a payload-free status."""
        return cls(kind)

    @property
    def title(self) -> str:
        return _TITLES[self.kind]

    @property
    def color(self) -> str:
        """Rich colour name used when rendering the status."""
        return _COLORS[self.kind]

    def message(self, unit: str = "kg") -> str:
        """Human-readable advice for this status."""
        if self.kind is ProgressionKind.READY_TO_PROGRESS:
            return (
                "You've hit your targets for 2 sessions straight. "
                f"Try {self.recommended_weight:.1f} {unit} next session."
            )
        if self.kind is ProgressionKind.DECLINING_PERFORMANCE:
            return (
                f"Volume dropped {abs(self.percent_drop or 0.0):.0f}%. "
                "Focus on recovery: sleep, nutrition, and stress management."
            )
        return {
            ProgressionKind.PROGRESSING_TOWARD_TARGET: (
                "You're getting closer! Keep at this weight until you hit all target reps."
            ),
            ProgressionKind.MAINTAINING_BELOW_TARGET: (
                "Focus on hitting your target rep range consistently."
            ),
            ProgressionKind.RECENTLY_REGRESSED: (
                "Keep building confidence at this weight for another week before progressing."
            ),
            ProgressionKind.INSUFFICIENT_DATA: (
                "Complete a few more sessions to get progression recommendations."
            ),
        }[self.kind]


@dataclass(frozen=True)
class PersonalRecord:
    """A lifetime best-volume set for one exercise."""

    exercise_id: str
    exercise_name: str
    weight: float  # Logged unit
    reps: int
    unit: str
    date: date
    volume: float  # kg
    estimated_one_rep_max: float | None = None


@dataclass(frozen=True)
class VolumePoint:
    """Completed volume (kg) on one local day."""

    date: date
    volume: float


@dataclass(frozen=True)
class WeeklyVolumePoint:
    """Completed volume (kg) in the week starting on week_start."""

    week_start: date
    volume: float


@dataclass(frozen=True)
class CategoryShare:
    """One muscle group's share of total completed volume."""

    category: str
    volume: float
    percentage: float  # 0–100


@dataclass(frozen=True)
class PeriodComparison:
    """A metric in the current window against the same-length window before it."""

    current: float
    previous: float

    @property
    def percent_change(self) -> float | None:
        """Relative change in percent, or None when there is no previous value."""
        if self.previous == 0:
            return None
        return (self.current - self.previous) / self.previous * 100

    @property
    def has_data(self) -> bool:
        return self.current > 0 or self.previous > 0


@dataclass(frozen=True)
class ComparisonStats:
    """Period-over-period comparison of the headline insight metrics."""

    days: int
    workouts: PeriodComparison
    sets: PeriodComparison
    volume: PeriodComparison
    personal_records: PeriodComparison


@dataclass(frozen=True)
class BestSet:
    """Weight and reps of a single notable set."""

    weight: float
    reps: int
    unit: str = "kg"


@dataclass(frozen=True)
class ExerciseHistoryEntry:
    """One day of an exercise in the stats history view."""

    date: date
    set_count: int
    best_set: BestSet | None


@dataclass
class ExerciseStats:
    """Lifetime statistics for one exercise."""

    exercise_id: str
    best_weight: float | None = None
    best_volume_set: BestSet | None = None
    current_one_rep_max: float | None = None
    total_volume: float = 0.0  # kg
    times_performed: int = 0
    one_rep_max_progression: list[tuple[date, float]] = field(default_factory=list)
    rep_records: dict[int, float] = field(default_factory=dict)  # reps → best weight
    recent_history: list[ExerciseHistoryEntry] = field(default_factory=list)


@dataclass(frozen=True)
class StreakData:
    """Weekly training consistency."""

    current_streak: int  # Consecutive active weeks ending this week
    best_streak: int
    is_at_risk: bool  # No workout this week yet, but trained in the last 12 weeks
    last_workout_date: date | None
    weekly_consistency: list[tuple[date, int]]  # (week_start, workout days), ascending


@dataclass(frozen=True)
class MuscleRecoveryStatus:
    """Estimated recovery of one muscle group since it was last trained."""

    category: str
    last_trained: datetime | None
    hours_since: float | None
    recovery_percent: float  # 0–100
    sets_completed: int = 0
