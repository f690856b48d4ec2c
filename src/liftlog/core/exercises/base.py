"""
Base type for exercise definitions.

An Exercise describes how one movement is tracked: which muscle group it
counts toward, the unit weights are entered in, and the target rep range
the progression classifier measures sessions against.
"""

from dataclasses import dataclass, field

from ..config import UPPER_BODY_CATEGORIES
from ..models import EffortMode, ValidationError


@dataclass(frozen=True)
class Exercise:
    """
    Full configuration for one exercise.

    target_rep_min / target_rep_max are both set or both absent; without a
    target range the classifier has nothing to compare against and always
    reports insufficient data.
    """

    # Identity
    exercise_id: str             # e.g. "bench_press"
    name: str                    # e.g. "Bench Press"
    primary_category: str        # e.g. "Chest"
    secondary_categories: list[str] = field(default_factory=list)
    equipment: str = ""          # e.g. "Barbell"

    # Logging
    unit: str = "kg"
    effort_mode: EffortMode | None = None
    rest_seconds: int | None = None

    # Progression
    target_rep_min: int | None = None
    target_rep_max: int | None = None
    use_warmup_set: bool = False             # First set by order is a warm-up
    progression_set_count: int | None = None  # Only the first N working sets count

    def __post_init__(self) -> None:
        """Validate exercise configuration."""
        if not self.exercise_id:
            raise ValidationError("exercise_id must be a non-empty string")
        if (self.target_rep_min is None) != (self.target_rep_max is None):
            raise ValidationError(
                f"{self.exercise_id}: target_rep_min and target_rep_max must be set together"
            )
        if self.target_rep_min is not None and self.target_rep_max is not None:
            if self.target_rep_min < 1 or self.target_rep_min > self.target_rep_max:
                raise ValidationError(
                    f"{self.exercise_id}: invalid target range "
                    f"{self.target_rep_min}-{self.target_rep_max}"
                )
        if self.effort_mode not in (None, "rpe", "rir"):
            raise ValidationError(f"{self.exercise_id}: effort_mode must be 'rpe' or 'rir'")
        if self.progression_set_count is not None and self.progression_set_count < 1:
            raise ValidationError(f"{self.exercise_id}: progression_set_count must be >= 1")

    @property
    def has_target_range(self) -> bool:
        return self.target_rep_min is not None and self.target_rep_max is not None

    @property
    def is_upper_body(self) -> bool:
        """True for upper-body primary categories (case-insensitive)."""
        return self.primary_category.strip().lower() in UPPER_BODY_CATEGORIES

    @property
    def target_range_label(self) -> str:
        if not self.has_target_range:
            return "-"
        return f"{self.target_rep_min}-{self.target_rep_max}"
