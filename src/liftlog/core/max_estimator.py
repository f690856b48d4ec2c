"""
Estimated one-rep-max.

Uses the Epley formula, which is only trusted for low-rep sets:

    e1RM = weight × (1 + reps / 30)      for 1 ≤ reps ≤ 10

Outside that range no estimate is produced rather than a misleading one.
estimate_one_rep_max keeps the unit of its input; session estimates are in kg.
"""

import math

from .config import EPLEY_DIVISOR, ONE_RM_MAX_REPS, ONE_RM_MIN_REPS
from .models import LoggedSet, ValidationError
from .units import to_canonical


def estimate_one_rep_max(weight: float, reps: int) -> float | None:
    """
    Estimate a one-rep-max with the Epley formula.

    Args:
        weight: Load lifted
        reps: Repetitions performed with that load

    Returns:
        Estimated 1RM in the unit of *weight*, or None when reps is outside 1–10

    Raises:
        ValidationError: If weight is NaN or infinite
    """
    if not math.isfinite(weight):
        raise ValidationError(f"weight must be finite, got {weight}")
    if reps < ONE_RM_MIN_REPS or reps > ONE_RM_MAX_REPS:
        return None
    return weight * (1 + reps / EPLEY_DIVISOR)


def one_rep_max_from_set(logged_set: LoggedSet) -> float | None:
    """e1RM of one set; None when weight or reps is missing."""
    if logged_set.weight is None or logged_set.reps is None:
        return None
    return estimate_one_rep_max(logged_set.weight, logged_set.reps)


def one_rep_max_from_session(sets: list[LoggedSet]) -> float | None:
    """
    e1RM of a session in kg: taken from the first completed set by order.

    Later sets are usually fatigued, so only the opening completed set is
    used.  None if no set is completed or that set cannot be estimated.
    """
    completed = sorted((s for s in sets if s.is_completed), key=lambda s: s.order)
    if not completed:
        return None
    first = completed[0]
    if first.weight is None or first.reps is None:
        return None
    return estimate_one_rep_max(to_canonical(first.weight, first.unit), first.reps)
