"""
Weight unit conversion.

Everything that compares or sums weights across sets converts to the
canonical unit (kg) first.  Unit strings that are not recognised are
treated as canonical rather than rejected, because units come from user
data captured at log time.
"""

from .config import CANONICAL_UNIT, KG_TO_LBS, LBS_TO_KG, LBS_UNIT_ALIASES


def is_lbs(unit: str | None) -> bool:
    """Return True if *unit* names pounds (case-insensitive)."""
    return unit is not None and unit.strip().lower() in LBS_UNIT_ALIASES


def normalize_unit(unit: str | None) -> str:
    """Map a free-form unit string onto "kg" or "lbs"."""
    return "lbs" if is_lbs(unit) else CANONICAL_UNIT


def to_canonical(weight: float, unit: str | None) -> float:
    """
    Convert a weight to kilograms.

    Args:
        weight: Weight in *unit*
        unit: "kg", "lbs"/"lb", or anything else (treated as kg)

    Returns:
        Weight in kg
    """
    if is_lbs(unit):
        return weight * LBS_TO_KG
    return weight


def from_canonical(weight: float, unit: str | None) -> float:
    """Convert a weight in kilograms to *unit*."""
    if is_lbs(unit):
        return weight * KG_TO_LBS
    return weight


def volume_in_canonical_unit(weight: float, reps: int, unit: str | None) -> float:
    """Volume (weight × reps) of one set, in kg."""
    return to_canonical(weight, unit) * reps
