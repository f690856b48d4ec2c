"""
Exercise catalog for liftlog.

Each exercise is described by an Exercise object carrying its muscle
group, logging unit and target rep range.
"""

from .base import Exercise
from .registry import get_exercise, load_registry

__all__ = [
    "Exercise",
    "get_exercise",
    "load_registry",
]
