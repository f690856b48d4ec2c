"""
Exercise registry.

Exercises are loaded from per-exercise YAML files in the bundled
``src/liftlog/exercises/`` directory merged with the user's
``<data dir>/exercises/`` overrides.  If nothing at all can be loaded a
RuntimeError is raised: the application cannot work without a catalog.
"""

from pathlib import Path

from .base import Exercise
from .loader import load_exercises_from_yaml


def load_registry(user_dir: Path | None = None) -> dict[str, Exercise]:
    """
    Build the exercise catalog.

    Args:
        user_dir: Directory with user YAML overrides / custom exercises

    Returns:
        {exercise_id: Exercise}

    Raises:
        RuntimeError: If no exercise definition could be loaded
    """
    loaded = load_exercises_from_yaml(user_dir=user_dir)
    if not loaded:
        raise RuntimeError(
            "liftlog: no exercise definitions could be loaded from YAML. "
            "Check that src/liftlog/exercises/*.yaml files are present and valid."
        )
    return loaded


def get_exercise(exercise_id: str, registry: dict[str, Exercise] | None = None) -> Exercise:
    """
    Return the Exercise for the given exercise_id.

    Args:
        exercise_id: e.g. "bench_press", "squat" (or any user-defined id)
        registry: Catalog to search; the bundled catalog when omitted

    Returns:
        Exercise for the requested id

    Raises:
        ValueError: If exercise_id is not in the registry
    """
    if registry is None:
        registry = load_registry()
    if exercise_id not in registry:
        valid = ", ".join(registry)
        raise ValueError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")
    return registry[exercise_id]
