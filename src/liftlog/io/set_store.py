"""
JSONL-based storage for logged sets.

Handles reading, writing, and querying the set log.  Each line of the
file is one set; the whole file is rewritten on any modification, which is
fine for a personal training log.
"""

import dataclasses
from datetime import date
from pathlib import Path

from ..core.calendar_policy import DEFAULT_CALENDAR, CalendarPolicy
from ..core.config import SETS_FILE_NAME, USER_EXERCISES_DIR_NAME
from ..core.engine.config_loader import get_data_dir
from ..core.exercises.base import Exercise
from ..core.exercises.registry import load_registry
from ..core.models import LoggedSet
from .serializers import ValidationError, json_line_to_set, set_to_json_line

# Fields of a set that may be edited in place.
_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"weight", "reps", "unit", "is_completed", "rpe", "rir", "order", "date"}
)


class SetStore:
    """
    Manages the set log stored in JSONL format.

    The store also answers exercise-catalog queries, merging the bundled
    catalog with YAML files in the ``exercises/`` directory next to the log.
    """

    def __init__(self, sets_path: str | Path, calendar: CalendarPolicy | None = None):
        """
        Initialize the set store.

        Args:
            sets_path: Path to the JSONL set log
            calendar: Day-boundary policy used for date-range queries
        """
        self.sets_path = Path(sets_path)
        self.data_dir = self.sets_path.parent
        self.exercises_dir = self.data_dir / USER_EXERCISES_DIR_NAME
        self.calendar = calendar or DEFAULT_CALENDAR

    def exists(self) -> bool:
        """Check if the set log exists."""
        return self.sets_path.exists()

    def init(self) -> None:
        """
        Initialize an empty set log if it doesn't exist.

        Creates parent directories if needed.
        """
        self.sets_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.sets_path.exists():
            self.sets_path.touch()

    def _require(self) -> None:
        if not self.sets_path.exists():
            raise FileNotFoundError(f"Set log not found: {self.sets_path}. Run 'init' first.")

    def load_sets(self) -> list[LoggedSet]:
        """
        Load all sets from the log.

        Returns:
            Sets in file order

        Raises:
            FileNotFoundError: If the log doesn't exist
            ValidationError: If a line cannot be parsed (message names the line)
        """
        self._require()

        sets: list[LoggedSet] = []
        with open(self.sets_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    sets.append(json_line_to_set(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.sets_path}: {e}"
                    ) from e
        return sets

    def _write_sets(self, sets: list[LoggedSet]) -> None:
        """Rewrite the whole log, ordered by day, exercise and set order."""
        ordered = sorted(
            sets,
            key=lambda s: (self.calendar.local_day(s.date), s.exercise_id, s.order),
        )
        with open(self.sets_path, "w", encoding="utf-8") as f:
            for s in ordered:
                f.write(set_to_json_line(s) + "\n")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def fetch_sets(
        self,
        exercise_id: str | None = None,
        date_range: tuple[date, date] | None = None,
        completed_only: bool = False,
    ) -> list[LoggedSet]:
        """
        Query the set log.

        Args:
            exercise_id: Only sets of this exercise
            date_range: Inclusive (first day, last day) in local days
            completed_only: Skip sets not marked completed

        Returns:
            Matching sets, oldest day first
        """
        result = []
        for s in self.load_sets():
            if exercise_id is not None and s.exercise_id != exercise_id:
                continue
            if completed_only and not s.is_completed:
                continue
            if date_range is not None:
                day = self.calendar.local_day(s.date)
                if not date_range[0] <= day <= date_range[1]:
                    continue
            result.append(s)
        result.sort(key=lambda s: (self.calendar.local_day(s.date), s.exercise_id, s.order))
        return result

    def fetch_exercises(self) -> dict[str, Exercise]:
        """Exercise catalog: bundled definitions merged with user YAML files."""
        return load_registry(self.exercises_dir)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append_sets(self, new_sets: list[LoggedSet]) -> None:
        """Append sets to the log."""
        self._require()
        with open(self.sets_path, "a", encoding="utf-8") as f:
            for s in new_sets:
                f.write(set_to_json_line(s) + "\n")

    def replace_day(self, exercise_id: str, day: date, new_sets: list[LoggedSet]) -> list[LoggedSet]:
        """
        Replace all sets of one exercise on one day.

        Re-saving a day supersedes what was logged before; the new sets are
        renumbered 1..n in the given order.

        Returns:
            The stored sets
        """
        self._require()
        kept = [
            s
            for s in self.load_sets()
            if not (s.exercise_id == exercise_id and self.calendar.local_day(s.date) == day)
        ]
        stored = [
            dataclasses.replace(s, exercise_id=exercise_id, order=i)
            for i, s in enumerate(new_sets, 1)
        ]
        self._write_sets(kept + stored)
        return stored

    def update_set(self, set_id: str, **changes) -> LoggedSet:
        """
        Edit fields of one set in place.

        Raises:
            KeyError: If no set has this id
            ValidationError: If a field is not editable or the result is invalid
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit fields: {sorted(unknown)}")

        sets = self.load_sets()
        for i, s in enumerate(sets):
            if s.set_id == set_id:
                sets[i] = dataclasses.replace(s, **changes)
                self._write_sets(sets)
                return sets[i]
        raise KeyError(f"No set with id {set_id}")

    def delete_set(self, set_id: str) -> LoggedSet:
        """
        Remove one set by id.

        Raises:
            KeyError: If no set has this id
        """
        sets = self.load_sets()
        for i, s in enumerate(sets):
            if s.set_id == set_id:
                del sets[i]
                self._write_sets(sets)
                return s
        raise KeyError(f"No set with id {set_id}")


def get_default_sets_path() -> Path:
    """Default set log: <data dir>/sets.jsonl."""
    return get_data_dir() / SETS_FILE_NAME
