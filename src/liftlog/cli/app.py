"""Shared Typer app object, shared option types, and store utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import SETS_FILE_NAME
from ..core.engine.config_loader import load_calendar_policy
from ..core.exercises.base import Exercise
from ..core.exercises.registry import get_exercise
from ..core.models import LoggedSet, ValidationError
from ..io.set_store import SetStore, get_default_sets_path
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option(
        "--data-dir",
        "-d",
        help="Data directory (default: $LIFTLOG_HOME or ~/.liftlog)",
    ),
]

# Shared --exercise option for commands that work on one exercise
ExerciseOption = Annotated[
    str,
    typer.Option("--exercise", "-e", help="Exercise ID, e.g. bench_press (see 'exercises')"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

DaysOption = Annotated[
    int,
    typer.Option("--days", "-n", min=0, help="Window length in days"),
]

app = typer.Typer(
    name="liftlog",
    help="Progression and insights for your strength-training log.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(data_dir: Path | None) -> SetStore:
    """
    Get the set store from a data directory or the default location.

    The store's calendar comes from <data dir>/config.yaml merged over the
    bundled defaults.
    """
    sets_path = get_default_sets_path() if data_dir is None else data_dir / SETS_FILE_NAME
    try:
        calendar = load_calendar_policy(sets_path.parent)
    except ValidationError as e:
        views.print_error(f"Invalid calendar config: {e}")
        raise typer.Exit(1)
    return SetStore(sets_path, calendar=calendar)


def load_log(
    data_dir: Path | None,
) -> tuple[SetStore, list[LoggedSet], dict[str, Exercise]]:
    """
    Open the store and load every set plus the exercise catalog.

    Prints an error and exits with code 1 when the log is missing or cannot
    be parsed.
    """
    store = get_store(data_dir)

    if not store.exists():
        views.print_error(f"Set log not found: {store.sets_path}")
        views.print_info("Run 'init' first to create the data directory.")
        raise typer.Exit(1)

    try:
        sets = store.load_sets()
        exercises = store.fetch_exercises()
    except (FileNotFoundError, ValidationError, RuntimeError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    return store, sets, exercises


def resolve_exercise(exercise_id: str, exercises: dict[str, Exercise]) -> Exercise:
    """Look up an exercise or exit with the list of valid IDs."""
    try:
        return get_exercise(exercise_id, exercises)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
