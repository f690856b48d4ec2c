"""Logging commands: init, log, history, edit-set, delete-set, exercises, add-exercise."""

import json
from datetime import timedelta
from typing import Annotated, Optional

import typer

from ...core.calendar_policy import CalendarPolicy
from ...core.engine.config_loader import (
    load_progression_settings,
    parse_first_weekday,
    update_user_config,
)
from ...core.exercises.base import Exercise
from ...core.exercises.loader import exercise_to_dict, save_user_exercise
from ...core.models import LoggedSet
from ...core.progression import classify_progression
from ...core.sessions import sessions_for_exercise
from ...core.units import normalize_unit
from ...io.serializers import ValidationError, logged_set_to_dict, parse_date, parse_sets_string
from ...io.set_store import SetStore
from .. import views
from ..app import DataDirOption, ExerciseOption, JsonOption, app, get_store, load_log, resolve_exercise


def _resolve_set_id(store: SetStore, prefix: str) -> str:
    """Expand a set-id prefix (as shown by 'history') to the full id."""
    matches = [s.set_id for s in store.load_sets() if s.set_id.startswith(prefix)]
    if not matches:
        views.print_error(f"No set with id starting '{prefix}'")
        raise typer.Exit(1)
    if len(matches) > 1:
        views.print_error(f"Set id '{prefix}' is ambiguous ({len(matches)} matches)")
        raise typer.Exit(1)
    return matches[0]


@app.command()
def init(
    data_dir: DataDirOption = None,
    timezone_name: Annotated[
        Optional[str],
        typer.Option("--timezone", "-t", help="IANA timezone for day boundaries, e.g. Europe/Berlin"),
    ] = None,
    first_weekday: Annotated[
        Optional[str],
        typer.Option("--first-weekday", "-w", help="First day of the week: monday … sunday"),
    ] = None,
) -> None:
    """
    Create the data directory and an empty set log.

    Existing logs are never overwritten; calendar options are saved to
    config.yaml in the data directory.
    """
    store = get_store(data_dir)
    existed = store.exists()
    store.init()

    updates: dict = {}
    if timezone_name is not None or first_weekday is not None:
        try:
            weekday = parse_first_weekday(first_weekday)
            CalendarPolicy.from_names(timezone_name, weekday)
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        if timezone_name is not None:
            updates["timezone"] = timezone_name
        if first_weekday is not None:
            updates["first_weekday"] = first_weekday.lower()
    if updates:
        path = update_user_config({"calendar": updates}, store.data_dir)
        views.print_info(f"Saved calendar settings to {path}")

    if existed:
        views.print_info(f"Set log already exists: {store.sets_path}")
    else:
        views.print_success(f"Created set log: {store.sets_path}")
    views.print_info("Log your first workout with: liftlog log -e bench_press -s '8x3@60'")


@app.command()
def log(
    exercise_id: ExerciseOption,
    sets: Annotated[
        str,
        typer.Option(
            "--sets",
            "-s",
            help="Sets: reps@weight,... e.g. 8@100,8@100,6@100 or 8x3@100",
        ),
    ],
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Date or datetime (ISO, default: now)"),
    ] = None,
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", "-u", help="kg or lbs (default: the exercise's unit)"),
    ] = None,
    rpe: Annotated[
        Optional[int],
        typer.Option("--rpe", min=0, max=10, help="RPE reported for every set"),
    ] = None,
    rir: Annotated[
        Optional[int],
        typer.Option("--rir", min=0, max=10, help="Reps in reserve reported for every set"),
    ] = None,
    not_completed: Annotated[
        bool,
        typer.Option("--not-completed", help="Record the sets as not completed"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log the sets of one exercise for one day.

    Logging the same exercise again on the same day replaces that day's
    sets, so a workout can be corrected by re-entering it:

      liftlog log -e squat -s "5x3@120" --date 2026-03-02
    """
    store, _, exercises = load_log(data_dir)
    exercise = resolve_exercise(exercise_id, exercises)
    calendar = store.calendar

    if rpe is not None and rir is not None:
        views.print_error("Give either --rpe or --rir, not both")
        raise typer.Exit(1)

    try:
        parsed = parse_sets_string(sets)
        when = parse_date(date) if date is not None else calendar.now()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    set_unit = normalize_unit(unit or exercise.unit)
    try:
        new_sets = [
            LoggedSet(
                exercise_id=exercise.exercise_id,
                order=i,
                weight=weight,
                reps=reps,
                date=when,
                unit=set_unit,
                is_completed=not not_completed,
                rpe=rpe,
                rir=rir,
                created_at=calendar.now(),
            )
            for i, (reps, weight) in enumerate(parsed, 1)
        ]
        day = calendar.local_day(when)
        stored = store.replace_day(exercise.exercise_id, day, new_sets)
    except ValidationError as e:
        views.print_error(f"Invalid set data: {e}")
        raise typer.Exit(1)

    try:
        settings = load_progression_settings(store.data_dir)
    except ValidationError as e:
        views.print_error(f"Invalid progression config: {e}")
        raise typer.Exit(1)

    sessions = sessions_for_exercise(exercise, store.load_sets(), calendar=calendar)
    status = classify_progression(exercise, sessions, settings)

    if json_out:
        print(json.dumps({
            "exercise_id": exercise.exercise_id,
            "date": day.isoformat(),
            "sets": [logged_set_to_dict(s) for s in stored],
            "progression": {
                "status": status.kind.value,
                "recommended_weight": status.recommended_weight,
                "percent_drop": status.percent_drop,
            },
        }, indent=2))
        return

    views.print_success(
        f"Logged {len(stored)} set{'s' if len(stored) != 1 else ''} of {exercise.name} on {day.isoformat()}"
    )
    views.console.print(f"[bold {status.color}]{status.title}[/bold {status.color}]: {status.message(exercise.unit)}")


@app.command()
def history(
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only this exercise"),
    ] = None,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-n", min=0, help="Only the last N days"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show logged sets, oldest first.
    """
    store, _, exercises = load_log(data_dir)
    if exercise_id is not None:
        resolve_exercise(exercise_id, exercises)

    date_range = None
    if days is not None:
        today = store.calendar.today()
        date_range = (today - timedelta(days=days), today)

    try:
        sets = store.fetch_sets(exercise_id=exercise_id, date_range=date_range)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([logged_set_to_dict(s) for s in sets], indent=2))
        return

    views.print_history(sets, exercises, store.calendar)


@app.command("edit-set")
def edit_set(
    set_id: Annotated[str, typer.Argument(help="Set id or unique prefix (see 'history')")],
    weight: Annotated[Optional[float], typer.Option("--weight", help="New weight")] = None,
    reps: Annotated[Optional[int], typer.Option("--reps", help="New reps")] = None,
    rpe: Annotated[Optional[int], typer.Option("--rpe", min=0, max=10, help="New RPE")] = None,
    rir: Annotated[Optional[int], typer.Option("--rir", min=0, max=10, help="New RIR")] = None,
    completed: Annotated[
        Optional[bool],
        typer.Option("--completed/--not-completed", help="Mark the set completed or not"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Edit one logged set in place.
    """
    store, _, _ = load_log(data_dir)
    full_id = _resolve_set_id(store, set_id)

    changes: dict = {}
    if weight is not None:
        changes["weight"] = weight
    if reps is not None:
        changes["reps"] = reps
    if rpe is not None:
        changes["rpe"] = rpe
        changes["rir"] = None
    if rir is not None:
        changes["rir"] = rir
        changes["rpe"] = None
    if completed is not None:
        changes["is_completed"] = completed

    if not changes:
        views.print_warning("Nothing to change.")
        return

    try:
        updated = store.update_set(full_id, **changes)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Updated set {views.short_id(updated.set_id)}: "
        f"{views.format_weight(updated.weight, updated.unit)} × {updated.reps if updated.reps is not None else '-'}"
    )


@app.command("delete-set")
def delete_set(
    set_id: Annotated[str, typer.Argument(help="Set id or unique prefix (see 'history')")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Delete without confirmation"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete one logged set.
    """
    store, _, _ = load_log(data_dir)
    full_id = _resolve_set_id(store, set_id)

    if not force and not views.confirm_action(f"Delete set {views.short_id(full_id)}?"):
        views.print_info("Cancelled.")
        return

    removed = store.delete_set(full_id)
    views.print_success(
        f"Deleted set {views.short_id(removed.set_id)} ({removed.exercise_id}, "
        f"{store.calendar.local_day(removed.date).isoformat()})"
    )


@app.command()
def exercises(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List available exercises (bundled plus your own).
    """
    store = get_store(data_dir)
    try:
        catalog = store.fetch_exercises()
    except RuntimeError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(
            [exercise_to_dict(e) for e in sorted(catalog.values(), key=lambda e: e.exercise_id)],
            indent=2,
        ))
        return

    views.print_exercises(catalog)


@app.command("add-exercise")
def add_exercise(
    exercise_id: Annotated[str, typer.Argument(help="New exercise ID, e.g. cable_fly")],
    name: Annotated[str, typer.Option("--name", help="Display name")],
    category: Annotated[str, typer.Option("--category", "-c", help="Primary muscle group")],
    equipment: Annotated[str, typer.Option("--equipment", help="Equipment, e.g. Cable")] = "",
    unit: Annotated[str, typer.Option("--unit", "-u", help="kg or lbs")] = "kg",
    target_min: Annotated[
        Optional[int], typer.Option("--target-min", min=1, help="Lower bound of the target rep range")
    ] = None,
    target_max: Annotated[
        Optional[int], typer.Option("--target-max", min=1, help="Upper bound of the target rep range")
    ] = None,
    warmup: Annotated[
        bool, typer.Option("--warmup", help="First set of each session is a warm-up")
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Define a custom exercise, saved as YAML in the data directory.
    """
    store = get_store(data_dir)
    try:
        exercise = Exercise(
            exercise_id=exercise_id,
            name=name,
            primary_category=category,
            equipment=equipment,
            unit=normalize_unit(unit),
            target_rep_min=target_min,
            target_rep_max=target_max,
            use_warmup_set=warmup,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    path = save_user_exercise(exercise, store.exercises_dir)
    views.print_success(f"Saved {exercise.name} to {path}")
