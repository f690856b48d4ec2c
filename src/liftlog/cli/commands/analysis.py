"""Analysis commands: progression, prs, trend, weekly, breakdown, summary, streak, recovery, stats, 1rm."""

import json
from dataclasses import asdict
from typing import Annotated, Optional

import typer

from ...core.consistency import days_since_last_workout, get_muscle_recovery_status, get_streak_data
from ...core.engine.config_loader import load_progression_settings
from ...core.insights import (
    get_comparison_stats,
    get_exercise_stats,
    get_muscle_group_breakdown,
    get_top_exercises,
    get_volume_trend,
    get_weekly_volume_trend,
)
from ...core.max_estimator import estimate_one_rep_max
from ...core.progression import classify_progression, evaluate_rules
from ...core.records import detect_recent_prs, pr_count_in_window
from ...core.sessions import sessions_for_exercise
from ...core.units import from_canonical, normalize_unit
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, DaysOption, JsonOption, app, load_log, resolve_exercise


def _comparison_json(comparison) -> dict:
    change = comparison.percent_change
    return {
        "current": comparison.current,
        "previous": comparison.previous,
        "percent_change": round(change, 2) if change is not None else None,
    }


@app.command()
def progression(
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Show one exercise in detail (default: all)"),
    ] = None,
    explain: Annotated[
        bool,
        typer.Option("--explain", help="Show which progression rules matched"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show whether each exercise is ready for more weight.
    """
    store, sets, exercises = load_log(data_dir)
    try:
        settings = load_progression_settings(store.data_dir)
    except ValidationError as e:
        views.print_error(f"Invalid progression config: {e}")
        raise typer.Exit(1)

    if exercise_id is not None:
        exercise = resolve_exercise(exercise_id, exercises)
        sessions = sessions_for_exercise(exercise, sets, calendar=store.calendar)
        status = classify_progression(exercise, sessions, settings)
        rule_results = evaluate_rules(exercise, sessions, settings) if explain else None

        if json_out:
            print(json.dumps({
                "exercise_id": exercise.exercise_id,
                "status": status.kind.value,
                "title": status.title,
                "message": status.message(exercise.unit),
                "recommended_weight": status.recommended_weight,
                "percent_drop": status.percent_drop,
                "sessions": [
                    {
                        "date": s.date.isoformat(),
                        "top_weight": round(from_canonical(s.top_weight, exercise.unit), 2),
                        "total_volume": round(s.total_volume, 2),
                        "estimated_one_rep_max": (
                            round(from_canonical(s.estimated_one_rep_max, exercise.unit), 2)
                            if s.estimated_one_rep_max is not None
                            else None
                        ),
                        "hit_target_reps": s.hit_target_reps,
                    }
                    for s in sessions[: settings.window]
                ],
                "rules": dict(rule_results) if rule_results is not None else None,
            }, indent=2))
            return

        views.print_progression(exercise, status, sessions[: settings.window], rule_results)
        return

    trained = {s.exercise_id for s in sets}
    rows = []
    for exercise in sorted(exercises.values(), key=lambda e: e.name):
        if exercise.exercise_id not in trained:
            continue
        sessions = sessions_for_exercise(exercise, sets, calendar=store.calendar)
        rows.append((exercise, classify_progression(exercise, sessions, settings)))

    if json_out:
        print(json.dumps([
            {
                "exercise_id": exercise.exercise_id,
                "status": status.kind.value,
                "recommended_weight": status.recommended_weight,
                "percent_drop": status.percent_drop,
            }
            for exercise, status in rows
        ], indent=2))
        return

    views.print_progression_overview(rows)


@app.command()
def prs(
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", min=0, help="Number of records to show"),
    ] = 10,
    days: Annotated[
        Optional[int],
        typer.Option("--days", "-n", min=0, help="Also count exercises with a PR in the last N days"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the most recent personal records.
    """
    store, sets, exercises = load_log(data_dir)
    records = detect_recent_prs(sets, exercises, limit=limit, calendar=store.calendar)
    in_window = (
        pr_count_in_window(days, sets, exercises, calendar=store.calendar)
        if days is not None
        else None
    )

    if json_out:
        payload = [
            {
                "exercise_id": r.exercise_id,
                "exercise_name": r.exercise_name,
                "date": r.date.isoformat(),
                "weight": r.weight,
                "reps": r.reps,
                "unit": r.unit,
                "volume": round(r.volume, 2),
                "estimated_one_rep_max": (
                    round(r.estimated_one_rep_max, 2)
                    if r.estimated_one_rep_max is not None
                    else None
                ),
            }
            for r in records
        ]
        if in_window is None:
            print(json.dumps(payload, indent=2))
        else:
            print(json.dumps({"records": payload, "days": days, "pr_count": in_window}, indent=2))
        return

    views.print_personal_records(records)
    if in_window is not None:
        views.print_info(f"Exercises with a PR in the last {days} days: {in_window}")


@app.command()
def trend(
    days: DaysOption = 14,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show daily training volume.
    """
    store, sets, _ = load_log(data_dir)
    points = get_volume_trend(days, sets, calendar=store.calendar)

    if json_out:
        print(json.dumps(
            [{"date": p.date.isoformat(), "volume": round(p.volume, 2)} for p in points],
            indent=2,
        ))
        return

    views.print_volume_trend(points)


@app.command()
def weekly(
    weeks: Annotated[
        int,
        typer.Option("--weeks", "-w", min=0, help="Number of weeks to show"),
    ] = 8,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show weekly training volume.
    """
    store, sets, _ = load_log(data_dir)
    points = get_weekly_volume_trend(weeks, sets, calendar=store.calendar)

    if json_out:
        print(json.dumps(
            [{"week_start": p.week_start.isoformat(), "volume": round(p.volume, 2)} for p in points],
            indent=2,
        ))
        return

    views.print_weekly_volume(points)


@app.command()
def breakdown(
    days: DaysOption = 30,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show volume per muscle group.
    """
    store, sets, exercises = load_log(data_dir)
    shares = get_muscle_group_breakdown(days, sets, exercises, calendar=store.calendar)

    if json_out:
        print(json.dumps([
            {
                "category": s.category,
                "volume": round(s.volume, 2),
                "percentage": round(s.percentage, 2),
            }
            for s in shares
        ], indent=2))
        return

    views.print_breakdown(shares)


@app.command()
def summary(
    days: DaysOption = 30,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Compare this period with the previous one.
    """
    store, sets, exercises = load_log(data_dir)
    stats = get_comparison_stats(days, sets, exercises, calendar=store.calendar)
    top = get_top_exercises(sets, exercises)
    since = days_since_last_workout(sets, calendar=store.calendar)

    if json_out:
        print(json.dumps({
            "days": stats.days,
            "workouts": _comparison_json(stats.workouts),
            "sets": _comparison_json(stats.sets),
            "volume": _comparison_json(stats.volume),
            "personal_records": _comparison_json(stats.personal_records),
            "top_exercises": [
                {"exercise_id": e.exercise_id, "sets": count} for e, count in top
            ],
            "days_since_last_workout": since,
        }, indent=2))
        return

    views.print_summary(stats, top, since)


@app.command()
def streak(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show weekly training streaks.
    """
    store, sets, _ = load_log(data_dir)
    data = get_streak_data(sets, calendar=store.calendar)

    if json_out:
        print(json.dumps({
            "current_streak": data.current_streak,
            "best_streak": data.best_streak,
            "is_at_risk": data.is_at_risk,
            "last_workout_date": (
                data.last_workout_date.isoformat() if data.last_workout_date else None
            ),
            "weekly_consistency": [
                {"week_start": week.isoformat(), "workouts": count}
                for week, count in data.weekly_consistency
            ],
        }, indent=2))
        return

    views.print_streak(data)


@app.command()
def recovery(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Estimate how recovered each muscle group is.
    """
    store, sets, exercises = load_log(data_dir)
    now = store.calendar.now()
    statuses = get_muscle_recovery_status(sets, exercises, now=now, calendar=store.calendar)

    if json_out:
        print(json.dumps({
            group: {
                "recovery_percent": round(s.recovery_percent, 1),
                "hours_since": round(s.hours_since, 1) if s.hours_since is not None else None,
                "last_trained": s.last_trained.isoformat() if s.last_trained else None,
                "sets_completed": s.sets_completed,
            }
            for group, s in statuses.items()
        }, indent=2))
        return

    views.print_recovery(statuses, now)


@app.command()
def stats(
    exercise_id: Annotated[
        str,
        typer.Option("--exercise", "-e", help="Exercise ID, e.g. bench_press"),
    ],
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show lifetime statistics for one exercise.
    """
    store, sets, exercises = load_log(data_dir)
    exercise = resolve_exercise(exercise_id, exercises)
    result = get_exercise_stats(
        exercise.exercise_id, sets, calendar=store.calendar, unit=exercise.unit
    )

    if json_out:
        data = asdict(result)
        data["one_rep_max_progression"] = [
            [day.isoformat(), round(value, 2)] for day, value in result.one_rep_max_progression
        ]
        data["recent_history"] = [
            {**entry, "date": entry["date"].isoformat()} for entry in data["recent_history"]
        ]
        print(json.dumps(data, indent=2))
        return

    views.print_exercise_stats(exercise, result)


@app.command("1rm")
def one_rep_max(
    weight: Annotated[float, typer.Option("--weight", "-w", min=0, help="Weight lifted")],
    reps: Annotated[int, typer.Option("--reps", "-r", min=1, help="Reps performed")],
    unit: Annotated[str, typer.Option("--unit", "-u", help="kg or lbs")] = "kg",
    json_out: JsonOption = False,
) -> None:
    """
    Estimate a one-rep max with the Epley formula (1–10 reps).
    """
    unit = normalize_unit(unit)
    try:
        estimate = estimate_one_rep_max(weight, reps)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "weight": weight,
            "reps": reps,
            "unit": unit,
            "estimated_one_rep_max": round(estimate, 2) if estimate is not None else None,
        }, indent=2))
        return

    views.print_one_rep_max(weight, reps, unit, estimate)
