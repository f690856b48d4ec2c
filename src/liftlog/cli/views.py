"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of logged sets and insights.
"""

from datetime import datetime

from rich.console import Console
from rich.table import Table

from ..core.ascii_plot import (
    create_breakdown_chart,
    create_one_rep_max_plot,
    create_volume_trend_chart,
    create_weekly_volume_chart,
)
from ..core.calendar_policy import CalendarPolicy
from ..core.exercises.base import Exercise
from ..core.insights import format_volume
from ..core.units import from_canonical
from ..core.models import (
    CategoryShare,
    ComparisonStats,
    ExerciseStats,
    LoggedSet,
    MuscleRecoveryStatus,
    PeriodComparison,
    PersonalRecord,
    ProgressionStatus,
    Session,
    StreakData,
    VolumePoint,
    WeeklyVolumePoint,
)

console = Console()


def format_weight(weight: float | None, unit: str = "kg") -> str:
    """100.0 → "100 kg", 102.5 → "102.5 kg", None → "-"."""
    if weight is None:
        return "-"
    return f"{weight:g} {unit}"


def short_id(set_id: str) -> str:
    """First 8 characters of a set id, enough to address it on the command line."""
    return set_id[:8]


# =============================================================================
# LOGGED SETS
# =============================================================================

def format_sets_table(
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    calendar: CalendarPolicy,
) -> Table:
    """
    Create a Rich table displaying logged sets.

    Args:
        sets: Sets to display, already ordered
        exercises: Catalog used for display names
        calendar: Policy used to show local days

    Returns:
        Rich Table object
    """
    table = Table(title="Logged Sets")

    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Exercise", style="magenta")
    table.add_column("#", justify="right")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Reps", justify="right", style="bold")
    table.add_column("Effort", justify="right")
    table.add_column("Done", justify="center")

    for s in sets:
        exercise = exercises.get(s.exercise_id)
        if s.rpe is not None:
            effort = f"RPE {s.rpe}"
        elif s.rir is not None:
            effort = f"RIR {s.rir}"
        else:
            effort = ""
        table.add_row(
            short_id(s.set_id),
            calendar.local_day(s.date).isoformat(),
            exercise.name if exercise else s.exercise_id,
            str(s.order),
            format_weight(s.weight, s.unit),
            str(s.reps) if s.reps is not None else "-",
            effort,
            "[green]✓[/green]" if s.is_completed else "[dim]·[/dim]",
        )

    return table


def print_history(
    sets: list[LoggedSet],
    exercises: dict[str, Exercise],
    calendar: CalendarPolicy,
) -> None:
    """Print logged sets, or a notice when there are none."""
    if not sets:
        console.print("[yellow]No sets logged yet.[/yellow]")
        return
    console.print(format_sets_table(sets, exercises, calendar))


def print_exercises(exercises: dict[str, Exercise]) -> None:
    """Print the exercise catalog."""
    table = Table(title="Exercises")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Muscle group", style="magenta")
    table.add_column("Equipment")
    table.add_column("Target reps", justify="right")
    table.add_column("Unit", justify="center")

    for exercise in sorted(exercises.values(), key=lambda e: e.name):
        table.add_row(
            exercise.exercise_id,
            exercise.name,
            exercise.primary_category,
            exercise.equipment or "-",
            exercise.target_range_label,
            exercise.unit,
        )
    console.print(table)


# =============================================================================
# PROGRESSION
# =============================================================================

def format_sessions_table(sessions: list[Session], exercise: Exercise) -> Table:
    """Session summaries used as progression evidence, newest first."""
    table = Table(title=f"{exercise.name}: recent sessions")
    table.add_column("Date", style="cyan")
    table.add_column("Sets", justify="right")
    table.add_column("Top weight", justify="right", style="bold")
    table.add_column("Reps", justify="right")
    table.add_column("Volume (kg)", justify="right")
    table.add_column("e1RM", justify="right")
    table.add_column("Target", justify="center")

    for session in sessions:
        e1rm = session.estimated_one_rep_max
        if e1rm is not None:
            e1rm = from_canonical(e1rm, exercise.unit)
        table.add_row(
            session.date.isoformat(),
            str(len(session.sets)),
            format_weight(from_canonical(session.top_weight, exercise.unit), exercise.unit),
            str(session.typical_reps) if session.typical_reps is not None else "-",
            format_volume(session.total_volume),
            f"{e1rm:.1f}" if e1rm is not None else "-",
            "[green]hit[/green]" if session.hit_target_reps else "[dim]miss[/dim]",
        )
    return table


def print_progression(
    exercise: Exercise,
    status: ProgressionStatus,
    sessions: list[Session],
    rule_results: list[tuple[str, bool]] | None = None,
) -> None:
    """
    Print a progression verdict with the sessions it was based on.

    Args:
        exercise: The classified exercise
        status: Classification result
        sessions: Recent sessions, newest first
        rule_results: Optional per-rule predicate results for --explain
    """
    console.print()
    console.print(
        f"[bold]{exercise.name}[/bold]  (target {exercise.target_range_label} reps)"
    )
    console.print(f"[bold {status.color}]{status.title}[/bold {status.color}]")
    console.print(status.message(exercise.unit))

    if sessions:
        console.print()
        console.print(format_sessions_table(sessions, exercise))

    if rule_results:
        console.print()
        console.print("[bold]Rule checks (priority order):[/bold]")
        for name, matched in rule_results:
            mark = "[green]yes[/green]" if matched else "[dim]no[/dim]"
            console.print(f"  {name:<28} {mark}")
    console.print()


def print_progression_overview(rows: list[tuple[Exercise, ProgressionStatus]]) -> None:
    """One line per exercise with its current verdict."""
    if not rows:
        console.print("[yellow]No exercises with logged sessions yet.[/yellow]")
        return

    table = Table(title="Progression")
    table.add_column("Exercise", style="bold")
    table.add_column("Target", justify="right")
    table.add_column("Status")
    table.add_column("Next step")
    for exercise, status in rows:
        table.add_row(
            exercise.name,
            exercise.target_range_label,
            f"[{status.color}]{status.title}[/{status.color}]",
            status.message(exercise.unit),
        )
    console.print(table)


# =============================================================================
# RECORDS
# =============================================================================

def print_personal_records(records: list[PersonalRecord], title: str = "Recent PRs") -> None:
    """Print personal records, newest first."""
    if not records:
        console.print("[yellow]No personal records yet.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("Date", style="cyan")
    table.add_column("Exercise", style="bold")
    table.add_column("Set", justify="right")
    table.add_column("Volume (kg)", justify="right")
    table.add_column("e1RM", justify="right", style="green")

    for record in records:
        e1rm = record.estimated_one_rep_max
        table.add_row(
            record.date.isoformat(),
            record.exercise_name,
            f"{format_weight(record.weight, record.unit)} × {record.reps}",
            format_volume(record.volume),
            format_weight(round(e1rm, 1), record.unit) if e1rm is not None else "-",
        )
    console.print(table)


# =============================================================================
# VOLUME
# =============================================================================

def print_volume_trend(points: list[VolumePoint]) -> None:
    console.print(create_volume_trend_chart(points))


def print_weekly_volume(points: list[WeeklyVolumePoint]) -> None:
    console.print(create_weekly_volume_chart(points))


def print_breakdown(shares: list[CategoryShare]) -> None:
    console.print(create_breakdown_chart(shares))


def _format_change(comparison: PeriodComparison) -> str:
    if not comparison.has_data:
        return "[dim]-[/dim]"
    change = comparison.percent_change
    if change is None:
        return "[dim]new[/dim]"
    if change > 0:
        return f"[green]+{change:.0f}%[/green]"
    if change < 0:
        return f"[red]{change:.0f}%[/red]"
    return "0%"


def format_comparison_table(stats: ComparisonStats) -> Table:
    """
    Create a table comparing this period with the one before it.

    Args:
        stats: Period-over-period metrics

    Returns:
        Rich Table object
    """
    table = Table(title=f"Last {stats.days} days vs previous {stats.days} days")
    table.add_column("Metric", style="bold")
    table.add_column("Now", justify="right")
    table.add_column("Before", justify="right", style="dim")
    table.add_column("Change", justify="right")

    rows = [
        ("Workouts", stats.workouts, "{:.0f}"),
        ("Sets", stats.sets, "{:.0f}"),
        ("Volume (kg)", stats.volume, None),
        ("PRs", stats.personal_records, "{:.0f}"),
    ]
    for label, comparison, fmt in rows:
        if fmt is None:
            now, before = format_volume(comparison.current), format_volume(comparison.previous)
        else:
            now, before = fmt.format(comparison.current), fmt.format(comparison.previous)
        table.add_row(label, now, before, _format_change(comparison))
    return table


def print_summary(
    stats: ComparisonStats,
    top_exercises: list[tuple[Exercise, int]],
    days_since: int | None,
) -> None:
    """Print the headline insight block."""
    console.print()
    console.print(format_comparison_table(stats))

    if top_exercises:
        console.print()
        console.print("[bold]Most trained exercises:[/bold]")
        for exercise, count in top_exercises:
            console.print(f"  {exercise.name:<28} {count} sets")

    console.print()
    if days_since is None:
        console.print("[dim]No workouts logged yet.[/dim]")
    elif days_since == 0:
        console.print("[green]Trained today.[/green]")
    else:
        noun = "day" if days_since == 1 else "days"
        console.print(f"Last workout: {days_since} {noun} ago")
    console.print()


# =============================================================================
# CONSISTENCY AND RECOVERY
# =============================================================================

def format_streak_display(streak: StreakData) -> str:
    """
    Format streak data as a text block with a week-by-week strip.

    Returns:
        Formatted string (Rich markup)
    """
    weeks = "week" if streak.current_streak == 1 else "weeks"
    lines = [f"[bold]Current streak:[/bold] {streak.current_streak} {weeks}"]
    lines.append(f"[bold]Best streak:[/bold]    {streak.best_streak} weeks")
    if streak.last_workout_date is not None:
        lines.append(f"[bold]Last workout:[/bold]   {streak.last_workout_date.isoformat()}")
    if streak.is_at_risk:
        lines.append("[yellow]No workout this week yet: train to keep the streak going.[/yellow]")

    lines.append("")
    lines.append("Workout days per week (oldest → this week):")
    strip = []
    for _, count in streak.weekly_consistency:
        if count == 0:
            strip.append("[dim]·[/dim]")
        elif count < 3:
            strip.append(f"[yellow]{count}[/yellow]")
        else:
            strip.append(f"[green]{min(count, 9)}[/green]")
    lines.append("  " + " ".join(strip))
    return "\n".join(lines)


def print_streak(streak: StreakData) -> None:
    console.print()
    console.print(format_streak_display(streak))
    console.print()


def _recovery_color(percent: float) -> str:
    if percent >= 100:
        return "green"
    if percent >= 80:
        return "yellow"
    return "red"


def print_recovery(statuses: dict[str, MuscleRecoveryStatus], now: datetime) -> None:
    """Print recovery per muscle group, least recovered first."""
    table = Table(title="Muscle Recovery")
    table.add_column("Muscle group", style="bold")
    table.add_column("Recovery", justify="right")
    table.add_column("", min_width=10)
    table.add_column("Last trained", style="cyan")
    table.add_column("Sets (7d)", justify="right")

    ordered = sorted(statuses.values(), key=lambda s: (s.recovery_percent, s.category))
    for status in ordered:
        color = _recovery_color(status.recovery_percent)
        bar = "█" * int(status.recovery_percent / 10)
        if status.hours_since is None:
            last = "-"
        elif status.hours_since < 48:
            last = f"{status.hours_since:.0f} h ago"
        else:
            last = f"{status.hours_since / 24:.0f} days ago"
        table.add_row(
            status.category,
            f"[{color}]{status.recovery_percent:.0f}%[/{color}]",
            f"[{color}]{bar}[/{color}]",
            last,
            str(status.sets_completed) if status.sets_completed else "-",
        )
    console.print(table)
    console.print(f"[dim]As of {now:%Y-%m-%d %H:%M}[/dim]")


# =============================================================================
# EXERCISE STATISTICS
# =============================================================================

def print_exercise_stats(exercise: Exercise, stats: ExerciseStats) -> None:
    """Print lifetime statistics for one exercise."""
    unit = exercise.unit
    console.print()
    console.print(f"[bold cyan]{exercise.name}[/bold cyan]  ({exercise.primary_category})")

    if stats.times_performed == 0:
        console.print("[yellow]No completed sets for this exercise yet.[/yellow]")
        return

    best = stats.best_volume_set
    lines = [
        f"- Sessions:      {stats.times_performed}",
        f"- Total volume:  {format_volume(stats.total_volume)} kg",
        f"- Heaviest set:  {format_weight(stats.best_weight, unit)}",
        "- Best set:      "
        + (f"{format_weight(best.weight, best.unit)} × {best.reps}" if best else "-"),
        "- Current e1RM:  "
        + (
            format_weight(round(stats.current_one_rep_max, 1), unit)
            if stats.current_one_rep_max is not None
            else "-"
        ),
    ]
    console.print("\n".join(lines))

    if stats.rep_records:
        console.print()
        console.print("[bold]Rep records:[/bold]")
        for reps in sorted(stats.rep_records):
            console.print(f"  {reps:>2} reps: {format_weight(stats.rep_records[reps], unit)}")

    if stats.one_rep_max_progression:
        console.print()
        console.print(create_one_rep_max_plot(stats.one_rep_max_progression, unit=unit))

    if stats.recent_history:
        console.print()
        table = Table(title="Recent sessions")
        table.add_column("Date", style="cyan")
        table.add_column("Sets", justify="right")
        table.add_column("Best set", justify="right")
        for entry in stats.recent_history:
            top = entry.best_set
            table.add_row(
                entry.date.isoformat(),
                str(entry.set_count),
                f"{format_weight(top.weight, top.unit)} × {top.reps}" if top else "-",
            )
        console.print(table)
    console.print()


def print_one_rep_max(weight: float, reps: int, unit: str, estimate: float | None) -> None:
    """Print an Epley 1RM estimate with a percentage table."""
    if estimate is None:
        print_warning(f"1RM is only estimated from sets of 1–10 reps (got {reps}).")
        return

    console.print()
    console.print(
        f"[bold]Estimated 1RM:[/bold] {format_weight(round(estimate, 1), unit)}"
        f"  (from {format_weight(weight, unit)} × {reps})"
    )
    table = Table(title="Training loads")
    table.add_column("% 1RM", justify="right")
    table.add_column("Weight", justify="right", style="bold")
    for pct in (95, 90, 85, 80, 75, 70, 65, 60):
        table.add_row(f"{pct}%", format_weight(round(estimate * pct / 100, 1), unit))
    console.print(table)
    console.print()


# =============================================================================
# MESSAGES
# =============================================================================

def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
