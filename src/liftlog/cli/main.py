"""
CLI entry point using Typer.

Provides commands for logging and analysing strength training:
- init: Create the data directory and set log
- log / history / edit-set / delete-set: Manage logged sets
- exercises / add-exercise: Browse and extend the exercise catalog
- progression: Ready-to-progress verdicts per exercise
- prs / trend / weekly / breakdown / summary: Volume and record insights
- streak / recovery: Consistency and muscle recovery
- stats / 1rm: Per-exercise statistics and 1RM estimates
"""

import typer

from . import views
from .app import app
from .commands import analysis, sessions  # noqa: F401  (registers commands)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Progression and insights for your strength-training log.
    """
    if ctx.invoked_subcommand is not None:
        return

    views.console.print()
    views.console.print("[bold cyan]liftlog[/bold cyan] — strength-training insights")
    views.console.print()
    views.console.print(ctx.get_help())


if __name__ == "__main__":
    app()
