"""
Progression classifier.

Looks at an exercise's most recent sessions and decides what the lifter
should do next.  The decision is an ordered list of rules; the first rule
whose predicate holds determines the outcome:

  1. declining_performance     latest volume < previous × (1 − 10 %)
  2. recently_regressed        an older session in the window was heavier
  3. ready_to_progress         two sessions on target, flat volume/e1RM/weight
  4. progressing_toward_target latest volume > previous × (1 + 10 %)
  5. maintaining_below_target  fallback

Fewer than two sessions, or an exercise without a target rep range,
yields insufficient data before any rule is consulted.

Ratios against a zero reference are "not comparable": the rule that needs
them simply does not match.  Weights and volumes are compared in kg; only
the recommended weight is given in the exercise's own unit.
"""

from dataclasses import dataclass, field
from typing import Callable

from .config import (
    LOWER_BODY_INCREMENT,
    ONE_RM_TOLERANCE,
    PROGRESSION_WINDOW,
    REGRESSION_MIN_SESSIONS,
    REQUIRED_CONSECUTIVE_HITS,
    UPPER_BODY_INCREMENT,
    VOLUME_TOLERANCE,
    WEIGHT_TOLERANCE,
)
from .exercises.base import Exercise
from .models import ProgressionKind, ProgressionStatus, Session
from .units import from_canonical, normalize_unit


@dataclass(frozen=True)
class ProgressionSettings:
    """Tolerances and increments used by the classifier."""

    window: int = PROGRESSION_WINDOW
    required_hits: int = REQUIRED_CONSECUTIVE_HITS
    volume_tolerance: float = VOLUME_TOLERANCE
    one_rm_tolerance: float = ONE_RM_TOLERANCE
    weight_tolerance: float = WEIGHT_TOLERANCE
    upper_body_increment: dict[str, float] = field(default_factory=lambda: dict(UPPER_BODY_INCREMENT))
    lower_body_increment: dict[str, float] = field(default_factory=lambda: dict(LOWER_BODY_INCREMENT))


DEFAULT_SETTINGS = ProgressionSettings()


@dataclass(frozen=True)
class ProgressionContext:
    """What every rule sees: the exercise and its recent sessions, newest first."""

    exercise: Exercise
    sessions: list[Session]
    settings: ProgressionSettings

    @property
    def latest(self) -> Session:
        return self.sessions[0]

    @property
    def previous(self) -> Session:
        return self.sessions[1]


@dataclass(frozen=True)
class ProgressionRule:
    """A named (predicate, outcome) pair."""

    name: str
    applies: Callable[[ProgressionContext], bool]
    outcome: Callable[[ProgressionContext], ProgressionStatus]


# ---------------------------------------------------------------------------
# Comparisons
# ---------------------------------------------------------------------------

def within_ratio(current: float, reference: float, tolerance: float) -> bool:
    """
    True if current / reference lies within 1 ± tolerance.

    A zero reference is not comparable and returns False.
    """
    if reference == 0:
        return False
    ratio = current / reference
    return 1 - tolerance <= ratio <= 1 + tolerance


def weight_increment(exercise: Exercise, settings: ProgressionSettings = DEFAULT_SETTINGS) -> float:
    """Plate jump for the next session: smaller for upper-body lifts."""
    table = settings.upper_body_increment if exercise.is_upper_body else settings.lower_body_increment
    return table[normalize_unit(exercise.unit)]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _is_declining(ctx: ProgressionContext) -> bool:
    threshold = ctx.previous.total_volume * (1 - ctx.settings.volume_tolerance)
    return ctx.latest.total_volume < threshold


def _declining(ctx: ProgressionContext) -> ProgressionStatus:
    previous = ctx.previous.total_volume
    drop = (ctx.latest.total_volume - previous) / previous * 100
    return ProgressionStatus.declining(drop)


def _recently_regressed(ctx: ProgressionContext) -> bool:
    if len(ctx.sessions) < REGRESSION_MIN_SESSIONS:
        return False
    ceiling = ctx.latest.top_weight + ctx.settings.weight_tolerance
    return any(s.top_weight > ceiling for s in ctx.sessions[2:])


def _is_ready(ctx: ProgressionContext) -> bool:
    recent = ctx.sessions[: ctx.settings.required_hits]
    if len(recent) < ctx.settings.required_hits:
        return False
    if not all(s.hit_target_reps for s in recent):
        return False

    latest, previous = ctx.latest, ctx.previous
    if not within_ratio(latest.total_volume, previous.total_volume, ctx.settings.volume_tolerance):
        return False
    if latest.estimated_one_rep_max is None or previous.estimated_one_rep_max is None:
        return False
    if not within_ratio(
        latest.estimated_one_rep_max,
        previous.estimated_one_rep_max,
        ctx.settings.one_rm_tolerance,
    ):
        return False
    return abs(latest.top_weight - previous.top_weight) <= ctx.settings.weight_tolerance


def _ready(ctx: ProgressionContext) -> ProgressionStatus:
    # Session weights are kg; the increment is in the exercise's unit.
    current = from_canonical(ctx.latest.top_weight, ctx.exercise.unit)
    increment = weight_increment(ctx.exercise, ctx.settings)
    return ProgressionStatus.ready_to_progress(round(current + increment, 2))


def _is_progressing(ctx: ProgressionContext) -> bool:
    if ctx.previous.total_volume == 0:
        return False
    threshold = ctx.previous.total_volume * (1 + ctx.settings.volume_tolerance)
    return ctx.latest.total_volume > threshold


PROGRESSION_RULES: tuple[ProgressionRule, ...] = (
    ProgressionRule("declining_performance", _is_declining, _declining),
    ProgressionRule(
        "recently_regressed",
        _recently_regressed,
        lambda ctx: ProgressionStatus.of(ProgressionKind.RECENTLY_REGRESSED),
    ),
    ProgressionRule("ready_to_progress", _is_ready, _ready),
    ProgressionRule(
        "progressing_toward_target",
        _is_progressing,
        lambda ctx: ProgressionStatus.of(ProgressionKind.PROGRESSING_TOWARD_TARGET),
    ),
    ProgressionRule(
        "maintaining_below_target",
        lambda ctx: True,
        lambda ctx: ProgressionStatus.of(ProgressionKind.MAINTAINING_BELOW_TARGET),
    ),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _context(
    exercise: Exercise,
    sessions: list[Session],
    settings: ProgressionSettings,
) -> ProgressionContext | None:
    if not exercise.has_target_range:
        return None
    recent = sorted(sessions, key=lambda s: s.date, reverse=True)[: settings.window]
    if len(recent) < 2:
        return None
    return ProgressionContext(exercise=exercise, sessions=recent, settings=settings)


def classify_progression(
    exercise: Exercise,
    sessions: list[Session],
    settings: ProgressionSettings | None = None,
) -> ProgressionStatus:
    """
    Classify an exercise's recent progress.

    Args:
        exercise: Exercise with its target rep range
        sessions: Sessions of that exercise, in any order
        settings: Tolerances and increments (defaults from config.py)

    Returns:
        ProgressionStatus from the first matching rule, or INSUFFICIENT_DATA
    """
    ctx = _context(exercise, sessions, settings or DEFAULT_SETTINGS)
    if ctx is None:
        return ProgressionStatus.of(ProgressionKind.INSUFFICIENT_DATA)
    for rule in PROGRESSION_RULES:
        if rule.applies(ctx):
            return rule.outcome(ctx)
    raise AssertionError("the fallback rule always applies")


def evaluate_rules(
    exercise: Exercise,
    sessions: list[Session],
    settings: ProgressionSettings | None = None,
) -> list[tuple[str, bool]]:
    """
    Evaluate every rule independently, for auditing a classification.

    Returns:
        (rule name, predicate result) in priority order; empty when there
        is insufficient data
    """
    ctx = _context(exercise, sessions, settings or DEFAULT_SETTINGS)
    if ctx is None:
        return []
    return [(rule.name, rule.applies(ctx)) for rule in PROGRESSION_RULES]
