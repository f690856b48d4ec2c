"""
YAML → typed config loader.

Loads analytics settings from config.yaml (bundled with the package) and
optionally merges user overrides from <data dir>/config.yaml
(~/.liftlog/config.yaml unless LIFTLOG_HOME is set).

Usage:
    from liftlog.core.engine.config_loader import load_progression_settings
    settings = load_progression_settings()
    classify_progression(exercise, sessions, settings)

Missing keys fall back to the Python defaults in config.py.  A user file
that cannot be parsed is ignored with a warning.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from ..calendar_policy import CalendarPolicy
from ..config import (
    APP_DIR_NAME,
    APP_HOME_ENV,
    DEFAULT_FIRST_WEEKDAY,
    DEFAULT_TIMEZONE,
    USER_CONFIG_FILE_NAME,
)
from ..exercises.loader import deep_merge, load_yaml_file
from ..models import ValidationError
from ..progression import DEFAULT_SETTINGS, ProgressionSettings

_WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def get_data_dir() -> Path:
    """Return the liftlog data directory ($LIFTLOG_HOME or ~/.liftlog)."""
    override = os.environ.get(APP_HOME_ENV)
    if override:
        return Path(override).expanduser()
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / APP_DIR_NAME


def get_bundled_yaml_path() -> Path:
    """Return the path to the bundled config.yaml."""
    # config_loader.py lives at src/liftlog/core/engine/config_loader.py
    return Path(__file__).parent.parent.parent / "config.yaml"


def get_user_yaml_path(data_dir: Path | None = None) -> Path | None:
    """Return <data dir>/config.yaml if it exists, else None."""
    p = (data_dir or get_data_dir()) / USER_CONFIG_FILE_NAME
    return p if p.exists() else None


def load_model_config(data_dir: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/liftlog/config.yaml
    2. User override at <data dir>/config.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled.exists():
        config = deep_merge(config, load_yaml_file(bundled))

    user = get_user_yaml_path(data_dir)
    if user is not None:
        config = deep_merge(config, load_yaml_file(user))

    return config


def update_user_config(updates: dict[str, Any], data_dir: Path | None = None) -> Path:
    """
    Merge *updates* into <data dir>/config.yaml, creating it if needed.

    Returns:
        Path of the written file
    """
    data_dir = data_dir or get_data_dir()
    path = data_dir / USER_CONFIG_FILE_NAME
    current = load_yaml_file(path) if path.exists() else {}
    data_dir.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(deep_merge(current, updates), fh, sort_keys=False)
    return path


def progression_settings_from_dict(section: dict[str, Any]) -> ProgressionSettings:
    """Build ProgressionSettings from a "progression" config section."""
    upper = dict(DEFAULT_SETTINGS.upper_body_increment)
    upper.update({str(k): float(v) for k, v in (section.get("upper_body_increment") or {}).items()})
    lower = dict(DEFAULT_SETTINGS.lower_body_increment)
    lower.update({str(k): float(v) for k, v in (section.get("lower_body_increment") or {}).items()})

    settings = ProgressionSettings(
        window=int(section.get("window", DEFAULT_SETTINGS.window)),
        required_hits=int(section.get("required_hits", DEFAULT_SETTINGS.required_hits)),
        volume_tolerance=float(section.get("volume_tolerance", DEFAULT_SETTINGS.volume_tolerance)),
        one_rm_tolerance=float(section.get("one_rm_tolerance", DEFAULT_SETTINGS.one_rm_tolerance)),
        weight_tolerance=float(section.get("weight_tolerance", DEFAULT_SETTINGS.weight_tolerance)),
        upper_body_increment=upper,
        lower_body_increment=lower,
    )
    if settings.window < 2:
        raise ValidationError(f"progression.window must be >= 2, got {settings.window}")
    if not 1 <= settings.required_hits <= settings.window:
        raise ValidationError(
            f"progression.required_hits must be between 1 and window, got {settings.required_hits}"
        )
    return settings


def parse_first_weekday(value: Any) -> int:
    """Accept a weekday name ("monday") or number (0 = Monday)."""
    if value is None:
        return DEFAULT_FIRST_WEEKDAY
    if isinstance(value, int):
        return value
    key = str(value).strip().lower()
    if key not in _WEEKDAYS:
        raise ValidationError(f"Unknown weekday: {value!r}")
    return _WEEKDAYS[key]


def load_progression_settings(data_dir: Path | None = None) -> ProgressionSettings:
    """ProgressionSettings from the merged YAML config."""
    return progression_settings_from_dict(load_model_config(data_dir).get("progression") or {})


def load_calendar_policy(data_dir: Path | None = None) -> CalendarPolicy:
    """CalendarPolicy (timezone, first weekday) from the merged YAML config."""
    section = load_model_config(data_dir).get("calendar") or {}
    return CalendarPolicy.from_names(
        section.get("timezone", DEFAULT_TIMEZONE),
        parse_first_weekday(section.get("first_weekday")),
    )
