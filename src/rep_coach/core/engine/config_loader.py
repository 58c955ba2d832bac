"""
YAML → typed config loader.

Loads coach settings from coach.yaml (bundled with the package) and
optionally merges user overrides from ~/.rep-coach/coach.yaml.

Usage:
    from rep_coach.core.engine.config_loader import load_settings
    settings = load_settings()
    settings.xp_per_set  # 10 unless overridden

If the user override file exists but cannot be parsed, a warning is logged
and the file is ignored.  Unknown keys are ignored.
"""

from __future__ import annotations

import importlib.resources
import os
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from ..config import CoachSettings

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; return {} and log a warning on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level is not a mapping")
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_data_dir() -> Path:
    """Return the rep-coach data directory (REP_COACH_HOME or ~/.rep-coach)."""
    env = os.environ.get("REP_COACH_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".rep-coach"


def get_bundled_yaml_path(name: str = "coach.yaml") -> Path | None:
    """Return the path to a bundled YAML resource, or None if not found."""
    ref = importlib.resources.files("rep_coach").joinpath(name)
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / name
    return candidate if candidate.exists() else None


def get_user_yaml_path(name: str = "coach.yaml") -> Path | None:
    """Return <data dir>/<name> if it exists, else None."""
    p = get_data_dir() / name
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/rep_coach/coach.yaml
    2. User override at <data dir>/coach.yaml

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        user_cfg = _load_yaml_file(user)
        if user_cfg:
            logger.debug(f"Merging user config from {user}")
            config = _deep_merge(config, user_cfg)

    return config


def settings_from_dict(config: dict[str, Any]) -> CoachSettings:
    """
    Build CoachSettings from the `session` and `rewards` config sections.

    Keys that are not CoachSettings fields are ignored.

    Raises:
        ValueError: If a known key has a value CoachSettings rejects
    """
    known = {f.name for f in fields(CoachSettings)}
    values: dict[str, Any] = {}
    for section in ("session", "rewards"):
        raw = config.get(section) or {}
        if not isinstance(raw, dict):
            continue
        for key, value in raw.items():
            if key not in known:
                logger.debug(f"Ignoring unknown config key {section}.{key}")
                continue
            values[key] = float(value) if key == "overload_factor" else int(value)
    return CoachSettings(**values)


def load_settings() -> CoachSettings:
    """
    Return CoachSettings with bundled and user YAML overrides applied.

    Invalid values fall back to the built-in defaults with a warning.
    """
    try:
        return settings_from_dict(load_model_config())
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid coach settings, using defaults: {e}")
        return CoachSettings()
