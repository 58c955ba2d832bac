"""
YAML → Exercise loader.

Loads the exercise catalog and the fixed recovery flow from the bundled
``src/rep_coach/exercises/`` directory.  Each file holds a top-level
``exercises:`` list of flat records matching the Exercise schema.

User overrides: ``<data dir>/exercises.yaml`` uses the same shape.  An entry
whose exercise_id matches a bundled exercise is merged over it (only changed
keys need to be listed); an unknown exercise_id adds a new exercise.  Invalid
user entries are skipped with a warning; an invalid bundled entry is fatal.

Usage (internal, called by registry.py):
    from .loader import load_catalog_entries, load_recovery_entries
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from ..engine.config_loader import get_user_yaml_path
from ..errors import ValidationError
from .base import Exercise

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {
        "exercise_id",
        "display_name",
        "target",
        "equipment",
        "impact",
        "focus_area",
        "load_ratio",
    }
)


def exercise_from_dict(d: dict[str, Any]) -> Exercise:
    """Convert a raw dict (from YAML) to an Exercise.

    Raises ValidationError if any required field is absent or invalid.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValidationError(f"Exercise missing fields: {sorted(missing)}")
    try:
        load_ratio = float(d["load_ratio"])
    except (TypeError, ValueError) as e:
        raise ValidationError(f"load_ratio must be a number, got {d['load_ratio']!r}") from e
    tip = d.get("tip")
    return Exercise(
        exercise_id=str(d["exercise_id"]),
        display_name=str(d["display_name"]),
        target=str(d["target"]),
        equipment=d["equipment"],
        impact=d["impact"],
        focus_area=d["focus_area"],
        load_ratio=load_ratio,
        tip=str(tip) if tip else None,
    )


def _read_entries(path: Path) -> list[dict[str, Any]]:
    """Return the raw `exercises:` list of a catalog file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    entries = data.get("exercises") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ValidationError(f"{path}: expected a top-level 'exercises' list")
    return [e for e in entries if isinstance(e, dict)]


def _get_bundled_exercises_dir() -> Path:
    """Return path to the bundled exercises/ data directory."""
    # loader.py lives at src/rep_coach/core/exercises/loader.py
    # three levels up → src/rep_coach/
    return Path(__file__).parent.parent.parent / "exercises"


def _load_bundled(name: str) -> list[Exercise]:
    path = _get_bundled_exercises_dir() / name
    try:
        entries = _read_entries(path)
        return [exercise_from_dict(e) for e in entries]
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise RuntimeError(
            f"rep-coach: bundled exercise file {path} could not be loaded: {e}"
        ) from e


def _apply_user_overrides(
    exercises: list[Exercise],
    user_entries: list[dict[str, Any]],
) -> list[Exercise]:
    """Merge user entries over bundled exercises; append unknown ids."""
    by_id: dict[str, int] = {ex.exercise_id: i for i, ex in enumerate(exercises)}
    result = list(exercises)
    for raw in user_entries:
        ex_id = raw.get("exercise_id")
        try:
            if ex_id in by_id:
                base = result[by_id[ex_id]]
                merged = {
                    "exercise_id": base.exercise_id,
                    "display_name": base.display_name,
                    "target": base.target,
                    "equipment": base.equipment,
                    "impact": base.impact,
                    "focus_area": base.focus_area,
                    "load_ratio": base.load_ratio,
                    "tip": base.tip,
                }
                merged.update(raw)
                result[by_id[ex_id]] = exercise_from_dict(merged)
            else:
                ex = exercise_from_dict(raw)
                by_id[ex.exercise_id] = len(result)
                result.append(ex)
        except ValidationError as exc:
            logger.warning(f"Skipping user exercise {ex_id!r}: {exc}")
    return result


def load_catalog_entries(user_path: Path | None = None) -> list[Exercise]:
    """
    Return the catalog exercises in file order.

    Args:
        user_path: Override file to merge; defaults to <data dir>/exercises.yaml
            when it exists.

    Raises:
        RuntimeError: If the bundled catalog is missing or invalid
    """
    exercises = _load_bundled("catalog.yaml")
    if user_path is None:
        user_path = get_user_yaml_path("exercises.yaml")
    if user_path is not None:
        try:
            user_entries = _read_entries(user_path)
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            logger.warning(f"Ignoring user exercise file {user_path}: {exc}")
        else:
            exercises = _apply_user_overrides(exercises, user_entries)
    return exercises


def load_recovery_entries() -> list[Exercise]:
    """Return the fixed recovery flow in prescribed order (no user overrides)."""
    return _load_bundled("recovery.yaml")
