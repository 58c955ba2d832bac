"""
JSON serialization for rep-coach models.

Handles conversion between dataclasses and JSON-compatible dicts.
Stored data is validated on the way in; problems surface as ValidationError.
"""

import json
from typing import Any

from ..core.errors import ValidationError
from ..core.exercises.base import EQUIPMENT_TYPES
from ..core.models import (
    PrescribedSet,
    SESSION_MODES,
    SessionPlan,
    SessionResult,
    UserProfile,
)

__all__ = [
    "ValidationError",
    "dict_to_session_result",
    "dict_to_user_profile",
    "parse_equipment",
    "prescribed_set_to_dict",
    "session_plan_to_dict",
    "session_result_to_dict",
    "to_json",
    "user_profile_to_dict",
]


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a non-negative number.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a positive number.

    Raises:
        ValidationError: If value is not positive or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def parse_equipment(raw: str) -> frozenset[str]:
    """
    Parse a comma-separated equipment list, e.g. "barbell, dumbbell".

    Empty input means bodyweight only.

    Raises:
        ValidationError: If an item is not a known equipment type
    """
    items = {part.strip().lower() for part in raw.split(",") if part.strip()}
    unknown = items - set(EQUIPMENT_TYPES)
    if unknown:
        raise ValidationError(
            f"Unknown equipment: {', '.join(sorted(unknown))}. "
            f"Choose from {', '.join(EQUIPMENT_TYPES)}"
        )
    return frozenset(items)


def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """Convert UserProfile to JSON-compatible dict."""
    return {
        "weight_kg": profile.weight_kg,
        "height_cm": profile.height_cm,
        "age": profile.age,
        "experience": profile.experience,
        "goal": profile.goal,
        "sex": profile.sex,
        "sleep_quality": profile.sleep_quality,
        "equipment": sorted(profile.equipment),
        "personal_records": dict(profile.personal_records),
    }


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    Raises:
        ValidationError: If data is missing fields or invalid
    """
    for key in ("weight_kg", "age", "experience", "goal", "sex"):
        if key not in data:
            raise ValidationError(f"Profile is missing '{key}'")

    validate_positive(data["weight_kg"], "weight_kg")
    validate_positive(data["age"], "age")
    if data.get("height_cm") is not None:
        validate_positive(data["height_cm"], "height_cm")

    records = data.get("personal_records") or {}
    if not isinstance(records, dict):
        raise ValidationError("personal_records must be a mapping")

    return UserProfile(
        weight_kg=float(data["weight_kg"]),
        height_cm=float(data["height_cm"]) if data.get("height_cm") is not None else None,
        age=int(data["age"]),
        experience=data["experience"],
        goal=data["goal"],
        sex=data["sex"],
        sleep_quality=data.get("sleep_quality"),
        equipment=frozenset(data.get("equipment") or []),
        personal_records={
            str(k): float(validate_non_negative(v, f"personal_records[{k!r}]"))
            for k, v in records.items()
        },
    )


def prescribed_set_to_dict(prescribed: PrescribedSet) -> dict[str, Any]:
    """Convert PrescribedSet to JSON-compatible dict."""
    ex = prescribed.exercise
    return {
        "exercise_id": ex.exercise_id,
        "name": ex.display_name,
        "target": ex.target,
        "equipment": ex.equipment,
        "weight_kg": prescribed.weight_kg,
        "reps": prescribed.rep_range,
        "rest_seconds": prescribed.rest_seconds,
    }


def session_plan_to_dict(plan: SessionPlan) -> dict[str, Any]:
    """Convert SessionPlan to JSON-compatible dict (output only)."""
    return {
        "mode": plan.mode,
        "goal": plan.goal,
        "fatigue_rating": plan.fatigue_rating,
        "sets": [prescribed_set_to_dict(s) for s in plan.sets],
    }


def session_result_to_dict(result: SessionResult) -> dict[str, Any]:
    """Convert SessionResult to JSON-compatible dict."""
    return {
        "mode": result.mode,
        "elapsed_seconds": result.elapsed_seconds,
        "xp_earned": result.xp_earned,
        "total_xp": result.total_xp,
        "level": result.level,
        "leveled_up": result.leveled_up,
        "personal_records": dict(result.personal_records),
        "improved_records": dict(result.improved_records),
    }


def dict_to_session_result(data: dict[str, Any]) -> SessionResult:
    """
    Convert dict to SessionResult.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        mode = data["mode"]
        if mode not in SESSION_MODES:
            raise ValidationError(f"Invalid session mode: {mode!r}")
        validate_non_negative(data["elapsed_seconds"], "elapsed_seconds")
        validate_non_negative(data["xp_earned"], "xp_earned")
        validate_non_negative(data["total_xp"], "total_xp")
        validate_positive(data["level"], "level")
        return SessionResult(
            mode=mode,
            elapsed_seconds=int(data["elapsed_seconds"]),
            xp_earned=int(data["xp_earned"]),
            total_xp=int(data["total_xp"]),
            level=int(data["level"]),
            leveled_up=bool(data.get("leveled_up", False)),
            personal_records={str(k): float(v) for k, v in (data.get("personal_records") or {}).items()},
            improved_records={str(k): float(v) for k, v in (data.get("improved_records") or {}).items()},
        )
    except KeyError as e:
        raise ValidationError(f"Session result is missing {e}") from e


def to_json(data: Any) -> str:
    """Serialize to a compact single JSON line."""
    return json.dumps(data, separators=(",", ":"))
