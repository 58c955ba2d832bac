"""
Session settlement: XP, level and progressive-overload record updates.

    xp_earned  = completion bonus + XP accumulated over validated sets
    total_xp   = prior total + xp_earned
    level      = 1 + floor(total_xp / 500)
    record     = round(weight × 1.025 / 1.25) × 1.25
                 for every exercise finished at weight > 0 and ≥ its prior record

Records only ever move up from a single session.
"""

from typing import Iterable

from .config import COMPLETION_BONUS_XP, OVERLOAD_FACTOR, XP_PER_LEVEL
from .load import round_to_plate
from .models import SessionMode, SessionResult


def level_for_xp(total_xp: int, xp_per_level: int = XP_PER_LEVEL) -> int:
    """Level reached with the given lifetime XP (level 1 at 0 XP)."""
    return 1 + max(0, total_xp) // xp_per_level


def progress_records(
    prior: dict[str, float],
    performed: Iterable[tuple[str, float]],
    overload_factor: float = OVERLOAD_FACTOR,
) -> tuple[dict[str, float], dict[str, float]]:
    """
    Apply the progressive-overload nudge to personal records.

    Args:
        prior: Records before this session
        performed: (exercise_id, final session weight) per exercise trained
        overload_factor: Multiplier applied on a matched or beaten record

    Returns:
        (full updated mapping, only the entries that changed)
    """
    updated = dict(prior)
    improved: dict[str, float] = {}
    for exercise_id, weight in performed:
        if weight <= 0:
            continue
        current = updated.get(exercise_id) or 0.0
        if weight >= current:
            new_record = round_to_plate(weight * overload_factor)
            updated[exercise_id] = new_record
            improved[exercise_id] = new_record
    return updated, improved


def settle_session(
    *,
    mode: SessionMode,
    elapsed_seconds: int,
    set_xp: int,
    performed: Iterable[tuple[str, float]],
    prior_total_xp: int = 0,
    prior_level: int | None = None,
    prior_records: dict[str, float] | None = None,
    completion_bonus_xp: int = COMPLETION_BONUS_XP,
    xp_per_level: int = XP_PER_LEVEL,
    overload_factor: float = OVERLOAD_FACTOR,
) -> SessionResult:
    """
    Build the SessionResult for a completed session.

    ``prior_level`` defaults to the level implied by ``prior_total_xp``.
    """
    xp_earned = completion_bonus_xp + set_xp
    total_xp = prior_total_xp + xp_earned
    level = level_for_xp(total_xp, xp_per_level)
    if prior_level is None:
        prior_level = level_for_xp(prior_total_xp, xp_per_level)

    records, improved = progress_records(prior_records or {}, performed, overload_factor)

    return SessionResult(
        mode=mode,
        elapsed_seconds=elapsed_seconds,
        xp_earned=xp_earned,
        total_xp=total_xp,
        level=level,
        leveled_up=level > prior_level,
        personal_records=records,
        improved_records=improved,
    )
