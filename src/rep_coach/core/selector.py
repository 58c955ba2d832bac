"""
Program selector (goal matrix).

Turns an eligible exercise pool and a training goal into an ordered
exercise selection with a rep range, a rest interval and a target
intensity (fraction of estimated 1RM):

    strength   "3-6"    180 s  0.85   barbell compounds first, then heavy accessories, max 5
    fat_loss   "15-20"   45 s  0.55   shuffled circuit + cardio, max 8, finishers always added
    muscle     "8-12"    90 s  0.75   focus-area ranking by sex category, max 7

A high fatigue rating bypasses the matrix for the fixed recovery flow.

Everything is deterministic except the fat-loss shuffle, which draws from
an injectable random source.
"""

import random
import re
from dataclasses import dataclass
from typing import Sequence

from loguru import logger

from .config import (
    DEFAULT_REST_SECONDS,
    FAT_LOSS_ACTIVE_PICKS,
    FAT_LOSS_FINISHER_IDS,
    GOAL_PARAMS,
    RECOVERY_HOLD,
    RECOVERY_REST_SECONDS,
    SEX_FOCUS_BIAS,
    STRENGTH_ACCESSORY_MIN_RATIO,
    STRENGTH_COMPOUND_IDS,
)
from .exercises.base import Exercise
from .exercises.registry import ExerciseCatalog
from .models import Goal, Sex

# "45-60s" / "45–60 s" / "180" / "90s"; a range keeps its lower bound
_REST_RE = re.compile(r"^\s*(\d+)\s*(?:[-–—]\s*\d+)?\s*s?\s*$")


@dataclass(frozen=True)
class ProgramSelection:
    """Selected exercises plus the goal-level prescription shared by all of them."""

    exercises: tuple[Exercise, ...]
    rep_range: str
    rest_seconds: int
    intensity: float
    goal: Goal | None  # None for the recovery flow


def parse_rest_seconds(value: str | int, default: int = DEFAULT_REST_SECONDS) -> int:
    """
    Normalize a rest target to whole seconds.

    Ranges resolve to their lower bound ("45-60s" → 45); plain values to
    their integer ("180" → 180).  Anything unparseable yields ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 0 else default
    m = _REST_RE.match(str(value))
    if m is None:
        return default
    return int(m.group(1))


def _select_strength(pool: Sequence[Exercise], limit: int) -> list[Exercise]:
    by_id = {ex.exercise_id: ex for ex in pool}
    compounds = [
        by_id[ex_id]
        for ex_id in STRENGTH_COMPOUND_IDS
        if ex_id in by_id and by_id[ex_id].equipment == "barbell"
    ]
    heavy = [
        ex for ex in pool
        if ex not in compounds and ex.load_ratio > STRENGTH_ACCESSORY_MIN_RATIO
    ]
    return (compounds + heavy)[:limit]


def _select_fat_loss(
    pool: Sequence[Exercise],
    limit: int,
    rng: random.Random,
) -> list[Exercise]:
    cardio = [ex for ex in pool if ex.equipment == "cardio"]
    active = [ex for ex in pool if ex.equipment != "cardio"]
    shuffled = rng.sample(active, len(active))

    selected = (shuffled[:FAT_LOSS_ACTIVE_PICKS] + cardio)[:limit]

    # Finishers go in even past the cap
    for ex in pool:
        if ex.exercise_id in FAT_LOSS_FINISHER_IDS and ex not in selected:
            selected.append(ex)
    return selected


def _select_muscle(pool: Sequence[Exercise], sex: Sex, limit: int) -> list[Exercise]:
    preferred = SEX_FOCUS_BIAS.get(sex, frozenset())
    # sorted() is stable: preferred focus first, catalog order otherwise
    ranked = sorted(pool, key=lambda ex: 0 if ex.focus_area in preferred else 1)
    return ranked[:limit]


def select_program(
    pool: Sequence[Exercise],
    goal: Goal,
    sex: Sex,
    rng: random.Random | None = None,
) -> ProgramSelection:
    """
    Apply the goal matrix to an eligible pool.

    Args:
        pool: Exercises that passed the eligibility filter
        goal: Training goal
        sex: Sex category (ranking bias for the muscle goal only)
        rng: Random source for the fat-loss shuffle (fresh Random() if None)

    Returns:
        ProgramSelection (may hold zero exercises if the pool is empty)
    """
    params = GOAL_PARAMS[goal]

    if goal == "strength":
        exercises = _select_strength(pool, params.max_exercises)
    elif goal == "fat_loss":
        exercises = _select_fat_loss(pool, params.max_exercises, rng or random.Random())
    else:
        exercises = _select_muscle(pool, sex, params.max_exercises)

    logger.debug(
        f"Goal matrix [{goal}]: selected {[ex.exercise_id for ex in exercises]} "
        f"from pool of {len(pool)}"
    )
    return ProgramSelection(
        exercises=tuple(exercises),
        rep_range=params.rep_range,
        rest_seconds=params.rest_seconds,
        intensity=params.intensity,
        goal=goal,
    )


def recovery_program(catalog: ExerciseCatalog) -> ProgramSelection:
    """
    Return the fixed active-recovery flow.

    Identical for every user: the eligibility filters are not consulted.
    """
    return ProgramSelection(
        exercises=catalog.recovery_flow,
        rep_range=RECOVERY_HOLD,
        rest_seconds=parse_rest_seconds(RECOVERY_REST_SECONDS),
        intensity=0.0,
        goal=None,
    )
