"""
Eligibility filter: which catalog exercises a user may be prescribed.

Two rules, applied in order:

1. Safety: age > 50 or BMI > 30 removes every high-impact exercise.
   BMI defaults to a neutral 22 when height is unknown.
2. Equipment: bodyweight and cardio work is always allowed; barbell,
   dumbbell and machine work requires the user to own that equipment.

Both functions are pure; the catalog is never mutated.
"""

from typing import Iterable

from loguru import logger

from .config import ALWAYS_AVAILABLE_EQUIPMENT, HIGH_RISK_AGE, HIGH_RISK_BMI, NEUTRAL_BMI
from .exercises.base import Exercise
from .models import UserProfile


def effective_bmi(profile: UserProfile) -> float:
    """BMI from weight and height, or NEUTRAL_BMI when height is missing."""
    bmi = profile.bmi
    return NEUTRAL_BMI if bmi is None else bmi


def is_high_risk(profile: UserProfile) -> bool:
    """True when the profile must avoid high-impact exercises."""
    return profile.age > HIGH_RISK_AGE or effective_bmi(profile) > HIGH_RISK_BMI


def passes_safety(exercise: Exercise, high_risk: bool) -> bool:
    return not (high_risk and exercise.impact == "high")


def passes_equipment(exercise: Exercise, profile: UserProfile) -> bool:
    if exercise.equipment in ALWAYS_AVAILABLE_EQUIPMENT:
        return True
    return profile.owns(exercise.equipment)


def filter_eligible(catalog: Iterable[Exercise], profile: UserProfile) -> list[Exercise]:
    """
    Return the catalog exercises the user may be prescribed, in catalog order.

    The safety decision is taken once per call from the profile as given.

    Args:
        catalog: Reference exercises
        profile: User profile

    Returns:
        Filtered list of exercises
    """
    exercises = list(catalog)
    high_risk = is_high_risk(profile)

    safe = [ex for ex in exercises if passes_safety(ex, high_risk)]
    pool = [ex for ex in safe if passes_equipment(ex, profile)]

    logger.debug(
        f"Eligibility: {len(exercises)} in catalog, {len(safe)} after safety "
        f"(high_risk={high_risk}), {len(pool)} after equipment"
    )
    return pool
