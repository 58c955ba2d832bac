"""
Load calculator: prescribed working weight per exercise.

    base    = personal record                            (if one exists)
            = BW × load_ratio × experience × intensity   (otherwise)
    fat-loss clamp: record > 60% × BW × load_ratio  →  base = record × 0.6
    weight  = base × recovery_factor
    weight  = 0                                          (if load_ratio == 0)
    weight  = round(weight / 1.25) × 1.25

All functions are pure; nothing here reads or writes session state.
"""

import math
from dataclasses import dataclass

from .config import (
    EXPERIENCE_MULTIPLIERS,
    FAT_LOSS_RECORD_CLAMP,
    PLATE_INCREMENT_KG,
    POOR_SLEEP_RECOVERY_FACTOR,
    TOO_HARD_REDUCTION,
)
from .exercises.base import Exercise
from .models import ExperienceLevel, Goal, SleepQuality, UserProfile


@dataclass(frozen=True)
class LoadTrace:
    """
    Every intermediate value of one load calculation.

    Consumed by the planner's explain output so the explanation can never
    diverge from the prescribed weight.
    """

    exercise_id: str
    bodyweight_kg: float
    load_ratio: float
    intensity: float
    experience_multiplier: float
    recovery_factor: float
    record_kg: float | None      # usable personal record, None if absent
    record_clamped: bool         # fat-loss clamp applied to the record
    base_kg: float               # before recovery factor
    adjusted_kg: float           # after recovery factor (and zero-load rule)
    weight_kg: float             # final, plate-rounded


def round_to_plate(weight_kg: float, increment: float = PLATE_INCREMENT_KG) -> float:
    """
    Round to the nearest plate increment (halves round up), never below 0.

    >>> round_to_plate(65.28)
    65.0
    """
    if weight_kg <= 0:
        return 0.0
    return math.floor(weight_kg / increment + 0.5) * increment


def experience_multiplier(level: ExperienceLevel) -> float:
    """Return the 1RM scaling for an experience level (beginner if unknown)."""
    return EXPERIENCE_MULTIPLIERS.get(level, EXPERIENCE_MULTIPLIERS["beginner"])


def recovery_factor(sleep_quality: SleepQuality | None) -> float:
    """0.85 after poor sleep, 1.0 otherwise."""
    return POOR_SLEEP_RECOVERY_FACTOR if sleep_quality == "poor" else 1.0


def usable_record(profile: UserProfile, exercise_id: str) -> float | None:
    """The personal record for exercise_id, ignoring zero or negative values."""
    record = profile.personal_records.get(exercise_id)
    if record is None or record <= 0:
        return None
    return float(record)


def compute_load(
    exercise: Exercise,
    profile: UserProfile,
    intensity: float,
    goal: Goal | None = None,
    sleep_quality: SleepQuality | None = None,
) -> LoadTrace:
    """
    Calculate the prescribed weight for one exercise, keeping every step.

    Args:
        exercise: Exercise to load
        profile: User profile (bodyweight, experience, personal records)
        intensity: Target fraction of estimated 1RM
        goal: Active goal; defaults to profile.goal
        sleep_quality: Readiness used for the recovery factor; defaults to
            profile.sleep_quality

    Returns:
        LoadTrace whose weight_kg is the prescription
    """
    goal = goal if goal is not None else profile.goal
    sleep_quality = sleep_quality if sleep_quality is not None else profile.sleep_quality

    exp_mult = experience_multiplier(profile.experience)
    rec_factor = recovery_factor(sleep_quality)
    record = usable_record(profile, exercise.exercise_id)

    clamped = False
    if record is not None:
        base = record
        ceiling = profile.weight_kg * exercise.load_ratio * FAT_LOSS_RECORD_CLAMP
        if goal == "fat_loss" and record > ceiling:
            base = record * FAT_LOSS_RECORD_CLAMP
            clamped = True
    else:
        base = profile.weight_kg * exercise.load_ratio * exp_mult * intensity

    adjusted = base * rec_factor
    if exercise.load_ratio == 0:
        adjusted = 0.0

    return LoadTrace(
        exercise_id=exercise.exercise_id,
        bodyweight_kg=profile.weight_kg,
        load_ratio=exercise.load_ratio,
        intensity=intensity,
        experience_multiplier=exp_mult,
        recovery_factor=rec_factor,
        record_kg=record,
        record_clamped=clamped,
        base_kg=base,
        adjusted_kg=adjusted,
        weight_kg=round_to_plate(adjusted),
    )


def prescribe_weight(
    exercise: Exercise,
    profile: UserProfile,
    intensity: float,
    goal: Goal | None = None,
    sleep_quality: SleepQuality | None = None,
) -> float:
    """Return only the final prescribed weight; see compute_load()."""
    return compute_load(exercise, profile, intensity, goal, sleep_quality).weight_kg


def reduce_weight(weight_kg: float, reduction: float = TOO_HARD_REDUCTION) -> float:
    """
    Weight after a "too hard" signal: -10%, re-rounded to the plate increment.

    >>> reduce_weight(65.0)
    58.75
    """
    return round_to_plate(weight_kg * (1 - reduction))
