"""
Plan generation for rep-coach.

Turns a user profile and a same-day fatigue rating into an immutable
SessionPlan:

    readiness check → eligibility filter → goal matrix → load calculator

A fatigue rating above the recovery threshold skips the whole pipeline in
favour of the fixed recovery flow.  Generation is synchronous and has no
side effects; apart from the fat-loss shuffle it is fully deterministic.
"""

import random

from loguru import logger

from .config import (
    MEDIUM_READINESS_THRESHOLD,
    READINESS_MAX,
    READINESS_MIN,
    RECOVERY_FATIGUE_THRESHOLD,
)
from .eligibility import effective_bmi, filter_eligible, is_high_risk
from .errors import EmptyPlanError, ValidationError
from .exercises.registry import ExerciseCatalog, get_catalog
from .load import LoadTrace, compute_load
from .models import PrescribedSet, SessionMode, SessionPlan, SleepQuality, UserProfile
from .selector import ProgramSelection, recovery_program, select_program


def validate_readiness(rating: object) -> int:
    """
    Check a fatigue rating (1 = fresh, 10 = exhausted).

    Raises:
        ValidationError: If rating is not an integer in [1, 10]
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"Readiness rating must be an integer, got {rating!r}")
    if not READINESS_MIN <= rating <= READINESS_MAX:
        raise ValidationError(
            f"Readiness rating must be between {READINESS_MIN} and {READINESS_MAX}, got {rating}"
        )
    return rating


def session_mode_for(rating: int) -> SessionMode:
    """Recovery above the fatigue threshold, standard otherwise."""
    return "recovery" if rating > RECOVERY_FATIGUE_THRESHOLD else "standard"


def resolve_sleep_quality(profile: UserProfile, rating: int) -> SleepQuality:
    """
    Sleep quality used for the recovery factor.

    The profile's own value wins; without one, a fatigue rating above 5
    counts as "medium" and anything else as "good".
    """
    if profile.sleep_quality is not None:
        return profile.sleep_quality
    return "medium" if rating > MEDIUM_READINESS_THRESHOLD else "good"


def _select(
    profile: UserProfile,
    rating: int,
    catalog: ExerciseCatalog,
    rng: random.Random | None,
) -> ProgramSelection:
    if session_mode_for(rating) == "recovery":
        return recovery_program(catalog)
    pool = filter_eligible(catalog, profile)
    return select_program(pool, profile.goal, profile.sex, rng)


def generate_plan(
    profile: UserProfile,
    fatigue_rating: int,
    catalog: ExerciseCatalog | None = None,
    rng: random.Random | None = None,
) -> SessionPlan:
    """
    Generate the session plan for today.

    Args:
        profile: User profile (validated on construction)
        fatigue_rating: Self-reported fatigue, 1–10
        catalog: Exercise reference table (bundled catalog if None)
        rng: Random source for the fat-loss shuffle

    Returns:
        SessionPlan with one PrescribedSet per selected exercise

    Raises:
        ValidationError: If the rating is out of range
        EmptyPlanError: If no exercise survives selection
    """
    rating = validate_readiness(fatigue_rating)
    catalog = catalog if catalog is not None else get_catalog()
    mode = session_mode_for(rating)

    selection = _select(profile, rating, catalog, rng)
    if not selection.exercises:
        logger.error(f"Plan generation produced no exercises (mode={mode}, goal={profile.goal})")
        raise EmptyPlanError(
            "No eligible exercises for this profile; check the exercise catalog"
        )

    sleep_quality = resolve_sleep_quality(profile, rating)
    sets: list[PrescribedSet] = []
    for exercise in selection.exercises:
        if mode == "recovery":
            weight = 0.0
        else:
            trace = compute_load(
                exercise, profile, selection.intensity, profile.goal, sleep_quality
            )
            weight = trace.weight_kg
            logger.debug(
                f"Load {exercise.exercise_id}: base={trace.base_kg:.2f} "
                f"x{trace.recovery_factor} -> {weight} kg"
            )
        sets.append(
            PrescribedSet(
                exercise=exercise,
                weight_kg=weight,
                rep_range=selection.rep_range,
                rest_seconds=selection.rest_seconds,
            )
        )

    plan = SessionPlan(
        sets=tuple(sets),
        mode=mode,
        goal=selection.goal,
        fatigue_rating=rating,
    )
    logger.info(
        f"Generated {mode} plan with {len(plan)} exercises "
        f"(goal={profile.goal}, fatigue={rating})"
    )
    return plan


def explain_prescription(
    profile: UserProfile,
    fatigue_rating: int,
    exercise_id: str,
    catalog: ExerciseCatalog | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Explain, step by step, how one exercise of today's plan was prescribed.

    Re-runs the same pipeline as generate_plan() and formats the load trace
    for the requested exercise.

    Raises:
        ValidationError: If the rating is out of range
        KeyError: If the exercise is not part of the generated plan
    """
    rating = validate_readiness(fatigue_rating)
    catalog = catalog if catalog is not None else get_catalog()
    mode = session_mode_for(rating)
    selection = _select(profile, rating, catalog, rng)

    exercise = next(
        (ex for ex in selection.exercises if ex.exercise_id == exercise_id), None
    )
    if exercise is None:
        chosen = ", ".join(ex.exercise_id for ex in selection.exercises) or "none"
        raise KeyError(f"'{exercise_id}' is not in today's plan (plan: {chosen})")

    lines = [
        f"{exercise.display_name} ({exercise.exercise_id})",
        f"  Fatigue {rating}/{READINESS_MAX} -> {mode} mode",
    ]
    if mode == "recovery":
        lines += [
            f"  Fixed recovery flow: hold {selection.rep_range}, rest {selection.rest_seconds}s",
            "  Weight: 0 kg (no external load in recovery mode)",
        ]
        return "\n".join(lines)

    bmi = effective_bmi(profile)
    lines += [
        f"  Safety: age {profile.age}, BMI {bmi:.1f} -> "
        + ("high-impact work excluded" if is_high_risk(profile) else "no restriction"),
        f"  Goal {profile.goal}: reps {selection.rep_range}, rest {selection.rest_seconds}s, "
        f"intensity {selection.intensity:.2f}",
    ]
    sleep_quality = resolve_sleep_quality(profile, rating)
    lines += _format_trace(
        compute_load(exercise, profile, selection.intensity, profile.goal, sleep_quality),
        sleep_quality,
    )
    return "\n".join(lines)


def _format_trace(trace: LoadTrace, sleep_quality: SleepQuality) -> list[str]:
    lines: list[str] = []
    if trace.record_kg is not None:
        lines.append(f"  Personal record: {trace.record_kg:g} kg")
        if trace.record_clamped:
            lines.append(
                f"  Fat-loss clamp: record above 60% of BW x ratio "
                f"({trace.bodyweight_kg:g} x {trace.load_ratio:g} x 0.6) "
                f"-> {trace.base_kg:.2f} kg"
            )
    else:
        lines.append(
            f"  Base: {trace.bodyweight_kg:g} kg x ratio {trace.load_ratio:g} "
            f"x experience {trace.experience_multiplier:g} x intensity {trace.intensity:g} "
            f"= {trace.base_kg:.2f} kg"
        )
    if trace.load_ratio == 0:
        lines.append("  No external load for this movement -> 0 kg")
    else:
        lines.append(
            f"  Recovery factor ({sleep_quality} sleep): x{trace.recovery_factor:g} "
            f"= {trace.adjusted_kg:.2f} kg"
        )
    lines.append(f"  Rounded to 1.25 kg plates: {trace.weight_kg:g} kg")
    return lines
