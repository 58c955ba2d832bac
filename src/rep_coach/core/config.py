"""
Configuration constants for the adaptive session engine.

All adjustable parameters are centralized here for easy tuning.  The
session/reward subset can be overridden from coach.yaml (see
core/engine/config_loader.py); everything else is fixed.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# READINESS
# =============================================================================

READINESS_MIN: Final[int] = 1
READINESS_MAX: Final[int] = 10
RECOVERY_FATIGUE_THRESHOLD: Final[int] = 8  # rating above this => recovery flow
MEDIUM_READINESS_THRESHOLD: Final[int] = 5  # rating above this => "medium" sleep when unset

# =============================================================================
# SAFETY FILTER
# =============================================================================

HIGH_RISK_AGE: Final[int] = 50  # strictly above => no high-impact work
HIGH_RISK_BMI: Final[float] = 30.0  # strictly above => no high-impact work
NEUTRAL_BMI: Final[float] = 22.0  # assumed when height is unknown

# Equipment types that never require ownership
ALWAYS_AVAILABLE_EQUIPMENT: Final[frozenset[str]] = frozenset({"bodyweight", "cardio"})

# =============================================================================
# GOAL MATRIX
# =============================================================================


@dataclass(frozen=True)
class GoalParams:
    """Prescription parameters for one training goal."""

    rep_range: str  # e.g. "8-12"
    rest_seconds: int
    intensity: float  # fraction of estimated 1RM
    max_exercises: int


GOAL_PARAMS: Final[dict[str, GoalParams]] = {
    "strength": GoalParams(rep_range="3-6", rest_seconds=180, intensity=0.85, max_exercises=5),
    "fat_loss": GoalParams(rep_range="15-20", rest_seconds=45, intensity=0.55, max_exercises=8),
    "muscle": GoalParams(rep_range="8-12", rest_seconds=90, intensity=0.75, max_exercises=7),
}

# Strength: barbell compounds taken first, in this order
STRENGTH_COMPOUND_IDS: Final[tuple[str, ...]] = (
    "squat",
    "deadlift",
    "bench_press",
    "military_press",
    "barbell_row",
)
STRENGTH_ACCESSORY_MIN_RATIO: Final[float] = 0.5  # accessories need load_ratio above this

# Fat loss: non-cardio picks before cardio is appended, and forced finishers
FAT_LOSS_ACTIVE_PICKS: Final[int] = 6
FAT_LOSS_FINISHER_IDS: Final[tuple[str, ...]] = ("burpees", "mountain_climbers")

# Muscle/default: focus areas ranked first per sex category
SEX_FOCUS_BIAS: Final[dict[str, frozenset[str]]] = {
    "female": frozenset({"glutes", "lower_body"}),
    "male": frozenset({"upper_body"}),
}

# Recovery flow prescription
RECOVERY_HOLD: Final[str] = "45-60s"
RECOVERY_REST_SECONDS: Final[int] = 30

# =============================================================================
# LOAD CALCULATION
# =============================================================================

EXPERIENCE_MULTIPLIERS: Final[dict[str, float]] = {
    "beginner": 0.5,
    "intermediate": 0.8,
    "advanced": 1.2,
}
POOR_SLEEP_RECOVERY_FACTOR: Final[float] = 0.85
PLATE_INCREMENT_KG: Final[float] = 1.25
FAT_LOSS_RECORD_CLAMP: Final[float] = 0.6  # record kept at 60% when above 60% of BW x ratio
TOO_HARD_REDUCTION: Final[float] = 0.10  # "too hard" drops the current weight by 10%

# =============================================================================
# SESSION
# =============================================================================

STANDARD_SETS_PER_EXERCISE: Final[int] = 4
RECOVERY_SETS_PER_EXERCISE: Final[int] = 1
DEFAULT_REST_SECONDS: Final[int] = 60  # used when a rest target cannot be parsed

# =============================================================================
# REWARDS & PROGRESSION
# =============================================================================

XP_PER_SET: Final[int] = 10
COMPLETION_BONUS_XP: Final[int] = 100
XP_PER_LEVEL: Final[int] = 500
OVERLOAD_FACTOR: Final[float] = 1.025  # +2.5% on a record matched or beaten
SESSION_INTENSITY_LABEL: Final[int] = 3  # intensity stored with each logged session

MODE_LABELS: Final[dict[str, str]] = {
    "standard": "Standard Session",
    "recovery": "Active Recovery",
}


@dataclass(frozen=True)
class CoachSettings:
    """Session and reward tunables that coach.yaml may override."""

    standard_sets_per_exercise: int = STANDARD_SETS_PER_EXERCISE
    recovery_sets_per_exercise: int = RECOVERY_SETS_PER_EXERCISE
    xp_per_set: int = XP_PER_SET
    completion_bonus_xp: int = COMPLETION_BONUS_XP
    xp_per_level: int = XP_PER_LEVEL
    overload_factor: float = OVERLOAD_FACTOR

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.standard_sets_per_exercise < 1 or self.recovery_sets_per_exercise < 1:
            raise ValueError("sets per exercise must be at least 1")
        if self.xp_per_level <= 0:
            raise ValueError("xp_per_level must be positive")
        if self.overload_factor < 1.0:
            raise ValueError("overload_factor must be >= 1.0")

    def sets_for_mode(self, mode: str) -> int:
        """Return how many sets each exercise gets in the given session mode."""
        if mode == "recovery":
            return self.recovery_sets_per_exercise
        return self.standard_sets_per_exercise
