"""
Base types for the exercise catalog.

An Exercise is static reference data: identity, equipment and impact tags
used by the eligibility filter, a focus area used for ranking, and the
load ratio (fraction of bodyweight) used to estimate a 1RM baseline.
"""

from dataclasses import dataclass
from typing import Literal

from ..errors import ValidationError

Equipment = Literal["barbell", "dumbbell", "machine", "bodyweight", "cardio"]
Impact = Literal["low", "high"]
FocusArea = Literal["upper_body", "lower_body", "full_body", "core", "glutes"]

EQUIPMENT_TYPES: tuple[str, ...] = ("barbell", "dumbbell", "machine", "bodyweight", "cardio")
IMPACT_LEVELS: tuple[str, ...] = ("low", "high")
FOCUS_AREAS: tuple[str, ...] = ("upper_body", "lower_body", "full_body", "core", "glutes")


@dataclass(frozen=True)
class Exercise:
    """
    One catalog exercise.

    load_ratio == 0 marks a movement with no meaningful external load; its
    prescribed weight is always 0.
    """

    exercise_id: str      # e.g. "squat"
    display_name: str     # e.g. "Back Squat"
    target: str           # muscle label shown to the user, e.g. "Legs"
    equipment: Equipment
    impact: Impact
    focus_area: FocusArea
    load_ratio: float
    tip: str | None = None  # coaching cue

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.exercise_id:
            raise ValidationError("exercise_id must be non-empty")
        if self.equipment not in EQUIPMENT_TYPES:
            raise ValidationError(
                f"Invalid equipment for {self.exercise_id!r}: {self.equipment!r}. "
                f"Must be one of {EQUIPMENT_TYPES}"
            )
        if self.impact not in IMPACT_LEVELS:
            raise ValidationError(f"Invalid impact for {self.exercise_id!r}: {self.impact!r}")
        if self.focus_area not in FOCUS_AREAS:
            raise ValidationError(
                f"Invalid focus_area for {self.exercise_id!r}: {self.focus_area!r}"
            )
        if self.load_ratio < 0:
            raise ValidationError(f"load_ratio for {self.exercise_id!r} must be non-negative")

    @property
    def is_loaded(self) -> bool:
        """True when the exercise carries a meaningful external load."""
        return self.load_ratio > 0
