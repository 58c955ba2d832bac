"""
Data models for rep-coach.

All core dataclasses: the user profile supplied per request, the immutable
session plan produced by the generator, the mutable live-session state
owned by the session controller, and the result emitted on completion.
"""

import math
from dataclasses import dataclass, field
from typing import Literal

from .errors import EmptyPlanError, ValidationError
from .exercises.base import EQUIPMENT_TYPES, Exercise

ExperienceLevel = Literal["beginner", "intermediate", "advanced"]
Goal = Literal["strength", "muscle", "fat_loss"]
Sex = Literal["male", "female"]
SleepQuality = Literal["good", "medium", "poor"]
SessionMode = Literal["standard", "recovery"]
SessionPhase = Literal[
    "awaiting_readiness",
    "generating",
    "active",
    "resting",
    "complete",
    "abandoned",
]

EXPERIENCE_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")
GOALS: tuple[str, ...] = ("strength", "muscle", "fat_loss")
SEXES: tuple[str, ...] = ("male", "female")
SLEEP_QUALITIES: tuple[str, ...] = ("good", "medium", "poor")
SESSION_MODES: tuple[str, ...] = ("standard", "recovery")


@dataclass
class UserProfile:
    """
    User profile supplied with each plan request.

    ``equipment`` lists owned equipment categories (barbell, dumbbell,
    machine); bodyweight and cardio work never needs to be listed.
    ``personal_records`` maps exercise_id to the last successfully used
    working weight in kg.  ``sleep_quality`` may be left unset, in which case
    the readiness rating supplies it at generation time.
    """

    weight_kg: float
    age: int
    experience: ExperienceLevel
    goal: Goal
    sex: Sex
    height_cm: float | None = None
    sleep_quality: SleepQuality | None = None
    equipment: frozenset[str] = field(default_factory=frozenset)
    personal_records: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate profile data."""
        if self.weight_kg <= 0:
            raise ValidationError(f"weight_kg must be positive, got {self.weight_kg}")
        if self.age <= 0:
            raise ValidationError(f"age must be positive, got {self.age}")
        if self.height_cm is not None and self.height_cm <= 0:
            raise ValidationError(f"height_cm must be positive, got {self.height_cm}")
        if self.experience not in EXPERIENCE_LEVELS:
            raise ValidationError(
                f"Invalid experience: {self.experience!r}. Must be one of {EXPERIENCE_LEVELS}"
            )
        if self.goal not in GOALS:
            raise ValidationError(f"Invalid goal: {self.goal!r}. Must be one of {GOALS}")
        if self.sex not in SEXES:
            raise ValidationError(f"Invalid sex: {self.sex!r}. Must be one of {SEXES}")
        if self.sleep_quality is not None and self.sleep_quality not in SLEEP_QUALITIES:
            raise ValidationError(
                f"Invalid sleep_quality: {self.sleep_quality!r}. Must be one of {SLEEP_QUALITIES}"
            )

        self.equipment = frozenset(self.equipment)
        unknown = self.equipment - set(EQUIPMENT_TYPES)
        if unknown:
            raise ValidationError(f"Unknown equipment: {sorted(unknown)}")

        # Records must be numbers; zero/negative values are kept and treated
        # as "no usable record" by the load calculator.
        for ex_id, weight in self.personal_records.items():
            if not isinstance(weight, (int, float)) or isinstance(weight, bool):
                raise ValidationError(
                    f"personal_records[{ex_id!r}] must be a number, got {weight!r}"
                )

    @property
    def bmi(self) -> float | None:
        """Body-mass index, or None when height is unknown."""
        if self.height_cm is None:
            return None
        height_m = self.height_cm / 100
        return self.weight_kg / (height_m ** 2)

    def owns(self, equipment: str) -> bool:
        """Return True if the equipment category is in the owned set."""
        return equipment in self.equipment


@dataclass(frozen=True)
class PrescribedSet:
    """
    One exercise prescription in a session plan.

    ``rep_range`` is a repetition range ("8-12") or a hold duration
    ("45-60s") for recovery work.  ``rest_seconds`` is already normalized.
    """

    exercise: Exercise
    weight_kg: float
    rep_range: str
    rest_seconds: int

    def __post_init__(self) -> None:
        """Validate prescription."""
        if self.weight_kg < 0:
            raise ValidationError("weight_kg must be non-negative")
        if self.rest_seconds < 0:
            raise ValidationError("rest_seconds must be non-negative")
        if not self.exercise.is_loaded and self.weight_kg != 0:
            raise ValidationError(
                f"{self.exercise.exercise_id} has no external load; weight must be 0"
            )

    @property
    def exercise_id(self) -> str:
        return self.exercise.exercise_id


@dataclass(frozen=True)
class SessionPlan:
    """
    The immutable, ordered prescription for one session.

    Created once before the live session begins.
    """

    sets: tuple[PrescribedSet, ...]
    mode: SessionMode = "standard"
    goal: Goal | None = None  # None for the recovery flow
    fatigue_rating: int | None = None

    def __post_init__(self) -> None:
        """Validate plan."""
        if not self.sets:
            raise EmptyPlanError("A session plan needs at least one exercise")
        if self.mode not in SESSION_MODES:
            raise ValidationError(f"Invalid session mode: {self.mode!r}")

    def __len__(self) -> int:
        return len(self.sets)

    @property
    def exercise_ids(self) -> list[str]:
        """Exercise ids in prescribed order."""
        return [s.exercise_id for s in self.sets]

    def find(self, exercise_id: str) -> PrescribedSet | None:
        """Return the prescription for exercise_id, or None."""
        for s in self.sets:
            if s.exercise_id == exercise_id:
                return s
        return None


@dataclass
class SessionState:
    """
    Mutable state of one live session.

    Owned exclusively by the session controller; never persisted mid-session.
    ``set_index`` is the 0-based index of the set being worked within the
    current exercise.  ``weights_kg`` holds the session-local working weight
    per exercise (the "too hard" regression changes it here, never in the plan).
    """

    phase: SessionPhase = "awaiting_readiness"
    exercise_index: int = 0
    set_index: int = 0
    elapsed_seconds: int = 0
    rest_remaining: int = 0
    paused: bool = False
    xp: int = 0
    weights_kg: list[float] = field(default_factory=list)

    @property
    def resting(self) -> bool:
        return self.phase == "resting"


@dataclass(frozen=True)
class SessionResult:
    """
    Outcome of a completed session, created once at completion.

    ``personal_records`` is the full updated mapping; ``improved_records``
    holds only the entries this session raised or created.
    """

    mode: SessionMode
    elapsed_seconds: int
    xp_earned: int
    total_xp: int
    level: int
    leveled_up: bool
    personal_records: dict[str, float] = field(default_factory=dict)
    improved_records: dict[str, float] = field(default_factory=dict)

    @property
    def duration_minutes(self) -> int:
        """Elapsed time rounded up to whole minutes."""
        return math.ceil(self.elapsed_seconds / 60)
