"""
Live session controller.

A state machine that drives one generated plan set by set:

    awaiting_readiness ──submit_readiness──▶ generating ──▶ active
    active ──validate_set──▶ resting ──tick…/skip_rest──▶ active
    active ──validate_set (last set of last exercise)──▶ complete

Each exercise needs a fixed number of validated sets (4 standard, 1 recovery)
before the next one starts.  Every command returns the events it produced and
publishes them to subscribers; rendering and voice feedback live in those
subscribers, never here.  Nothing is persisted by the controller: the
SessionResult is built in memory when the last set is validated and it is up
to the caller to save it.
"""

import random
from dataclasses import dataclass, replace
from typing import Callable, Union

from loguru import logger

from .config import CoachSettings
from .errors import SessionStateError
from .exercises.registry import ExerciseCatalog
from .load import reduce_weight
from .models import PrescribedSet, SessionMode, SessionPlan, SessionResult, SessionState, UserProfile
from .planner import generate_plan, validate_readiness
from .progression import settle_session

GENERIC_TIP = "Focus on your breathing and control every rep."

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModeSelected:
    mode: SessionMode
    fatigue_rating: int


@dataclass(frozen=True)
class ExerciseStarted:
    index: int
    prescribed: PrescribedSet
    weight_kg: float


@dataclass(frozen=True)
class SetValidated:
    exercise_index: int
    set_index: int
    xp_so_far: int


@dataclass(frozen=True)
class RestStarted:
    seconds: int


@dataclass(frozen=True)
class RestFinished:
    """One-shot "ready" pulse: the next set can start."""

    next_set_index: int
    skipped: bool = False


@dataclass(frozen=True)
class WeightReduced:
    exercise_index: int
    old_kg: float
    new_kg: float


@dataclass(frozen=True)
class Paused:
    elapsed_seconds: int


@dataclass(frozen=True)
class Resumed:
    elapsed_seconds: int


@dataclass(frozen=True)
class SessionCompleted:
    result: SessionResult


@dataclass(frozen=True)
class SessionAbandoned:
    elapsed_seconds: int


SessionEvent = Union[
    ModeSelected,
    ExerciseStarted,
    SetValidated,
    RestStarted,
    RestFinished,
    WeightReduced,
    Paused,
    Resumed,
    SessionCompleted,
    SessionAbandoned,
]
Subscriber = Callable[[SessionEvent], None]
PlanFactory = Callable[..., SessionPlan]

_IN_PROGRESS = ("active", "resting")


class SessionController:
    """
    Drives one live session for one user.

    Args:
        profile: User profile used for plan generation and record comparison
        catalog: Exercise reference table (bundled catalog if None)
        settings: Session and reward tunables
        rng: Random source for the fat-loss shuffle
        prior_total_xp: Lifetime XP before this session
        prior_level: Level before this session (derived from XP if None)
        plan_factory: Plan generator, generate_plan by default
    """

    COMMANDS = (
        "submit_readiness",
        "validate_set",
        "skip_rest",
        "signal_too_hard",
        "pause",
        "resume",
        "tick",
        "abandon",
    )

    def __init__(
        self,
        profile: UserProfile,
        *,
        catalog: ExerciseCatalog | None = None,
        settings: CoachSettings | None = None,
        rng: random.Random | None = None,
        prior_total_xp: int = 0,
        prior_level: int | None = None,
        plan_factory: PlanFactory = generate_plan,
    ):
        self.profile = profile
        self.catalog = catalog
        self.settings = settings or CoachSettings()
        self.rng = rng
        self.prior_total_xp = prior_total_xp
        self.prior_level = prior_level
        self._plan_factory = plan_factory

        self.state = SessionState()
        self.plan: SessionPlan | None = None
        self.result: SessionResult | None = None
        self._subscribers: list[Subscriber] = []

    # ── Subscribers ─────────────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an event callback; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _publish(self, events: list[SessionEvent]) -> list[SessionEvent]:
        for event in events:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    # Subscriber errors never interrupt the session
                    logger.exception(f"Session subscriber failed on {type(event).__name__}")
        return events

    # ── Read-only views ─────────────────────────────────────────────────────

    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def mode(self) -> SessionMode | None:
        return self.plan.mode if self.plan is not None else None

    @property
    def sets_required(self) -> int:
        """Validated sets needed per exercise in the current mode."""
        return self.settings.sets_for_mode(self.mode or "standard")

    @property
    def current(self) -> PrescribedSet | None:
        """Prescription for the exercise being worked, or None before generation."""
        if self.plan is None:
            return None
        return self.plan.sets[self.state.exercise_index]

    @property
    def current_weight_kg(self) -> float:
        if not self.state.weights_kg:
            return 0.0
        return self.state.weights_kg[self.state.exercise_index]

    def snapshot(self) -> SessionState:
        """Copy of the current state; mutating it does not affect the session."""
        return replace(self.state, weights_kg=list(self.state.weights_kg))

    def coaching_tip(self) -> str:
        """Coaching cue for the current exercise, or a generic breathing cue."""
        current = self.current
        if current is not None and current.exercise.tip:
            return current.exercise.tip
        return GENERIC_TIP

    # ── Guards ──────────────────────────────────────────────────────────────

    def _require(self, *phases: str, action: str) -> None:
        if self.state.phase not in phases:
            raise SessionStateError(
                f"Cannot {action} while session is {self.state.phase!r}"
            )

    def _require_plan(self) -> SessionPlan:
        if self.plan is None:
            raise SessionStateError(
                f"No plan generated while session is {self.state.phase!r}"
            )
        return self.plan

    # ── Commands ────────────────────────────────────────────────────────────

    def apply(self, command: str, *args) -> list[SessionEvent]:
        """
        Dispatch a command by name (see COMMANDS).

        Raises:
            SessionStateError: Unknown command or not allowed in this phase
        """
        if command not in self.COMMANDS:
            raise SessionStateError(f"Unknown session command: {command!r}")
        return getattr(self, command)(*args)

    def submit_readiness(self, rating: int) -> list[SessionEvent]:
        """
        Record the fatigue rating, generate the plan and start the first set.

        Raises:
            ValidationError: Rating outside 1–10 (state unchanged)
            EmptyPlanError: Nothing could be prescribed (state unchanged)
        """
        self._require("awaiting_readiness", action="submit readiness")
        rating = validate_readiness(rating)

        self.state.phase = "generating"
        try:
            plan = self._plan_factory(self.profile, rating, catalog=self.catalog, rng=self.rng)
        except Exception:
            self.state.phase = "awaiting_readiness"
            raise

        self.plan = plan
        self.state = SessionState(
            phase="active",
            weights_kg=[s.weight_kg for s in plan.sets],
        )
        logger.info(f"Session started: {plan.mode} mode, {len(plan)} exercises")
        return self._publish([
            ModeSelected(mode=plan.mode, fatigue_rating=rating),
            ExerciseStarted(index=0, prescribed=plan.sets[0], weight_kg=plan.sets[0].weight_kg),
        ])

    def validate_set(self) -> list[SessionEvent]:
        """
        Mark the current set done.

        Starts a rest period when the exercise has sets left, otherwise moves
        to the next exercise or completes the session.
        """
        self._require("active", action="validate a set")
        plan = self._require_plan()
        state = self.state

        state.xp += self.settings.xp_per_set
        events: list[SessionEvent] = [
            SetValidated(
                exercise_index=state.exercise_index,
                set_index=state.set_index,
                xp_so_far=state.xp,
            )
        ]

        if state.set_index + 1 < self.sets_required:
            state.set_index += 1
            rest = plan.sets[state.exercise_index].rest_seconds
            if rest > 0:
                state.phase = "resting"
                state.rest_remaining = rest
                events.append(RestStarted(seconds=rest))
            return self._publish(events)

        if state.exercise_index < len(plan) - 1:
            state.exercise_index += 1
            state.set_index = 0
            state.rest_remaining = 0
            state.phase = "active"
            nxt = plan.sets[state.exercise_index]
            events.append(
                ExerciseStarted(
                    index=state.exercise_index,
                    prescribed=nxt,
                    weight_kg=state.weights_kg[state.exercise_index],
                )
            )
            return self._publish(events)

        state.set_index = self.sets_required
        events.append(self._complete(plan))
        return self._publish(events)

    def tick(self, seconds: int = 1) -> list[SessionEvent]:
        """
        Advance the session clock by ``seconds`` one-second ticks.

        Ticks outside an in-progress session, or while paused, are ignored.
        Passing several seconds at once catches up on missed ticks.
        """
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        events: list[SessionEvent] = []
        state = self.state
        for _ in range(seconds):
            if state.phase not in _IN_PROGRESS or state.paused:
                break
            state.elapsed_seconds += 1
            if state.phase == "resting":
                state.rest_remaining -= 1
                if state.rest_remaining <= 0:
                    state.rest_remaining = 0
                    state.phase = "active"
                    events.append(RestFinished(next_set_index=state.set_index))
        return self._publish(events)

    def skip_rest(self) -> list[SessionEvent]:
        """End the rest period now; a no-op when not resting."""
        if self.state.phase != "resting":
            return []
        self.state.rest_remaining = 0
        self.state.phase = "active"
        return self._publish([RestFinished(next_set_index=self.state.set_index, skipped=True)])

    def signal_too_hard(self) -> list[SessionEvent]:
        """
        Drop the current exercise's working weight by 10% for this session.

        Raises:
            SessionStateError: In recovery mode or outside a running session
        """
        self._require(*_IN_PROGRESS, action="reduce the weight")
        if self.mode == "recovery":
            raise SessionStateError("Weight reduction is not available in recovery mode")
        idx = self.state.exercise_index
        old = self.state.weights_kg[idx]
        new = reduce_weight(old)
        self.state.weights_kg[idx] = new
        logger.debug(f"Too hard on exercise {idx}: {old} -> {new} kg")
        return self._publish([WeightReduced(exercise_index=idx, old_kg=old, new_kg=new)])

    def pause(self) -> list[SessionEvent]:
        self._require(*_IN_PROGRESS, action="pause")
        if self.state.paused:
            return []
        self.state.paused = True
        return self._publish([Paused(elapsed_seconds=self.state.elapsed_seconds)])

    def resume(self) -> list[SessionEvent]:
        self._require(*_IN_PROGRESS, action="resume")
        if not self.state.paused:
            return []
        self.state.paused = False
        return self._publish([Resumed(elapsed_seconds=self.state.elapsed_seconds)])

    def abandon(self) -> list[SessionEvent]:
        """Discard the session without producing a result."""
        if self.state.phase in ("complete", "abandoned"):
            return []
        elapsed = self.state.elapsed_seconds
        self.state = SessionState(phase="abandoned")
        self.plan = None
        logger.info(f"Session abandoned after {elapsed}s")
        return self._publish([SessionAbandoned(elapsed_seconds=elapsed)])

    # ── Completion ──────────────────────────────────────────────────────────

    def _complete(self, plan: SessionPlan) -> SessionCompleted:
        state = self.state
        state.phase = "complete"
        state.rest_remaining = 0

        performed = [
            (prescribed.exercise_id, weight)
            for prescribed, weight in zip(plan.sets, state.weights_kg)
        ]
        self.result = settle_session(
            mode=plan.mode,
            elapsed_seconds=state.elapsed_seconds,
            set_xp=state.xp,
            performed=performed,
            prior_total_xp=self.prior_total_xp,
            prior_level=self.prior_level,
            prior_records=self.profile.personal_records,
            completion_bonus_xp=self.settings.completion_bonus_xp,
            xp_per_level=self.settings.xp_per_level,
            overload_factor=self.settings.overload_factor,
        )
        logger.info(
            f"Session complete: {self.result.xp_earned} XP, level {self.result.level}, "
            f"{len(self.result.improved_records)} records raised"
        )
        return SessionCompleted(result=self.result)
