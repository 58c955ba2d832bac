"""
Exercise registry.

ExerciseCatalog is the read-only reference table handed to the eligibility
filter and program selector.  Nothing in the engine reads a module-level
catalog: callers obtain one with get_catalog() (bundled YAML plus user
overrides) or build one directly for tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Iterator

from .base import Exercise


@dataclass(frozen=True)
class ExerciseCatalog:
    """Immutable, ordered collection of exercises plus the fixed recovery flow."""

    exercises: tuple[Exercise, ...]
    recovery_flow: tuple[Exercise, ...] = ()

    def __post_init__(self) -> None:
        ids = [ex.exercise_id for ex in self.exercises]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"Duplicate exercise ids in catalog: {dupes}")

    @classmethod
    def from_exercises(
        cls,
        exercises: Iterable[Exercise],
        recovery_flow: Iterable[Exercise] = (),
    ) -> "ExerciseCatalog":
        """Build a catalog from any iterable of exercises."""
        return cls(exercises=tuple(exercises), recovery_flow=tuple(recovery_flow))

    def __iter__(self) -> Iterator[Exercise]:
        return iter(self.exercises)

    def __len__(self) -> int:
        return len(self.exercises)

    def __contains__(self, exercise_id: object) -> bool:
        return any(ex.exercise_id == exercise_id for ex in self.exercises)

    def get(self, exercise_id: str) -> Exercise:
        """
        Return the Exercise with the given id.

        Raises:
            KeyError: If exercise_id is not in the catalog
        """
        for ex in self.exercises:
            if ex.exercise_id == exercise_id:
                return ex
        for ex in self.recovery_flow:
            if ex.exercise_id == exercise_id:
                return ex
        valid = ", ".join(ex.exercise_id for ex in self.exercises)
        raise KeyError(f"Unknown exercise '{exercise_id}'. Valid IDs: {valid}")


@lru_cache(maxsize=1)
def get_catalog() -> ExerciseCatalog:
    """
    Return the catalog loaded from bundled YAML and the user override file.

    The result is cached for the life of the process; it is immutable.

    Raises:
        RuntimeError: If the bundled exercise files cannot be loaded
    """
    from .loader import load_catalog_entries, load_recovery_entries

    return ExerciseCatalog.from_exercises(load_catalog_entries(), load_recovery_entries())
