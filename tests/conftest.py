"""Shared fixtures: an isolated data directory and the bundled catalog."""

import pytest

from rep_coach.core.exercises.registry import ExerciseCatalog, get_catalog
from rep_coach.core.models import UserProfile


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point REP_COACH_HOME at an empty directory so user overrides never leak in."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("REP_COACH_HOME", str(home))
    get_catalog.cache_clear()
    yield home
    get_catalog.cache_clear()


@pytest.fixture
def catalog() -> ExerciseCatalog:
    return get_catalog()


def make_profile(**overrides) -> UserProfile:
    """80 kg / 180 cm / 30 y intermediate with every equipment type, unless overridden."""
    data = dict(
        weight_kg=80.0,
        height_cm=180.0,
        age=30,
        experience="intermediate",
        goal="strength",
        sex="male",
        equipment=frozenset({"barbell", "dumbbell", "machine"}),
    )
    data.update(overrides)
    return UserProfile(**data)
