"""
Configuration and catalog loading tests.

User files are written to the isolated REP_COACH_HOME set up in conftest.
"""

import pytest

from rep_coach.core.config import (
    COMPLETION_BONUS_XP,
    GOAL_PARAMS,
    OVERLOAD_FACTOR,
    XP_PER_LEVEL,
    XP_PER_SET,
    CoachSettings,
)
from rep_coach.core.engine.config_loader import (
    get_data_dir,
    load_settings,
    settings_from_dict,
)
from rep_coach.core.errors import ValidationError
from rep_coach.core.exercises.loader import exercise_from_dict, load_catalog_entries
from rep_coach.core.exercises.registry import ExerciseCatalog, get_catalog


class TestCoachSettings:

    def test_defaults_match_constants(self):
        s = CoachSettings()
        assert s.xp_per_set == XP_PER_SET == 10
        assert s.completion_bonus_xp == COMPLETION_BONUS_XP == 100
        assert s.xp_per_level == XP_PER_LEVEL == 500
        assert s.overload_factor == OVERLOAD_FACTOR == 1.025

    def test_sets_for_mode(self):
        s = CoachSettings()
        assert s.sets_for_mode("standard") == 4
        assert s.sets_for_mode("recovery") == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"standard_sets_per_exercise": 0},
            {"recovery_sets_per_exercise": 0},
            {"xp_per_level": 0},
            {"overload_factor": 0.9},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            CoachSettings(**kwargs)

    def test_goal_matrix(self):
        assert GOAL_PARAMS["strength"].rep_range == "3-6"
        assert GOAL_PARAMS["fat_loss"].max_exercises == 8
        assert GOAL_PARAMS["muscle"].intensity == 0.75


class TestLoadSettings:

    def test_bundled_defaults(self):
        assert load_settings() == CoachSettings()

    def test_data_dir_from_env(self, isolated_home):
        assert get_data_dir() == isolated_home

    def test_user_override_merges(self, isolated_home):
        (isolated_home / "coach.yaml").write_text("rewards:\n  xp_per_set: 20\n")
        s = load_settings()
        assert s.xp_per_set == 20
        assert s.completion_bonus_xp == 100
        assert s.standard_sets_per_exercise == 4

    def test_malformed_user_file_ignored(self, isolated_home):
        (isolated_home / "coach.yaml").write_text("rewards: [unclosed\n")
        assert load_settings() == CoachSettings()

    def test_unknown_keys_ignored(self):
        s = settings_from_dict({"session": {"warmup_minutes": 10}, "other": {"x": 1}})
        assert s == CoachSettings()

    def test_known_keys_from_both_sections(self):
        s = settings_from_dict({
            "session": {"recovery_sets_per_exercise": 2},
            "rewards": {"xp_per_level": 1000, "overload_factor": 1},
        })
        assert s.recovery_sets_per_exercise == 2
        assert s.xp_per_level == 1000
        assert isinstance(s.overload_factor, float)

    def test_invalid_value_falls_back(self, isolated_home):
        (isolated_home / "coach.yaml").write_text("rewards:\n  overload_factor: 0.5\n")
        assert load_settings() == CoachSettings()

    def test_settings_from_dict_raises_on_invalid(self):
        with pytest.raises(ValueError):
            settings_from_dict({"session": {"standard_sets_per_exercise": 0}})


class TestCatalog:

    def test_bundled_catalog(self, catalog):
        assert len(catalog) == 20
        assert [ex.exercise_id for ex in catalog.recovery_flow] == [
            "cat_cow", "world_greatest_stretch", "child_pose", "glute_bridge_iso", "plank",
        ]
        assert "squat" in catalog
        assert catalog.get("squat").load_ratio == 1.2
        assert catalog.get("cat_cow").load_ratio == 0.0

    def test_unknown_id(self, catalog):
        with pytest.raises(KeyError):
            catalog.get("moon_jump")

    def test_duplicate_ids_rejected(self, catalog):
        squat = catalog.get("squat")
        with pytest.raises(ValueError):
            ExerciseCatalog.from_exercises([squat, squat])

    def test_missing_fields(self):
        with pytest.raises(ValidationError):
            exercise_from_dict({"exercise_id": "x", "display_name": "X"})

    def test_bad_load_ratio(self):
        with pytest.raises(ValidationError):
            exercise_from_dict({
                "exercise_id": "x",
                "display_name": "X",
                "target": "T",
                "equipment": "bodyweight",
                "impact": "low",
                "focus_area": "core",
                "load_ratio": "heavy",
            })

    def test_user_overrides_and_additions(self, isolated_home):
        (isolated_home / "exercises.yaml").write_text(
            "exercises:\n"
            "  - exercise_id: squat\n"
            "    load_ratio: 1.0\n"
            "  - exercise_id: kettlebell_swing\n"
            "    display_name: Kettlebell Swing\n"
            "    target: Posterior chain\n"
            "    equipment: dumbbell\n"
            "    impact: low\n"
            "    focus_area: glutes\n"
            "    load_ratio: 0.3\n"
            "  - exercise_id: broken\n"
            "    display_name: Broken\n"
        )
        catalog = get_catalog()
        assert catalog.get("squat").load_ratio == 1.0
        assert catalog.get("squat").display_name == "Back Squat"
        assert catalog.get("kettlebell_swing").focus_area == "glutes"
        assert "broken" not in catalog
        assert len(catalog) == 21

    def test_explicit_user_path(self, tmp_path):
        path = tmp_path / "mine.yaml"
        path.write_text("exercises:\n  - exercise_id: deadlift\n    impact: high\n")
        exercises = {ex.exercise_id: ex for ex in load_catalog_entries(user_path=path)}
        assert exercises["deadlift"].impact == "high"
