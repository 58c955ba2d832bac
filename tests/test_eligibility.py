"""
Eligibility filter tests: safety (age/BMI) and equipment rules.
"""

from conftest import make_profile
from rep_coach.core.eligibility import effective_bmi, filter_eligible, is_high_risk
from rep_coach.core.exercises.base import Exercise


def _ex(exercise_id: str, equipment: str = "bodyweight", impact: str = "low") -> Exercise:
    return Exercise(
        exercise_id=exercise_id,
        display_name=exercise_id.title(),
        target="Test",
        equipment=equipment,
        impact=impact,
        focus_area="full_body",
        load_ratio=0.5 if equipment != "cardio" else 0.0,
    )


MINI_CATALOG = [
    _ex("jump_squat", "bodyweight", "high"),
    _ex("pushup", "bodyweight"),
    _ex("squat", "barbell", "high"),
    _ex("bench", "barbell"),
    _ex("curl", "dumbbell"),
    _ex("leg_press", "machine"),
    _ex("sprint", "cardio", "high"),
]


def _ids(exercises) -> list[str]:
    return [ex.exercise_id for ex in exercises]


class TestRiskAssessment:
    """High risk = age > 50 or BMI > 30; missing height means BMI 22."""

    def test_age_boundary(self):
        assert not is_high_risk(make_profile(age=50))
        assert is_high_risk(make_profile(age=51))

    def test_bmi_boundary(self):
        # 80 kg at 160 cm → 80 / 1.6² = 31.25
        assert is_high_risk(make_profile(height_cm=160.0))
        # 80 kg at 180 cm → 24.7
        assert not is_high_risk(make_profile(height_cm=180.0))

    def test_missing_height_uses_neutral_bmi(self):
        profile = make_profile(weight_kg=150.0, height_cm=None)
        assert effective_bmi(profile) == 22.0
        assert not is_high_risk(profile)


class TestFilterEligible:

    def test_full_equipment_low_risk_keeps_everything(self):
        profile = make_profile()
        assert _ids(filter_eligible(MINI_CATALOG, profile)) == _ids(MINI_CATALOG)

    def test_high_risk_removes_high_impact(self):
        profile = make_profile(age=60)
        assert _ids(filter_eligible(MINI_CATALOG, profile)) == [
            "pushup", "bench", "curl", "leg_press",
        ]

    def test_no_equipment_keeps_bodyweight_and_cardio(self):
        profile = make_profile(equipment=frozenset())
        assert _ids(filter_eligible(MINI_CATALOG, profile)) == ["jump_squat", "pushup", "sprint"]

    def test_partial_equipment(self):
        profile = make_profile(equipment=frozenset({"dumbbell"}))
        assert "curl" in _ids(filter_eligible(MINI_CATALOG, profile))
        assert "bench" not in _ids(filter_eligible(MINI_CATALOG, profile))
        assert "leg_press" not in _ids(filter_eligible(MINI_CATALOG, profile))

    def test_both_rules_combine(self):
        profile = make_profile(age=65, equipment=frozenset())
        assert _ids(filter_eligible(MINI_CATALOG, profile)) == ["pushup"]

    def test_catalog_is_not_mutated(self):
        catalog = list(MINI_CATALOG)
        filter_eligible(catalog, make_profile(age=70, equipment=frozenset()))
        assert catalog == MINI_CATALOG

    def test_bundled_catalog_high_risk(self, catalog):
        pool = filter_eligible(catalog, make_profile(age=55))
        assert all(ex.impact == "low" for ex in pool)
        assert "squat" not in _ids(pool)
        assert "burpees" not in _ids(pool)
