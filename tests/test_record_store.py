"""
JSON record store and result sync tests.
"""

import json

import pytest

from conftest import make_profile
from rep_coach.core.errors import PersistenceError, ValidationError
from rep_coach.core.models import SessionResult
from rep_coach.io.record_store import DEFAULT_USER_ID, RecordStore
from rep_coach.io.sync import ResultSync, duration_minutes


@pytest.fixture
def store(tmp_path) -> RecordStore:
    return RecordStore(tmp_path / "data")


def _result(**overrides) -> SessionResult:
    data = dict(
        mode="standard",
        elapsed_seconds=1850,
        xp_earned=300,
        total_xp=300,
        level=1,
        leveled_up=False,
        personal_records={"squat": 61.25},
        improved_records={"squat": 61.25},
    )
    data.update(overrides)
    return SessionResult(**data)


class FlakyStore(RecordStore):
    """RecordStore whose workout-log writes fail until `failing` is cleared."""

    failing = True

    def record_session(self, *args, **kwargs):
        if self.failing:
            raise PersistenceError("disk full")
        return super().record_session(*args, **kwargs)


class RecordsFailStore(RecordStore):
    """RecordStore whose record writes fail until `failing` is cleared."""

    failing = True

    def set_personal_records(self, *args, **kwargs):
        if self.failing:
            raise PersistenceError("records.json is read-only")
        return super().set_personal_records(*args, **kwargs)


class AchievementFailStore(RecordStore):
    """RecordStore whose first achievement write fails."""

    failures_left = 1

    def unlock_achievement(self, *args, **kwargs):
        if self.failures_left:
            self.failures_left -= 1
            raise PersistenceError("achievements.json is read-only")
        return super().unlock_achievement(*args, **kwargs)


class TestProfile:

    def test_missing_profile_is_none(self, store):
        assert not store.exists()
        assert store.load_profile() is None

    def test_round_trip(self, store):
        profile = make_profile(
            sleep_quality="poor",
            personal_records={"squat": 80.0},
        )
        store.save_profile(profile)
        loaded = store.load_profile()
        assert loaded == profile
        # Records live in records.json, not in the profile file
        raw = json.loads(store.profile_path.read_text())
        assert "personal_records" not in raw
        assert raw["equipment"] == ["barbell", "dumbbell", "machine"]

    def test_missing_height_round_trips(self, store):
        store.save_profile(make_profile(height_cm=None))
        assert store.load_profile().height_cm is None

    def test_corrupt_file_raises_persistence_error(self, store):
        store.data_dir.mkdir(parents=True)
        store.profile_path.write_text("{not json")
        with pytest.raises(PersistenceError):
            store.load_profile()

    def test_invalid_profile_raises_validation_error(self, store):
        store.save_profile(make_profile())
        raw = json.loads(store.profile_path.read_text())
        raw["weight_kg"] = -5
        store.profile_path.write_text(json.dumps(raw))
        with pytest.raises(ValidationError):
            store.load_profile()

    def test_progress_defaults_and_updates(self, store):
        assert store.load_progress() == (0, 1)
        store.save_profile(make_profile())
        store.save_progress(650, 2)
        assert store.load_progress() == (650, 2)

    def test_resaving_profile_keeps_progress(self, store):
        store.save_profile(make_profile())
        store.save_progress(650, 2)
        store.save_profile(make_profile(goal="muscle"))
        assert store.load_progress() == (650, 2)
        assert store.load_profile().goal == "muscle"

    def test_progress_without_profile_raises(self, store):
        with pytest.raises(PersistenceError):
            store.save_progress(10, 1)


class TestWorkoutLog:

    def test_record_session_appends_entry(self, store):
        store.record_session("u1", "Standard Session", 31, 3, completed_at="2026-03-01T10:00:00")
        assert store.load_workout_log() == [
            {
                "user_id": "u1",
                "workout_type": "Standard Session",
                "duration": 31,
                "intensity": 3,
                "completed_at": "2026-03-01T10:00:00",
            }
        ]

    def test_filter_by_user(self, store):
        store.record_session("u1", "Standard Session", 30, 3)
        store.record_session("u2", "Active Recovery", 5, 3)
        store.record_session("u1", "Active Recovery", 6, 3)
        assert len(store.load_workout_log("u1")) == 2
        assert len(store.load_workout_log()) == 3

    def test_first_workout_unlocked_once(self, store):
        store.record_session("u1", "Standard Session", 30, 3)
        store.record_session("u1", "Standard Session", 30, 3)
        assert store.get_achievements("u1") == ["first_workout"]

    def test_corrupt_line_raises(self, store):
        store.record_session("u1", "Standard Session", 30, 3)
        with open(store.log_path, "a") as f:
            f.write("garbage\n")
        with pytest.raises(PersistenceError):
            store.load_workout_log()

    def test_negative_duration_rejected(self, store):
        with pytest.raises(ValidationError):
            store.record_session("u1", "Standard Session", -1, 3)


class TestRecordsAndAchievements:

    def test_records_are_per_user(self, store):
        store.set_personal_records("u1", {"squat": 60.0})
        store.set_personal_records("u2", {"bench_press": 40.0})
        assert store.get_personal_records("u1") == {"squat": 60.0}
        assert store.get_personal_records("u2") == {"bench_press": 40.0}
        assert store.get_personal_records("nobody") == {}

    def test_set_replaces_mapping(self, store):
        store.set_personal_records("u1", {"squat": 60.0, "deadlift": 90.0})
        store.set_personal_records("u1", {"squat": 61.25})
        assert store.get_personal_records("u1") == {"squat": 61.25}

    def test_negative_record_rejected(self, store):
        with pytest.raises(ValidationError):
            store.set_personal_records("u1", {"squat": -1.0})

    def test_unlock_is_idempotent(self, store):
        assert store.unlock_achievement("u1", "streak_3")
        assert not store.unlock_achievement("u1", "streak_3")
        assert store.get_achievements("u1") == ["streak_3"]


class TestResultSync:

    def test_duration_rounds_up(self):
        assert duration_minutes(0) == 0
        assert duration_minutes(60) == 1
        assert duration_minutes(61) == 2

    def test_successful_save(self, store):
        store.save_profile(make_profile())
        sync = ResultSync(store)
        assert sync.save(DEFAULT_USER_ID, _result()) == "synced"
        assert store.get_personal_records(DEFAULT_USER_ID) == {"squat": 61.25}
        assert store.load_progress() == (300, 1)
        [entry] = store.load_workout_log(DEFAULT_USER_ID)
        # 1850 s → 31 min
        assert entry["duration"] == 31
        assert entry["workout_type"] == "Standard Session"
        assert entry["intensity"] == 3
        assert store.get_achievements(DEFAULT_USER_ID) == ["first_workout"]

    def test_recovery_label(self, store):
        store.save_profile(make_profile())
        ResultSync(store).save(DEFAULT_USER_ID, _result(mode="recovery", personal_records={}))
        assert store.load_workout_log()[0]["workout_type"] == "Active Recovery"

    def test_failure_is_queued_not_raised(self, tmp_path):
        store = FlakyStore(tmp_path / "data")
        store.save_profile(make_profile())
        sync = ResultSync(store)
        assert sync.save(DEFAULT_USER_ID, _result()) == "failed"
        assert len(sync.pending) == 1
        assert store.pending_path.exists()

    def test_pending_survives_restart_and_retries(self, tmp_path):
        store = FlakyStore(tmp_path / "data")
        store.save_profile(make_profile())
        ResultSync(store).save(DEFAULT_USER_ID, _result())

        restarted = ResultSync(store)
        assert restarted.status == "pending"
        assert restarted.retry() == "failed"

        store.failing = False
        assert restarted.retry() == "synced"
        assert restarted.pending == []
        assert not store.pending_path.exists()
        assert len(store.load_workout_log()) == 1
        # Progress was applied on the first attempt and is not added again
        assert store.load_progress() == (300, 1)

    def test_retry_with_nothing_pending(self, store):
        assert ResultSync(store).retry() == "synced"

    def test_retry_merges_with_later_sessions(self, tmp_path):
        """A result retried after a newer session adds to it instead of replacing it."""
        store = RecordsFailStore(tmp_path / "data")
        store.save_profile(make_profile())
        sync = ResultSync(store)
        sync.save(DEFAULT_USER_ID, _result())

        store.failing = False
        sync.save(
            DEFAULT_USER_ID,
            _result(
                personal_records={"bench_press": 51.25},
                improved_records={"bench_press": 51.25},
            ),
        )
        assert sync.retry() == "synced"

        # 300 + 300 XP → level 2
        assert store.load_progress() == (600, 2)
        assert store.get_personal_records(DEFAULT_USER_ID) == {
            "bench_press": 51.25,
            "squat": 61.25,
        }
        assert len(store.load_workout_log()) == 2

    def test_retry_keeps_heavier_stored_record(self, tmp_path):
        store = RecordsFailStore(tmp_path / "data")
        store.save_profile(make_profile())
        sync = ResultSync(store)
        sync.save(DEFAULT_USER_ID, _result())

        store.failing = False
        store.set_personal_records(DEFAULT_USER_ID, {"squat": 70.0})
        sync.retry()
        assert store.get_personal_records(DEFAULT_USER_ID) == {"squat": 70.0}

    def test_failed_achievement_does_not_duplicate_log(self, tmp_path):
        store = AchievementFailStore(tmp_path / "data")
        store.save_profile(make_profile())
        sync = ResultSync(store)
        assert sync.save(DEFAULT_USER_ID, _result()) == "failed"
        assert store.load_workout_log() == []

        assert sync.retry() == "synced"
        assert len(store.load_workout_log()) == 1
        assert store.get_achievements(DEFAULT_USER_ID) == ["first_workout"]
        assert store.load_progress() == (300, 1)

    def test_applied_steps_survive_restart(self, tmp_path):
        store = FlakyStore(tmp_path / "data")
        store.save_profile(make_profile())
        ResultSync(store).save(DEFAULT_USER_ID, _result())

        [entry] = json.loads(store.pending_path.read_text())
        assert entry["done"] == ["records", "progress"]

    def test_xp_per_level_setting(self, store):
        store.save_profile(make_profile())
        ResultSync(store, xp_per_level=100).save(DEFAULT_USER_ID, _result())
        # 300 XP at 100 per level → level 4
        assert store.load_progress() == (300, 4)
