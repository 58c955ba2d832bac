"""
JSON-file storage for profiles, workout logs, personal records and progress.

Layout of the data directory:

    profile.json          serialized UserProfile plus "xp" and "level"
    workout_log.jsonl     one line per recorded session
    records.json          {user_id: {exercise_id: weight_kg}}
    achievements.json     {user_id: [achievement_id, ...]}
    pending_sync.json     session results waiting to be saved (see sync.py)

Every read or write failure is raised as PersistenceError.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from ..core.engine.config_loader import get_data_dir
from ..core.errors import PersistenceError
from ..core.models import UserProfile
from .serializers import (
    ValidationError,
    dict_to_user_profile,
    to_json,
    user_profile_to_dict,
    validate_non_negative,
)

DEFAULT_USER_ID = "local"
FIRST_WORKOUT = "first_workout"


class RecordStore:
    """
    Persistence collaborator backed by JSON files in one directory.

    The profile file holds a single local user; records, achievements and the
    workout log are keyed by user id.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the data files (created on first write)
        """
        self.data_dir = Path(data_dir)
        self.profile_path = self.data_dir / "profile.json"
        self.log_path = self.data_dir / "workout_log.jsonl"
        self.records_path = self.data_dir / "records.json"
        self.achievements_path = self.data_dir / "achievements.json"
        self.pending_path = self.data_dir / "pending_sync.json"

    def exists(self) -> bool:
        """Check if a profile has been saved."""
        return self.profile_path.exists()

    # ── Low-level file access ───────────────────────────────────────────────

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with open(path, "r") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e

    def _write_json(self, path: Path, data: Any) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e

    # ── Profile & progress ──────────────────────────────────────────────────

    def load_profile(self, user_id: str = DEFAULT_USER_ID) -> UserProfile | None:
        """
        Load the user profile, with personal records attached from records.json.

        Returns:
            UserProfile, or None if no profile has been saved

        Raises:
            PersistenceError: If a file cannot be read
            ValidationError: If the stored profile is invalid
        """
        data = self._read_json(self.profile_path, None)
        if data is None:
            return None
        data = dict(data)
        data["personal_records"] = self.get_personal_records(user_id)
        try:
            return dict_to_user_profile(data)
        except ValidationError as e:
            raise ValidationError(f"Invalid profile in {self.profile_path}: {e}") from e

    def save_profile(
        self,
        profile: UserProfile,
        xp: int | None = None,
        level: int | None = None,
        user_id: str = DEFAULT_USER_ID,
    ) -> None:
        """
        Save the profile; XP and level are kept unless given.

        Personal records carried by the profile go to records.json.
        """
        prior_xp, prior_level = self.load_progress()
        data = user_profile_to_dict(profile)
        records = data.pop("personal_records")
        data["xp"] = prior_xp if xp is None else xp
        data["level"] = prior_level if level is None else level
        self._write_json(self.profile_path, data)
        if records:
            self.set_personal_records(user_id, records)
        logger.debug(f"Saved profile to {self.profile_path}")

    def load_progress(self) -> tuple[int, int]:
        """Return (total_xp, level); (0, 1) before the first session."""
        data = self._read_json(self.profile_path, {})
        return int(data.get("xp", 0)), int(data.get("level", 1))

    def save_progress(self, xp: int, level: int) -> None:
        """
        Update XP and level in profile.json.

        Raises:
            PersistenceError: If no profile exists or the file cannot be written
        """
        data = self._read_json(self.profile_path, None)
        if data is None:
            raise PersistenceError(
                f"Profile not found: {self.profile_path}. Run 'init' first."
            )
        data["xp"] = xp
        data["level"] = level
        self._write_json(self.profile_path, data)

    # ── Workout log ─────────────────────────────────────────────────────────

    def record_session(
        self,
        user_id: str,
        mode_label: str,
        duration_minutes: int,
        intensity: int,
        completed_at: str | None = None,
    ) -> None:
        """
        Append one completed session to the workout log.

        The first recorded session also unlocks the "first_workout" achievement.
        The unlock happens before the append, so a failed call never leaves a
        logged line behind.

        Args:
            user_id: Owner of the session
            mode_label: "Standard Session" or "Active Recovery"
            duration_minutes: Session length, rounded up to whole minutes
            intensity: Coarse intensity label
            completed_at: ISO timestamp (now if None)
        """
        validate_non_negative(duration_minutes, "duration_minutes")
        entry = {
            "user_id": user_id,
            "workout_type": mode_label,
            "duration": duration_minutes,
            "intensity": intensity,
            "completed_at": completed_at or datetime.now().isoformat(timespec="seconds"),
        }
        self.unlock_achievement(user_id, FIRST_WORKOUT)

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a") as f:
                f.write(to_json(entry) + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise PersistenceError(f"Could not append to {self.log_path}: {e}") from e

        logger.info(f"Recorded {mode_label} ({duration_minutes} min) for {user_id}")

    def load_workout_log(self, user_id: str | None = None) -> list[dict]:
        """
        Load logged sessions, oldest first.

        Args:
            user_id: Only this user's entries if given

        Raises:
            PersistenceError: If the log cannot be read or a line is corrupt
        """
        if not self.log_path.exists():
            return []
        entries: list[dict] = []
        try:
            with open(self.log_path, "r") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError as e:
                        raise PersistenceError(
                            f"Error parsing line {line_num} in {self.log_path}: {e}"
                        ) from e
                    if user_id is None or data.get("user_id") == user_id:
                        entries.append(data)
        except OSError as e:
            raise PersistenceError(f"Could not read {self.log_path}: {e}") from e
        return entries

    # ── Personal records ────────────────────────────────────────────────────

    def get_personal_records(self, user_id: str) -> dict[str, float]:
        """Return {exercise_id: weight_kg} for a user (empty if none)."""
        all_records = self._read_json(self.records_path, {})
        return {k: float(v) for k, v in all_records.get(user_id, {}).items()}

    def set_personal_records(self, user_id: str, records: dict[str, float]) -> None:
        """Replace a user's personal records."""
        for exercise_id, weight in records.items():
            validate_non_negative(weight, f"record for {exercise_id}")
        all_records = self._read_json(self.records_path, {})
        all_records[user_id] = {k: float(v) for k, v in sorted(records.items())}
        self._write_json(self.records_path, all_records)
        logger.debug(f"Saved {len(records)} personal records for {user_id}")

    # ── Achievements ────────────────────────────────────────────────────────

    def get_achievements(self, user_id: str) -> list[str]:
        return list(self._read_json(self.achievements_path, {}).get(user_id, []))

    def unlock_achievement(self, user_id: str, achievement_id: str) -> bool:
        """
        Unlock an achievement.

        Returns:
            True if newly unlocked, False if the user already had it
        """
        data = self._read_json(self.achievements_path, {})
        unlocked = data.setdefault(user_id, [])
        if achievement_id in unlocked:
            return False
        unlocked.append(achievement_id)
        self._write_json(self.achievements_path, data)
        logger.info(f"Achievement unlocked for {user_id}: {achievement_id}")
        return True

    # ── Pending sync queue ──────────────────────────────────────────────────

    def load_pending(self) -> list[dict]:
        return list(self._read_json(self.pending_path, []))

    def save_pending(self, entries: list[dict]) -> None:
        """Write the pending queue; an empty queue removes the file."""
        if not entries:
            try:
                self.pending_path.unlink(missing_ok=True)
            except OSError as e:
                raise PersistenceError(f"Could not remove {self.pending_path}: {e}") from e
            return
        self._write_json(self.pending_path, entries)


def get_default_store() -> RecordStore:
    """
    Get a RecordStore in the default data directory.

    Returns:
        RecordStore instance
    """
    return RecordStore(get_data_dir())
