"""
Saving session results with a retry queue.

A completed session must never be lost because the store failed: results that
cannot be saved stay in memory and in pending_sync.json until retry() succeeds.

A result is applied to the store as deltas, in three steps:

    records   each improved record merged in (the heavier weight wins)
    progress  xp_earned added to the stored XP, level recomputed
    log       one workout log line

Steps already applied are remembered with the queued result, so a retry
never repeats them, and results saved in between are never overwritten.

Status:
    synced   nothing waiting
    pending  results waiting that have not been retried in this process
    failed   the last save or retry attempt failed
"""

import math
from dataclasses import dataclass, field
from typing import Literal

from loguru import logger

from ..core.config import MODE_LABELS, SESSION_INTENSITY_LABEL, XP_PER_LEVEL
from ..core.errors import PersistenceError
from ..core.models import SessionResult
from ..core.progression import level_for_xp
from .record_store import RecordStore
from .serializers import ValidationError, dict_to_session_result, session_result_to_dict

SyncStatus = Literal["synced", "pending", "failed"]

SYNC_STEPS: tuple[str, ...] = ("records", "progress", "log")


def duration_minutes(elapsed_seconds: int) -> int:
    """Whole minutes, rounded up."""
    return math.ceil(elapsed_seconds / 60)


@dataclass
class PendingResult:
    """A session result waiting to be saved, with the steps already applied."""

    user_id: str
    result: SessionResult
    done: set[str] = field(default_factory=set)


class ResultSync:
    """
    Writes SessionResults through a RecordStore, queueing failures.

    Args:
        store: Persistence collaborator
        xp_per_level: XP per level used when recomputing the stored level
    """

    def __init__(self, store: RecordStore, xp_per_level: int = XP_PER_LEVEL):
        self.store = store
        self.xp_per_level = xp_per_level
        self._failed = False
        self._pending: list[PendingResult] = self._load_pending()

    @property
    def status(self) -> SyncStatus:
        if not self._pending:
            return "synced"
        return "failed" if self._failed else "pending"

    @property
    def pending(self) -> list[tuple[str, SessionResult]]:
        """(user_id, result) pairs not yet fully saved."""
        return [(p.user_id, p.result) for p in self._pending]

    def save(self, user_id: str, result: SessionResult) -> SyncStatus:
        """
        Save one session result: records, XP/level, then the workout log entry.

        Returns:
            Sync status after the attempt; a failure never raises
        """
        entry = PendingResult(user_id, result)
        try:
            self._apply(entry)
        except PersistenceError as e:
            logger.warning(f"Session result queued for retry: {e}")
            self._pending.append(entry)
            self._failed = True
            self._persist_pending()
        return self.status

    def retry(self) -> SyncStatus:
        """Re-attempt every queued result, keeping those that still fail."""
        if not self._pending:
            return self.status

        remaining: list[PendingResult] = []
        for entry in self._pending:
            try:
                self._apply(entry)
            except PersistenceError as e:
                logger.warning(f"Retry failed: {e}")
                remaining.append(entry)

        synced = len(self._pending) - len(remaining)
        self._pending = remaining
        self._failed = bool(remaining)
        self._persist_pending()
        if synced:
            logger.info(f"Synced {synced} pending session result(s)")
        return self.status

    def _apply(self, entry: PendingResult) -> None:
        for step in SYNC_STEPS:
            if step in entry.done:
                continue
            getattr(self, f"_write_{step}")(entry.user_id, entry.result)
            entry.done.add(step)

    def _write_records(self, user_id: str, result: SessionResult) -> None:
        records = self.store.get_personal_records(user_id)
        for exercise_id, weight in result.improved_records.items():
            if weight > records.get(exercise_id, 0.0):
                records[exercise_id] = weight
        self.store.set_personal_records(user_id, records)

    def _write_progress(self, user_id: str, result: SessionResult) -> None:
        xp, level = self.store.load_progress()
        xp += result.xp_earned
        self.store.save_progress(xp, max(level, level_for_xp(xp, self.xp_per_level)))

    def _write_log(self, user_id: str, result: SessionResult) -> None:
        self.store.record_session(
            user_id,
            MODE_LABELS[result.mode],
            duration_minutes(result.elapsed_seconds),
            SESSION_INTENSITY_LABEL,
        )

    def _load_pending(self) -> list[PendingResult]:
        try:
            raw = self.store.load_pending()
        except PersistenceError as e:
            logger.warning(f"Could not read pending sync queue: {e}")
            return []
        pending: list[PendingResult] = []
        for entry in raw:
            try:
                pending.append(
                    PendingResult(
                        user_id=str(entry["user_id"]),
                        result=dict_to_session_result(entry["result"]),
                        done=set(entry.get("done", [])) & set(SYNC_STEPS),
                    )
                )
            except (KeyError, TypeError, AttributeError, ValidationError) as e:
                logger.warning(f"Dropping malformed pending sync entry: {e}")
        return pending

    def _persist_pending(self) -> None:
        entries = [
            {
                "user_id": p.user_id,
                "result": session_result_to_dict(p.result),
                "done": [step for step in SYNC_STEPS if step in p.done],
            }
            for p in self._pending
        ]
        try:
            self.store.save_pending(entries)
        except PersistenceError as e:
            logger.warning(f"Pending sync queue kept in memory only: {e}")
