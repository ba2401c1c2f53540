"""In-memory record store, used for tests and ephemeral sessions."""

import threading
from typing import Optional

import structlog

from ..state.models import FastingGoal, FastingRecord
from .base import RecordStore, check_update


class InMemoryRecordStore(RecordStore):
    """Thread-safe record store that keeps everything in process memory."""

    def __init__(self):
        self.logger = structlog.get_logger("fastpath.store")
        self._lock = threading.Lock()
        self._records: dict[str, FastingRecord] = {}
        self._goals: dict[str, FastingGoal] = {}
        self._selected_goal_name: Optional[str] = None

    def save(self, record: FastingRecord) -> FastingRecord:
        with self._lock:
            if record.is_active:
                existing = self._active_locked()
                if existing is not None and existing.id != record.id:
                    self.logger.warning(
                        "Active record already exists, not inserting",
                        requested_id=record.id,
                        record_id=existing.id
                    )
                    return existing

            self._records[record.id] = record
            return record

    def update(self, record: FastingRecord) -> FastingRecord:
        with self._lock:
            check_update(self._records.get(record.id), record)
            self._records[record.id] = record
            return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def list_all(self) -> list[FastingRecord]:
        with self._lock:
            # Equal start times: most recently inserted first
            ordered = sorted(
                enumerate(self._records.values()),
                key=lambda item: (item[1].start_time, item[0]),
                reverse=True
            )
            return [record for _, record in ordered]

    def get_active(self) -> Optional[FastingRecord]:
        with self._lock:
            return self._active_locked()

    def _active_locked(self) -> Optional[FastingRecord]:
        active = [r for r in self._records.values() if r.is_active]
        if not active:
            return None
        return max(active, key=lambda r: r.start_time)

    def save_goal(self, goal: Optional[FastingGoal]) -> None:
        with self._lock:
            if goal is None:
                self._selected_goal_name = None
                return
            self._goals[goal.name] = goal
            self._selected_goal_name = goal.name

    def get_goal(self) -> Optional[FastingGoal]:
        with self._lock:
            if self._selected_goal_name is None:
                return None
            return self._goals.get(self._selected_goal_name)

    def get_goal_by_name(self, name: str) -> Optional[FastingGoal]:
        with self._lock:
            return self._goals.get(name)

    def list_goals(self) -> list[FastingGoal]:
        with self._lock:
            return sorted(self._goals.values(), key=lambda g: (g.target_duration, g.name))

    def delete_goal(self, name: str) -> bool:
        with self._lock:
            if self._selected_goal_name == name:
                self._selected_goal_name = None
            return self._goals.pop(name, None) is not None

    def _insert_goal_definitions(self, goals: tuple[FastingGoal, ...]) -> None:
        with self._lock:
            for goal in goals:
                self._goals[goal.name] = goal
