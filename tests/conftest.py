"""Pytest configuration and shared fixtures."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from fastpath.persistence.memory_store import InMemoryRecordStore
from fastpath.persistence.sqlite_store import SQLiteRecordStore
from fastpath.state.models import FastingGoal, FastingRecord

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)
HOUR = 3600.0


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: datetime = T0):
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, seconds: float) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(seconds=seconds)
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteRecordStore:
    return SQLiteRecordStore(str(tmp_path / "fastpath_test.db"))


@pytest.fixture
def sixteen_hour_goal() -> FastingGoal:
    return FastingGoal(target_duration=16 * HOUR, name="16-Hour Fast")


@pytest.fixture
def completed_record() -> FastingRecord:
    return FastingRecord(
        id="completed-1",
        start_time=T0 - timedelta(days=1),
        end_time=T0 - timedelta(days=1) + timedelta(hours=14),
    )
