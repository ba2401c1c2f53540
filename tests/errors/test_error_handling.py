"""
Error handling tests for the fasting core.

Covers the error classification hierarchy and how persistence and live
surface failures degrade instead of propagating.
"""

import sqlite3
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from fastpath.errors import (
    FastingDataError,
    GracefulDegradationError,
    InvalidGoalError,
    InvalidRecordError,
    LiveSurfaceUnavailableError,
    MissingDataError,
    PersistenceError,
    StateTransitionError,
    SystemFailureError,
)
from fastpath.live.base import NullLivePublisher
from fastpath.state.models import FastingRecord

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


class TestErrorClassification:
    """Test error classification system."""

    def test_data_error_hierarchy(self):
        base_error = FastingDataError("base error")
        assert base_error.recoverable is True
        assert base_error.context == {}

        goal_error = InvalidGoalError("bad goal", goal_name="x", target_duration=-1)
        assert isinstance(goal_error, FastingDataError)
        assert goal_error.goal_name == "x"
        assert goal_error.target_duration == -1

        record_error = InvalidRecordError("bad record", record_id="r1", context={"k": "v"})
        assert record_error.record_id == "r1"
        assert record_error.context == {"k": "v"}

        missing_error = MissingDataError("missing", data_type="fasting_record")
        assert missing_error.data_type == "fasting_record"

    def test_system_failure_hierarchy(self):
        transition_error = StateTransitionError(
            "no handler", current_state="idle", attempted_transition="Unknown"
        )
        assert isinstance(transition_error, SystemFailureError)
        assert transition_error.recoverable is False
        assert transition_error.current_state == "idle"

        persistence_error = PersistenceError("write failed", operation="save", target="r1")
        assert persistence_error.recoverable is True
        assert persistence_error.operation == "save"
        assert persistence_error.target == "r1"

    def test_persistence_error_can_be_fatal(self):
        error = PersistenceError("schema broken", operation="init", recoverable=False)

        assert error.recoverable is False

    def test_degradation_errors(self):
        error = LiveSurfaceUnavailableError("no surface", publisher="file")

        assert isinstance(error, GracefulDegradationError)
        assert error.allows_degradation is True
        assert error.degraded_functionality == "live_surface"
        assert error.fallback_strategy == "in_app_status_only"
        assert error.publisher == "file"


class TestFailureDegradation:
    """Test that collaborator failures surface as typed errors or degrade."""

    def test_sqlite_failure_wrapped_on_save(self, sqlite_store):
        with patch("fastpath.persistence.sqlite_store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("database is locked")):
            with pytest.raises(PersistenceError) as exc_info:
                sqlite_store.save(FastingRecord(id="r1", start_time=T0))

        assert exc_info.value.operation == "save"
        assert exc_info.value.target == "r1"
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    def test_unwritable_database_path(self, tmp_path):
        from fastpath.persistence.sqlite_store import SQLiteRecordStore

        with pytest.raises(PersistenceError) as exc_info:
            SQLiteRecordStore(str(tmp_path / "missing" / "dir" / "db.sqlite"))

        assert exc_info.value.operation == "init"

    def test_unavailable_publisher_returns_false(self):
        publisher = NullLivePublisher()

        assert publisher.start("s1", T0, 3600.0, "Short") is False
        assert publisher.get_stats()["error_count"] == 0
