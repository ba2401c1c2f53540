"""Tests for record store implementations."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from fastpath.errors import InvalidRecordError, MissingDataError
from fastpath.persistence.memory_store import InMemoryRecordStore
from fastpath.persistence.sqlite_store import SQLiteRecordStore
from fastpath.state.goals import PREDEFINED_GOALS
from fastpath.state.models import FastingGoal, FastingRecord

T0 = datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryRecordStore()
    return SQLiteRecordStore(str(tmp_path / "records.db"))


def completed(record_id: str, days_ago: int, hours: float = 16) -> FastingRecord:
    start = T0 - timedelta(days=days_ago)
    return FastingRecord(id=record_id, start_time=start, end_time=start + timedelta(hours=hours))


class TestRecords:
    """Test record save, update, delete and queries."""

    def test_save_and_get_active(self, store):
        record = FastingRecord(id="r1", start_time=T0)

        assert store.save(record) == record
        assert store.get_active() == record

    def test_list_all_newest_first(self, store):
        for record in [completed("old", 3), completed("newest", 1), completed("middle", 2)]:
            store.save(record)

        assert [r.id for r in store.list_all()] == ["newest", "middle", "old"]

    def test_equal_start_times_most_recent_first(self, store):
        for record_id in ["first", "second", "third"]:
            store.save(completed(record_id, 1))

        assert [r.id for r in store.list_all()] == ["third", "second", "first"]

    def test_list_all_empty(self, store):
        assert store.list_all() == []
        assert store.get_active() is None

    def test_timestamps_round_trip(self, store):
        record = FastingRecord(
            id="precise",
            start_time=T0 + timedelta(microseconds=250000),
            end_time=T0 + timedelta(hours=16, seconds=1),
        )
        store.save(record)

        loaded = store.list_all()[0]
        assert loaded == record
        assert loaded.start_time.tzinfo is not None

    def test_second_active_record_not_inserted(self, store):
        first = FastingRecord(id="first", start_time=T0)
        store.save(first)

        result = store.save(FastingRecord(id="second", start_time=T0 + timedelta(minutes=1)))

        assert result == first
        assert [r.id for r in store.list_all()] == ["first"]

    def test_completed_record_saved_alongside_active(self, store):
        store.save(FastingRecord(id="active", start_time=T0))

        assert store.save(completed("done", 1)).id == "done"
        assert len(store.list_all()) == 2

    def test_update_sets_end_time(self, store):
        record = FastingRecord(id="r1", start_time=T0)
        store.save(record)
        stopped = record.stopped_at(T0 + timedelta(hours=12))

        assert store.update(stopped) == stopped
        assert store.get_active() is None
        assert store.list_all()[0].duration == 12 * 3600

    def test_update_missing_record(self, store):
        with pytest.raises(MissingDataError):
            store.update(completed("ghost", 1))

    def test_update_already_stopped(self, store):
        record = completed("done", 1)
        store.save(record)

        with pytest.raises(InvalidRecordError) as exc_info:
            store.update(record)

        assert exc_info.value.record_id == "done"

    def test_update_cannot_change_start(self, store):
        store.save(FastingRecord(id="r1", start_time=T0))

        with pytest.raises(InvalidRecordError):
            store.update(FastingRecord(
                id="r1", start_time=T0 - timedelta(hours=1), end_time=T0 + timedelta(hours=1)
            ))

    def test_update_rejects_end_before_start(self, store):
        store.save(FastingRecord(id="r1", start_time=T0))

        with pytest.raises(InvalidRecordError):
            store.update(FastingRecord(id="r1", start_time=T0, end_time=T0 - timedelta(seconds=1)))

        assert store.get_active().id == "r1"

    def test_update_requires_end_time(self, store):
        record = FastingRecord(id="r1", start_time=T0)
        store.save(record)

        with pytest.raises(InvalidRecordError):
            store.update(record)

    def test_delete(self, store):
        store.save(completed("done", 1))

        assert store.delete("done") is True
        assert store.delete("done") is False
        assert store.list_all() == []

    def test_concurrent_saves_keep_single_active(self, store):
        results = []

        def start(i):
            results.append(store.save(FastingRecord(id=f"r{i}", start_time=T0 + timedelta(seconds=i))))

        threads = [threading.Thread(target=start, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        active = [r for r in store.list_all() if r.is_active]
        assert len(active) == 1
        assert {r.id for r in results} == {active[0].id}


class TestGoals:
    """Test goal definitions and the selected-goal pointer."""

    def test_no_goal_selected(self, store):
        assert store.get_goal() is None

    def test_save_goal_selects_it(self, store):
        goal = FastingGoal(target_duration=16 * 3600, name="16-Hour Fast", description="Popular")

        store.save_goal(goal)

        assert store.get_goal() == goal
        assert store.get_goal_by_name("16-Hour Fast") == goal

    def test_save_goal_upserts_by_name(self, store):
        store.save_goal(FastingGoal(target_duration=10 * 3600, name="Custom"))
        store.save_goal(FastingGoal(target_duration=12 * 3600, name="Custom"))

        assert store.get_goal().target_duration == 12 * 3600
        assert len(store.list_goals()) == 1

    def test_selection_follows_latest_save(self, store):
        first = FastingGoal(target_duration=14 * 3600, name="14-Hour Fast")
        second = FastingGoal(target_duration=18 * 3600, name="18-Hour Fast")
        store.save_goal(first)
        store.save_goal(second)

        assert store.get_goal() == second
        assert [g.name for g in store.list_goals()] == ["14-Hour Fast", "18-Hour Fast"]

    def test_clear_selection_keeps_definitions(self, store):
        goal = FastingGoal(target_duration=16 * 3600, name="16-Hour Fast")
        store.save_goal(goal)

        store.save_goal(None)

        assert store.get_goal() is None
        assert store.get_goal_by_name("16-Hour Fast") == goal

    def test_get_goal_by_unknown_name(self, store):
        assert store.get_goal_by_name("missing") is None

    def test_delete_selected_goal_clears_selection(self, store):
        store.save_goal(FastingGoal(target_duration=3600, name="Short"))

        assert store.delete_goal("Short") is True
        assert store.get_goal() is None
        assert store.delete_goal("Short") is False

    def test_seed_predefined_goals(self, store):
        assert store.seed_predefined_goals() is True

        assert store.list_goals() == list(PREDEFINED_GOALS)
        assert store.get_goal() is None

    def test_seed_skipped_when_goals_exist(self, store):
        store.save_goal(FastingGoal(target_duration=3600, name="Mine"))

        assert store.seed_predefined_goals() is False
        assert [g.name for g in store.list_goals()] == ["Mine"]


class TestSQLiteRecordStore:
    """SQLite specific behavior."""

    def test_schema_created(self, sqlite_store):
        with sqlite_store._get_connection() as conn:
            tables = {row[0] for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()}

        assert {"fasting_records", "fasting_goals", "app_state"} <= tables

    def test_data_survives_reopen(self, tmp_path):
        db_path = str(tmp_path / "reopen.db")
        first = SQLiteRecordStore(db_path)
        first.save(FastingRecord(id="r1", start_time=T0))
        first.save_goal(FastingGoal(target_duration=3600, name="Short"))

        reopened = SQLiteRecordStore(db_path)

        assert reopened.get_active().id == "r1"
        assert reopened.get_goal().name == "Short"

    def test_sqlite_errors_wrapped(self, sqlite_store):
        from fastpath.errors import PersistenceError

        with sqlite_store._get_connection() as conn:
            conn.execute("DROP TABLE fasting_records")
            conn.commit()

        with pytest.raises(PersistenceError) as exc_info:
            sqlite_store.list_all()

        assert exc_info.value.operation == "list_all"
        assert exc_info.value.recoverable is True
