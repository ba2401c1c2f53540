"""Unit tests for application wiring."""

from unittest.mock import patch

from fastpath.app import build_runtime, create_publisher, create_store
from fastpath.config.defaults import LiveSurfaceParams, StorageParams
from fastpath.live.base import NullLivePublisher
from fastpath.live.file_publisher import FileLivePublisher
from fastpath.live.stdout_publisher import StdoutLivePublisher
from fastpath.persistence.memory_store import InMemoryRecordStore
from fastpath.persistence.sqlite_store import SQLiteRecordStore
from fastpath.state import actions as act
from fastpath.state.goals import PREDEFINED_GOALS


class TestFactories:
    """Test store and publisher construction from parameters."""

    def test_memory_store(self):
        assert isinstance(create_store(StorageParams(backend="memory")), InMemoryRecordStore)

    def test_sqlite_store(self, tmp_path):
        store = create_store(StorageParams(db_path=str(tmp_path / "app.db")))

        assert isinstance(store, SQLiteRecordStore)

    def test_publishers(self, tmp_path):
        assert isinstance(create_publisher(LiveSurfaceParams(method="stdout")), StdoutLivePublisher)
        assert isinstance(create_publisher(LiveSurfaceParams(method="none")), NullLivePublisher)

        publisher = create_publisher(LiveSurfaceParams(
            method="file", format="jsonl", output_path=str(tmp_path / "live.jsonl")
        ))
        assert isinstance(publisher, FileLivePublisher)
        assert publisher.format == "jsonl"


class TestBuildRuntime:
    """Test runtime construction from configuration."""

    def test_build_with_overrides(self, tmp_path, clock):
        overrides = {
            "storage": {"backend": "memory"},
            "timer": {"tick_interval_seconds": 30},
            "live_surface": {"enabled": False, "method": "none"},
        }

        runtime = build_runtime(config_dir=tmp_path, overrides=overrides, clock=clock,
                                setup_logging=False)

        assert isinstance(runtime.store, InMemoryRecordStore)
        assert isinstance(runtime.publisher, NullLivePublisher)
        assert runtime.tick_interval == 30
        assert runtime.state.live_surface_enabled is False
        assert runtime.store.list_goals() == list(PREDEFINED_GOALS)

    def test_seeding_disabled(self, tmp_path):
        runtime = build_runtime(
            config_dir=tmp_path,
            overrides={"storage": {"backend": "memory"}, "goals": {"seed_predefined": False}},
            setup_logging=False,
        )

        assert runtime.store.list_goals() == []

    def test_configures_logging(self, tmp_path):
        with patch("fastpath.app.configure_logging") as configure:
            build_runtime(
                config_dir=tmp_path,
                overrides={"storage": {"backend": "memory"}, "logging": {"level": "DEBUG"}},
            )

        configure.assert_called_once_with(level="DEBUG", format_json=False, include_caller=False)

    def test_end_to_end_with_sqlite(self, tmp_path, clock):
        overrides = {
            "storage": {"db_path": str(tmp_path / "e2e.db")},
            "live_surface": {"method": "none"},
        }

        with build_runtime(config_dir=tmp_path, overrides=overrides, clock=clock,
                           setup_logging=False) as runtime:
            runtime.send(act.LoadInitialState())
            runtime.send(act.SelectGoal(PREDEFINED_GOALS[1]))
            runtime.send(act.StartFast())
            assert runtime.wait_until_idle(5.0)
            clock.advance(3600)
            runtime.send(act.StopFast())
            assert runtime.wait_until_idle(5.0)

            state = runtime.state

        assert state.active_record is None
        assert state.history[0].duration == 3600.0
        assert state.selected_goal == PREDEFINED_GOALS[1]
        assert runtime.store.get_goal() == PREDEFINED_GOALS[1]
        assert runtime.store.list_all()[0].duration == 3600.0
