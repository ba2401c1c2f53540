"""Unit tests for configuration management."""

import pytest
from pathlib import Path

import yaml

from fastpath.config.defaults import get_default_config
from fastpath.config.loader import CONFIG_FILENAME, ConfigLoader
from fastpath.config.validation import ConfigValidator


def write_config(config_dir: Path, data: dict) -> None:
    with open(config_dir / CONFIG_FILENAME, "w") as f:
        yaml.safe_dump(data, f)


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        config = get_default_config()

        assert config.storage.backend == "sqlite"
        assert config.timer.tick_interval_seconds == 1.0
        assert config.goals.min_custom_hours == 1
        assert config.goals.max_custom_hours == 36
        assert config.live_surface.enabled is True
        assert config.logging.level == "INFO"


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        loader = ConfigLoader.create()

        assert isinstance(loader.config_dir, Path)
        assert loader.config_dir.name == "config"

    def test_merge_config_defaults_only(self, tmp_path) -> None:
        config = ConfigLoader.create(tmp_path).merge_config()

        assert config["timer"]["tick_interval_seconds"] == 1.0
        assert config["storage"]["db_path"] == "fastpath.db"

    def test_file_overrides_defaults(self, tmp_path) -> None:
        write_config(tmp_path, {"storage": {"backend": "memory"}})

        config = ConfigLoader.create(tmp_path).load()

        assert config.storage.backend == "memory"
        assert config.storage.db_path == "fastpath.db"

    def test_explicit_overrides_win(self, tmp_path) -> None:
        write_config(tmp_path, {"timer": {"tick_interval_seconds": 5}})

        config = ConfigLoader.create(tmp_path).load({"timer": {"tick_interval_seconds": 0.5}})

        assert config.timer.tick_interval_seconds == 0.5

    def test_empty_file(self, tmp_path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("")

        assert ConfigLoader.create(tmp_path).load_file_config() == {}

    def test_invalid_config_raises(self, tmp_path) -> None:
        write_config(tmp_path, {"live_surface": {"method": "carrier-pigeon"}})

        with pytest.raises(ValueError, match="live_surface.method"):
            ConfigLoader.create(tmp_path).load()

    def test_bundled_config_is_valid(self) -> None:
        config = ConfigLoader.create().load()

        assert config.live_surface.method in ("stdout", "file", "none")


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_defaults(self) -> None:
        merged = ConfigLoader.create(Path("/nonexistent")).merge_config()

        assert ConfigValidator.validate_config(merged) == []

    def test_unknown_section(self) -> None:
        errors = ConfigValidator.validate_config({"metrics": {}})

        assert errors[0].field == "metrics"

    def test_unknown_key(self) -> None:
        errors = ConfigValidator.validate_config({"timer": {"tick_rate": 2}})

        assert [e.field for e in errors] == ["timer.tick_rate"]

    def test_tick_interval_must_be_positive(self) -> None:
        errors = ConfigValidator.validate_timer_params({"tick_interval_seconds": 0})

        assert len(errors) == 1

    def test_custom_goal_range_order(self) -> None:
        errors = ConfigValidator.validate_goal_params(
            {"min_custom_hours": 20, "max_custom_hours": 10}
        )

        assert [e.field for e in errors] == ["goals.min_custom_hours"]

    def test_file_publisher_formats(self) -> None:
        assert ConfigValidator.validate_live_surface_params(
            {"method": "file", "format": "jsonl"}
        ) == []
        assert len(ConfigValidator.validate_live_surface_params(
            {"method": "stdout", "format": "jsonl"}
        )) == 1

    def test_log_level(self) -> None:
        assert ConfigValidator.validate_logging_params({"level": "debug"}) == []
        assert len(ConfigValidator.validate_logging_params({"level": "LOUD"})) == 1

    def test_storage_backend(self) -> None:
        errors = ConfigValidator.validate_storage_params({"backend": "postgres"})

        assert errors[0].field == "storage.backend"
