"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any

from .defaults import (
    GoalParams,
    LiveSurfaceParams,
    LoggingParams,
    StorageParams,
    TimerParams,
)

_SECTIONS = {
    "storage": StorageParams,
    "timer": TimerParams,
    "goals": GoalParams,
    "live_surface": LiveSurfaceParams,
    "logging": LoggingParams,
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_known_fields(section: str, params: dict[str, Any]) -> list[ValidationError]:
        """Reject keys that do not exist on the section's dataclass."""
        known = {f.name for f in fields(_SECTIONS[section])}
        return [
            ValidationError(
                field=f"{section}.{key}",
                message="Unknown configuration key",
                value=value
            )
            for key, value in params.items()
            if key not in known
        ]

    @staticmethod
    def validate_storage_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate record store parameters."""
        errors = []

        if "backend" in params and params["backend"] not in ("sqlite", "memory"):
            errors.append(ValidationError(
                field="storage.backend",
                message="Must be one of: sqlite, memory",
                value=params["backend"]
            ))

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="storage.db_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_timer_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate tick source parameters."""
        errors = []

        if "tick_interval_seconds" in params:
            value = params["tick_interval_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(ValidationError(
                    field="timer.tick_interval_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_goal_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate goal selection parameters."""
        errors = []

        for key in ("min_custom_hours", "max_custom_hours"):
            if key in params:
                value = params[key]
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    errors.append(ValidationError(
                        field=f"goals.{key}",
                        message="Must be a positive integer",
                        value=value
                    ))

        low = params.get("min_custom_hours", GoalParams.min_custom_hours)
        high = params.get("max_custom_hours", GoalParams.max_custom_hours)
        if isinstance(low, int) and isinstance(high, int) and low > high:
            errors.append(ValidationError(
                field="goals.min_custom_hours",
                message="Must not exceed max_custom_hours",
                value=low
            ))

        if "seed_predefined" in params and not isinstance(params["seed_predefined"], bool):
            errors.append(ValidationError(
                field="goals.seed_predefined",
                message="Must be a boolean",
                value=params["seed_predefined"]
            ))

        return errors

    @staticmethod
    def validate_live_surface_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate live status surface parameters."""
        errors = []

        if "enabled" in params and not isinstance(params["enabled"], bool):
            errors.append(ValidationError(
                field="live_surface.enabled",
                message="Must be a boolean",
                value=params["enabled"]
            ))

        method = params.get("method", LiveSurfaceParams.method)
        if method not in ("stdout", "file", "none"):
            errors.append(ValidationError(
                field="live_surface.method",
                message="Must be one of: stdout, file, none",
                value=method
            ))

        if "format" in params:
            allowed = ("json", "jsonl") if method == "file" else ("json", "pretty")
            if params["format"] not in allowed:
                errors.append(ValidationError(
                    field="live_surface.format",
                    message=f"Must be one of: {', '.join(allowed)}",
                    value=params["format"]
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of: {', '.join(_LOG_LEVELS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section, params in config.items():
            if section not in _SECTIONS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=params
                ))
                continue
            if not isinstance(params, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=params
                ))
                continue
            errors.extend(ConfigValidator.validate_known_fields(section, params))

        if isinstance(config.get("storage"), dict):
            errors.extend(ConfigValidator.validate_storage_params(config["storage"]))

        if isinstance(config.get("timer"), dict):
            errors.extend(ConfigValidator.validate_timer_params(config["timer"]))

        if isinstance(config.get("goals"), dict):
            errors.extend(ConfigValidator.validate_goal_params(config["goals"]))

        if isinstance(config.get("live_surface"), dict):
            errors.extend(ConfigValidator.validate_live_surface_params(config["live_surface"]))

        if isinstance(config.get("logging"), dict):
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
