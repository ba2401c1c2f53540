"""Default configuration parameters for the fasting core."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StorageParams:
    """Record store parameters."""
    backend: str = "sqlite"                          # sqlite | memory
    db_path: str = "fastpath.db"


@dataclass(frozen=True)
class TimerParams:
    """Tick source parameters."""
    tick_interval_seconds: float = 1.0


@dataclass(frozen=True)
class GoalParams:
    """Goal selection parameters."""
    min_custom_hours: int = 1                        # Custom goal picker lower bound
    max_custom_hours: int = 36                       # Custom goal picker upper bound
    seed_predefined: bool = True                     # Seed predefined goals into empty store


@dataclass(frozen=True)
class LiveSurfaceParams:
    """Live status surface parameters."""
    enabled: bool = True                             # Initial value of the user toggle
    method: str = "stdout"                           # stdout | file | none
    format: str = "json"                             # json | pretty (stdout), json | jsonl (file)
    output_path: str = "live_status.json"


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_caller: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    storage: StorageParams
    timer: TimerParams
    goals: GoalParams
    live_surface: LiveSurfaceParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        storage=StorageParams(),
        timer=TimerParams(),
        goals=GoalParams(),
        live_surface=LiveSurfaceParams(),
        logging=LoggingParams(),
    )
