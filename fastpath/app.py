"""
Application wiring for the fasting core.

Builds the record store, live status publisher and runtime from the merged
configuration, so hosts only need to send actions and observe state.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import structlog

from .config.defaults import DefaultConfig, LiveSurfaceParams, StorageParams
from .config.loader import ConfigLoader
from .live.base import BaseLiveStatusPublisher, NullLivePublisher
from .live.file_publisher import FileLivePublisher
from .live.stdout_publisher import StdoutLivePublisher
from .logging.config import configure_logging
from .persistence.base import RecordStore
from .persistence.memory_store import InMemoryRecordStore
from .persistence.sqlite_store import SQLiteRecordStore
from .state.machine import FastingStateMachine
from .state.models import SessionViewState
from .state.runtime import FastingRuntime, Navigator
from .utils.time import utc_now

logger = structlog.get_logger(__name__)


def load_config(config_dir: Optional[Path] = None,
                overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
    """Load configuration with defaults, fastpath.yaml and explicit overrides."""
    return ConfigLoader.create(config_dir).load(overrides)


def create_store(params: StorageParams) -> RecordStore:
    if params.backend == "memory":
        return InMemoryRecordStore()
    return SQLiteRecordStore(params.db_path)


def create_publisher(params: LiveSurfaceParams) -> BaseLiveStatusPublisher:
    if params.method == "file":
        return FileLivePublisher(params.output_path, format=params.format)
    if params.method == "stdout":
        return StdoutLivePublisher(format=params.format)
    return NullLivePublisher()


def build_runtime(
    config: Optional[DefaultConfig] = None,
    config_dir: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None,
    store: Optional[RecordStore] = None,
    publisher: Optional[BaseLiveStatusPublisher] = None,
    clock: Callable[[], datetime] = utc_now,
    navigator: Optional[Navigator] = None,
    setup_logging: bool = True,
) -> FastingRuntime:
    """
    Build an unstarted fasting runtime.

    Args:
        config: Fully loaded configuration; loaded from config_dir when omitted
        config_dir: Directory holding fastpath.yaml
        overrides: Highest-priority configuration overrides
        store: Record store to use instead of the configured backend
        publisher: Live status publisher to use instead of the configured method
        clock: Wall-clock source
        navigator: Callback receiving the history on a show-history request
        setup_logging: Configure structlog from the logging section

    Returns:
        FastingRuntime ready to start()
    """
    if config is None:
        config = load_config(config_dir, overrides)

    if setup_logging:
        configure_logging(
            level=config.logging.level,
            format_json=config.logging.format_json,
            include_caller=config.logging.include_caller,
        )

    store = store or create_store(config.storage)
    if config.goals.seed_predefined:
        store.seed_predefined_goals()

    publisher = publisher or create_publisher(config.live_surface)

    runtime = FastingRuntime(
        store=store,
        publisher=publisher,
        clock=clock,
        tick_interval=config.timer.tick_interval_seconds,
        navigator=navigator,
        state_machine=FastingStateMachine(config.goals),
        initial_state=SessionViewState(live_surface_enabled=config.live_surface.enabled),
    )

    logger.info(
        "Fasting runtime built",
        storage_backend=config.storage.backend,
        live_surface_method=config.live_surface.method,
        tick_interval=config.timer.tick_interval_seconds
    )
    return runtime
