"""Periodic tick source for the active fasting record."""

import threading
from datetime import datetime
from typing import Callable, Optional

import structlog

from ..utils.time import utc_now

logger = structlog.get_logger(__name__)


class TickSource:
    """
    Background thread emitting a tick for one record at a fixed interval.

    The first tick fires one interval after start. Stopping is idempotent and
    no tick is delivered after stop() returns, except one already being
    delivered on the tick thread.
    """

    def __init__(self, record_id: str, interval: float,
                 on_tick: Callable[[str, datetime], None],
                 clock: Callable[[], datetime] = utc_now):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")

        self.record_id = record_id
        self.interval = interval
        self.on_tick = on_tick
        self.clock = clock

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return

        self._thread = threading.Thread(
            target=self._run,
            name=f"fastpath-tick-{self.record_id[:8]}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        logger.debug("Tick source started", record_id=self.record_id, interval=self.interval)

        while not self._stop_event.wait(self.interval):
            try:
                self.on_tick(self.record_id, self.clock())
            except Exception as e:
                logger.error("Tick delivery failed", record_id=self.record_id, error=str(e))

        logger.debug("Tick source stopped", record_id=self.record_id)
