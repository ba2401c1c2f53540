"""Base class for live status publishers."""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from ..errors import LiveSurfaceUnavailableError
from ..logging.config import get_live_logger
from ..state.models import LivePublication, LiveStatus
from ..utils.time import ensure_utc


class BaseLiveStatusPublisher(ABC):
    """
    Best-effort mirror of the running fast onto an external surface.

    At most one publication exists at a time. Failures are logged and counted,
    never raised to the caller: the fasting core must keep working when the
    surface is missing.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_live_logger(f"fastpath.live.{name}")
        self._lock = threading.Lock()
        self._publication: Optional[LivePublication] = None
        self._publish_count = 0
        self._error_count = 0

    @abstractmethod
    def is_supported(self) -> bool:
        """Check whether the surface can currently be used."""
        pass

    @abstractmethod
    def _open(self, publication: LivePublication) -> None:
        """Create the external publication."""
        pass

    @abstractmethod
    def _push(self, publication: LivePublication) -> None:
        """Push updated content of the publication."""
        pass

    @abstractmethod
    def _close(self, publication: LivePublication) -> None:
        """End the external publication."""
        pass

    @property
    def has_active_publication(self) -> bool:
        with self._lock:
            return self._publication is not None

    @property
    def publication(self) -> Optional[LivePublication]:
        with self._lock:
            return self._publication

    def start(self, session_id: str, start_time: datetime, goal_duration: float,
              goal_name: Optional[str] = None) -> bool:
        """
        Start a publication for a fasting session.

        Any previous publication is ended first.

        Returns:
            True if the publication was started
        """
        with self._lock:
            self._end_locked()

            if not self.is_supported():
                self.logger.info("Live surface not supported", publisher=self.name)
                return False

            publication = LivePublication(
                session_id=session_id,
                start_time=ensure_utc(start_time),
                goal_duration=goal_duration,
                goal_name=goal_name,
            )
            try:
                self._open(publication)
            except (LiveSurfaceUnavailableError, OSError) as e:
                self._error_count += 1
                self.logger.warning(
                    "Failed to start live publication",
                    publisher=self.name,
                    session_id=session_id,
                    error=str(e)
                )
                return False

            self._publication = publication
            self._publish_count += 1
            self.logger.info(
                "Live publication started",
                publisher=self.name,
                session_id=session_id,
                goal_name=goal_name
            )
            return True

    def update(self, elapsed_time: float, remaining_time: float, goal_reached: bool) -> None:
        """Push new content; ignored when nothing is published."""
        with self._lock:
            if self._publication is None:
                return

            status = LiveStatus(
                elapsed_time=max(0.0, elapsed_time),
                remaining_time=max(0.0, remaining_time),
                goal_reached=goal_reached,
            )
            publication = LivePublication(
                session_id=self._publication.session_id,
                start_time=self._publication.start_time,
                goal_duration=self._publication.goal_duration,
                goal_name=self._publication.goal_name,
                status=status,
            )
            try:
                self._push(publication)
            except (LiveSurfaceUnavailableError, OSError) as e:
                self._error_count += 1
                self.logger.warning(
                    "Failed to update live publication",
                    publisher=self.name,
                    session_id=publication.session_id,
                    error=str(e)
                )
                return

            self._publication = publication
            self._publish_count += 1

    def stop(self) -> None:
        """End the current publication, if any."""
        with self._lock:
            self._end_locked()

    def _end_locked(self) -> None:
        publication = self._publication
        if publication is None:
            return

        self._publication = None
        try:
            self._close(publication)
        except (LiveSurfaceUnavailableError, OSError) as e:
            self._error_count += 1
            self.logger.warning(
                "Failed to end live publication",
                publisher=self.name,
                session_id=publication.session_id,
                error=str(e)
            )
            return

        self.logger.info(
            "Live publication ended",
            publisher=self.name,
            session_id=publication.session_id
        )

    def to_document(self, publication: LivePublication, event: str) -> dict[str, Any]:
        """Serialize a publication for output."""
        document: dict[str, Any] = {
            "event": event,
            "session_id": publication.session_id,
            "start_time": publication.start_time.isoformat(),
            "goal_duration": publication.goal_duration,
            "goal_name": publication.goal_name,
        }
        if publication.status is not None:
            document.update({
                "elapsed_time": publication.status.elapsed_time,
                "remaining_time": publication.status.remaining_time,
                "goal_reached": publication.status.goal_reached,
            })
        return document

    def get_stats(self) -> dict[str, Any]:
        """Get publishing statistics."""
        return {
            "name": self.name,
            "publish_count": self._publish_count,
            "error_count": self._error_count,
            "active": self.has_active_publication,
        }

    def reset_stats(self):
        """Reset publishing statistics."""
        self._publish_count = 0
        self._error_count = 0


class NullLivePublisher(BaseLiveStatusPublisher):
    """Publisher for environments without a live surface."""

    def __init__(self, name: str = "none"):
        super().__init__(name)

    def is_supported(self) -> bool:
        return False

    def _open(self, publication: LivePublication) -> None:
        raise LiveSurfaceUnavailableError("Live surface disabled", publisher=self.name)

    def _push(self, publication: LivePublication) -> None:
        pass

    def _close(self, publication: LivePublication) -> None:
        pass
