"""Standard output live status publisher."""

import json
import sys
from typing import Any

from ..state.models import LivePublication
from ..utils.time import format_duration, format_time_interval
from .base import BaseLiveStatusPublisher


class StdoutLivePublisher(BaseLiveStatusPublisher):
    """Prints one line per publication event to stdout."""

    def __init__(self, name: str = "stdout", format: str = "json", stream=None):
        super().__init__(name)
        self.format = format
        self.stream = stream or sys.stdout

    def is_supported(self) -> bool:
        """Check if the stream is available."""
        try:
            return not self.stream.closed and self.stream.writable()
        except (AttributeError, ValueError):
            return False

    def _open(self, publication: LivePublication) -> None:
        self._emit(publication, "start")

    def _push(self, publication: LivePublication) -> None:
        self._emit(publication, "update")

    def _close(self, publication: LivePublication) -> None:
        self._emit(publication, "stop")

    def _emit(self, publication: LivePublication, event: str) -> None:
        print(self._format_event(publication, event), file=self.stream, flush=True)

    def _format_event(self, publication: LivePublication, event: str) -> str:
        """Format a publication event for stdout output."""
        if self.format == "pretty":
            goal = publication.goal_name or format_duration(publication.goal_duration)
            output = f"[{event.upper()}] {goal}"
            status = publication.status
            if status is not None:
                output += (
                    f" elapsed {format_time_interval(status.elapsed_time)}"
                    f" remaining {format_time_interval(status.remaining_time)}"
                )
                if status.goal_reached:
                    output += " (goal reached)"
            return output

        document: dict[str, Any] = self.to_document(publication, event)
        return json.dumps(document)
