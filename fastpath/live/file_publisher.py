"""File-based live status publisher."""

import fcntl
import json
import os
from pathlib import Path

from ..errors import LiveSurfaceUnavailableError
from ..state.models import LivePublication
from ..utils.time import format_timestamp, utc_now
from .base import BaseLiveStatusPublisher


class FileLivePublisher(BaseLiveStatusPublisher):
    """
    Writes live status to a file another process can watch.

    In "json" format the file always holds the current status document and
    is removed when the publication ends. In "jsonl" format every event is
    appended as one line.
    """

    def __init__(self, output_path: str, name: str = "file", format: str = "json",
                 create_dirs: bool = True):
        super().__init__(name)
        self.output_path = Path(output_path)
        self.format = format
        self.create_dirs = create_dirs

        if format not in ["json", "jsonl"]:
            raise LiveSurfaceUnavailableError(f"Unsupported format: {format}", publisher=name)

    def is_supported(self) -> bool:
        parent = self.output_path.parent
        if not parent.exists():
            if not self.create_dirs:
                return False
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError:
                return False
        return os.access(parent, os.W_OK)

    def _open(self, publication: LivePublication) -> None:
        self._write(publication, "start")

    def _push(self, publication: LivePublication) -> None:
        self._write(publication, "update")

    def _close(self, publication: LivePublication) -> None:
        if self.format == "jsonl":
            self._write(publication, "stop")
        elif self.output_path.exists():
            self.output_path.unlink()

    def _write(self, publication: LivePublication, event: str) -> None:
        document = self.to_document(publication, event)
        document["written_at"] = format_timestamp(utc_now())

        if self.format == "jsonl":
            with open(self.output_path, "a") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                f.write(json.dumps(document) + "\n")
            return

        # Readers must never see a partially written document
        tmp_path = self.output_path.with_suffix(self.output_path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            json.dump(document, f, indent=2)
        os.replace(tmp_path, self.output_path)
