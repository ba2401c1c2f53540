"""Live status publishers mirroring the running fast."""

from .base import BaseLiveStatusPublisher, NullLivePublisher
from .file_publisher import FileLivePublisher
from .stdout_publisher import StdoutLivePublisher

__all__ = [
    "BaseLiveStatusPublisher",
    "NullLivePublisher",
    "FileLivePublisher",
    "StdoutLivePublisher",
]
