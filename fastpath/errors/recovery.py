"""
Degradation classifications for optional collaborators.

The live status surface is optional: when it cannot be used the core keeps
working without it.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Mixin for errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True


class LiveSurfaceUnavailableError(GracefulDegradationError):
    """Live status surface is unsupported, unauthorized or unwritable."""

    def __init__(self, message: str, publisher: Optional[str] = None, **kwargs):
        kwargs.setdefault("degraded_functionality", "live_surface")
        kwargs.setdefault("fallback_strategy", "in_app_status_only")
        super().__init__(message, **kwargs)
        self.publisher = publisher
