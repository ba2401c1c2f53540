"""
Error classification system for the fasting core.

This module provides the exception hierarchy used across persistence, the
state machine and the live status surface.
"""

from .data_quality import (
    FastingDataError,
    InvalidGoalError,
    InvalidRecordError,
    MissingDataError,
)
from .system_failures import (
    SystemFailureError,
    StateTransitionError,
    PersistenceError,
)
from .recovery import (
    GracefulDegradationError,
    LiveSurfaceUnavailableError,
)

__all__ = [
    # Data errors
    "FastingDataError",
    "InvalidGoalError",
    "InvalidRecordError",
    "MissingDataError",
    # System failures
    "SystemFailureError",
    "StateTransitionError",
    "PersistenceError",
    # Degradation
    "GracefulDegradationError",
    "LiveSurfaceUnavailableError",
]
