"""
System failure error classifications.

Storage and state machine failures. Nothing in the fasting core is fatal to
the process, so persistence failures are flagged recoverable: the runtime
turns them into an error state and the next reload reconciles.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for system-level failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recoverable: bool = False):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = recoverable


class StateTransitionError(SystemFailureError):
    """Invalid state transition requested of the state machine."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class PersistenceError(SystemFailureError):
    """Database or file system persistence failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target
