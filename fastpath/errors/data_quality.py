"""
Data error classifications for fasting records and goals.

These exceptions describe input that the core refuses to accept, such as a
goal with a non-positive duration or a record whose end precedes its start.
"""

from typing import Any, Dict, Optional


class FastingDataError(Exception):
    """Base class for data issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class InvalidGoalError(FastingDataError):
    """Goal definition with an unusable name or duration."""

    def __init__(self, message: str, goal_name: Optional[str] = None,
                 target_duration: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.goal_name = goal_name
        self.target_duration = target_duration


class InvalidRecordError(FastingDataError):
    """Fasting record that violates its lifecycle rules."""

    def __init__(self, message: str, record_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record_id = record_id


class MissingDataError(FastingDataError):
    """Required data is completely missing."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type
