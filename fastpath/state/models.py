"""
State machine data models for the fasting session lifecycle.

This module defines immutable data structures for fasting records, goal
definitions and the in-memory session view state that the state machine
transitions between.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from ..utils.time import ensure_utc, time_elapsed_seconds


class FastingPhase(str, Enum):
    """Top-level session phases."""
    IDLE = "idle"
    FASTING = "fasting"


class ErrorKind(str, Enum):
    """Categories of recoverable errors surfaced in the view state."""
    PERSISTENCE = "persistence"
    INVALID_OPERATION = "invalid_operation"
    INVALID_GOAL = "invalid_goal"


@dataclass(frozen=True)
class FastingRecord:
    """One fasting session, from start to stop."""

    id: str
    start_time: datetime
    end_time: Optional[datetime] = None

    @classmethod
    def begin(cls, start_time: datetime) -> "FastingRecord":
        """Create a new active record with a fresh identifier."""
        return cls(id=str(uuid.uuid4()), start_time=ensure_utc(start_time))

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def duration(self) -> Optional[float]:
        """Seconds between start and end, None while active."""
        if self.end_time is None:
            return None
        return time_elapsed_seconds(self.start_time, self.end_time)

    def stopped_at(self, end_time: datetime) -> "FastingRecord":
        """
        Return the stopped copy of this record.

        The end time is clamped so it never precedes the start time.
        """
        end = max(ensure_utc(end_time), self.start_time)
        return replace(self, end_time=end)

    def reopened(self) -> "FastingRecord":
        """Return the active copy of this record, for rolling back a failed stop."""
        return replace(self, end_time=None)


@dataclass(frozen=True)
class FastingGoal:
    """A named target duration used to compute remaining time."""

    target_duration: float                           # Seconds
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class SessionError:
    """Recoverable error surfaced to the view layer."""

    kind: ErrorKind
    message: str
    operation: Optional[str] = None


@dataclass(frozen=True)
class SessionViewState:
    """In-memory state owned by the fasting runtime."""

    active_record: Optional[FastingRecord] = None
    history: tuple[FastingRecord, ...] = ()
    current_elapsed_time: float = 0.0
    selected_goal: Optional[FastingGoal] = None
    available_goals: tuple[FastingGoal, ...] = ()

    # Live surface
    live_surface_enabled: bool = True
    live_surface_active: bool = False

    # Orthogonal sub-states
    goal_picker_visible: bool = False
    is_loading: bool = False

    # Record the tick stream currently runs for
    ticking_record_id: Optional[str] = None

    last_error: Optional[SessionError] = None

    # Derived values
    @property
    def is_fasting(self) -> bool:
        return self.active_record is not None

    @property
    def phase(self) -> FastingPhase:
        return FastingPhase.FASTING if self.is_fasting else FastingPhase.IDLE

    @property
    def remaining_time(self) -> Optional[float]:
        """Seconds left until the selected goal, None without goal or fast."""
        if not self.is_fasting or self.selected_goal is None:
            return None
        return max(0.0, self.selected_goal.target_duration - self.current_elapsed_time)

    @property
    def goal_reached(self) -> Optional[bool]:
        remaining = self.remaining_time
        if remaining is None:
            return None
        return remaining == 0

    def with_history_entry(self, record: FastingRecord) -> "SessionViewState":
        """Replace the record in history, or insert it at the front."""
        if any(r.id == record.id for r in self.history):
            history = tuple(record if r.id == record.id else r for r in self.history)
        else:
            history = (record,) + self.history
        return replace(self, history=history)

    def without_history_entry(self, record_id: str) -> "SessionViewState":
        return replace(self, history=tuple(r for r in self.history if r.id != record_id))

    def with_error(self, kind: ErrorKind, message: str,
                   operation: Optional[str] = None) -> "SessionViewState":
        return replace(self, last_error=SessionError(kind=kind, message=message, operation=operation))


@dataclass(frozen=True)
class LiveStatus:
    """Content pushed to the live surface on every update."""

    elapsed_time: float
    remaining_time: float
    goal_reached: bool


@dataclass(frozen=True)
class LivePublication:
    """Attributes of one live surface publication, fixed at start."""

    session_id: str
    start_time: datetime
    goal_duration: float
    goal_name: Optional[str] = None
    status: Optional[LiveStatus] = None
