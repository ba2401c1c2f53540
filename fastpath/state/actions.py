"""
Actions processed by the fasting state machine.

User actions come from the view layer. Result actions are produced by the
runtime when a command completes, and re-enter the same serialized
transition pipeline.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from .models import FastingGoal, FastingRecord


# User actions

@dataclass(frozen=True)
class LoadInitialState:
    pass


@dataclass(frozen=True)
class StartFast:
    pass


@dataclass(frozen=True)
class StopFast:
    pass


@dataclass(frozen=True)
class DeleteRecordRequested:
    record_id: str


@dataclass(frozen=True)
class SelectGoal:
    goal: FastingGoal


@dataclass(frozen=True)
class SetCustomGoal:
    target_duration: float                           # Seconds


@dataclass(frozen=True)
class ClearGoal:
    pass


@dataclass(frozen=True)
class ShowGoalPicker:
    pass


@dataclass(frozen=True)
class DismissGoalPicker:
    pass


@dataclass(frozen=True)
class SetLiveSurfaceEnabled:
    enabled: bool


@dataclass(frozen=True)
class ShowHistory:
    pass


@dataclass(frozen=True)
class DismissError:
    pass


# Result actions

@dataclass(frozen=True)
class TimerTick:
    record_id: str
    at: datetime


@dataclass(frozen=True)
class SnapshotLoaded:
    active_record: Optional[FastingRecord]
    history: tuple[FastingRecord, ...]
    selected_goal: Optional[FastingGoal]
    available_goals: tuple[FastingGoal, ...]


@dataclass(frozen=True)
class SnapshotLoadFailed:
    message: str


@dataclass(frozen=True)
class RecordSaved:
    """The store acknowledged a save; record may be a pre-existing active record."""
    requested_id: str
    record: FastingRecord


@dataclass(frozen=True)
class RecordSaveFailed:
    record: FastingRecord
    message: str


@dataclass(frozen=True)
class RecordUpdated:
    record: FastingRecord


@dataclass(frozen=True)
class RecordUpdateFailed:
    record: FastingRecord
    message: str


@dataclass(frozen=True)
class RecordDeleted:
    record_id: str


@dataclass(frozen=True)
class RecordDeleteFailed:
    record_id: str
    message: str


@dataclass(frozen=True)
class GoalSelectionSaved:
    goal: Optional[FastingGoal]


@dataclass(frozen=True)
class GoalSelectionSaveFailed:
    goal: Optional[FastingGoal]
    previous: Optional[FastingGoal]
    message: str


@dataclass(frozen=True)
class LiveSurfaceStartCompleted:
    record_id: str
    started: bool


Action = Union[
    LoadInitialState, StartFast, StopFast, DeleteRecordRequested, SelectGoal,
    SetCustomGoal, ClearGoal, ShowGoalPicker, DismissGoalPicker,
    SetLiveSurfaceEnabled, ShowHistory, DismissError, TimerTick,
    SnapshotLoaded, SnapshotLoadFailed, RecordSaved, RecordSaveFailed,
    RecordUpdated, RecordUpdateFailed, RecordDeleted, RecordDeleteFailed,
    GoalSelectionSaved, GoalSelectionSaveFailed, LiveSurfaceStartCompleted,
]
