"""
Commands emitted by the fasting state machine.

Commands describe effects; the runtime executes them against the record
store, the tick source, the live status publisher and the navigator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from .models import FastingGoal, FastingRecord


# Persistence

@dataclass(frozen=True)
class LoadSnapshot:
    pass


@dataclass(frozen=True)
class SaveRecord:
    record: FastingRecord


@dataclass(frozen=True)
class UpdateRecord:
    record: FastingRecord


@dataclass(frozen=True)
class DeleteRecord:
    record_id: str


@dataclass(frozen=True)
class PersistGoalSelection:
    goal: Optional[FastingGoal]
    previous: Optional[FastingGoal]


# Tick source

@dataclass(frozen=True)
class StartTicker:
    record_id: str


@dataclass(frozen=True)
class StopTicker:
    record_id: str


# Live surface

@dataclass(frozen=True)
class StartLiveSurface:
    record_id: str
    start_time: datetime
    goal_duration: float
    goal_name: Optional[str]


@dataclass(frozen=True)
class UpdateLiveSurface:
    elapsed_time: float
    remaining_time: float
    goal_reached: bool


@dataclass(frozen=True)
class StopLiveSurface:
    pass


# Navigation

@dataclass(frozen=True)
class ShowHistoryScreen:
    history: tuple[FastingRecord, ...]


Command = Union[
    LoadSnapshot, SaveRecord, UpdateRecord, DeleteRecord, PersistGoalSelection,
    StartTicker, StopTicker, StartLiveSurface, UpdateLiveSurface,
    StopLiveSurface, ShowHistoryScreen,
]

PERSISTENCE_COMMANDS = (LoadSnapshot, SaveRecord, UpdateRecord, DeleteRecord, PersistGoalSelection)
LIVE_SURFACE_COMMANDS = (StartLiveSurface, UpdateLiveSurface, StopLiveSurface)
