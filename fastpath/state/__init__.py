"""Fasting session state machine, models and runtime."""

from .machine import FastingStateMachine, Transition
from .models import (
    ErrorKind,
    FastingGoal,
    FastingPhase,
    FastingRecord,
    SessionError,
    SessionViewState,
)

__all__ = [
    "FastingStateMachine",
    "Transition",
    "ErrorKind",
    "FastingGoal",
    "FastingPhase",
    "FastingRecord",
    "SessionError",
    "SessionViewState",
]
