#!/usr/bin/env python3
"""
Basic Usage Example - FastPath fasting tracker core

This script demonstrates the basic usage of the fasting runtime with an
in-memory store and a simulated clock. It shows how to:
- Build a runtime from configuration
- Load the initial state and pick a goal
- Start a fast, let time pass and watch the countdown
- Stop the fast and show the history

Run: python examples/basic_usage.py
"""

import threading
from datetime import datetime, timedelta, timezone

from fastpath.app import build_runtime
from fastpath.state import actions as act
from fastpath.state.models import FastingRecord, SessionViewState
from fastpath.utils.time import format_duration, format_record_duration, format_time_interval


class SimulatedClock:
    """Wall clock that is advanced by hand."""

    def __init__(self):
        self._now = datetime(2024, 3, 1, 20, 0, 0, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, **kwargs) -> None:
        with self._lock:
            self._now += timedelta(**kwargs)


def print_state(state: SessionViewState) -> None:
    """Print a one-line summary of the session state."""
    if not state.is_fasting:
        print(f"  Idle, {len(state.history)} fast(s) in history")
        return

    line = f"  Fasting for {format_time_interval(state.current_elapsed_time)}"
    if state.selected_goal is not None:
        line += f", {format_time_interval(state.remaining_time)} left of {state.selected_goal.name}"
        if state.goal_reached:
            line += " - goal reached!"
    print(line)


def print_history(history: tuple[FastingRecord, ...]) -> None:
    print("📜 History:")
    for record in history:
        print(f"  {record.start_time:%Y-%m-%d %H:%M}  {format_record_duration(record)}")


def main():
    """Run a simulated 16 hour fast."""
    clock = SimulatedClock()
    runtime = build_runtime(
        overrides={
            "storage": {"backend": "memory"},
            "live_surface": {"method": "stdout", "format": "pretty"},
            "logging": {"level": "WARNING"},
        },
        clock=clock,
        navigator=print_history,
    )

    with runtime:
        runtime.send(act.LoadInitialState())
        runtime.wait_until_idle(5.0)

        goals = runtime.state.available_goals
        print("🎯 Available goals:")
        for goal in goals:
            print(f"  {goal.name:<16} {format_duration(goal.target_duration):>4}  {goal.description}")

        runtime.send(act.SelectGoal(goals[1]))
        runtime.send(act.StartFast())
        runtime.wait_until_idle(5.0)
        print("\n▶️  Fast started")
        print_state(runtime.state)

        # Deliver ticks by hand rather than waiting on the tick source
        for hours in (4, 8, 4):
            clock.advance(hours=hours)
            runtime.send(act.TimerTick(runtime.state.active_record.id, clock()))
            runtime.wait_until_idle(5.0)
            print_state(runtime.state)

        runtime.send(act.StopFast())
        runtime.wait_until_idle(5.0)
        print("\n⏹️  Fast stopped")
        print_state(runtime.state)

        runtime.send(act.ShowHistory())
        runtime.wait_until_idle(5.0)


if __name__ == "__main__":
    main()
