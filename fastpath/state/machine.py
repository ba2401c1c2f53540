"""
Core fasting state machine.

A pure transition function over SessionViewState. Every action, whether it
comes from the user, the tick source or a completed persistence command, is
reduced to a new state plus a tuple of commands for the runtime to execute.
The machine never performs I/O itself.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Optional

import structlog

from ..config.defaults import GoalParams
from ..errors import InvalidGoalError, StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from ..utils.time import time_elapsed_seconds
from . import actions as act
from .commands import (
    Command,
    DeleteRecord,
    LoadSnapshot,
    PersistGoalSelection,
    SaveRecord,
    ShowHistoryScreen,
    StartLiveSurface,
    StartTicker,
    StopLiveSurface,
    StopTicker,
    UpdateLiveSurface,
    UpdateRecord,
)
from .goals import build_custom_goal, validate_goal
from .models import ErrorKind, FastingGoal, FastingRecord, SessionViewState

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)


@dataclass(frozen=True)
class Transition:
    """Result of reducing one action."""

    state: SessionViewState
    commands: tuple[Command, ...] = ()


class FastingStateMachine:
    """Reduces actions against the session view state."""

    def __init__(self, goal_params: Optional[GoalParams] = None):
        self.logger = logger
        self.goal_params = goal_params or GoalParams()
        self._handlers: dict[type, Callable[[SessionViewState, Any, datetime], Transition]] = {
            act.LoadInitialState: self._on_load_initial_state,
            act.SnapshotLoaded: self._on_snapshot_loaded,
            act.SnapshotLoadFailed: self._on_snapshot_load_failed,
            act.StartFast: self._on_start_fast,
            act.RecordSaved: self._on_record_saved,
            act.RecordSaveFailed: self._on_record_save_failed,
            act.StopFast: self._on_stop_fast,
            act.RecordUpdated: self._on_record_updated,
            act.RecordUpdateFailed: self._on_record_update_failed,
            act.TimerTick: self._on_timer_tick,
            act.DeleteRecordRequested: self._on_delete_record_requested,
            act.RecordDeleted: self._on_record_deleted,
            act.RecordDeleteFailed: self._on_record_delete_failed,
            act.SelectGoal: self._on_select_goal,
            act.SetCustomGoal: self._on_set_custom_goal,
            act.ClearGoal: self._on_clear_goal,
            act.GoalSelectionSaved: self._on_goal_selection_saved,
            act.GoalSelectionSaveFailed: self._on_goal_selection_save_failed,
            act.ShowGoalPicker: self._on_show_goal_picker,
            act.DismissGoalPicker: self._on_dismiss_goal_picker,
            act.SetLiveSurfaceEnabled: self._on_set_live_surface_enabled,
            act.LiveSurfaceStartCompleted: self._on_live_surface_start_completed,
            act.ShowHistory: self._on_show_history,
            act.DismissError: self._on_dismiss_error,
        }

    def reduce(self, state: SessionViewState, action: "act.Action", now: datetime) -> Transition:
        """
        Reduce a single action.

        Args:
            state: Current session view state
            action: Action to apply
            now: Wall-clock time at which the action is processed

        Returns:
            Transition with the new state and commands to execute

        Raises:
            StateTransitionError: If the action type is not handled
        """
        handler = self._handlers.get(type(action))
        if handler is None:
            raise StateTransitionError(
                f"No transition for action {type(action).__name__}",
                current_state=state.phase.value,
                attempted_transition=type(action).__name__
            )

        transition = handler(state, action, now)

        if transition.state.phase != state.phase:
            record = transition.state.active_record or state.active_record
            log_state_transition(
                state_logger,
                record_id=record.id if record else None,
                from_state=state.phase.value,
                to_state=transition.state.phase.value,
                trigger=type(action).__name__,
                context={"commands": [type(c).__name__ for c in transition.commands]}
            )

        return transition

    # Initial load

    def _on_load_initial_state(self, state, action, now) -> Transition:
        return Transition(replace(state, is_loading=True), (LoadSnapshot(),))

    def _on_snapshot_loaded(self, state, action: act.SnapshotLoaded, now) -> Transition:
        # A fast started or a goal selected before the snapshot arrived stays in place
        active = action.active_record or state.active_record
        selected = state.selected_goal or action.selected_goal

        loaded_names = {g.name for g in action.available_goals}
        available = action.available_goals + tuple(
            g for g in state.available_goals if g.name not in loaded_names
        )

        new_state = replace(
            state,
            is_loading=False,
            active_record=active,
            history=action.history,
            selected_goal=selected,
            available_goals=available,
        )

        if active is None:
            return Transition(new_state)

        new_state = replace(new_state, current_elapsed_time=self._elapsed(active, now))
        new_state, commands = self._ensure_ticker(new_state, active)
        new_state, live_commands = self._start_live_surface(new_state)
        return Transition(new_state, commands + live_commands)

    def _on_snapshot_load_failed(self, state, action: act.SnapshotLoadFailed, now) -> Transition:
        new_state = replace(state, is_loading=False)
        return Transition(new_state.with_error(ErrorKind.PERSISTENCE, action.message, "load"))

    # Start

    def _on_start_fast(self, state, action, now) -> Transition:
        if state.is_fasting:
            self.logger.warning(
                "Start ignored, fast already active",
                record_id=state.active_record.id
            )
            return Transition(state)

        record = FastingRecord.begin(now)
        new_state = replace(
            state,
            active_record=record,
            current_elapsed_time=0.0,
            last_error=None,
        )
        return Transition(new_state, (SaveRecord(record),))

    def _on_record_saved(self, state, action: act.RecordSaved, now) -> Transition:
        active = state.active_record
        if active is None or active.id != action.requested_id:
            # Stopped before the save was acknowledged; the update result follows
            return Transition(state)

        record = action.record
        if record.id != action.requested_id:
            self.logger.warning(
                "Store returned an existing active record, adopting it",
                requested_id=action.requested_id,
                record_id=record.id
            )

        new_state = replace(
            state,
            active_record=record,
            current_elapsed_time=self._elapsed(record, now),
        ).with_history_entry(record)
        new_state, commands = self._ensure_ticker(new_state, record)
        new_state, live_commands = self._start_live_surface(new_state)
        return Transition(new_state, commands + live_commands)

    def _on_record_save_failed(self, state, action: act.RecordSaveFailed, now) -> Transition:
        active = state.active_record
        if active is None or active.id != action.record.id:
            return Transition(state.with_error(ErrorKind.PERSISTENCE, action.message, "save"))

        commands: list[Command] = []
        if state.ticking_record_id is not None:
            commands.append(StopTicker(state.ticking_record_id))
        if state.live_surface_active:
            commands.append(StopLiveSurface())

        new_state = replace(
            state,
            active_record=None,
            current_elapsed_time=0.0,
            ticking_record_id=None,
            live_surface_active=False,
        ).without_history_entry(active.id)
        return Transition(
            new_state.with_error(ErrorKind.PERSISTENCE, action.message, "save"),
            tuple(commands)
        )

    # Stop

    def _on_stop_fast(self, state, action, now) -> Transition:
        active = state.active_record
        if active is None:
            return Transition(state)

        record = active.stopped_at(now)

        commands: list[Command] = []
        if state.ticking_record_id is not None:
            commands.append(StopTicker(state.ticking_record_id))
        commands.append(UpdateRecord(record))
        if state.live_surface_active:
            commands.append(StopLiveSurface())

        new_state = replace(
            state,
            active_record=None,
            ticking_record_id=None,
            live_surface_active=False,
        )
        return Transition(new_state, tuple(commands))

    def _on_record_updated(self, state, action: act.RecordUpdated, now) -> Transition:
        new_state = state.with_history_entry(action.record)
        if not new_state.is_fasting:
            new_state = replace(new_state, current_elapsed_time=0.0)
        return Transition(new_state)

    def _on_record_update_failed(self, state, action: act.RecordUpdateFailed, now) -> Transition:
        if state.is_fasting:
            return Transition(state.with_error(ErrorKind.PERSISTENCE, action.message, "update"))

        restored = action.record.reopened()
        new_state = replace(
            state,
            active_record=restored,
            current_elapsed_time=self._elapsed(restored, now),
        ).with_error(ErrorKind.PERSISTENCE, action.message, "update")
        new_state, commands = self._ensure_ticker(new_state, restored)
        new_state, live_commands = self._start_live_surface(new_state)
        return Transition(new_state, commands + live_commands)

    # Tick

    def _on_timer_tick(self, state, action: act.TimerTick, now) -> Transition:
        active = state.active_record
        if active is None or active.id != action.record_id:
            return Transition(state)

        elapsed = max(state.current_elapsed_time, self._elapsed(active, action.at))
        new_state = replace(state, current_elapsed_time=elapsed)

        if new_state.live_surface_active and new_state.selected_goal is not None:
            return Transition(new_state, (self._live_update(new_state),))
        return Transition(new_state)

    # Delete

    def _on_delete_record_requested(self, state, action: act.DeleteRecordRequested, now) -> Transition:
        active = state.active_record
        if active is not None and active.id == action.record_id:
            return Transition(state.with_error(
                ErrorKind.INVALID_OPERATION,
                "Cannot delete the active fasting record; stop it first",
                "delete"
            ))
        return Transition(state, (DeleteRecord(action.record_id),))

    def _on_record_deleted(self, state, action: act.RecordDeleted, now) -> Transition:
        return Transition(state.without_history_entry(action.record_id))

    def _on_record_delete_failed(self, state, action: act.RecordDeleteFailed, now) -> Transition:
        return Transition(state.with_error(ErrorKind.PERSISTENCE, action.message, "delete"))

    # Goals

    def _on_select_goal(self, state, action: act.SelectGoal, now) -> Transition:
        try:
            goal = validate_goal(action.goal)
        except InvalidGoalError as e:
            return Transition(state.with_error(ErrorKind.INVALID_GOAL, str(e), "select_goal"))
        return self._apply_goal_selection(state, goal)

    def _on_set_custom_goal(self, state, action: act.SetCustomGoal, now) -> Transition:
        try:
            goal = build_custom_goal(action.target_duration, self.goal_params)
        except InvalidGoalError as e:
            return Transition(state.with_error(ErrorKind.INVALID_GOAL, str(e), "custom_goal"))
        return self._apply_goal_selection(state, goal)

    def _on_clear_goal(self, state, action, now) -> Transition:
        return self._apply_goal_selection(state, None)

    def _apply_goal_selection(self, state: SessionViewState,
                              goal: Optional[FastingGoal]) -> Transition:
        previous = state.selected_goal
        new_state = replace(state, selected_goal=goal, goal_picker_visible=False)
        commands: list[Command] = [PersistGoalSelection(goal, previous)]

        if goal is None:
            if new_state.live_surface_active:
                commands.append(StopLiveSurface())
                new_state = replace(new_state, live_surface_active=False)
            return Transition(new_state, tuple(commands))

        others = tuple(g for g in new_state.available_goals if g.name != goal.name)
        if len(others) == len(new_state.available_goals):
            new_state = replace(new_state, available_goals=new_state.available_goals + (goal,))
        else:
            new_state = replace(new_state, available_goals=tuple(
                goal if g.name == goal.name else g for g in new_state.available_goals
            ))

        new_state, live_commands = self._start_live_surface(new_state)
        return Transition(new_state, tuple(commands) + live_commands)

    def _on_goal_selection_saved(self, state, action: act.GoalSelectionSaved, now) -> Transition:
        return Transition(state)

    def _on_goal_selection_save_failed(self, state, action: act.GoalSelectionSaveFailed,
                                       now) -> Transition:
        if state.selected_goal != action.goal:
            # Superseded by a later selection
            return Transition(state.with_error(ErrorKind.PERSISTENCE, action.message, "save_goal"))

        new_state = replace(state, selected_goal=action.previous)
        commands: tuple[Command, ...] = ()
        if action.previous is None:
            if new_state.live_surface_active:
                commands = (StopLiveSurface(),)
                new_state = replace(new_state, live_surface_active=False)
        else:
            new_state, commands = self._start_live_surface(new_state)

        return Transition(
            new_state.with_error(ErrorKind.PERSISTENCE, action.message, "save_goal"),
            commands
        )

    def _on_show_goal_picker(self, state, action, now) -> Transition:
        return Transition(replace(state, goal_picker_visible=True))

    def _on_dismiss_goal_picker(self, state, action, now) -> Transition:
        return Transition(replace(state, goal_picker_visible=False))

    # Live surface

    def _on_set_live_surface_enabled(self, state, action: act.SetLiveSurfaceEnabled,
                                     now) -> Transition:
        new_state = replace(state, live_surface_enabled=action.enabled)

        if not action.enabled:
            if state.live_surface_active:
                return Transition(replace(new_state, live_surface_active=False), (StopLiveSurface(),))
            return Transition(new_state)

        new_state, commands = self._start_live_surface(new_state)
        return Transition(new_state, commands)

    def _on_live_surface_start_completed(self, state, action: act.LiveSurfaceStartCompleted,
                                         now) -> Transition:
        active = state.active_record
        if action.started or active is None or active.id != action.record_id:
            return Transition(state)

        self.logger.info("Live surface did not start", record_id=action.record_id)
        return Transition(replace(state, live_surface_active=False))

    # Navigation and errors

    def _on_show_history(self, state, action, now) -> Transition:
        return Transition(state, (ShowHistoryScreen(state.history),))

    def _on_dismiss_error(self, state, action, now) -> Transition:
        return Transition(replace(state, last_error=None))

    # Helpers

    def _elapsed(self, record: FastingRecord, at: datetime) -> float:
        return max(0.0, time_elapsed_seconds(record.start_time, at))

    def _ensure_ticker(self, state: SessionViewState,
                       record: FastingRecord) -> tuple[SessionViewState, tuple[Command, ...]]:
        """Start the tick stream for record unless it already runs."""
        if state.ticking_record_id == record.id:
            return state, ()

        commands: list[Command] = []
        if state.ticking_record_id is not None:
            commands.append(StopTicker(state.ticking_record_id))
        commands.append(StartTicker(record.id))
        return replace(state, ticking_record_id=record.id), tuple(commands)

    def _start_live_surface(
        self, state: SessionViewState
    ) -> tuple[SessionViewState, tuple[Command, ...]]:
        """Start the live mirror when fasting, enabled, goal selected and none active."""
        active = state.active_record
        goal = state.selected_goal
        if (active is None or goal is None or not state.live_surface_enabled
                or state.live_surface_active):
            return state, ()

        commands: list[Command] = [StartLiveSurface(
            record_id=active.id,
            start_time=active.start_time,
            goal_duration=goal.target_duration,
            goal_name=goal.name,
        )]
        if state.current_elapsed_time > 0:
            commands.append(self._live_update(state))

        return replace(state, live_surface_active=True), tuple(commands)

    def _live_update(self, state: SessionViewState) -> UpdateLiveSurface:
        return UpdateLiveSurface(
            elapsed_time=state.current_elapsed_time,
            remaining_time=state.remaining_time or 0.0,
            goal_reached=bool(state.goal_reached),
        )
