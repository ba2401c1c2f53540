"""
Fasting runtime: the single actor owning the session view state.

Actions are drained from one inbox by one thread, so every transition is
serialized in arrival order. Commands emitted by the state machine run on
dedicated executors and report back by sending result actions into the same
inbox.
"""

import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional

import structlog

from ..errors import FastingDataError, MissingDataError, PersistenceError, StateTransitionError
from ..live.base import BaseLiveStatusPublisher
from ..persistence.base import RecordStore
from ..utils.time import utc_now
from . import actions as act
from .commands import (
    LIVE_SURFACE_COMMANDS,
    PERSISTENCE_COMMANDS,
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
from .machine import FastingStateMachine
from .models import FastingRecord, SessionViewState
from .ticker import TickSource

logger = structlog.get_logger(__name__)

StateListener = Callable[[SessionViewState], None]
Navigator = Callable[[tuple[FastingRecord, ...]], None]

_STOP = object()


class FastingRuntime:
    """Owns the current state and executes commands against collaborators."""

    def __init__(
        self,
        store: RecordStore,
        publisher: Optional[BaseLiveStatusPublisher] = None,
        clock: Callable[[], datetime] = utc_now,
        tick_interval: float = 1.0,
        navigator: Optional[Navigator] = None,
        state_machine: Optional[FastingStateMachine] = None,
        initial_state: Optional[SessionViewState] = None,
    ):
        self.store = store
        self.publisher = publisher
        self.clock = clock
        self.tick_interval = tick_interval
        self.navigator = navigator
        self.state_machine = state_machine or FastingStateMachine()
        self.logger = logger

        self._state = initial_state or SessionViewState()
        self._state_lock = threading.Lock()
        self._listeners: list[StateListener] = []

        self._inbox: queue.Queue = queue.Queue()
        self._actor: Optional[threading.Thread] = None
        self._closed = False

        # Single writer: store operations keep their issue order
        self._persistence = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fastpath-store")
        self._live = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fastpath-live")
        self._tickers: dict[str, TickSource] = {}

        # Queued actions plus in-flight commands
        self._pending = 0
        self._idle = threading.Condition()

    # Lifecycle

    def start(self) -> "FastingRuntime":
        if self._actor is not None:
            return self
        if self._closed:
            raise RuntimeError("Fasting runtime has been stopped")

        self._actor = threading.Thread(target=self._run, name="fastpath-runtime", daemon=True)
        self._actor.start()
        self.logger.info("Fasting runtime started", tick_interval=self.tick_interval)
        return self

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Drain queued actions, cancel tick sources and shut down executors."""
        with self._idle:
            if self._closed:
                return
            self._closed = True

        self._inbox.put(_STOP)
        if self._actor is not None:
            self._actor.join(timeout)

        for ticker in list(self._tickers.values()):
            ticker.stop(timeout)
        self._tickers.clear()

        self._persistence.shutdown(wait=True)
        self._live.shutdown(wait=True)
        self.logger.info("Fasting runtime stopped")

    def __enter__(self) -> "FastingRuntime":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # Public API

    @property
    def state(self) -> SessionViewState:
        with self._state_lock:
            return self._state

    @property
    def active_ticker_ids(self) -> list[str]:
        return [record_id for record_id, ticker in self._tickers.items() if ticker.is_running]

    def send(self, action: "act.Action") -> None:
        """Enqueue an action. Actions sent after stop() are dropped."""
        with self._idle:
            if self._closed:
                self.logger.debug("Runtime stopped, dropping action", action=type(action).__name__)
                return
            self._pending += 1
        self._inbox.put(action)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with every new state.

        Listeners run on the runtime thread and must not block.

        Returns:
            Callable removing the listener
        """
        with self._state_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._state_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no action is queued and no command is in flight.

        Returns:
            False if the timeout expired first
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout)

    # Actor loop

    def _run(self) -> None:
        while True:
            item = self._inbox.get()
            if item is _STOP:
                break
            try:
                with structlog.contextvars.bound_contextvars(action=type(item).__name__):
                    self._process(item)
            except Exception as e:
                self.logger.error(
                    "Unhandled error processing action",
                    action=type(item).__name__,
                    error=str(e),
                    exc_info=True
                )
            finally:
                self._finish_work()

    def _process(self, action: "act.Action") -> None:
        previous = self.state
        try:
            transition = self.state_machine.reduce(previous, action, self.clock())
        except StateTransitionError as e:
            self.logger.error(
                "Action rejected by state machine",
                action=type(action).__name__,
                current_state=e.current_state,
                error=str(e)
            )
            return

        with self._state_lock:
            self._state = transition.state
            listeners = list(self._listeners)

        if transition.state != previous:
            for listener in listeners:
                try:
                    listener(transition.state)
                except Exception as e:
                    self.logger.error("State listener failed", error=str(e), exc_info=True)

        for command in transition.commands:
            self._execute(command)

    def _execute(self, command: Command) -> None:
        if isinstance(command, PERSISTENCE_COMMANDS):
            self._submit(self._persistence, self._run_persistence, command)
        elif isinstance(command, LIVE_SURFACE_COMMANDS):
            self._execute_live(command)
        elif isinstance(command, StartTicker):
            self._start_ticker(command.record_id)
        elif isinstance(command, StopTicker):
            self._stop_ticker(command.record_id)
        elif isinstance(command, ShowHistoryScreen):
            self._show_history(command.history)
        else:
            self.logger.error("Unknown command", command=type(command).__name__)

    # Work accounting

    def _begin_work(self) -> None:
        with self._idle:
            self._pending += 1

    def _finish_work(self) -> None:
        with self._idle:
            self._pending -= 1
            if self._pending == 0:
                self._idle.notify_all()

    def _submit(self, executor: ThreadPoolExecutor, fn, command: Command) -> None:
        self._begin_work()
        try:
            future = executor.submit(fn, command)
        except RuntimeError:
            self.logger.warning("Executor shut down, dropping command", command=type(command).__name__)
            self._finish_work()
            return
        future.add_done_callback(lambda f: self._on_command_done(f, command))

    def _on_command_done(self, future: Future, command: Command) -> None:
        error = future.exception()
        if error is not None:
            self.logger.error(
                "Command failed unexpectedly",
                command=type(command).__name__,
                error=str(error)
            )
        self._finish_work()

    # Persistence

    def _run_persistence(self, command: Command) -> None:
        self.send(self._persist(command))

    def _persist(self, command: Command) -> "act.Action":
        """Execute one store command and translate the outcome into a result action."""
        if isinstance(command, LoadSnapshot):
            try:
                return act.SnapshotLoaded(
                    active_record=self.store.get_active(),
                    history=tuple(self.store.list_all()),
                    selected_goal=self.store.get_goal(),
                    available_goals=tuple(self.store.list_goals()),
                )
            except PersistenceError as e:
                self.logger.error("Snapshot load failed", error=str(e))
                return act.SnapshotLoadFailed(str(e))

        if isinstance(command, SaveRecord):
            try:
                stored = self.store.save(command.record)
                return act.RecordSaved(requested_id=command.record.id, record=stored)
            except (PersistenceError, FastingDataError) as e:
                self.logger.error("Record save failed", record_id=command.record.id, error=str(e))
                return act.RecordSaveFailed(command.record, str(e))

        if isinstance(command, UpdateRecord):
            try:
                return act.RecordUpdated(self.store.update(command.record))
            except MissingDataError:
                # Deleted elsewhere; nothing to stop
                self.logger.warning("Stopped record no longer stored", record_id=command.record.id)
                return act.RecordDeleted(command.record.id)
            except (PersistenceError, FastingDataError) as e:
                self.logger.error("Record update failed", record_id=command.record.id, error=str(e))
                return act.RecordUpdateFailed(command.record, str(e))

        if isinstance(command, DeleteRecord):
            try:
                deleted = self.store.delete(command.record_id)
                if not deleted:
                    self.logger.info("Record already absent", record_id=command.record_id)
                return act.RecordDeleted(command.record_id)
            except PersistenceError as e:
                self.logger.error("Record delete failed", record_id=command.record_id, error=str(e))
                return act.RecordDeleteFailed(command.record_id, str(e))

        if isinstance(command, PersistGoalSelection):
            try:
                self.store.save_goal(command.goal)
                return act.GoalSelectionSaved(command.goal)
            except PersistenceError as e:
                self.logger.error(
                    "Goal selection save failed",
                    goal_name=command.goal.name if command.goal else None,
                    error=str(e)
                )
                return act.GoalSelectionSaveFailed(command.goal, command.previous, str(e))

        raise TypeError(f"Not a persistence command: {type(command).__name__}")

    # Live surface

    def _execute_live(self, command: Command) -> None:
        if self.publisher is None:
            if isinstance(command, StartLiveSurface):
                self.send(act.LiveSurfaceStartCompleted(command.record_id, started=False))
            return
        self._submit(self._live, self._run_live, command)

    def _run_live(self, command: Command) -> None:
        if isinstance(command, StartLiveSurface):
            started = self.publisher.start(
                command.record_id,
                command.start_time,
                command.goal_duration,
                command.goal_name,
            )
            self.send(act.LiveSurfaceStartCompleted(command.record_id, started=started))
        elif isinstance(command, UpdateLiveSurface):
            self.publisher.update(command.elapsed_time, command.remaining_time, command.goal_reached)
        elif isinstance(command, StopLiveSurface):
            self.publisher.stop()

    # Tick source

    def _start_ticker(self, record_id: str) -> None:
        existing = self._tickers.get(record_id)
        if existing is not None and existing.is_running:
            return

        for other_id in [rid for rid in self._tickers if rid != record_id]:
            self._stop_ticker(other_id)

        ticker = TickSource(
            record_id,
            self.tick_interval,
            on_tick=lambda rid, at: self.send(act.TimerTick(rid, at)),
            clock=self.clock,
        )
        self._tickers[record_id] = ticker
        ticker.start()
        self.logger.debug("Tick source started", record_id=record_id)

    def _stop_ticker(self, record_id: str) -> None:
        ticker = self._tickers.pop(record_id, None)
        if ticker is not None:
            ticker.stop()
            self.logger.debug("Tick source stopped", record_id=record_id)

    # Navigation

    def _show_history(self, history: tuple[FastingRecord, ...]) -> None:
        if self.navigator is None:
            self.logger.debug("No navigator attached, ignoring history request")
            return
        try:
            self.navigator(history)
        except Exception as e:
            self.logger.error("Navigator failed", error=str(e), exc_info=True)
