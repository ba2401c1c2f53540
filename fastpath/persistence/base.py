"""Record store contract consumed by the fasting runtime."""

from abc import ABC, abstractmethod
from typing import Optional

from ..errors import InvalidRecordError, MissingDataError
from ..state.goals import PREDEFINED_GOALS
from ..state.models import FastingGoal, FastingRecord


def check_update(stored: Optional[FastingRecord], record: FastingRecord) -> None:
    """
    Enforce the record lifecycle: the end time is set exactly once.

    Raises:
        MissingDataError: If there is no stored record
        InvalidRecordError: If the update is not a valid stop of an active record
    """
    if stored is None:
        raise MissingDataError(f"Fasting record {record.id} not found", data_type="fasting_record")
    if not stored.is_active:
        raise InvalidRecordError(
            f"Fasting record {record.id} is already stopped",
            record_id=record.id
        )
    if record.end_time is None:
        raise InvalidRecordError(
            f"Update of fasting record {record.id} must set an end time",
            record_id=record.id
        )
    if record.start_time != stored.start_time:
        raise InvalidRecordError(
            f"Start time of fasting record {record.id} is immutable",
            record_id=record.id
        )
    if record.end_time < record.start_time:
        raise InvalidRecordError(
            f"End time precedes start time for fasting record {record.id}",
            record_id=record.id,
            context={"start_time": record.start_time.isoformat(),
                     "end_time": record.end_time.isoformat()}
        )


class RecordStore(ABC):
    """
    Durable storage for fasting records and goal definitions.

    Implementations must serialize writes so that at most one record without
    an end time exists at any observation point.
    """

    @abstractmethod
    def save(self, record: FastingRecord) -> FastingRecord:
        """
        Insert a record.

        Returns:
            The stored record. When record is active and another active record
            already exists, nothing is inserted and the existing one is returned.
        """

    @abstractmethod
    def update(self, record: FastingRecord) -> FastingRecord:
        """
        Set the end time of a still-active record.

        Raises:
            MissingDataError: If no record with this id exists
            InvalidRecordError: If the stored record is already stopped, or
                the update would change anything but the end time
        """

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Delete a record by id. Returns whether a record was removed."""

    @abstractmethod
    def list_all(self) -> list[FastingRecord]:
        """All records ordered by start time, newest first."""

    @abstractmethod
    def get_active(self) -> Optional[FastingRecord]:
        """The single record without an end time, if any."""

    @abstractmethod
    def save_goal(self, goal: Optional[FastingGoal]) -> None:
        """
        Upsert a goal definition by name and mark it as the selected goal.

        Passing None clears the selection; goal definitions are kept.
        """

    @abstractmethod
    def get_goal(self) -> Optional[FastingGoal]:
        """The currently selected goal, if any."""

    @abstractmethod
    def get_goal_by_name(self, name: str) -> Optional[FastingGoal]:
        """A goal definition by its name."""

    @abstractmethod
    def list_goals(self) -> list[FastingGoal]:
        """All goal definitions ordered by target duration."""

    @abstractmethod
    def delete_goal(self, name: str) -> bool:
        """Delete a goal definition, clearing the selection if it pointed at it."""

    @abstractmethod
    def _insert_goal_definitions(self, goals: tuple[FastingGoal, ...]) -> None:
        """Insert definitions without touching the selection."""

    def seed_predefined_goals(self) -> bool:
        """
        Seed the predefined goals when no goal definitions exist.

        Returns:
            True if goals were inserted
        """
        if self.list_goals():
            return False
        self._insert_goal_definitions(PREDEFINED_GOALS)
        return True

    def close(self) -> None:
        """Release resources held by the store."""
