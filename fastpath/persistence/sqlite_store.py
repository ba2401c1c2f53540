"""SQLite-based record store for fasting sessions and goals."""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import structlog

from ..errors import PersistenceError
from ..state.models import FastingGoal, FastingRecord
from ..utils.time import format_timestamp, parse_timestamp, utc_now
from .base import RecordStore, check_update

SELECTED_GOAL_KEY = "selected_goal"


class SQLiteRecordStore(RecordStore):
    """
    SQLite persistence for fasting records and goal definitions.

    Writes are serialized by a process-wide lock and run inside
    BEGIN IMMEDIATE transactions, so concurrent writers cannot create a
    second active record.
    """

    def __init__(self, db_path: str = "fastpath.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("fastpath.store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS fasting_records (
                        id TEXT PRIMARY KEY,
                        start_time TEXT NOT NULL,
                        start_ts REAL NOT NULL,
                        end_time TEXT
                    )
                """)

                conn.execute("""
                    CREATE TABLE IF NOT EXISTS fasting_goals (
                        name TEXT PRIMARY KEY,
                        target_duration REAL NOT NULL CHECK (target_duration > 0),
                        description TEXT,
                        updated_at TEXT NOT NULL
                    )
                """)

                conn.execute("""
                    CREATE TABLE IF NOT EXISTS app_state (
                        key TEXT PRIMARY KEY,
                        value TEXT
                    )
                """)

                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_records_start_ts ON fasting_records(start_ts)
                """)

                conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_records_end_time ON fasting_records(end_time)
                """)

                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to initialize database: {e}",
                operation="init",
                target=str(self.db_path)
            ) from e

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e), db_path=str(self.db_path))
            raise
        finally:
            if conn:
                conn.close()

    # Records

    def save(self, record: FastingRecord) -> FastingRecord:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("BEGIN IMMEDIATE")

                    if record.is_active:
                        existing = self._fetch_active(conn)
                        if existing is not None and existing.id != record.id:
                            conn.rollback()
                            self.logger.warning(
                                "Active record already exists, not inserting",
                                requested_id=record.id,
                                record_id=existing.id
                            )
                            return existing

                    conn.execute("""
                        INSERT INTO fasting_records (id, start_time, start_ts, end_time)
                        VALUES (?, ?, ?, ?)
                    """, (
                        record.id,
                        format_timestamp(record.start_time),
                        record.start_time.timestamp(),
                        format_timestamp(record.end_time) if record.end_time else None
                    ))
                    conn.commit()

                    self.logger.info("Fasting record saved", record_id=record.id)
                    return record

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to save fasting record: {e}",
                    operation="save",
                    target=record.id
                ) from e

    def update(self, record: FastingRecord) -> FastingRecord:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("BEGIN IMMEDIATE")

                    row = conn.execute("""
                        SELECT * FROM fasting_records WHERE id = ?
                    """, (record.id,)).fetchone()
                    stored = self._row_to_record(row) if row else None

                    try:
                        check_update(stored, record)
                    except Exception:
                        conn.rollback()
                        raise

                    conn.execute("""
                        UPDATE fasting_records SET end_time = ?
                        WHERE id = ? AND end_time IS NULL
                    """, (format_timestamp(record.end_time), record.id))
                    conn.commit()

                    self.logger.info(
                        "Fasting record stopped",
                        record_id=record.id,
                        duration_seconds=record.duration
                    )
                    return record

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to update fasting record: {e}",
                    operation="update",
                    target=record.id
                ) from e

    def delete(self, record_id: str) -> bool:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("""
                        DELETE FROM fasting_records WHERE id = ?
                    """, (record_id,))
                    conn.commit()

                    deleted = cursor.rowcount > 0
                    self.logger.info("Fasting record deleted", record_id=record_id, deleted=deleted)
                    return deleted

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to delete fasting record: {e}",
                    operation="delete",
                    target=record_id
                ) from e

    def list_all(self) -> list[FastingRecord]:
        try:
            with self._get_connection() as conn:
                rows = conn.execute("""
                    SELECT * FROM fasting_records ORDER BY start_ts DESC, rowid DESC
                """).fetchall()

                return [self._row_to_record(row) for row in rows]

        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to list fasting records: {e}",
                operation="list_all",
                target="fasting_records"
            ) from e

    def get_active(self) -> Optional[FastingRecord]:
        try:
            with self._get_connection() as conn:
                return self._fetch_active(conn)

        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to load active fasting record: {e}",
                operation="get_active",
                target="fasting_records"
            ) from e

    def _fetch_active(self, conn: sqlite3.Connection) -> Optional[FastingRecord]:
        row = conn.execute("""
            SELECT * FROM fasting_records WHERE end_time IS NULL
            ORDER BY start_ts DESC, rowid DESC LIMIT 1
        """).fetchone()
        return self._row_to_record(row) if row else None

    # Goals

    def save_goal(self, goal: Optional[FastingGoal]) -> None:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    if goal is None:
                        conn.execute("""
                            DELETE FROM app_state WHERE key = ?
                        """, (SELECTED_GOAL_KEY,))
                    else:
                        self._upsert_goal(conn, goal)
                        conn.execute("""
                            INSERT INTO app_state (key, value) VALUES (?, ?)
                            ON CONFLICT(key) DO UPDATE SET value = excluded.value
                        """, (SELECTED_GOAL_KEY, goal.name))
                    conn.commit()

                    self.logger.info(
                        "Goal selection saved",
                        goal_name=goal.name if goal else None
                    )

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to save goal: {e}",
                    operation="save_goal",
                    target=goal.name if goal else SELECTED_GOAL_KEY
                ) from e

    def get_goal(self) -> Optional[FastingGoal]:
        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT g.* FROM app_state s
                    JOIN fasting_goals g ON g.name = s.value
                    WHERE s.key = ?
                """, (SELECTED_GOAL_KEY,)).fetchone()

                return self._row_to_goal(row) if row else None

        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to load selected goal: {e}",
                operation="get_goal",
                target=SELECTED_GOAL_KEY
            ) from e

    def get_goal_by_name(self, name: str) -> Optional[FastingGoal]:
        try:
            with self._get_connection() as conn:
                row = conn.execute("""
                    SELECT * FROM fasting_goals WHERE name = ?
                """, (name,)).fetchone()

                return self._row_to_goal(row) if row else None

        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to load goal {name}: {e}",
                operation="get_goal_by_name",
                target=name
            ) from e

    def list_goals(self) -> list[FastingGoal]:
        try:
            with self._get_connection() as conn:
                rows = conn.execute("""
                    SELECT * FROM fasting_goals ORDER BY target_duration, name
                """).fetchall()

                return [self._row_to_goal(row) for row in rows]

        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to list goals: {e}",
                operation="list_goals",
                target="fasting_goals"
            ) from e

    def delete_goal(self, name: str) -> bool:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute("""
                        DELETE FROM fasting_goals WHERE name = ?
                    """, (name,))
                    conn.execute("""
                        DELETE FROM app_state WHERE key = ? AND value = ?
                    """, (SELECTED_GOAL_KEY, name))
                    conn.commit()
                    return cursor.rowcount > 0

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to delete goal {name}: {e}",
                    operation="delete_goal",
                    target=name
                ) from e

    def _insert_goal_definitions(self, goals: tuple[FastingGoal, ...]) -> None:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    for goal in goals:
                        self._upsert_goal(conn, goal)
                    conn.commit()

                    self.logger.info("Seeded goal definitions", count=len(goals))

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to seed goals: {e}",
                    operation="seed_goals",
                    target="fasting_goals"
                ) from e

    def _upsert_goal(self, conn: sqlite3.Connection, goal: FastingGoal) -> None:
        conn.execute("""
            INSERT INTO fasting_goals (name, target_duration, description, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                target_duration = excluded.target_duration,
                description = excluded.description,
                updated_at = excluded.updated_at
        """, (goal.name, goal.target_duration, goal.description, format_timestamp(utc_now())))

    def _row_to_record(self, row: sqlite3.Row) -> FastingRecord:
        """Convert database row to FastingRecord object."""
        return FastingRecord(
            id=row["id"],
            start_time=parse_timestamp(row["start_time"]),
            end_time=parse_timestamp(row["end_time"])
        )

    def _row_to_goal(self, row: sqlite3.Row) -> FastingGoal:
        """Convert database row to FastingGoal object."""
        return FastingGoal(
            target_duration=row["target_duration"],
            name=row["name"],
            description=row["description"]
        )
