"""Record stores for fasting sessions and goal definitions."""

from .base import RecordStore
from .memory_store import InMemoryRecordStore
from .sqlite_store import SQLiteRecordStore

__all__ = ["RecordStore", "InMemoryRecordStore", "SQLiteRecordStore"]
