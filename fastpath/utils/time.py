"""
Time handling and formatting utilities.

All timestamps inside the core are timezone-aware UTC datetimes. Elapsed time
is always recomputed from the wall-clock difference, never accumulated from
tick counts.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(ts: datetime) -> datetime:
    """
    Normalize a timestamp to aware UTC.

    Naive datetimes are assumed to already be UTC.
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """
    Format a timestamp for persistence and logging.

    Args:
        ts: Timestamp to format

    Returns:
        ISO8601 formatted string in UTC
    """
    return ensure_utc(ts).isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO8601 string written by format_timestamp."""
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def time_elapsed_seconds(start_time: datetime, end_time: Optional[datetime] = None) -> float:
    """
    Calculate elapsed time in seconds between two timestamps.

    Args:
        start_time: Start timestamp
        end_time: End timestamp, defaults to the current wall-clock time

    Returns:
        Elapsed time in seconds
    """
    if end_time is None:
        end_time = utc_now()

    return (ensure_utc(end_time) - ensure_utc(start_time)).total_seconds()


def format_time_interval(seconds: float) -> str:
    """
    Format an interval as zero-padded HH:MM:SS.

    Hours are not wrapped at 24, so a 30 hour fast reads "30:00:00".
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Format a goal-style duration: "16h" or "16h 30m"."""
    total = max(0, int(seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60

    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def format_record_duration(record) -> str:
    """Format a history entry: "In progress" while active, otherwise "3h 5m"."""
    if record.end_time is None:
        return "In progress"
    return format_duration(record.duration)
