"""
Centralized Utilities for Time Handling in ExamPrep.
Goal: every timestamp inside the engines is a timezone-aware UTC datetime.
"""
from datetime import datetime, timezone
from typing import Optional, Union

SECONDS_PER_DAY = 86400.0


def utcnow() -> datetime:
    """
    Get the current timezone-aware UTC datetime.
    Always use this instead of datetime.utcnow() or datetime.now().
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo) and normalize aware ones."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into an aware UTC datetime."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value).replace('Z', '+00:00')))


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if dt is None:
        return None
    dt = ensure_utc(dt)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"


def days_between(start: datetime, end: datetime) -> float:
    """Real-valued number of days from ``start`` to ``end`` (negative if end is earlier)."""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / SECONDS_PER_DAY
