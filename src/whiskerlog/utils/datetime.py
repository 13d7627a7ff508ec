"""Datetime utilities for consistent timestamp handling."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def parse_epoch(value: Optional[int | float | str]) -> Optional[datetime]:
    """Parse epoch seconds to an aware UTC datetime.

    Args:
        value: Unix timestamp in seconds (int, float or digit string), or None

    Returns:
        datetime (UTC), or None if the value is missing or not representable
    """
    if value is None:
        return None

    try:
        seconds = float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch(dt: datetime) -> int:
    """Whole epoch seconds for a datetime."""
    return int(ensure_utc(dt).timestamp())


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MICROSECOND = timedelta(microseconds=1)


def to_epoch_micros(dt: datetime) -> int:
    """Exact epoch microseconds for a datetime (no float rounding)."""
    return (ensure_utc(dt) - EPOCH) // ONE_MICROSECOND


def from_epoch_micros(value: Optional[int]) -> Optional[datetime]:
    """Inverse of to_epoch_micros(); None for a missing value."""
    if value is None:
        return None
    return EPOCH + timedelta(microseconds=int(value))


def format_iso(dt: Optional[datetime] = None) -> str:
    """Format datetime as ISO 8601 string (current time if None)."""
    if dt is None:
        dt = utc_now()
    return dt.isoformat()


def parse_iso(value: str) -> datetime:
    """Parse an ISO 8601 string produced by format_iso()."""
    return ensure_utc(datetime.fromisoformat(value))


def day_of(dt: datetime) -> date:
    """Calendar day (UTC) of a timestamp."""
    return ensure_utc(dt).date()
