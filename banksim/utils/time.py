"""Time utilities (UTC)."""

from datetime import datetime, timezone


def now_utc_naive() -> datetime:
    """
    Current time in UTC, returned as naive datetime for DB storage.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are assumed UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_iso(dt: datetime) -> str:
    """Naive UTC datetime to ISO string with offset."""
    return to_utc_naive(dt).replace(tzinfo=timezone.utc).isoformat()


def elapsed_ms(start: datetime, end: datetime) -> float:
    """Milliseconds between two timestamps (negative when end precedes start)."""
    return (to_utc_naive(end) - to_utc_naive(start)).total_seconds() * 1000.0
