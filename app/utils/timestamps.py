"""
Timestamp helpers shared by the priority scorer and the triage service.

All values are normalised to timezone-aware UTC datetimes so that naive
datetimes, ISO strings and aware datetimes can be subtracted safely.
"""

from datetime import datetime, timezone
from typing import Optional, Union

TimestampLike = Union[datetime, str, int, float]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[TimestampLike]) -> Optional[datetime]:
    """
    Parse a timestamp into a timezone-aware UTC datetime.

    Accepts datetimes (naive values are taken as UTC), ISO-8601 strings
    (a trailing 'Z' is allowed) and POSIX epoch seconds.

    Returns:
        Aware datetime, or None if the value is None or cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    return None


def age_in_days(created_at: Optional[TimestampLike], now: Optional[TimestampLike] = None) -> float:
    """
    Fractional number of days between created_at and now.

    A missing or unparseable created_at is treated as "created now" (age 0).
    """
    now_dt = to_utc(now) or utc_now()
    created_dt = to_utc(created_at)
    if created_dt is None:
        return 0.0
    return (now_dt - created_dt).total_seconds() / 86400.0
