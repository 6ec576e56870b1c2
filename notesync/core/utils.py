"""
Core Utilities.

Shared time helpers used across the sync engine.
All datetimes are timezone-naive and assumed to be UTC.
"""

from datetime import datetime, timedelta, timezone

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This keeps SQLite storage and equality
    comparisons of note timestamps consistent.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def advance_timestamp(now: datetime, previous: datetime | None) -> datetime:
    """
    Return a timestamp strictly later than `previous`.

    Wall clocks can stand still or step backwards between two saves of the
    same note. Every save must still carry a distinct, increasing
    `updated_at`, so the clock value is bumped by one microsecond past the
    previous value when needed.

    Args:
        now: Current clock reading
        previous: Last stored timestamp, if any

    Returns:
        `now`, or `previous` plus one microsecond if `now` is not later
    """
    if previous is not None and now <= previous:
        return previous + _TICK
    return now


def to_wire_timestamp(value: datetime) -> str:
    """Format a naive UTC datetime as ISO 8601 with a trailing Z."""
    return value.isoformat(timespec="microseconds") + "Z"
