"""Shared time helpers for devflow hooks.

All persisted timestamps are UTC, second precision, ``Z`` suffixed
(``2024-01-15T10:30:00Z``) so they sort lexically.
"""

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
DATE_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def utc_timestamp(now: datetime | None = None) -> str:
    """Format *now* (default: current time) as a UTC ISO-8601 timestamp."""
    return (now or utc_now()).astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def utc_date_key(now: datetime | None = None) -> str:
    """Format *now* (default: current time) as a ``YYYY-MM-DD`` day key."""
    return (now or utc_now()).astimezone(timezone.utc).strftime(DATE_FORMAT)


def parse_timestamp(value: str) -> datetime | None:
    """Parse a timestamp written by :func:`utc_timestamp`.

    Returns:
        A timezone-aware datetime, or ``None`` if *value* is empty or malformed.
    """
    if not value:
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None
