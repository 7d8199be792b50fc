"""
Time formatting utilities for the API.

Two relative-time styles are used: a compact one for post and comment feeds
("5m ago") and a spelled-out one for search results ("5 minutes ago").
"""

from datetime import datetime, timezone

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_MONTH = 2592000  # 30 days
SECONDS_PER_YEAR = 31536000  # 365 days


def _seconds_since(dt: datetime, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)

    # Naive datetimes from the database are stored in UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return max(0, int((now - dt).total_seconds()))


def format_time_ago_short(dt: datetime, now: datetime | None = None) -> str:
    """
    Format a datetime as a compact relative time.

    A unit is used once strictly more than one of it has elapsed, so exactly
    one hour reads "60m ago".

    Args:
        dt: The datetime to format (naive values are treated as UTC)
        now: Reference time, defaults to the current UTC time

    Returns:
        A string like "12s ago", "5m ago", "3h ago", "2d ago", "4mo ago", "1y ago"
    """
    seconds = _seconds_since(dt, now)

    for unit_seconds, suffix in (
        (SECONDS_PER_YEAR, "y"),
        (SECONDS_PER_MONTH, "mo"),
        (SECONDS_PER_DAY, "d"),
        (SECONDS_PER_HOUR, "h"),
        (SECONDS_PER_MINUTE, "m"),
    ):
        if seconds > unit_seconds:
            return f"{seconds // unit_seconds}{suffix} ago"

    return f"{seconds}s ago"


def format_relative_time(dt: datetime, now: datetime | None = None) -> str:
    """
    Format a datetime as a human-readable relative time string.

    Args:
        dt: The datetime to format (naive values are treated as UTC)
        now: Reference time, defaults to the current UTC time

    Returns:
        A string like "just now", "1 minute ago", "3 days ago", "2 years ago"
    """
    seconds = _seconds_since(dt, now)

    for unit_seconds, unit in (
        (SECONDS_PER_YEAR, "year"),
        (SECONDS_PER_MONTH, "month"),
        (SECONDS_PER_DAY, "day"),
        (SECONDS_PER_HOUR, "hour"),
        (SECONDS_PER_MINUTE, "minute"),
    ):
        count = seconds // unit_seconds
        if count > 1:
            return f"{count} {unit}s ago"
        if count == 1:
            return f"1 {unit} ago"

    return "just now"


def format_iso8601(dt: datetime) -> str:
    """
    Format a datetime as ISO 8601 string.

    Args:
        dt: The datetime to format

    Returns:
        ISO 8601 formatted string (e.g., "2024-01-15T10:30:00Z")
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
