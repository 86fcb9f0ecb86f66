"""Time helpers.

Timestamps are stored as ISO-8601 UTC strings; calendar dates use the
local date as 'YYYY-MM-DD'.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Current UTC time as ISO-8601 string."""
    return utc_now().isoformat()


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(utc_now().timestamp() * 1000)


def today() -> date:
    """Today's local calendar date."""
    return date.today()


def parse_iso(value: str | None) -> datetime | None:
    """Parse a stored ISO timestamp, assuming UTC when naive."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: str) -> date:
    """Parse a 'YYYY-MM-DD' string."""
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    """Format a date as 'YYYY-MM-DD'."""
    return value.isoformat()


def hours_from(start: datetime, hours: float) -> datetime:
    """Timestamp `hours` after `start`."""
    return start + timedelta(hours=hours)
