"""Datetime utilities for consistent timestamp and calendar-day handling."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional

DAY_KEY_FORMAT = "%Y-%m-%d"
DAY_KEY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse a record timestamp into an aware datetime.

    Accepts ISO 8601 strings (a trailing ``Z`` is allowed; naive values are
    taken as local time) and Unix epoch numbers in seconds or milliseconds
    (values > 1e10 are milliseconds).

    Returns:
        Aware datetime, or None if the value cannot be parsed or has no
        local calendar date.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        ts = value / 1000.0 if value > 1e10 else value
        try:
            parsed = datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return _with_local_date(parsed)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return _with_local_date(parsed)

    return None


def _with_local_date(parsed: datetime) -> Optional[datetime]:
    # Values at the edges of the datetime range can overflow when moved
    # into the local zone
    try:
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        local_date(parsed)
    except (OverflowError, OSError, ValueError):
        return None
    return parsed


def local_date(dt: datetime) -> date:
    """Calendar date of a datetime in the process's local time zone."""
    return dt.astimezone().date()


def day_key(day: date) -> str:
    """Canonical YYYY-MM-DD key for a date."""
    return day.strftime(DAY_KEY_FORMAT)


def parse_day_key(key: str) -> date:
    """Parse a canonical YYYY-MM-DD key.

    Raises:
        ValueError: If the key is not a valid, zero-padded date in that format.
    """
    if not DAY_KEY_PATTERN.fullmatch(key):
        raise ValueError(f"day key must be YYYY-MM-DD, got {key!r}")
    return datetime.strptime(key, DAY_KEY_FORMAT).date()


def today_local() -> date:
    """Current calendar date in the local time zone."""
    return datetime.now().astimezone().date()


def yesterday(today: date) -> date:
    """The day before ``today``."""
    return today - timedelta(days=1)


def now_iso() -> str:
    """Current time as an ISO 8601 string with UTC offset."""
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds")
