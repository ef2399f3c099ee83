# File: utils/dt_utils.py
"""Date and time utilities for Routine Tracker.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Every calendar-day comparison in the integration (pending items, streaks,
day buckets) goes through dt_local_date() so a log's day is always the local
calendar date of its completed_at timestamp.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_now_local: Get current datetime in local timezone
    - dt_now_iso: Get current datetime as ISO string
    - dt_now_utc: Get current datetime in UTC
    - as_utc / as_local: Timezone conversion
    - dt_parse: Parse ISO timestamps into aware datetimes
    - dt_local_date: Project a timestamp onto its local calendar date
    - parse_time_of_day: Parse and validate "HH:MM" strings
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
import logging
from zoneinfo import ZoneInfo

from dateutil import parser as dt_parser

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - overridden at integration setup
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_iso(tz: ZoneInfo | None = None) -> str:
    """Return the current local datetime as an ISO 8601 string.

    Example:
        "2025-04-07T14:30:00-05:00"
    """
    return dt_now_local(tz).isoformat()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in the default timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object (naive values are treated as UTC)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse(
    dt_input: str | date | datetime | None,
    default_tzinfo: ZoneInfo | None = None,
) -> datetime | None:
    """Normalize a timestamp input into a timezone-aware datetime.

    Strings are parsed as ISO 8601 (a trailing "Z" is accepted). Plain dates
    become local midnight. Naive values get `default_tzinfo` (or the
    default timezone) attached.

    Returns:
        Aware datetime, or None if the input could not be parsed.

    Example:
        >>> dt_parse("2025-04-15T07:30:00Z")
        datetime.datetime(2025, 4, 15, 7, 30, tzinfo=tzutc())
    """
    if not dt_input:
        return None

    tz_info = default_tzinfo or DEFAULT_TIME_ZONE
    result: datetime

    if isinstance(dt_input, datetime):
        result = dt_input
    elif isinstance(dt_input, date):
        result = datetime.combine(dt_input, time.min)
    elif isinstance(dt_input, str):
        try:
            result = dt_parser.isoparse(dt_input)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=tz_info)
    return result


def dt_local_date(
    dt_input: str | datetime | None, tz: ZoneInfo | None = None
) -> date | None:
    """Return the local calendar date a timestamp falls on.

    A log completed at 2025-04-07T23:30:00-05:00 belongs to April 7 in
    America/Chicago even though it is already April 8 in UTC.

    Returns:
        The local date, or None (with a warning) when the value is unparseable.
    """
    parsed = dt_parse(dt_input)
    if parsed is None:
        _LOGGER.warning("Ignoring unparseable timestamp: %r", dt_input)
        return None
    return as_local(parsed, tz).date()


def parse_time_of_day(time_str: str | None) -> time | None:
    """Parse a 24h "HH:MM" string.

    Returns:
        datetime.time, or None (with a warning) for malformed or
        out-of-range values.

    Example:
        >>> parse_time_of_day("07:05")
        datetime.time(7, 5)
    """
    if not time_str or not isinstance(time_str, str):
        return None

    try:
        hour_str, minute_str = time_str.strip().split(":")
        hour = int(hour_str)
        minute = int(minute_str)
    except (ValueError, AttributeError) as exc:
        _LOGGER.warning(
            "Invalid time format: %s (expected HH:MM): %s", time_str, exc
        )
        return None

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        _LOGGER.warning("Invalid time value: %s (out of range)", time_str)
        return None

    return time(hour, minute)
