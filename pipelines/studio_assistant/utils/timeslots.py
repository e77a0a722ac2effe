"""Weekday/time-of-day helpers for the Studio Assistant pipeline."""

import re
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from core.contracts.studio import format_utc
from core.logger import get_logger
from pipelines.studio_assistant.config import MINUTES_PER_DAY, WEEKDAY_NAMES
from pipelines.studio_assistant.errors import InvalidWeekdayError

logger = get_logger(__name__)

_TIME_OF_DAY = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

__all__ = [
    "format_utc",
    "parse_time_of_day",
    "resolve_next_occurrence",
    "weekday_index",
    "weekday_name",
    "weekly_minute",
    "zone_for",
]


def weekday_index(weekday: str) -> int:
    """
    Map an English weekday name to its index (Monday=0 ... Sunday=6).

    Args:
        weekday: Day name, case-insensitive (e.g. "monday", "Friday").

    Returns:
        Weekday index matching ``datetime.weekday()``.

    Raises:
        InvalidWeekdayError: If the name is not a weekday.
    """
    normalized = str(weekday).strip().capitalize()
    try:
        return WEEKDAY_NAMES.index(normalized)
    except ValueError:
        raise InvalidWeekdayError(weekday) from None


def weekday_name(moment: datetime) -> str:
    """English weekday name of a datetime in its own timezone."""
    return WEEKDAY_NAMES[moment.weekday()]


def parse_time_of_day(value: str) -> int:
    """
    Parse "HH:MM" into minutes since midnight.

    Args:
        value: 24-hour time string, e.g. "09:30" or "9:30".

    Returns:
        Minute of day in [0, 1440).

    Raises:
        ValueError: If the string is not a valid 24-hour time.
    """
    match = _TIME_OF_DAY.match(str(value))
    if not match:
        raise ValueError(f"Time of day must look like HH:MM, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time of day out of range: {value!r}")
    return hours * 60 + minutes


def weekly_minute(weekday: str, time_of_day: str) -> int:
    """
    Position of a weekly occurrence on the linear week axis.

    The axis runs from Monday 00:00 (0) to Sunday 23:59 (10079).
    """
    return weekday_index(weekday) * MINUTES_PER_DAY + parse_time_of_day(time_of_day)


def resolve_next_occurrence(weekday: str, time_of_day: str, now: datetime) -> datetime:
    """
    Next instant strictly after ``now`` that falls on ``weekday`` at ``time_of_day``.

    Civil time is read in ``now``'s timezone (UTC when ``now`` is naive).
    When the weekday is today and the time has not passed yet, today's
    instant is used; once it is at or before ``now`` the result moves
    exactly one week ahead.

    Args:
        weekday: English weekday name.
        time_of_day: "HH:MM".
        now: Reference instant.

    Returns:
        Timezone-aware datetime in ``now``'s timezone.

    Raises:
        InvalidWeekdayError: If ``weekday`` is not a weekday name.
        ValueError: If ``time_of_day`` is malformed.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    target_day = weekday_index(weekday)
    minute_of_day = parse_time_of_day(time_of_day)

    days_ahead = (target_day - now.weekday()) % 7
    candidate = datetime.combine(
        now.date() + timedelta(days=days_ahead),
        time(minute_of_day // 60, minute_of_day % 60),
        tzinfo=now.tzinfo,
    )
    if candidate <= now:
        candidate = datetime.combine(
            candidate.date() + timedelta(days=7),
            candidate.timetz(),
        )
    return candidate


def zone_for(name: Optional[str]) -> tzinfo:
    """
    Resolve an IANA timezone name.

    Unknown or empty names fall back to UTC with a warning, so one bad
    business record cannot block availability for everyone else.
    """
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{name}'; using UTC")
        return timezone.utc
