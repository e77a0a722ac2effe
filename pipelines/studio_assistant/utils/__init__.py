"""Utility functions for the Studio Assistant pipeline."""

from pipelines.studio_assistant.utils.timeslots import (
    format_utc,
    parse_time_of_day,
    resolve_next_occurrence,
    weekday_index,
    weekday_name,
    weekly_minute,
    zone_for,
)

__all__ = [
    "format_utc",
    "parse_time_of_day",
    "resolve_next_occurrence",
    "weekday_index",
    "weekday_name",
    "weekly_minute",
    "zone_for",
]
