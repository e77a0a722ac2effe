"""
Weekly schedule generator for newly created services.

Places a new service's recurring occurrences into a business's week so
that no two occurrences of any services overlap.

CRITICAL INVARIANTS:
- The week is one linear axis of 7 * 24 * 60 minutes
  (weekday_index * 1440 + minute_of_day)
- Overlap is half-open: [start, end) intervals that merely touch are free
- Every accepted slot joins the busy set before the next one is drawn
- Bounded work: a slot that cannot be placed within the attempt budget
  is skipped, so fewer slots than targeted may be returned
- Output is sorted by weekday, then time of day
"""

import random
from typing import Iterable, List, NamedTuple, Optional

from core.contracts.studio import Service, WeeklySlot
from core.logger import get_logger
from pipelines.studio_assistant.config import (
    CLOSING_HOUR,
    MAX_ATTEMPTS_PER_SLOT,
    MAX_SLOTS,
    MIN_SLOTS,
    OPENING_HOUR,
    SCHEDULE_WEEKDAYS,
    SLOT_GRANULARITY_MINUTES,
)
from pipelines.studio_assistant.errors import InvalidWeekdayError
from pipelines.studio_assistant.utils.timeslots import weekly_minute

logger = get_logger(__name__)


class Interval(NamedTuple):
    """Half-open [start, end) span on the weekly minute axis."""

    start: int
    end: int

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and self.end > other.start


def busy_intervals(services: Iterable[Service]) -> List[Interval]:
    """
    Weekly-axis intervals occupied by the given services.

    Entries with an unknown weekday or malformed time cannot occupy the
    calendar and are skipped.

    Args:
        services: Services whose weekly schedules are already committed.

    Returns:
        One interval per weekly occurrence.
    """
    intervals: List[Interval] = []
    for service in services:
        for slot in service.weekly_schedule:
            try:
                start = weekly_minute(slot.day, slot.time)
            except (InvalidWeekdayError, ValueError) as e:
                logger.warning(f"Ignoring schedule entry of '{service.name}': {e}")
                continue
            intervals.append(Interval(start, start + service.duration_minutes))
    return intervals


def candidate_start_minutes(duration_minutes: int) -> List[int]:
    """
    Start times (minute of day) at which a service fits the daily window.

    Starts fall on the configured granularity (:00 / :30) between the
    opening hour and closing hour minus the duration.
    """
    opening = OPENING_HOUR * 60
    latest_start = CLOSING_HOUR * 60 - duration_minutes
    return list(range(opening, latest_start + 1, SLOT_GRANULARITY_MINUTES))


def _sort_key(slot: WeeklySlot) -> int:
    return weekly_minute(slot.day, slot.time)


def generate_weekly_schedule(
    existing_services: Iterable[Service],
    new_duration_minutes: int,
    rng: Optional[random.Random] = None,
) -> List[WeeklySlot]:
    """
    Generate a non-overlapping weekly schedule for a new service.

    Args:
        existing_services: Services already in the business.
        new_duration_minutes: Duration of the service being added.
        rng: Random source. Defaults to a fresh, unseeded generator.

    Returns:
        Between 0 and MAX_SLOTS weekly slots (targeting MIN_SLOTS..MAX_SLOTS),
        sorted by weekday then time.
    """
    rng = rng or random.Random()
    busy = busy_intervals(existing_services)
    starts = candidate_start_minutes(new_duration_minutes)

    if not starts:
        logger.warning(
            f"A {new_duration_minutes}-minute service does not fit between "
            f"{OPENING_HOUR:02d}:00 and {CLOSING_HOUR:02d}:00; no schedule generated"
        )
        return []

    target = rng.randint(MIN_SLOTS, MAX_SLOTS)
    schedule: List[WeeklySlot] = []

    for _ in range(target):
        for _attempt in range(MAX_ATTEMPTS_PER_SLOT):
            day = rng.choice(SCHEDULE_WEEKDAYS)
            minute_of_day = rng.choice(starts)
            time_of_day = f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"

            start = weekly_minute(day, time_of_day)
            candidate = Interval(start, start + new_duration_minutes)
            if any(candidate.overlaps(taken) for taken in busy):
                continue

            schedule.append(WeeklySlot(day=day, time=time_of_day))
            busy.append(candidate)
            break
        else:
            logger.warning(
                f"No free slot found after {MAX_ATTEMPTS_PER_SLOT} attempts; "
                "skipping one occurrence"
            )

    schedule.sort(key=_sort_key)
    logger.debug(f"Generated weekly schedule: {[(s.day, s.time) for s in schedule]}")
    return schedule
