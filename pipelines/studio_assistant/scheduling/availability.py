"""
Availability projector.

Expands each service's recurring weekly schedule into concrete, dated
appointment slots inside a lookahead horizon. The result is recomputed
on demand and never stored.

CRITICAL INVARIANTS:
- Every projected slot starts strictly after the ``now`` passed in
- end_time = start_time + service.duration_minutes
- Output is sorted by start instant; nothing is deduplicated (two
  services listing the same weekday/time both appear)
- An empty list means "no upcoming slots", not an error
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from core.contracts.assistant import AvailableSlot
from core.contracts.studio import Service, format_utc, to_utc
from core.logger import get_logger
from pipelines.studio_assistant.config import HORIZON_DAYS
from pipelines.studio_assistant.errors import InvalidWeekdayError
from pipelines.studio_assistant.utils.timeslots import parse_time_of_day, weekday_index

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectedSlot:
    """A dated instance of one weekly occurrence. Times are UTC."""

    service_name: str
    start_time: datetime
    end_time: datetime
    service_id: Optional[str] = None

    def describe(self) -> str:
        """Prompt line: "<service>: Starts <ISO start>, Ends <ISO end>"."""
        return (
            f"{self.service_name}: Starts {format_utc(self.start_time)}, "
            f"Ends {format_utc(self.end_time)}"
        )

    def to_available_slot(self) -> AvailableSlot:
        return AvailableSlot(
            service_name=self.service_name,
            start_time=self.start_time,
            end_time=self.end_time,
        )


def _resolve_tz(tz: Union[str, tzinfo, None], now: datetime) -> tzinfo:
    if isinstance(tz, str):
        return ZoneInfo(tz)
    if tz is not None:
        return tz
    return now.tzinfo or timezone.utc


def _occurrences_by_weekday(services: Iterable[Service]) -> Dict[int, List[Tuple[Service, int]]]:
    """Index valid (service, minute_of_day) pairs by weekday index."""
    index: Dict[int, List[Tuple[Service, int]]] = {}
    for service in services:
        for slot in service.weekly_schedule:
            try:
                day = weekday_index(slot.day)
                minute_of_day = parse_time_of_day(slot.time)
            except (InvalidWeekdayError, ValueError) as e:
                logger.warning(f"Skipping schedule entry of '{service.name}': {e}")
                continue
            index.setdefault(day, []).append((service, minute_of_day))
    return index


def project_upcoming_slots(
    services: Iterable[Service],
    now: datetime,
    horizon_days: int = HORIZON_DAYS,
    tz: Union[str, tzinfo, None] = None,
) -> List[ProjectedSlot]:
    """
    Project weekly schedules into dated slots for the next ``horizon_days`` days.

    Day offsets 0..horizon_days-1 are counted from ``now``'s calendar
    date in the business timezone, and each weekly time of day is read
    as business-local civil time.

    Args:
        services: Services with weekly schedules.
        now: Reference instant (naive values are read as UTC).
        horizon_days: Number of calendar days to scan, including today.
        tz: Business timezone (IANA name or tzinfo). Defaults to ``now``'s.

    Returns:
        Chronologically sorted slots; empty when nothing qualifies.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    zone = _resolve_tz(tz, now)
    local_today = now.astimezone(zone).date()
    occurrences = _occurrences_by_weekday(services)

    slots: List[ProjectedSlot] = []
    for offset in range(horizon_days):
        day = local_today + timedelta(days=offset)
        for service, minute_of_day in occurrences.get(day.weekday(), []):
            local_start = datetime.combine(
                day, time(minute_of_day // 60, minute_of_day % 60), tzinfo=zone
            )
            if local_start <= now:
                continue
            start = to_utc(local_start)
            slots.append(
                ProjectedSlot(
                    service_name=service.name,
                    start_time=start,
                    end_time=start + timedelta(minutes=service.duration_minutes),
                    service_id=service.id,
                )
            )

    slots.sort(key=lambda s: s.start_time)
    logger.debug(f"Projected {len(slots)} slot(s) over {horizon_days} day(s)")
    return slots
