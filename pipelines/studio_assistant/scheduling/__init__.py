"""Schedule generation and availability projection."""

from pipelines.studio_assistant.scheduling.availability import (
    ProjectedSlot,
    project_upcoming_slots,
)
from pipelines.studio_assistant.scheduling.schedule_generator import (
    Interval,
    busy_intervals,
    generate_weekly_schedule,
)

__all__ = [
    "Interval",
    "ProjectedSlot",
    "busy_intervals",
    "generate_weekly_schedule",
    "project_upcoming_slots",
]
