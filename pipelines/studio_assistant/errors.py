"""Exceptions raised by the studio assistant core.

Interpretation failures never surface as exceptions; the gateway turns
them into a fallback response. Everything here is a caller-facing,
descriptive failure that leaves stored state untouched.
"""


class StudioError(Exception):
    """Base class for studio domain errors."""


class InvalidWeekdayError(StudioError, ValueError):
    """A schedule entry names a day that is not an English weekday."""

    def __init__(self, weekday: str) -> None:
        super().__init__(f"Unknown weekday in schedule entry: {weekday!r}")
        self.weekday = weekday


class AccountError(StudioError, ValueError):
    """Signup/login/profile input was rejected (missing fields, bad password, duplicate email)."""


class BusinessNotFoundError(StudioError, LookupError):
    """No business with the given id exists in the store."""

    def __init__(self, business_id: str) -> None:
        super().__init__(f"Business not found: {business_id}")
        self.business_id = business_id


class ServiceNotFoundError(StudioError, LookupError):
    """No service with the given id exists in the business."""


class SlotUnavailableError(StudioError):
    """The requested appointment overlaps an active booking of the same service."""


class TurnInProgressError(StudioError):
    """A conversation already has an interpretation call in flight."""


class InvalidAppointmentError(StudioError, ValueError):
    """An appointment's times are impossible (ends before it starts, or already past)."""


class OperationNotPermittedError(StudioError, PermissionError):
    """The turn's role may not apply this write."""
