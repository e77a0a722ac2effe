"""
Business directory over the state store.

Every mutation reads the whole ``Businesses`` collection, changes one
business and writes the collection back. There is no partial update.

CRITICAL INVARIANTS:
- Demo tenants (``is_demo``) are never written to the store
- Appointments are cancelled by status, never removed
- A new service always gets a freshly generated, non-overlapping schedule
- Re-adding an appointment id that already exists changes nothing
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from core.contracts.studio import (
    Announcement,
    Appointment,
    Business,
    Customer,
    Service,
    StudioPicture,
    WeeklySlot,
)
from core.infrastructure.state_store import StateStore
from core.logger import get_logger
from pipelines.studio_assistant.config import BUSINESSES_KEY
from pipelines.studio_assistant.errors import (
    BusinessNotFoundError,
    InvalidAppointmentError,
    ServiceNotFoundError,
    SlotUnavailableError,
)
from pipelines.studio_assistant.scheduling.schedule_generator import generate_weekly_schedule
from pipelines.studio_assistant.utils.timeslots import resolve_next_occurrence, zone_for

logger = get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def new_id(prefix: str) -> str:
    """Short random identifier such as ``appt_3f2a9c0d41b7``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BusinessDirectory:
    """
    Read and write businesses stored under the ``Businesses`` key.

    Usage:
        directory = BusinessDirectory(JsonFileStateStore(".studio/state.json"))
        service = directory.add_service("biz_1", Service(name="Hatha", ...))
        appointment = directory.book_weekly_slot(
            "biz_1", service.id, service.weekly_schedule[0], customer
        )
    """

    def __init__(
        self,
        store: StateStore,
        clock: Optional[Clock] = None,
        schedule_rng: Optional[random.Random] = None,
    ) -> None:
        """
        Args:
            store: Backing key-value store.
            clock: Returns the current instant. Defaults to the UTC wall clock.
            schedule_rng: Random source for schedule generation.
        """
        self.store = store
        self.clock = clock or _utcnow
        self.schedule_rng = schedule_rng or random.Random()

    # =========================================================================
    # COLLECTION ACCESS
    # =========================================================================

    def list_businesses(self, zipcode: Optional[str] = None) -> List[Business]:
        """All stored businesses, optionally only those in one zipcode."""
        raw = self.store.get(BUSINESSES_KEY, [])
        businesses = [Business.model_validate(item) for item in raw]
        if zipcode is not None:
            businesses = [b for b in businesses if b.zipcode == zipcode]
        return businesses

    def save_businesses(self, businesses: List[Business]) -> None:
        """Replace the whole collection. Demo tenants are dropped."""
        real = [b for b in businesses if not b.is_demo]
        skipped = len(businesses) - len(real)
        if skipped:
            logger.debug(f"Not persisting {skipped} demo business(es)")
        self.store.set(BUSINESSES_KEY, [b.model_dump(mode="json") for b in real])

    def get_business(self, business_id: str) -> Business:
        """
        Raises:
            BusinessNotFoundError: If no stored business has this id.
        """
        for business in self.list_businesses():
            if business.id == business_id:
                return business
        raise BusinessNotFoundError(business_id)

    def add_business(self, business: Business) -> Business:
        """Store a new business (or replace the one with the same id)."""
        businesses = [b for b in self.list_businesses() if b.id != business.id]
        businesses.append(business)
        self.save_businesses(businesses)
        logger.info(f"Stored business {business.id} ({business.name})")
        return business

    def _update(self, business_id: str, mutate: Callable[[Business], T]) -> T:
        """Copy-modify-replace one business and persist the collection."""
        businesses = self.list_businesses()
        for business in businesses:
            if business.id == business_id:
                result = mutate(business)
                self.save_businesses(businesses)
                return result
        raise BusinessNotFoundError(business_id)

    # =========================================================================
    # SERVICES, PICTURES, ANNOUNCEMENTS
    # =========================================================================

    def add_service(self, business_id: str, draft: Service) -> Service:
        """
        Add a service with a schedule generated against existing services.

        Any weekly_schedule on the draft is ignored.

        Returns:
            The stored service, with id and weekly_schedule filled in.
        """
        def mutate(business: Business) -> Service:
            schedule = generate_weekly_schedule(
                business.services, draft.duration_minutes, self.schedule_rng
            )
            service = draft.model_copy(
                update={"id": draft.id or new_id("svc"), "weekly_schedule": schedule}
            )
            business.services.append(service)
            return service

        service = self._update(business_id, mutate)
        logger.info(
            f"Added service '{service.name}' to {business_id} "
            f"with {len(service.weekly_schedule)} weekly slot(s)"
        )
        return service

    def add_picture(
        self,
        business_id: str,
        url: str,
        caption: str,
        is_demo: bool = False,
    ) -> StudioPicture:
        picture = StudioPicture(id=new_id("pic"), url=url, caption=caption, is_demo=is_demo)

        def mutate(business: Business) -> StudioPicture:
            business.pictures.append(picture)
            return picture

        return self._update(business_id, mutate)

    def add_announcement(
        self,
        business_id: str,
        message: str,
        is_demo: bool = False,
    ) -> Announcement:
        """Prepend an announcement; the newest one is always first."""
        announcement = Announcement(
            id=new_id("ann"), message=message, timestamp=self.clock(), is_demo=is_demo
        )

        def mutate(business: Business) -> Announcement:
            business.announcements.insert(0, announcement)
            return announcement

        return self._update(business_id, mutate)

    # =========================================================================
    # APPOINTMENTS
    # =========================================================================

    def add_appointment(
        self,
        business_id: str,
        draft: Union[Appointment, Dict[str, Any]],
        appointment_id: Optional[str] = None,
    ) -> Appointment:
        """
        Store an appointment in a business.

        Args:
            business_id: Target business.
            draft: Appointment fields; ``id`` is optional.
            appointment_id: Explicit id. Takes precedence over the draft's.

        Returns:
            The stored appointment, or the existing one if the id is taken.

        When the service is known, the end time is always its start plus
        the service duration.

        Raises:
            BusinessNotFoundError: If the business does not exist.
            InvalidAppointmentError: If the end time is not after the start.
            SlotUnavailableError: If an active appointment of the same
                service overlaps the requested time.
        """
        fields = draft.model_dump() if isinstance(draft, Appointment) else dict(draft)
        fields["id"] = appointment_id or fields.get("id") or new_id("appt")
        fields.setdefault("status", "confirmed")
        appointment = Appointment.model_validate(fields)

        def mutate(business: Business) -> Appointment:
            for existing in business.appointments:
                if existing.id == appointment.id:
                    logger.info(f"Appointment {appointment.id} already stored; nothing to do")
                    return existing

            service = _find_service(business, appointment.service_id, appointment.service_name)
            stored = appointment
            if service is not None:
                expected_end = stored.start_time + timedelta(minutes=service.duration_minutes)
                if stored.end_time is not None and stored.end_time != expected_end:
                    logger.warning(
                        f"Appointment {stored.id} end {stored.end_time.isoformat()} does not match "
                        f"'{service.name}' duration; using {expected_end.isoformat()}"
                    )
                stored = stored.model_copy(update={"end_time": expected_end})
            elif stored.end_time is not None and stored.end_time <= stored.start_time:
                raise InvalidAppointmentError(
                    f"Appointment for '{stored.service_name}' ends at {stored.end_time.isoformat()}, "
                    f"not after its start at {stored.start_time.isoformat()}"
                )
            if stored.is_active:
                _check_slot_free(business, stored)
            business.appointments.append(stored)
            return stored

        stored = self._update(business_id, mutate)
        logger.info(f"Appointment {stored.id} for '{stored.service_name}' stored in {business_id}")
        return stored

    def cancel_appointment(self, appointment_id: str) -> bool:
        """
        Mark an appointment cancelled wherever it lives.

        Returns:
            True if found. An unknown id leaves state untouched.
        """
        businesses = self.list_businesses()
        for business in businesses:
            for index, appointment in enumerate(business.appointments):
                if appointment.id == appointment_id:
                    business.appointments[index] = appointment.model_copy(
                        update={"status": "cancelled"}
                    )
                    self.save_businesses(businesses)
                    logger.info(f"Cancelled appointment {appointment_id} in {business.id}")
                    return True

        logger.warning(f"Appointment with ID {appointment_id} not found for cancellation.")
        return False

    def appointments_for_customer(self, email: str) -> List[Appointment]:
        """
        Appointments booked under ``email`` across every business.

        Service names are suffixed with " at <business name>". Newest first.
        """
        wanted = email.strip().lower()
        found: List[Appointment] = []
        for business in self.list_businesses():
            for appointment in business.appointments:
                booked_email = appointment.customer.email
                if booked_email and booked_email.lower() == wanted:
                    found.append(appointment.model_copy(
                        update={"service_name": f"{appointment.service_name} at {business.name}"}
                    ))
        found.sort(key=lambda a: a.start_time, reverse=True)
        return found

    def book_weekly_slot(
        self,
        business_id: str,
        service_id: str,
        slot: WeeklySlot,
        customer: Customer,
        now: Optional[datetime] = None,
    ) -> Appointment:
        """
        Book the next occurrence of a weekly slot.

        The slot's weekday and time are read as business-local civil time.

        Raises:
            ServiceNotFoundError: If the business has no such service.
            SlotUnavailableError: If the occurrence is already booked.
        """
        business = self.get_business(business_id)
        service = _find_service(business, service_id, None)
        if service is None:
            raise ServiceNotFoundError(f"Service {service_id} not found in {business_id}")

        reference = now or self.clock()
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        local_now = reference.astimezone(zone_for(business.timezone))
        start = resolve_next_occurrence(slot.day, slot.time, local_now)
        return self.add_appointment(
            business_id,
            {
                "service_id": service.id,
                "service_name": service.name,
                "customer": customer,
                "start_time": start,
                "end_time": start + timedelta(minutes=service.duration_minutes),
                "status": "confirmed",
            },
        )


def _find_service(
    business: Business,
    service_id: Optional[str],
    service_name: Optional[str],
) -> Optional[Service]:
    for service in business.services:
        if service_id and service.id == service_id:
            return service
    if service_name:
        for service in business.services:
            if service.name.lower() == service_name.lower():
                return service
    return None


def _same_service(a: Appointment, b: Appointment) -> bool:
    if a.service_id and b.service_id:
        return a.service_id == b.service_id
    return a.service_name.lower() == b.service_name.lower()


def _check_slot_free(business: Business, candidate: Appointment) -> None:
    """Raise if an active appointment of the same service overlaps the candidate."""
    candidate_end = candidate.end_time or candidate.start_time
    for existing in business.appointments:
        if not existing.is_active or not _same_service(existing, candidate):
            continue
        existing_end = existing.end_time or existing.start_time
        same_start = existing.start_time == candidate.start_time
        overlaps = existing.start_time < candidate_end and existing_end > candidate.start_time
        if same_start or overlaps:
            raise SlotUnavailableError(
                f"'{candidate.service_name}' is already booked at "
                f"{existing.start_time.isoformat()} (appointment {existing.id})"
            )
