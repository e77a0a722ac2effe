"""
Reconciliation of validated assistant responses into business state.

Only successful responses change anything. Each applied change is
published on the message bus so owner-facing hooks can react.

Key Design Decisions:
    1. IDEMPOTENT: appointment ids are uuid5 over business, service,
       start instant and customer contact, so a replayed turn finds its
       appointment already stored and writes nothing
    2. SCHEDULES REGENERATED: services proposed by the model never keep
       a model-written timetable; the directory generates one
    3. NON-RAISING: domain conflicts (slot taken, unknown business) are
       logged and reported in the result
    4. STALE TURNS DROPPED: the agent checks the session ticket first
    5. ROLE GATED: customer turns only book; service, broadcast and demo
       writes need an owner turn. Bookings must start after ``now``

Integration Position:
    AssistantRequestAgent
           ↓
    InterpretationAgent
           ↓
    ReconciliationAgent        <- THIS AGENT

Input: assistant_response, business, role, turn_ticket (optional), now (optional)
Output: reconciliation
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from core.contracts.assistant import AssistantResponse, ListedService
from core.contracts.studio import Appointment, Role, Service, format_utc
from core.infrastructure.message_bus import MessageBus
from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.studio_assistant.directory import BusinessDirectory
from pipelines.studio_assistant.errors import (
    InvalidAppointmentError,
    OperationNotPermittedError,
    StudioError,
)
from pipelines.studio_assistant.session import ConversationSession

logger = get_logger(__name__)

# UUID5 namespace for appointment ids (stable across runs)
APPOINTMENT_NAMESPACE = uuid.UUID("6f1c2a4e-8d3b-5e7f-9a0c-1b2d3e4f5a6b")

OWNER_ROLE = "business_owner"

DEMO_PHOTO_CAPTION = "Demo photo"


@dataclass
class ReconciliationResult:
    """What one reconciliation pass did."""

    applied: List[str] = field(default_factory=list)
    record_ids: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    discarded: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def appointment_key(business_id: str, appointment: Appointment) -> str:
    """
    Stable appointment id for a booking.

    The same business, service, start instant and customer contact
    always produce the same id.
    """
    customer = appointment.customer
    contact = (customer.email or customer.phone or customer.name or "").strip().lower()
    service = appointment.service_id or appointment.service_name.strip().lower()
    key = f"{business_id}|{service}|{format_utc(appointment.start_time)}|{contact}"
    return f"appt_{uuid.uuid5(APPOINTMENT_NAMESPACE, key).hex}"


def _service_draft(proposed: Any, is_demo: bool) -> Service:
    """Turn a model-proposed service into a draft without id or schedule."""
    fields = proposed.model_dump(exclude={"id", "weekly_schedule", "is_demo"})
    if isinstance(proposed, ListedService):
        fields.setdefault("tags", [])
    return Service(**fields, is_demo=is_demo)


class _Reconciler:
    """One pass over one response. Collects results as it goes."""

    def __init__(
        self,
        response: AssistantResponse,
        business_id: str,
        directory: BusinessDirectory,
        bus: Optional[MessageBus],
        role: Optional[Role],
        now: datetime,
    ) -> None:
        self.response = response
        self.payload = response.response
        self.business_id = business_id
        self.directory = directory
        self.bus = bus
        self.role = role
        self.now = now
        self.result = ReconciliationResult()

    def owner_only(self, action: str, step: Callable[[], None]) -> None:
        if self.role == OWNER_ROLE:
            self.attempt(action, step)
            return
        logger.warning(
            f"Refusing '{action}' write for {self.business_id} from a {self.role or 'unknown'} turn"
        )
        self.result.errors.append(str(OperationNotPermittedError(
            f"Only the business owner can apply '{action}' changes"
        )))

    def attempt(self, action: str, step: Callable[[], None]) -> None:
        try:
            step()
        except StudioError as e:
            logger.warning(f"Reconciliation step '{action}' failed for {self.business_id}: {e}")
            self.result.errors.append(str(e))

    def emit(self, event_name: str, payload: Dict[str, Any]) -> None:
        self.result.applied.append(event_name)
        if self.bus is not None:
            self.bus.publish(event_name, {"business_id": self.business_id, **payload})

    def create_appointment(self) -> None:
        proposed = self.payload.appointments[0]
        if proposed.start_time <= self.now:
            raise InvalidAppointmentError(
                f"Cannot book '{proposed.service_name}' at {format_utc(proposed.start_time)}: "
                f"that time has already passed"
            )
        appointment_id = appointment_key(self.business_id, proposed)
        business = self.directory.get_business(self.business_id)
        if any(a.id == appointment_id for a in business.appointments):
            logger.info(f"Appointment {appointment_id} already reconciled; skipping")
            return

        stored = self.directory.add_appointment(
            self.business_id,
            proposed.model_dump(exclude={"id", "is_demo"}),
            appointment_id=appointment_id,
        )
        self.result.record_ids.append(stored.id)
        notification = self.payload.notification
        self.emit("appointment.created", {
            "appointment_id": stored.id,
            "service_name": stored.service_name,
            "start_time": format_utc(stored.start_time),
            "customer_email": stored.customer.email,
            "message": notification.message if notification else None,
        })

    def create_services(self) -> None:
        for proposed in self.payload.services:
            self.attempt("service", lambda p=proposed: self._create_service(p))

    def _create_service(self, proposed: Service) -> None:
        stored = self.directory.add_service(self.business_id, _service_draft(proposed, False))
        self.result.record_ids.append(stored.id)
        self.emit("service.created", {"service_id": stored.id, "name": stored.name})

    def broadcast(self) -> None:
        message = self.payload.broadcast_result.message
        announcement = self.directory.add_announcement(self.business_id, message)
        self.result.record_ids.append(announcement.id)
        self.emit("announcement.created", {
            "announcement_id": announcement.id,
            "message": message,
            "channel": self.payload.broadcast_result.channel,
        })

    def seed_demo(self) -> None:
        services = self.payload.demo_services or []
        photos = self.payload.demo_photos or []
        broadcasts = self.payload.demo_broadcasts or []
        for proposed in services:
            stored = self.directory.add_service(self.business_id, _service_draft(proposed, True))
            self.result.record_ids.append(stored.id)
        for url in photos:
            picture = self.directory.add_picture(
                self.business_id, str(url), DEMO_PHOTO_CAPTION, is_demo=True
            )
            self.result.record_ids.append(picture.id)
        for broadcast in broadcasts:
            announcement = self.directory.add_announcement(
                self.business_id, broadcast.message, is_demo=True
            )
            self.result.record_ids.append(announcement.id)
        self.emit("demo.seeded", {
            "services": len(services),
            "photos": len(photos),
            "broadcasts": len(broadcasts),
        })

    def run(self) -> ReconciliationResult:
        operation = self.response.operation
        payload = self.payload

        if operation == "CREATE_APPOINTMENT" and payload.appointments:
            self.attempt("appointment", self.create_appointment)
        elif operation == "CREATE_SERVICE" and payload.services:
            self.owner_only("service", self.create_services)
        elif (
            operation == "BROADCAST_MESSAGE"
            and payload.broadcast_result is not None
            and payload.broadcast_result.message
        ):
            self.owner_only("broadcast", self.broadcast)

        if payload.is_demo and (payload.demo_services or payload.demo_photos or payload.demo_broadcasts):
            self.owner_only("demo", self.seed_demo)

        return self.result


def reconcile_response(
    response: AssistantResponse,
    business_id: str,
    directory: BusinessDirectory,
    bus: Optional[MessageBus] = None,
    now: Optional[datetime] = None,
    role: Optional[Role] = None,
) -> ReconciliationResult:
    """
    Apply a validated response to the business it was produced for.

    Customer turns may only book appointments. Service, broadcast and
    demo-content writes need ``role="business_owner"``; otherwise they are
    reported in ``errors`` and nothing is written. The role is the one the
    turn ran with, never the role the model echoes back.

    Args:
        response: Contract-validated assistant response.
        business_id: Business the turn ran against.
        directory: Directory used for every write.
        bus: Optional bus for domain events.
        now: Reference instant; appointments must start after it.
            Defaults to the directory clock.
        role: Role of the user who ran the turn.

    Returns:
        ReconciliationResult listing applied events and errors.
    """
    if not response.succeeded:
        logger.debug(f"Response status {response.status!r}; nothing to reconcile")
        return ReconciliationResult()

    now = now or directory.clock()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    result = _Reconciler(response, business_id, directory, bus, role, now).run()
    logger.info(
        f"Reconciled {response.operation} for {business_id} at {format_utc(now)}: "
        f"applied={result.applied}, errors={len(result.errors)}"
    )
    return result


class ReconciliationAgent(BaseAgent):
    """
    Agent that writes the turn's outcome to business state.

    Contract:
        Input: assistant_response, business, role, turn_ticket (optional), now (optional)
        Output: reconciliation
    """

    def __init__(
        self,
        directory: BusinessDirectory,
        session: Optional[ConversationSession] = None,
        bus: Optional[MessageBus] = None,
    ) -> None:
        super().__init__(name="ReconciliationAgent")
        self.directory = directory
        self.session = session
        self.bus = bus

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        response = self.require(input_data, "assistant_response", self.name)
        business = self.require(input_data, "business", self.name)
        ticket = input_data.get("turn_ticket")

        if self.session is not None and ticket is not None and not self.session.is_current(ticket):
            logger.warning(
                f"Discarding stale turn {ticket.generation} for conversation "
                f"{ticket.conversation_id}"
            )
            return {"reconciliation": ReconciliationResult(discarded=True)}

        if business.is_demo:
            logger.info(f"Business {business.id} is a demo tenant; nothing is persisted")
            return {"reconciliation": ReconciliationResult()}

        result = reconcile_response(
            response,
            business.id,
            self.directory,
            self.bus,
            now=input_data.get("now"),
            role=input_data.get("role"),
        )
        return {"reconciliation": result}
