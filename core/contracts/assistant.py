"""
Assistant Response Contract.

The exact shape of structured output the interpretation service must
return for one assistant turn. The gateway validates every model reply
against ``AssistantResponse`` before anything downstream touches it.

CRITICAL INVARIANTS:
- Top-level ``response`` is REQUIRED and must be an object. A reply
  without it is a validation failure, never a silently defaulted value;
  reconciliation and rendering read ``.response`` unconditionally
- Enumerations are closed sets; unknown values fail validation
- A structurally valid reply whose ``response`` is empty is NOT an error
- ``to_wire()`` only emits keys that were present on input, so
  validate -> dump -> validate is lossless

Usage:
    data = json.loads(raw_text)
    reply = parse_assistant_response(data)   # raises pydantic.ValidationError
    reply.response.assistant_reply
"""

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BeforeValidator, EmailStr, Field, HttpUrl, field_validator

from core.contracts.studio import (
    Appointment,
    AppointmentStatus,
    BusinessCategory,
    BusinessType,
    CustomerProfile,
    Price,
    Role,
    Service,
    StudioModel,
    UtcTimestamp,
    WeeklySlot,
)


# =============================================================================
# ENUMERATIONS
# =============================================================================

Operation = Literal[
    "LOGIN", "SIGNUP", "VIEW_PROFILE", "UPDATE_PROFILE", "RESET_PASSWORD",
    "LIST_BUSINESSES", "LIST_SERVICES",
    "CREATE_SERVICE", "UPDATE_SERVICE", "DELETE_SERVICE",
    "LIST_APPOINTMENTS", "CREATE_APPOINTMENT",
    "GENERATE_POST", "BROADCAST_MESSAGE",
    "ASSIST",
]

ResponseStatus = Literal["success", "failure"]

NotificationType = Literal[
    "APPOINTMENT_CREATED", "SERVICE_CREATED", "SERVICE_UPDATED", "SERVICE_DELETED",
]

NotificationChannel = Literal["dashboard", "email", "sms", "whatsapp"]

SocialPlatform = Literal["Instagram", "Facebook", "Twitter"]

PostTone = Literal["Promotional", "Informative", "Engaging"]

BroadcastStatus = Literal["queued", "sent", "failed"]

# Model output occasionally carries numbers or objects in question lists
LenientStr = Annotated[str, BeforeValidator(lambda v: v if isinstance(v, str) else str(v))]


# =============================================================================
# BUSINESS CONTEXT ECHO
# =============================================================================

class BusinessContext(StudioModel):
    """Snapshot of the business the turn ran against."""

    id: Optional[str] = None
    name: Optional[str] = None
    category: Optional[BusinessCategory] = None
    address: Optional[str] = None
    zipcode: Optional[str] = None
    timezone: Optional[str] = None


# =============================================================================
# REQUEST ECHO (what the model understood the user to ask for)
# =============================================================================

class AuthRequest(StudioModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    old_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_new_password: Optional[str] = None


class UserProfileRequest(StudioModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    apartment_number: Optional[str] = None
    zipcode: Optional[str] = None
    phone: Optional[str] = None


class BusinessProfileRequest(StudioModel):
    business_name: Optional[str] = None
    address: Optional[str] = None
    zipcode: Optional[str] = None
    category: Optional[BusinessCategory] = None


class PartialPrice(StudioModel):
    amount: Optional[float] = None
    currency: Optional[str] = None


class ServiceRequest(StudioModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    price: Optional[PartialPrice] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None


class PartialCustomer(StudioModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class AppointmentRequest(StudioModel):
    id: Optional[str] = None
    service_id: Optional[str] = None
    service_name: Optional[str] = None
    customer: Optional[PartialCustomer] = None
    start_time: Optional[UtcTimestamp] = None
    end_time: Optional[UtcTimestamp] = None
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None


class Filters(StudioModel):
    zipcode: Optional[str] = None
    category: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None


class MarketingRequest(StudioModel):
    platform: Optional[SocialPlatform] = None
    tone: Optional[PostTone] = None
    caption: Optional[str] = None
    image_prompt: Optional[str] = None


class BroadcastRequest(StudioModel):
    message: Optional[str] = None
    channel: Optional[NotificationChannel] = None


class RequestPayload(StudioModel):
    auth: Optional[AuthRequest] = None
    user_profile: Optional[UserProfileRequest] = None
    business_profile: Optional[BusinessProfileRequest] = None
    service: Optional[ServiceRequest] = None
    appointment: Optional[AppointmentRequest] = None
    filters: Optional[Filters] = None
    marketing: Optional[MarketingRequest] = None
    broadcast: Optional[BroadcastRequest] = None


# =============================================================================
# RESPONSE PAYLOAD
# =============================================================================

class AvailableSlot(StudioModel):
    service_name: str
    start_time: UtcTimestamp
    end_time: UtcTimestamp


class NotificationData(StudioModel):
    appointment_id: Optional[str] = None
    service_id: Optional[str] = None


class Notification(StudioModel):
    """Owner-facing notice emitted alongside a successful write."""

    type: Optional[NotificationType] = None
    channels: Optional[List[NotificationChannel]] = None
    message: Optional[str] = None
    data: Optional[NotificationData] = None


class ListedService(StudioModel):
    """Service as shown in discovery results (no id, tags or demo flag)."""

    name: str
    description: str = ""
    duration_minutes: int = Field(..., gt=0)
    price: Optional[Price] = None
    category: str
    weekly_schedule: List[WeeklySlot] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_bare_price(cls, value: Any) -> Any:
        # {"price": 20} -> {"price": {"amount": 20, "currency": "USD"}}
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return {"amount": value, "currency": "USD"}
        return value


class DiscoveredBusiness(StudioModel):
    id: Optional[str] = None
    business_name: str
    business_type: BusinessType
    address: str
    zipcode: str
    photos: List[HttpUrl] = Field(default_factory=list)
    services: List[ListedService] = Field(default_factory=list)


class DemoAppointment(StudioModel):
    customer_name: Optional[str] = None
    service: Optional[str] = None
    start_time: UtcTimestamp


class DemoBroadcast(StudioModel):
    message: str


class MarketingPost(StudioModel):
    platform: Optional[SocialPlatform] = None
    caption: Optional[str] = None
    image_url: Optional[HttpUrl] = None


class BroadcastResult(StudioModel):
    message: Optional[str] = None
    channel: Optional[NotificationChannel] = None
    status: Optional[BroadcastStatus] = None


class ResponsePayload(StudioModel):
    """
    The payload bag of one turn.

    Every field is optional; a reply that carries only
    ``assistant_reply`` (or nothing at all) is structurally valid.
    """

    assistant_reply: Optional[str] = None
    businesses: Optional[List[DiscoveredBusiness]] = None
    services: Optional[List[Service]] = None
    appointments: Optional[List[Appointment]] = None
    available_slots: Optional[List[AvailableSlot]] = None
    user_profile: Optional[CustomerProfile] = None
    post: Optional[MarketingPost] = None
    broadcast_result: Optional[BroadcastResult] = None
    notification: Optional[Notification] = None
    demo_businesses: Optional[List[DiscoveredBusiness]] = None
    demo_services: Optional[List[ListedService]] = None
    demo_appointments: Optional[List[DemoAppointment]] = None
    demo_photos: Optional[List[HttpUrl]] = None
    demo_broadcasts: Optional[List[DemoBroadcast]] = None
    is_demo: Optional[bool] = None
    missing_fields: Optional[List[str]] = None
    clarifying_questions: Optional[List[LenientStr]] = None
    errors: Optional[List[str]] = None


# =============================================================================
# TOP-LEVEL CONTRACT
# =============================================================================

class AssistantResponse(StudioModel):
    """
    Contract-validated output of one assistant turn.

    Example:
        {
            "operation": "CREATE_APPOINTMENT",
            "role": "user",
            "status": "success",
            "response": {
                "appointments": [{
                    "id": "a1",
                    "service_name": "Vinyasa Flow",
                    "customer": {"name": "Jane Doe", "email": "jane@x.com", "phone": null},
                    "start_time": "2025-09-14T13:30:00Z",
                    "end_time": "2025-09-14T14:30:00Z",
                    "notes": null,
                    "status": "confirmed"
                }]
            }
        }
    """

    operation: Optional[Operation] = None
    role: Optional[Role] = None
    status: Optional[ResponseStatus] = None
    business: Optional[BusinessContext] = None
    request: Optional[RequestPayload] = None
    response: ResponsePayload  # REQUIRED, never defaulted

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict containing exactly the keys that were set."""
        return self.model_dump(mode="json", exclude_unset=True)


def parse_assistant_response(data: Any) -> AssistantResponse:
    """
    Validate decoded JSON against the contract.

    Args:
        data: Object produced by ``json.loads``.

    Returns:
        Validated AssistantResponse.

    Raises:
        pydantic.ValidationError: On a missing ``response``, a wrong type,
            or an unknown enum value.
    """
    return AssistantResponse.model_validate(data)
