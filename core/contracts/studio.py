"""
Studio Domain Contract.

Pydantic models for the records the studio assistant reads and writes:
businesses, their services and weekly timetables, appointments, studio
pictures, announcements, and the two kinds of user account.

These models are shared by the persistence layer (stored as JSON via
``model_dump(mode="json")``) and by the assistant response contract in
``core.contracts.assistant``.

CRITICAL INVARIANTS:
- All instants are timezone-aware UTC; naive inputs are read as UTC
- Instants serialize as "YYYY-MM-DDTHH:MM:SSZ" (second precision)
- User is a tagged union on ``role``; never inspect a profile without
  first matching on the user type
- Appointments are cancelled by status, never deleted
"""

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    TypeAdapter,
)


# =============================================================================
# TIMESTAMPS
# =============================================================================

UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC with whole seconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def format_utc(value: datetime) -> str:
    """Format an instant as "YYYY-MM-DDTHH:MM:SSZ"."""
    return to_utc(value).strftime(UTC_FORMAT)


UtcTimestamp = Annotated[
    datetime,
    AfterValidator(to_utc),
    PlainSerializer(format_utc, return_type=str, when_used="json"),
]


# =============================================================================
# ENUMERATIONS
# =============================================================================

Role = Literal["user", "business_owner"]

AppointmentStatus = Literal["pending", "confirmed", "cancelled"]

BusinessCategory = Literal["Yoga", "Fitness", "Yoga & Fitness Center"]

BusinessType = Literal["Yoga Studio", "Gym Center", "Yoga & Fitness Center"]

CATEGORY_TO_TYPE: Dict[str, str] = {
    "Yoga": "Yoga Studio",
    "Fitness": "Gym Center",
    "Yoga & Fitness Center": "Yoga & Fitness Center",
}

TYPE_TO_CATEGORY: Dict[str, str] = {v: k for k, v in CATEGORY_TO_TYPE.items()}


class StudioModel(BaseModel):
    """Base for every studio record. Unknown keys are dropped on input."""

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# SERVICES
# =============================================================================

class Price(StudioModel):
    amount: float
    currency: str  # ISO 4217 code, e.g. "USD"


class WeeklySlot(StudioModel):
    """One recurring occurrence of a service."""

    day: str   # English weekday name, e.g. "Monday"
    time: str  # "HH:MM", 24-hour, business-local


class Service(StudioModel):
    """
    A bookable offering with a recurring weekly timetable.

    Each WeeklySlot implicitly lasts ``duration_minutes``. Across all
    services of one business no two occurrences overlap.
    """

    id: Optional[str] = None
    name: str
    description: str = ""
    duration_minutes: int = Field(..., gt=0)
    price: Optional[Price] = None
    category: str
    tags: Optional[List[str]] = None
    weekly_schedule: List[WeeklySlot] = Field(default_factory=list)
    is_demo: bool = False


# =============================================================================
# APPOINTMENTS
# =============================================================================

class Customer(StudioModel):
    name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class Appointment(StudioModel):
    """
    A booking inside one business.

    ``service_name`` is kept even when the service is later removed so
    history still renders.
    """

    id: str
    service_id: Optional[str] = None
    service_name: str
    customer: Customer
    start_time: UtcTimestamp
    end_time: Optional[UtcTimestamp] = None
    notes: Optional[str] = None
    status: AppointmentStatus
    is_demo: bool = False

    @property
    def is_active(self) -> bool:
        return self.status != "cancelled"


# =============================================================================
# BUSINESS
# =============================================================================

class StudioPicture(StudioModel):
    id: str
    url: str
    caption: str
    is_demo: bool = False


class Announcement(StudioModel):
    id: str
    message: str
    timestamp: UtcTimestamp
    is_demo: bool = False


class Business(StudioModel):
    """A tenant. Demo tenants (``is_demo``) are never persisted."""

    id: str
    name: str
    type: BusinessType
    zipcode: str
    address: str
    timezone: str = "America/New_York"
    pictures: List[StudioPicture] = Field(default_factory=list)
    announcements: List[Announcement] = Field(default_factory=list)
    services: List[Service] = Field(default_factory=list)
    appointments: List[Appointment] = Field(default_factory=list)
    is_demo: bool = False

    @property
    def category(self) -> BusinessCategory:
        return TYPE_TO_CATEGORY[self.type]  # type: ignore[return-value]


# =============================================================================
# USERS (tagged union on role)
# =============================================================================

class CustomerProfile(StudioModel):
    first_name: str
    last_name: str
    address: str
    zipcode: str
    apartment_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class BusinessProfile(StudioModel):
    """Owner profile; pictures/announcements mirror the linked Business."""

    business_name: str
    address: str
    zipcode: str
    category: BusinessCategory
    pictures: List[StudioPicture] = Field(default_factory=list)
    announcements: List[Announcement] = Field(default_factory=list)


class CustomerUser(StudioModel):
    id: str
    email: EmailStr
    password_hash: str
    role: Literal["user"] = "user"
    profile: CustomerProfile


class OwnerUser(StudioModel):
    id: str
    email: EmailStr
    password_hash: str
    role: Literal["business_owner"] = "business_owner"
    profile: BusinessProfile
    business_id: str


User = Annotated[Union[CustomerUser, OwnerUser], Field(discriminator="role")]

user_adapter: TypeAdapter = TypeAdapter(User)
