"""
Assistant Request Builder for the Studio Assistant pipeline.

Assembles the bounded context handed to the interpretation service for
one conversational turn: role, requesting user's profile, a business
summary with the full service list, the projected upcoming slots, the
current instant and the raw user request.

Integration Position:
    AssistantRequestAgent      <- THIS AGENT
           ↓
    InterpretationAgent
           ↓
    ReconciliationAgent

Input: message, role, business, user (optional), now (optional)
Output: assistant_request
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from core.contracts.assistant import BusinessContext
from core.contracts.studio import (
    Business,
    CustomerUser,
    OwnerUser,
    Role,
    format_utc,
)
from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.studio_assistant.config import HORIZON_DAYS
from pipelines.studio_assistant.scheduling.availability import (
    ProjectedSlot,
    project_upcoming_slots,
)
from pipelines.studio_assistant.utils.timeslots import zone_for

logger = get_logger(__name__)

ANONYMOUS_PROFILE = "Anonymous"
NO_SERVICES_TEXT = "No services with scheduled times are available."


def no_slots_text(horizon_days: int) -> str:
    if horizon_days == 14:
        return "No upcoming appointment slots found in the next two weeks."
    return f"No upcoming appointment slots found in the next {horizon_days} days."


def business_context_for(business: Business) -> BusinessContext:
    """Business snapshot echoed in responses (no services)."""
    return BusinessContext(
        id=business.id,
        name=business.name,
        category=business.category,
        address=business.address,
        zipcode=business.zipcode,
        timezone=business.timezone,
    )


@dataclass
class AssistantRequest:
    """Everything that crosses the boundary to the interpretation service."""

    message: str
    role: Role
    business: Business
    user_profile: str
    upcoming_slots: List[ProjectedSlot]
    slots_summary: str
    current_time: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def business_context(self) -> BusinessContext:
        return business_context_for(self.business)

    def business_data(self) -> Dict[str, Any]:
        """Business summary including every service and weekly schedule."""
        summary = self.business_context().model_dump(mode="json")
        summary["services"] = [
            service.model_dump(mode="json", exclude={"is_demo"})
            for service in self.business.services
        ]
        return summary

    def render_prompt(self) -> str:
        """Compose the single prompt string sent with the role instructions."""
        return (
            "Context:\n"
            f"- Role: {self.role}\n"
            f"- User Profile: {self.user_profile}\n"
            "- Business Data (includes full service details for listing): "
            f"{json.dumps(self.business_data(), ensure_ascii=False)}\n"
            "- Pre-Calculated Upcoming Slots (for finding and booking appointments):\n"
            f"{self.slots_summary}\n"
            f"- Current Date/Time: {self.current_time}\n"
            "\n"
            f"User Request: {json.dumps(self.message, ensure_ascii=False)}\n"
            "\n"
            "Process this request and return the JSON response defined by the contract.\n"
        )


def describe_user(user: Union[CustomerUser, OwnerUser, None]) -> str:
    """
    Serialize the requesting user's profile for the prompt.

    Credentials never leave the process; only the profile is sent.
    """
    if user is None:
        return ANONYMOUS_PROFILE
    if isinstance(user, CustomerUser):
        profile: Dict[str, Any] = user.profile.model_dump(mode="json")
    elif isinstance(user, OwnerUser):
        profile = user.profile.model_dump(
            mode="json", exclude={"pictures", "announcements"}
        )
    else:
        raise TypeError(f"Unsupported user type: {type(user).__name__}")
    profile["email"] = user.email
    return json.dumps(profile, ensure_ascii=False)


def summarize_slots(
    business: Business,
    slots: List[ProjectedSlot],
    horizon_days: int,
) -> str:
    """Render projected slots as one "- <line>" per slot, or an explicit empty sentence."""
    if not business.services:
        return NO_SERVICES_TEXT
    if not slots:
        return no_slots_text(horizon_days)
    return "\n".join(f"- {slot.describe()}" for slot in slots)


def build_assistant_request(
    message: str,
    role: Role,
    business: Business,
    user: Union[CustomerUser, OwnerUser, None] = None,
    now: Optional[datetime] = None,
    horizon_days: int = HORIZON_DAYS,
) -> AssistantRequest:
    """
    Build the bounded context for one assistant turn.

    Args:
        message: Raw free-text request.
        role: "user" (customer) or "business_owner".
        business: Business the conversation runs inside.
        user: Requesting account, or None for anonymous visitors.
        now: Current instant. Defaults to the wall clock (UTC).
        horizon_days: Availability lookahead.

    Returns:
        AssistantRequest ready to render.
    """
    now = now or datetime.now(timezone.utc)
    slots = project_upcoming_slots(
        business.services, now, horizon_days, tz=zone_for(business.timezone)
    )
    return AssistantRequest(
        message=message,
        role=role,
        business=business,
        user_profile=describe_user(user),
        upcoming_slots=slots,
        slots_summary=summarize_slots(business, slots, horizon_days),
        current_time=format_utc(now),
        metadata={"business_id": business.id, "role": role},
    )


class AssistantRequestAgent(BaseAgent):
    """
    Agent that assembles the assistant request for one turn.

    Contract:
        Input: message, role, business, user (optional), now (optional)
        Output: assistant_request
    """

    def __init__(self, horizon_days: int = HORIZON_DAYS) -> None:
        super().__init__(name="AssistantRequestAgent")
        self.horizon_days = horizon_days

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        message = self.require(input_data, "message", self.name)
        role = self.require(input_data, "role", self.name)
        business = self.require(input_data, "business", self.name)

        request = build_assistant_request(
            message=message,
            role=role,
            business=business,
            user=input_data.get("user"),
            now=input_data.get("now"),
            horizon_days=self.horizon_days,
        )
        logger.info(
            f"Built assistant request for business {business.id} "
            f"({len(request.upcoming_slots)} upcoming slot(s))"
        )
        return {"assistant_request": request}
