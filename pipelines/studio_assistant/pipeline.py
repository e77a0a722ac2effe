"""Studio Assistant turn pipeline construction.

One conversational turn runs three agents in order:

    Input (message, role, business, user, now, turn_ticket)
    ┌─────────────────────────────────────────────┐
    │  AssistantRequestAgent                      │
    │  → assistant_request                        │
    ├─────────────────────────────────────────────┤
    │  InterpretationAgent                        │
    │  → assistant_response (validated/fallback)  │
    ├─────────────────────────────────────────────┤
    │  ReconciliationAgent                        │
    │  → reconciliation                           │
    └─────────────────────────────────────────────┘
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from core.contracts.studio import Business, CustomerUser, OwnerUser, Role
from core.infrastructure.message_bus import MessageBus
from core.logger import get_logger
from pipelines.core.runner import PipelineRunner
from pipelines.studio_assistant.agents.interpretation_gateway import (
    InterpretationAgent,
    InterpretationGateway,
)
from pipelines.studio_assistant.agents.reconciliation_agent import ReconciliationAgent
from pipelines.studio_assistant.agents.request_builder_agent import AssistantRequestAgent
from pipelines.studio_assistant.config import HORIZON_DAYS, PIPELINE_NAME
from pipelines.studio_assistant.directory import BusinessDirectory
from pipelines.studio_assistant.session import ConversationSession

logger = get_logger(__name__)

__all__ = ["build_pipeline", "run_turn", "PIPELINE_NAME"]


def build_pipeline(
    directory: BusinessDirectory,
    gateway: InterpretationGateway,
    session: Optional[ConversationSession] = None,
    bus: Optional[MessageBus] = None,
    horizon_days: int = HORIZON_DAYS,
) -> PipelineRunner:
    """
    Build the per-turn pipeline.

    Args:
        directory: Directory used by reconciliation for writes.
        gateway: Interpretation gateway (owns the LLM client).
        session: Conversation session; enables stale-turn discarding.
        bus: Message bus for domain events.
        horizon_days: Availability lookahead for request building.

    Returns:
        Configured PipelineRunner instance.
    """
    return PipelineRunner(
        name=PIPELINE_NAME,
        agents=[
            AssistantRequestAgent(horizon_days=horizon_days),
            InterpretationAgent(gateway),
            ReconciliationAgent(directory, session=session, bus=bus),
        ],
    )


def run_turn(
    pipeline: PipelineRunner,
    message: str,
    role: Role,
    business: Business,
    user: Union[CustomerUser, OwnerUser, None] = None,
    session: Optional[ConversationSession] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Run one conversational turn.

    With a session, the turn holds the conversation's ticket for its
    whole duration and releases it even when a stage fails.

    Returns:
        Final pipeline context (``assistant_response``, ``reconciliation``, ...).

    Raises:
        TurnInProgressError: If the session already has a turn in flight.
        RuntimeError: If a pipeline stage fails.
    """
    context: Dict[str, Any] = {
        "message": message,
        "role": role,
        "business": business,
        "user": user,
        "now": now or datetime.now(timezone.utc),
    }
    if session is None:
        return pipeline.run(context)

    ticket = session.begin_turn()
    context["turn_ticket"] = ticket
    try:
        return pipeline.run(context)
    finally:
        session.finish_turn(ticket)
