"""Agents for the Studio Assistant pipeline."""

from pipelines.studio_assistant.agents.interpretation_gateway import (
    InterpretationAgent,
    InterpretationGateway,
)
from pipelines.studio_assistant.agents.reconciliation_agent import (
    ReconciliationAgent,
    ReconciliationResult,
    reconcile_response,
)
from pipelines.studio_assistant.agents.request_builder_agent import (
    AssistantRequest,
    AssistantRequestAgent,
    build_assistant_request,
)

__all__ = [
    "AssistantRequest",
    "AssistantRequestAgent",
    "InterpretationAgent",
    "InterpretationGateway",
    "ReconciliationAgent",
    "ReconciliationResult",
    "build_assistant_request",
    "reconcile_response",
]
