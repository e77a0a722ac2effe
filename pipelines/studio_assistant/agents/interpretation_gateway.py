"""
Interpretation Gateway for the Studio Assistant pipeline.

Sends one assistant request to the language model, extracts the JSON
object from the reply, validates it against the response contract and
hands back a typed AssistantResponse.

CRITICAL INVARIANTS:
- interpret() NEVER raises. Transport errors, unparsable text and
  contract violations all collapse into a deterministic fallback
  response with status="failure" and a non-empty errors list
- The gateway never persists anything; reconciliation does
- No retries at this level. One turn is one model call

Turn states: Pending -> Validated | Fallback

Integration Position:
    AssistantRequestAgent
           ↓
    InterpretationAgent        <- THIS AGENT
           ↓
    ReconciliationAgent

Input: assistant_request
Output: assistant_response
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from core.contracts.assistant import (
    AssistantResponse,
    BusinessContext,
    ResponsePayload,
    parse_assistant_response,
)
from core.contracts.studio import Business, CustomerUser, OwnerUser, Role
from core.llm_client import LLMClient
from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.studio_assistant.agents.request_builder_agent import (
    AssistantRequest,
    build_assistant_request,
    business_context_for,
)
from pipelines.studio_assistant.config import HORIZON_DAYS, LLM_MAX_TOKENS, LLM_TEMPERATURE
from pipelines.studio_assistant.prompts import instructions_for_role

logger = get_logger(__name__)

FALLBACK_REPLY = "I'm sorry, an unexpected error occurred. Please try again in a moment."
UNEXPECTED_ERROR = (
    "An unexpected error occurred while processing your request. "
    "The AI may be offline or have returned an invalid response."
)
FORMAT_ERROR = "The AI returned data in an unexpected format. Please try again."
REPHRASE_QUESTION = "Could you please rephrase your request?"


class ModelOutputError(ValueError):
    """The model reply contains no decodable JSON object."""


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Decode the JSON object embedded in a model reply.

    Takes the span from the first "{" to the last "}", which tolerates
    commentary or markdown fences around the object.

    Args:
        text: Raw model output.

    Returns:
        Decoded dictionary.

    Raises:
        ModelOutputError: If no object span exists, it fails to decode,
            or it decodes to something other than an object.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ModelOutputError("No JSON object found in model output")
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ModelOutputError(f"Model output is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ModelOutputError("Model output JSON is not an object")
    return data


def fallback_response(
    business: Optional[BusinessContext],
    errors: List[str],
    clarifying_questions: Optional[List[str]] = None,
) -> AssistantResponse:
    """
    Deterministic response used whenever interpretation fails.

    Only the keys passed here are set, so ``to_wire()`` stays compact.
    """
    payload: Dict[str, Any] = {"assistant_reply": FALLBACK_REPLY, "errors": errors}
    if clarifying_questions:
        payload["clarifying_questions"] = clarifying_questions
    return AssistantResponse(
        operation="ASSIST",
        status="failure",
        business=business,
        request=None,
        response=ResponsePayload(**payload),
    )


class InterpretationGateway:
    """
    Boundary to the language model.

    Usage:
        gateway = InterpretationGateway(LLMClient.from_env())
        reply = gateway.interpret("Book Vinyasa Friday 9am", "user", business)
        if reply.succeeded:
            ...
    """

    def __init__(
        self,
        llm_client: LLMClient,
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
        horizon_days: int = HORIZON_DAYS,
    ) -> None:
        """
        Args:
            llm_client: Client (or any object with the same ``generate``).
            temperature: Sampling temperature for every call.
            max_tokens: Completion budget for every call.
            horizon_days: Availability lookahead used to build requests.
        """
        self.llm_client = llm_client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.horizon_days = horizon_days

    def interpret(
        self,
        message: str,
        role: Role,
        business: Business,
        user: Union[CustomerUser, OwnerUser, None] = None,
        now: Optional[datetime] = None,
    ) -> AssistantResponse:
        """Build the request for one turn and interpret it. Never raises."""
        try:
            request = build_assistant_request(
                message, role, business, user, now, self.horizon_days
            )
        except Exception:
            logger.exception(f"Failed to build assistant request for business {business.id}")
            return fallback_response(business_context_for(business), [UNEXPECTED_ERROR])
        return self.interpret_request(request)

    def interpret_request(self, request: AssistantRequest) -> AssistantResponse:
        """
        Send a prepared request to the model and validate the reply.

        Args:
            request: Output of ``build_assistant_request``.

        Returns:
            The validated response, or the fallback response.
        """
        business_context = request.business_context()
        try:
            raw = self.llm_client.generate(
                prompt=request.render_prompt(),
                system_prompt=instructions_for_role(request.role),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
                metadata=request.metadata,
            )
            response = parse_assistant_response(extract_json_object(raw))
        except ValidationError as e:
            logger.warning(
                f"Model output failed contract validation "
                f"({e.error_count()} error(s)): {e.errors(include_url=False)}"
            )
            return fallback_response(
                business_context, [FORMAT_ERROR], [REPHRASE_QUESTION]
            )
        except Exception:
            logger.exception("Interpretation call failed; returning fallback response")
            return fallback_response(business_context, [UNEXPECTED_ERROR])

        logger.info(
            f"Interpreted turn: operation={response.operation}, status={response.status}"
        )
        return response


class InterpretationAgent(BaseAgent):
    """
    Agent that runs the gateway on the prepared request.

    Contract:
        Input: assistant_request
        Output: assistant_response
    """

    def __init__(self, gateway: InterpretationGateway) -> None:
        super().__init__(name="InterpretationAgent")
        self.gateway = gateway

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        request = self.require(input_data, "assistant_request", self.name)
        return {"assistant_response": self.gateway.interpret_request(request)}
