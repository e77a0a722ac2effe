"""Per-conversation turn tracking.

One conversation has at most one interpretation call in flight. Each
turn takes a ticket; when the turn finishes, its result is only applied
if the ticket is still current. Switching business makes older tickets
stale, and stale results are dropped instead of written.

State lives in the StateStore under ``conversation:<id>``:
    {"business_id": str, "generation": int, "in_flight": bool}
"""

from dataclasses import dataclass
from typing import Any, Dict

from core.infrastructure.state_store import StateStore
from core.logger import get_logger
from pipelines.studio_assistant.errors import TurnInProgressError

logger = get_logger(__name__)


@dataclass(frozen=True)
class TurnTicket:
    conversation_id: str
    business_id: str
    generation: int


class ConversationSession:
    """
    Guards one conversation against overlapping turns.

    Usage:
        session = ConversationSession(store, "conv-1", business.id)
        ticket = session.begin_turn()
        try:
            ...
            if session.is_current(ticket):
                apply(result)
        finally:
            session.finish_turn(ticket)
    """

    def __init__(self, store: StateStore, conversation_id: str, business_id: str) -> None:
        self.store = store
        self.conversation_id = conversation_id
        self.key = f"conversation:{conversation_id}"
        if not self.store.exists(self.key):
            self.store.set(self.key, _state(business_id, 0, False))

    @property
    def state(self) -> Dict[str, Any]:
        return self.store.get(self.key)

    @property
    def business_id(self) -> str:
        return self.state["business_id"]

    def begin_turn(self) -> TurnTicket:
        """
        Claim the conversation for a new turn.

        Raises:
            TurnInProgressError: If another turn has not finished yet.
        """
        current = self.state
        if current["in_flight"]:
            raise TurnInProgressError(
                f"Conversation {self.conversation_id} already has a turn in flight"
            )
        claimed = _state(current["business_id"], current["generation"] + 1, True)
        if not self.store.compare_and_set(self.key, current, claimed):
            raise TurnInProgressError(
                f"Conversation {self.conversation_id} was claimed by another turn"
            )
        logger.debug(f"Turn {claimed['generation']} started for {self.conversation_id}")
        return TurnTicket(self.conversation_id, claimed["business_id"], claimed["generation"])

    def is_current(self, ticket: TurnTicket) -> bool:
        """True while no newer turn or business switch has superseded the ticket."""
        current = self.state
        return (
            current["generation"] == ticket.generation
            and current["business_id"] == ticket.business_id
        )

    def finish_turn(self, ticket: TurnTicket) -> None:
        """Release the conversation. A stale ticket releases nothing."""
        current = self.state
        if current["generation"] != ticket.generation:
            logger.debug(f"Ignoring finish of stale turn {ticket.generation}")
            return
        released = dict(current, in_flight=False)
        self.store.compare_and_set(self.key, current, released)

    def switch_business(self, business_id: str) -> None:
        """Move the conversation to another business; in-flight tickets become stale."""
        current = self.state
        self.store.set(self.key, _state(business_id, current["generation"] + 1, False))
        logger.info(f"Conversation {self.conversation_id} switched to business {business_id}")


def _state(business_id: str, generation: int, in_flight: bool) -> Dict[str, Any]:
    return {"business_id": business_id, "generation": generation, "in_flight": in_flight}
