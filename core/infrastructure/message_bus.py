"""In-memory message bus for studio domain events.

Reconciliation publishes events such as "appointment.created" or
"service.created" after it writes business state. Subscribers (owner
dashboard notifications, email/SMS hooks) react to them.

CRITICAL INVARIANT: publish() MUST NOT raise exceptions.
Handler failures are logged and dropped so a broken notification hook
can never undo or block a booking that was already written.
"""

from typing import Any, Callable, Dict, List, Optional
from core.logger import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Dict[str, Any]], None]


class MessageBus:
    """
    In-memory publish/subscribe message bus.

    Handlers run synchronously, in subscription order.

    Usage:
        bus = MessageBus()
        bus.subscribe("appointment.created", handler_func)
        bus.publish("appointment.created", {"appointment_id": "appt_1"})
    """

    def __init__(self, max_history: int = 1000) -> None:
        """
        Initialize empty message bus.

        Args:
            max_history: Number of published events kept for inspection.
        """
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._event_history: List[Dict[str, Any]] = []
        self._max_history = max_history
        logger.debug("MessageBus initialized")

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """
        Subscribe a handler to an event type.

        Args:
            event_name: Event type to subscribe to (e.g., "appointment.created")
            handler: Callback function that accepts event payload dict
        """
        self._subscribers.setdefault(event_name, []).append(handler)
        logger.debug(f"Handler subscribed to '{event_name}'")

    def unsubscribe(self, event_name: str, handler: EventHandler) -> bool:
        """
        Unsubscribe a handler from an event type.

        Returns:
            True if handler was found and removed, False otherwise
        """
        handlers = self._subscribers.get(event_name, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        logger.debug(f"Handler unsubscribed from '{event_name}'")
        return True

    def publish(self, event_name: str, payload: Dict[str, Any]) -> int:
        """
        Publish an event to all subscribers.

        CRITICAL: This method MUST NOT raise exceptions.

        Args:
            event_name: Event type to publish
            payload: Event data dictionary

        Returns:
            Number of handlers that successfully processed the event
        """
        self._event_history.append({"event_name": event_name, "payload": payload})
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]

        handlers = list(self._subscribers.get(event_name, []))
        if not handlers:
            logger.debug(f"No handlers for event '{event_name}'")
            return 0

        success_count = 0
        for handler in handlers:
            try:
                handler(payload)
                success_count += 1
            except Exception as e:
                logger.warning(
                    f"Handler failed for event '{event_name}': {e}. "
                    "Event dropped (non-blocking)."
                )

        logger.debug(
            f"Event '{event_name}' delivered to {success_count}/{len(handlers)} handlers"
        )
        return success_count

    def get_event_history(self, event_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get published events, optionally filtered by type.

        Returns:
            List of event records (event_name, payload)
        """
        if event_name is None:
            return list(self._event_history)
        return [e for e in self._event_history if e["event_name"] == event_name]

    def clear_history(self) -> None:
        """Clear event history."""
        self._event_history = []
