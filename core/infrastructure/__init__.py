"""Infrastructure components shared by the studio assistant.

This module provides swappable infrastructure interfaces:
- StateStore / JsonFileStateStore: whole-collection key-value persistence
- MessageBus: publish/subscribe for domain events

Stores are passed to the components that use them. Swap the store for a
database-backed implementation by subclassing StateStore and overriding
the accessors.
"""

from core.infrastructure.message_bus import MessageBus
from core.infrastructure.state_store import JsonFileStateStore, StateStore

__all__ = [
    "MessageBus",
    "StateStore",
    "JsonFileStateStore",
]
