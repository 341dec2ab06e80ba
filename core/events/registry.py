"""
Handover Event Bus — Subscriber Registry
==========================================
Controls which handlers receive which events.

Rules:
- Event types follow engine.domain.action format
- Multiple subscribers per event type allowed
- The same handler may not be registered twice for one type
- An engine listening to its own events must opt in explicitly
- In-memory and thread-safe
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("handover.events")


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class SubscriberRegistry:
    """
    In-memory registry of event subscribers.

    Maps event_type to an ordered list of (handler, subscriber_engine).
    Handlers run in registration order.
    """

    def __init__(self):
        self._subscribers: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def validate_event_type(event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")

        parts = event_type.strip().split(".")
        if len(parts) < 3 or any(not part for part in parts):
            raise InvalidEventTypeFormat(event_type)

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:   Bad event type format
            DuplicateSubscriberError: Handler already registered
            SelfSubscriptionError:    Engine subscribing to own events
        """
        self.validate_event_type(event_type)

        if not callable(handler):
            raise EventBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        source_engine = event_type.split(".")[0]
        if source_engine == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        name = _handler_name(handler)

        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if any(existing is handler for existing, _ in handlers):
                raise DuplicateSubscriberError(event_type, name)
            handlers.append((handler, subscriber_engine))

        logger.info(
            f"Subscriber registered: {name} → {event_type} "
            f"(engine: {subscriber_engine})"
        )

    def unregister_subscriber(self, event_type: str, handler: Callable) -> bool:
        """Remove a handler. Returns False if it was not registered."""
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            for index, (existing, _) in enumerate(handlers):
                if existing is handler:
                    del handlers[index]
                    if not handlers:
                        del self._subscribers[event_type]
                    return True
        return False

    def get_subscribers(self, event_type: str) -> list[tuple[Callable, str]]:
        """Snapshot of subscribers; empty list when none."""
        with self._lock:
            return list(self._subscribers.get(event_type, []))

    def has_subscribers(self, event_type: str) -> bool:
        with self._lock:
            return bool(self._subscribers.get(event_type))

    def get_all_event_types(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._subscribers.keys())

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, []))
