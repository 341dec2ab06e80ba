"""
Handover Event Bus — Publisher
================================
The one object engines hold to announce committed changes.

Engines call publish() only after their store write has committed,
so subscribers never observe a change that was rolled back.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.events.dispatcher import dispatch
from core.events.envelope import DomainEvent
from core.events.registry import SubscriberRegistry
from core.time.clock import Clock, SystemClock

logger = logging.getLogger("handover.events")


class EventPublisher:
    """Builds DomainEvent envelopes and dispatches them."""

    def __init__(
        self,
        registry: Optional[SubscriberRegistry] = None,
        clock: Optional[Clock] = None,
    ):
        self._registry = registry or SubscriberRegistry()
        self._clock = clock or SystemClock()

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    def publish(
        self,
        event_type: str,
        payload: dict[str, Any],
        actor_id: str,
    ) -> DomainEvent:
        SubscriberRegistry.validate_event_type(event_type)
        event = DomainEvent(
            event_type=event_type,
            occurred_at=self._clock.now_utc(),
            actor_id=actor_id,
            payload=payload,
        )
        dispatch(event, self._registry)
        return event
