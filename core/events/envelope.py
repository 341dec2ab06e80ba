"""
Handover Event Bus — Domain Event Envelope
============================================
Immutable record of one committed state change, as handed to
subscribers.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DomainEvent:
    """
    One published event.

    Fields:
        event_id:    Unique id; subscribers use it as an idempotency key.
        event_type:  engine.domain.action.vN
        occurred_at: Commit time (from the engine clock).
        actor_id:    Who caused the change.
        payload:     Plain dict built by the engine's build_*_payload.
    """

    event_type: str
    occurred_at: datetime
    actor_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if not self.event_type or not isinstance(self.event_type, str):
            raise ValueError("event_type must be a non-empty string.")
        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if not isinstance(self.payload, dict):
            raise ValueError("payload must be a dict.")

    @property
    def source_engine(self) -> str:
        return self.event_type.split(".")[0]

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "actor_id": self.actor_id,
            "payload": dict(self.payload),
        }
