"""
Handover Dispute Primitive — Disputes and Their Message Thread
================================================================
A dispute is opened by a contractor or supplier against one order and
carries an append-only conversation between the participants.

RULES:
- messages only grow
- participant_ids always include contractor and supplier
- resolution is present iff status is RESOLVED

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from core.primitives.order import OrderStatus


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class DisputeStatus(Enum):
    """Dispute sub-states (see DISPUTE_WORKFLOW)."""
    NEW = "NEW"
    CONTRACTOR_RESPONDED = "CONTRACTOR_RESPONDED"
    SUPPLIER_RESPONDED = "SUPPLIER_RESPONDED"
    UNDER_ADMIN_REVIEW = "UNDER_ADMIN_REVIEW"
    RESOLVED = "RESOLVED"


class DisputeReason(Enum):
    """Why the dispute was raised."""
    DAMAGED = "DAMAGED"
    INCORRECT = "INCORRECT"
    MISSING = "MISSING"
    LATE = "LATE"
    OTHER = "OTHER"


class ResolutionOutcome(Enum):
    """What the administrator decided should happen to the order."""
    LEAVE_DISPUTED = "LEAVE_DISPUTED"
    COMPLETE_ORDER = "COMPLETE_ORDER"
    CANCEL_ORDER = "CANCEL_ORDER"
    RESUME_FULFILMENT = "RESUME_FULFILMENT"


# ══════════════════════════════════════════════════════════════
# MESSAGE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DisputeMessage:
    message_id: str
    author_id: str
    author_name: str
    text: str
    sent_at: datetime

    def __post_init__(self):
        if not self.message_id:
            raise ValueError("message_id must be non-empty.")
        if not self.author_id:
            raise ValueError("author_id must be non-empty.")
        if not self.text or not self.text.strip():
            raise ValueError("text must be non-empty.")

    def to_dict(self) -> dict:
        return {
            "message_id": self.message_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "text": self.text,
            "sent_at": self.sent_at.isoformat(),
        }


# ══════════════════════════════════════════════════════════════
# RESOLUTION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DisputeResolution:
    outcome: ResolutionOutcome
    resolved_by: str
    resolved_at: datetime
    note: str = ""

    def __post_init__(self):
        if not isinstance(self.outcome, ResolutionOutcome):
            raise ValueError("outcome must be ResolutionOutcome enum.")
        if not self.resolved_by:
            raise ValueError("resolved_by must be non-empty.")

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "resolved_by": self.resolved_by,
            "resolved_at": self.resolved_at.isoformat(),
            "note": self.note,
        }


# ══════════════════════════════════════════════════════════════
# DISPUTE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Dispute:
    """
    A dispute snapshot.

    order_status_at_opening records where fulfilment stood when the
    order was flipped to DISPUTED, so a settlement can resume it.
    """
    dispute_id: str
    order_id: str
    order_number: str
    contractor_id: str
    supplier_id: str
    raised_by: str
    reason: DisputeReason
    status: DisputeStatus
    created_at: datetime
    order_status_at_opening: OrderStatus
    messages: Tuple[DisputeMessage, ...] = ()
    participant_ids: FrozenSet[str] = field(default_factory=frozenset)
    resolution: Optional[DisputeResolution] = None
    version: int = 1

    def __post_init__(self):
        if not self.dispute_id:
            raise ValueError("dispute_id must be non-empty.")
        if not self.order_id:
            raise ValueError("order_id must be non-empty.")
        if not isinstance(self.reason, DisputeReason):
            raise ValueError("reason must be DisputeReason enum.")
        if not isinstance(self.status, DisputeStatus):
            raise ValueError("status must be DisputeStatus enum.")
        if not isinstance(self.order_status_at_opening, OrderStatus):
            raise ValueError("order_status_at_opening must be OrderStatus.")
        if not isinstance(self.messages, tuple):
            raise TypeError("messages must be a tuple.")
        if not isinstance(self.participant_ids, frozenset):
            raise TypeError("participant_ids must be a frozenset.")
        if (self.resolution is None) != (self.status != DisputeStatus.RESOLVED):
            raise ValueError("resolution must be set iff status is RESOLVED.")
        if self.version < 1:
            raise ValueError("version must be >= 1.")

    @property
    def is_resolved(self) -> bool:
        return self.status == DisputeStatus.RESOLVED

    def has_message_from(self, author_id: str) -> bool:
        return any(m.author_id == author_id for m in self.messages)

    def to_dict(self) -> dict:
        return {
            "dispute_id": self.dispute_id,
            "order_id": self.order_id,
            "order_number": self.order_number,
            "contractor_id": self.contractor_id,
            "supplier_id": self.supplier_id,
            "raised_by": self.raised_by,
            "reason": self.reason.value,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "order_status_at_opening": self.order_status_at_opening.value,
            "messages": [m.to_dict() for m in self.messages],
            "participant_ids": sorted(self.participant_ids),
            "resolution": (
                self.resolution.to_dict() if self.resolution else None
            ),
            "version": self.version,
        }
