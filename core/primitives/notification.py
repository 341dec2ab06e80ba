"""
Handover Notification Primitive
=================================
One message for one recipient. Only is_read ever changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class NotificationType(Enum):
    NEW_ORDER = "NEW_ORDER"
    ORDER_STATUS_UPDATE = "ORDER_STATUS_UPDATE"
    NEW_MESSAGE = "NEW_MESSAGE"
    DISPUTE_UPDATE = "DISPUTE_UPDATE"
    NEW_REVIEW = "NEW_REVIEW"


@dataclass(frozen=True)
class Notification:
    """
    Fields:
        notification_id:   Derived from (source_event_id, recipient_id)
        recipient_id:      Party who should see it
        notification_type: Type tag for the client to style it
        message:           Short human-readable text
        created_at:        Event time
        is_read:           Read flag
        source_event_id:   Event that caused it
    """
    notification_id: str
    recipient_id: str
    notification_type: NotificationType
    message: str
    created_at: datetime
    is_read: bool = False
    source_event_id: Optional[str] = None

    def __post_init__(self):
        if not self.notification_id:
            raise ValueError("notification_id must be non-empty.")
        if not self.recipient_id:
            raise ValueError("recipient_id must be non-empty.")
        if not isinstance(self.notification_type, NotificationType):
            raise ValueError("notification_type must be NotificationType.")

    def to_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "recipient_id": self.recipient_id,
            "notification_type": self.notification_type.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "is_read": self.is_read,
            "source_event_id": self.source_event_id,
        }
