"""
Handover Event Bus — Public API
=================================
The store commits the change. The bus announces it.
"""

from core.events.dispatcher import dispatch
from core.events.envelope import DomainEvent
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)
from core.events.publisher import EventPublisher
from core.events.registry import SubscriberRegistry

__all__ = [
    "dispatch",
    "DomainEvent",
    "EventPublisher",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
]
