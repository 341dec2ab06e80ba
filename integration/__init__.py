"""
Handover Integration Layer — Public API
=========================================
Outbound side only: committed events → notifications → sinks.
"""

from integration.adapters import IntegrationError, PermanentError, TransientError
from integration.notifications import (
    LoggingNotificationSink,
    NotificationDispatcher,
    NotificationService,
    NotificationSink,
)

__all__ = [
    "IntegrationError",
    "LoggingNotificationSink",
    "NotificationDispatcher",
    "NotificationService",
    "NotificationSink",
    "PermanentError",
    "TransientError",
]
