"""
Handover Notifications — Public API
=====================================
"""

from integration.notifications.dispatcher import (
    DeliveryResult,
    NotificationDispatcher,
    notification_id_for,
)
from integration.notifications.routing import NOTIFICATION_ROUTES, NotificationRoute
from integration.notifications.service import NotificationService
from integration.notifications.sink import LoggingNotificationSink, NotificationSink

__all__ = [
    "DeliveryResult",
    "LoggingNotificationSink",
    "NOTIFICATION_ROUTES",
    "NotificationDispatcher",
    "NotificationRoute",
    "NotificationService",
    "NotificationSink",
    "notification_id_for",
]
