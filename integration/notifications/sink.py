"""
Handover Notifications — Sink Port
====================================
Where stored notifications are pushed for delivery to a person
(push service, e-mail relay, websocket fan-out...).

emit() may raise TransientError to ask for a retry. Sinks receive
the same notification_id on every retry of the same event and should
treat it as an idempotency key.
"""

from __future__ import annotations

import logging
from typing import Protocol

from core.primitives.notification import Notification

logger = logging.getLogger("handover.notifications")


class NotificationSink(Protocol):
    def emit(self, notification: Notification) -> None:
        ...


class LoggingNotificationSink:
    """Default sink: writes each notification to the log."""

    def emit(self, notification: Notification) -> None:
        logger.info(
            f"Notify {notification.recipient_id} "
            f"[{notification.notification_type.value}]: {notification.message}"
        )
