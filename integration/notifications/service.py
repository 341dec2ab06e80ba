"""
Handover Notifications — Notification Service
===============================================
The recipient-facing side: list, mark one read, mark all read.
"""

from __future__ import annotations

import logging

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.primitives.notification import Notification
from core.repository.protocol import StoreProtocol

logger = logging.getLogger("handover.notifications")

NOTIFICATIONS_MARK_READ = "notifications.notification.mark_read"
NOTIFICATIONS_MARK_ALL_READ = "notifications.notification.mark_all_read"


class NotificationService:

    def __init__(self, *, store: StoreProtocol):
        self._store = store

    def list_for_recipient(
        self, recipient_id: str, unread_only: bool = False,
    ) -> list[Notification]:
        return self._store.list_notifications(recipient_id, unread_only)

    def unread_count(self, recipient_id: str) -> int:
        return len(self._store.list_notifications(recipient_id, unread_only=True))

    def mark_read(
        self, notification_id: str, *, actor: ActorContext,
    ) -> OperationOutcome:
        operation = NOTIFICATIONS_MARK_READ
        notification = self._store.get_notification(notification_id)
        if notification is None:
            return OperationOutcome.rejected(
                operation,
                RejectionReason(
                    code=ReasonCode.NOT_FOUND,
                    message=f"Notification '{notification_id}' not found.",
                    policy_name="notification_must_exist_policy",
                ),
            )
        rejection = evaluate_authorization(
            operation, actor, PartyScope(recipient_id=notification.recipient_id),
        )
        if rejection is not None:
            return OperationOutcome.rejected(operation, rejection)

        if notification.is_read:
            return OperationOutcome.accepted(operation, notification)
        return OperationOutcome.accepted(
            operation, self._store.mark_notification_read(notification_id),
        )

    def mark_all_read(self, *, actor: ActorContext) -> OperationOutcome:
        """Marks every notification of the acting user; value is the count."""
        operation = NOTIFICATIONS_MARK_ALL_READ
        if not isinstance(actor, ActorContext):
            return OperationOutcome.rejected(
                operation,
                RejectionReason(
                    code=ReasonCode.UNAUTHORIZED,
                    message="mark_all_read requires an ActorContext.",
                    policy_name="evaluate_authorization",
                ),
            )
        changed = self._store.mark_all_notifications_read(actor.actor_id)
        logger.debug(f"{changed} notifications marked read for {actor.actor_id}")
        return OperationOutcome.accepted(operation, changed)
