"""
Handover Notifications — Event Routing
========================================
Which event types notify whom, with what type tag and text.

Recipients are the parties the change affects, minus whoever caused
it. An event nobody else cares about produces no notifications.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Tuple

from core.events.envelope import DomainEvent
from core.primitives.notification import NotificationType
from engines.delivery.events import DELIVERY_DRIVER_ASSIGNED_V1
from engines.disputes.events import (
    DISPUTES_DISPUTE_ESCALATED_V1,
    DISPUTES_DISPUTE_OPENED_V1,
    DISPUTES_DISPUTE_RESOLVED_V1,
    DISPUTES_MESSAGE_ADDED_V1,
    DISPUTES_SUGGESTION_ACCEPTED_V1,
)
from engines.orders.events import (
    ORDERS_DELIVERY_COMPLETED_V1,
    ORDERS_DISPUTE_SETTLED_V1,
    ORDERS_ORDER_CREATED_V1,
    ORDERS_ORDER_STATUS_CHANGED_V1,
)
from engines.reviews.events import REVIEWS_REVIEW_SUBMITTED_V1


def status_label(status: str) -> str:
    return status.replace("_", " ").title()


@dataclass(frozen=True)
class NotificationRoute:
    notification_type: NotificationType
    recipient_fields: Tuple[str, ...]
    render: Callable[[dict], str]

    def recipients(self, event: DomainEvent) -> list[str]:
        """Affected parties in field order, de-duplicated, minus the actor."""
        found: list[str] = []
        for name in self.recipient_fields:
            value = event.payload.get(name)
            candidates: Iterable = value if isinstance(value, list) else (value,)
            for party_id in candidates:
                if party_id and party_id != event.actor_id and party_id not in found:
                    found.append(party_id)
        return found


NOTIFICATION_ROUTES = {
    ORDERS_ORDER_CREATED_V1: NotificationRoute(
        NotificationType.NEW_ORDER,
        ("supplier_id",),
        lambda p: f"New order #{p['order_number']} received.",
    ),
    ORDERS_ORDER_STATUS_CHANGED_V1: NotificationRoute(
        NotificationType.ORDER_STATUS_UPDATE,
        ("contractor_id", "supplier_id", "driver_id"),
        lambda p: (
            f"Order #{p['order_number']} is now {status_label(p['status'])}."
        ),
    ),
    DELIVERY_DRIVER_ASSIGNED_V1: NotificationRoute(
        NotificationType.ORDER_STATUS_UPDATE,
        ("contractor_id", "driver_id"),
        lambda p: (
            f"Order #{p['order_number']} is out for delivery with "
            f"{p['driver_name'] or 'a driver'}."
        ),
    ),
    ORDERS_DELIVERY_COMPLETED_V1: NotificationRoute(
        NotificationType.ORDER_STATUS_UPDATE,
        ("contractor_id", "supplier_id"),
        lambda p: f"Order #{p['order_number']} has been delivered.",
    ),
    ORDERS_DISPUTE_SETTLED_V1: NotificationRoute(
        NotificationType.DISPUTE_UPDATE,
        ("contractor_id", "supplier_id"),
        lambda p: (
            f"The dispute on order #{p['order_number']} was settled; the "
            f"order is now {status_label(p['status'])}."
        ),
    ),
    DISPUTES_DISPUTE_OPENED_V1: NotificationRoute(
        NotificationType.DISPUTE_UPDATE,
        ("contractor_id", "supplier_id"),
        lambda p: (
            f"A dispute was opened on order #{p['order_number']} "
            f"({status_label(p['reason'])})."
        ),
    ),
    DISPUTES_MESSAGE_ADDED_V1: NotificationRoute(
        NotificationType.NEW_MESSAGE,
        ("participant_ids",),
        lambda p: (
            f"New message from {p['message']['author_name'] or 'a participant'} "
            f"on the dispute for order #{p['order_number']}."
        ),
    ),
    DISPUTES_SUGGESTION_ACCEPTED_V1: NotificationRoute(
        NotificationType.NEW_MESSAGE,
        ("participant_ids",),
        lambda p: (
            f"A mediation proposal was added to the dispute for order "
            f"#{p['order_number']}."
        ),
    ),
    DISPUTES_DISPUTE_ESCALATED_V1: NotificationRoute(
        NotificationType.DISPUTE_UPDATE,
        ("participant_ids",),
        lambda p: (
            f"The dispute for order #{p['order_number']} is under admin review."
        ),
    ),
    DISPUTES_DISPUTE_RESOLVED_V1: NotificationRoute(
        NotificationType.DISPUTE_UPDATE,
        ("participant_ids",),
        lambda p: (
            f"The dispute for order #{p['order_number']} was resolved: "
            f"{status_label(p['resolution']['outcome'])}."
        ),
    ),
    REVIEWS_REVIEW_SUBMITTED_V1: NotificationRoute(
        NotificationType.NEW_REVIEW,
        ("supplier_id",),
        lambda p: (
            f"Order #{p['order_number']} received a {p['rating']}-star review."
        ),
    ),
}
