"""
Handover Repository — Store Port
==================================
The persistence contract every engine is written against.

Guarded updates:
    update_order / update_dispute take the version the caller read and
    a pure mutation. The store applies the mutation to the stored
    record only if its version still matches, then bumps the version.
    Otherwise StaleWriteError is raised and nothing is written.

atomic():
    Groups several writes so they all land or none do. Nested blocks
    join the outer one.
"""

from __future__ import annotations

from typing import Callable, ContextManager, Optional, Protocol

from core.primitives.dispute import Dispute
from core.primitives.notification import Notification
from core.primitives.order import Order
from core.primitives.review import Review


OrderMutation = Callable[[Order], Order]
DisputeMutation = Callable[[Dispute], Dispute]


class StoreProtocol(Protocol):

    def atomic(self) -> ContextManager[None]:
        ...

    # ── Orders ────────────────────────────────────────────────

    def create_order(self, order: Order) -> Order:
        ...

    def get_order(self, order_id: str) -> Optional[Order]:
        ...

    def update_order(
        self,
        order_id: str,
        expected_version: int,
        mutation: OrderMutation,
    ) -> Order:
        ...

    def list_orders_for_party(self, party_id: str) -> list[Order]:
        ...

    # ── Disputes ──────────────────────────────────────────────

    def create_dispute(self, dispute: Dispute) -> Dispute:
        ...

    def get_dispute(self, dispute_id: str) -> Optional[Dispute]:
        ...

    def get_dispute_for_order(self, order_id: str) -> Optional[Dispute]:
        """Most recently opened dispute for the order, if any."""
        ...

    def update_dispute(
        self,
        dispute_id: str,
        expected_version: int,
        mutation: DisputeMutation,
    ) -> Dispute:
        ...

    def list_disputes_for_party(self, party_id: str) -> list[Dispute]:
        ...

    # ── Reviews ───────────────────────────────────────────────

    def create_review(self, review: Review) -> Review:
        """Raises DuplicateRecordError if the order already has one."""
        ...

    def get_review_for_order(self, order_id: str) -> Optional[Review]:
        ...

    def list_reviews_for_supplier(self, supplier_id: str) -> list[Review]:
        ...

    # ── Notifications ─────────────────────────────────────────

    def create_notification(
        self, notification: Notification,
    ) -> tuple[Notification, bool]:
        """Idempotent on notification_id. Returns (record, created)."""
        ...

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        ...

    def list_notifications(
        self, recipient_id: str, unread_only: bool = False,
    ) -> list[Notification]:
        ...

    def mark_notification_read(self, notification_id: str) -> Notification:
        ...

    def mark_all_notifications_read(self, recipient_id: str) -> int:
        ...
