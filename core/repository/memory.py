"""
Handover Repository — In-Memory Store
=======================================
Deterministic StoreProtocol implementation for tests and embedding.

All access is serialised by one re-entrant lock. An atomic() block
holds the lock for its whole duration and restores a snapshot of
every table if the block raises.
"""

from __future__ import annotations

import dataclasses
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from core.primitives.dispute import Dispute
from core.primitives.notification import Notification
from core.primitives.order import Order
from core.primitives.review import Review
from core.repository.errors import (
    DuplicateRecordError,
    RecordNotFound,
    RepositoryError,
    StaleWriteError,
)
from core.repository.protocol import DisputeMutation, OrderMutation


class InMemoryStore:

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self._orders: dict[str, Order] = {}
        self._disputes: dict[str, Dispute] = {}
        self._reviews: dict[str, Review] = {}
        self._notifications: dict[str, Notification] = {}

    def _tables(self) -> tuple[dict, ...]:
        return (self._orders, self._disputes, self._reviews, self._notifications)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            snapshot = tuple(dict(t) for t in self._tables()) if outermost else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    for table, saved in zip(self._tables(), snapshot):
                        table.clear()
                        table.update(saved)
                raise
            finally:
                self._depth -= 1

    # ── Orders ────────────────────────────────────────────────

    def create_order(self, order: Order) -> Order:
        with self._lock:
            if order.order_id in self._orders:
                raise DuplicateRecordError("Order", order.order_id)
            self._orders[order.order_id] = order
            return order

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def update_order(
        self,
        order_id: str,
        expected_version: int,
        mutation: OrderMutation,
    ) -> Order:
        with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                raise RecordNotFound("Order", order_id)
            if current.version != expected_version:
                raise StaleWriteError(
                    "Order", order_id, expected_version, current.version,
                )
            updated = dataclasses.replace(
                mutation(current), version=current.version + 1,
            )
            self._orders[order_id] = updated
            return updated

    def list_orders_for_party(self, party_id: str) -> list[Order]:
        with self._lock:
            orders = [o for o in self._orders.values() if o.involves(party_id)]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    # ── Disputes ──────────────────────────────────────────────

    def create_dispute(self, dispute: Dispute) -> Dispute:
        with self._lock:
            if dispute.dispute_id in self._disputes:
                raise DuplicateRecordError("Dispute", dispute.dispute_id)
            self._disputes[dispute.dispute_id] = dispute
            return dispute

    def get_dispute(self, dispute_id: str) -> Optional[Dispute]:
        with self._lock:
            return self._disputes.get(dispute_id)

    def get_dispute_for_order(self, order_id: str) -> Optional[Dispute]:
        with self._lock:
            matches = [
                d for d in self._disputes.values() if d.order_id == order_id
            ]
        if not matches:
            return None
        # ties go to the most recently inserted
        return max(reversed(matches), key=lambda d: d.created_at)

    def update_dispute(
        self,
        dispute_id: str,
        expected_version: int,
        mutation: DisputeMutation,
    ) -> Dispute:
        with self._lock:
            current = self._disputes.get(dispute_id)
            if current is None:
                raise RecordNotFound("Dispute", dispute_id)
            if current.version != expected_version:
                raise StaleWriteError(
                    "Dispute", dispute_id, expected_version, current.version,
                )
            updated = dataclasses.replace(
                mutation(current), version=current.version + 1,
            )
            if updated.messages[: len(current.messages)] != current.messages:
                raise RepositoryError(
                    f"Dispute '{dispute_id}' messages are append-only."
                )
            self._disputes[dispute_id] = updated
            return updated

    def list_disputes_for_party(self, party_id: str) -> list[Dispute]:
        with self._lock:
            disputes = [
                d for d in self._disputes.values()
                if party_id in d.participant_ids
                or party_id in (d.contractor_id, d.supplier_id)
            ]
        return sorted(disputes, key=lambda d: d.created_at, reverse=True)

    # ── Reviews ───────────────────────────────────────────────

    def create_review(self, review: Review) -> Review:
        with self._lock:
            if review.order_id in self._reviews:
                raise DuplicateRecordError("Review", review.order_id)
            self._reviews[review.order_id] = review
            return review

    def get_review_for_order(self, order_id: str) -> Optional[Review]:
        with self._lock:
            return self._reviews.get(order_id)

    def list_reviews_for_supplier(self, supplier_id: str) -> list[Review]:
        with self._lock:
            reviews = [
                r for r in self._reviews.values() if r.supplier_id == supplier_id
            ]
        return sorted(reviews, key=lambda r: r.created_at, reverse=True)

    # ── Notifications ─────────────────────────────────────────

    def create_notification(
        self, notification: Notification,
    ) -> tuple[Notification, bool]:
        with self._lock:
            existing = self._notifications.get(notification.notification_id)
            if existing is not None:
                return existing, False
            self._notifications[notification.notification_id] = notification
            return notification, True

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            return self._notifications.get(notification_id)

    def list_notifications(
        self, recipient_id: str, unread_only: bool = False,
    ) -> list[Notification]:
        with self._lock:
            found = [
                n for n in self._notifications.values()
                if n.recipient_id == recipient_id
                and not (unread_only and n.is_read)
            ]
        return sorted(found, key=lambda n: n.created_at, reverse=True)

    def mark_notification_read(self, notification_id: str) -> Notification:
        with self._lock:
            current = self._notifications.get(notification_id)
            if current is None:
                raise RecordNotFound("Notification", notification_id)
            updated = dataclasses.replace(current, is_read=True)
            self._notifications[notification_id] = updated
            return updated

    def mark_all_notifications_read(self, recipient_id: str) -> int:
        with self._lock:
            changed = 0
            for key, n in list(self._notifications.items()):
                if n.recipient_id == recipient_id and not n.is_read:
                    self._notifications[key] = dataclasses.replace(n, is_read=True)
                    changed += 1
            return changed
