"""
Tests — In-Memory Store
===========================
Version guard, atomic rollback, uniqueness and idempotent notification
creation.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.primitives.dispute import (
    Dispute,
    DisputeMessage,
    DisputeReason,
    DisputeStatus,
)
from core.primitives.notification import Notification, NotificationType
from core.primitives.order import Order, OrderLine, OrderStatus
from core.primitives.review import Review
from core.repository import (
    DuplicateRecordError,
    InMemoryStore,
    RecordNotFound,
    RepositoryError,
    StaleWriteError,
)

NOW = datetime(2026, 3, 2, 10, 0, 0, tzinfo=timezone.utc)


def make_order(order_id="o-1", created_at=NOW, **overrides):
    fields = dict(
        order_id=order_id,
        order_number=f"ORD-{order_id.upper()}",
        contractor_id="contractor-1",
        supplier_id="supplier-1",
        lines=(OrderLine("p-1", "Cement 25kg", 4, Decimal("7.50")),),
        status=OrderStatus.NEW,
        created_at=created_at,
    )
    fields.update(overrides)
    return Order(**fields)


def make_dispute(dispute_id="d-1", order_id="o-1", created_at=NOW):
    return Dispute(
        dispute_id=dispute_id,
        order_id=order_id,
        order_number="ORD-O-1",
        contractor_id="contractor-1",
        supplier_id="supplier-1",
        raised_by="contractor-1",
        reason=DisputeReason.DAMAGED,
        status=DisputeStatus.NEW,
        created_at=created_at,
        order_status_at_opening=OrderStatus.PROCESSING,
        messages=(DisputeMessage("m-1", "contractor-1", "Casey", "Bags torn", NOW),),
        participant_ids=frozenset({"contractor-1", "supplier-1"}),
    )


def make_notification(notification_id="n-1", recipient_id="supplier-1", created_at=NOW):
    return Notification(
        notification_id=notification_id,
        recipient_id=recipient_id,
        notification_type=NotificationType.NEW_ORDER,
        message="New order #ORD-O-1 received.",
        created_at=created_at,
    )


class TestOrders:
    def test_total_computed_from_lines(self):
        assert make_order().total == Decimal("30.00")

    def test_create_and_get(self):
        store = InMemoryStore()
        store.create_order(make_order())
        assert store.get_order("o-1").version == 1
        assert store.get_order("missing") is None

    def test_duplicate_create_raises(self):
        store = InMemoryStore()
        store.create_order(make_order())
        with pytest.raises(DuplicateRecordError):
            store.create_order(make_order())

    def test_guarded_update_bumps_version(self):
        store = InMemoryStore()
        store.create_order(make_order())
        updated = store.update_order(
            "o-1", 1, lambda o: dataclasses.replace(o, status=OrderStatus.PROCESSING),
        )
        assert updated.version == 2
        assert store.get_order("o-1").status == OrderStatus.PROCESSING

    def test_stale_version_raises(self):
        store = InMemoryStore()
        store.create_order(make_order())
        store.update_order("o-1", 1, lambda o: o)
        with pytest.raises(StaleWriteError) as exc_info:
            store.update_order("o-1", 1, lambda o: o)
        assert exc_info.value.actual_version == 2

    def test_update_missing_raises(self):
        with pytest.raises(RecordNotFound):
            InMemoryStore().update_order("nope", 1, lambda o: o)

    def test_list_for_party_newest_first(self):
        store = InMemoryStore()
        store.create_order(make_order("o-1", created_at=NOW))
        store.create_order(make_order("o-2", created_at=NOW + timedelta(hours=1)))
        store.create_order(make_order("o-3", contractor_id="contractor-9"))
        ids = [o.order_id for o in store.list_orders_for_party("contractor-1")]
        assert ids == ["o-2", "o-1"]


class TestAtomic:
    def test_exception_restores_every_table(self):
        store = InMemoryStore()
        store.create_order(make_order())

        with pytest.raises(RuntimeError):
            with store.atomic():
                store.update_order(
                    "o-1", 1,
                    lambda o: dataclasses.replace(o, status=OrderStatus.DISPUTED),
                )
                store.create_dispute(make_dispute())
                raise RuntimeError("insert failed")

        assert store.get_order("o-1").status == OrderStatus.NEW
        assert store.get_order("o-1").version == 1
        assert store.get_dispute("d-1") is None

    def test_nested_blocks_commit_with_outer(self):
        store = InMemoryStore()
        with store.atomic():
            with store.atomic():
                store.create_order(make_order())
        assert store.get_order("o-1") is not None


class TestDisputes:
    def test_latest_dispute_for_order(self):
        store = InMemoryStore()
        store.create_dispute(make_dispute("d-1", created_at=NOW))
        store.create_dispute(make_dispute("d-2", created_at=NOW + timedelta(days=1)))
        assert store.get_dispute_for_order("o-1").dispute_id == "d-2"
        assert store.get_dispute_for_order("o-9") is None

    def test_messages_are_append_only(self):
        store = InMemoryStore()
        store.create_dispute(make_dispute())
        with pytest.raises(RepositoryError, match="append-only"):
            store.update_dispute(
                "d-1", 1, lambda d: dataclasses.replace(d, messages=()),
            )

    def test_list_for_participant(self):
        store = InMemoryStore()
        store.create_dispute(make_dispute())
        assert len(store.list_disputes_for_party("supplier-1")) == 1
        assert store.list_disputes_for_party("driver-1") == []


class TestReviews:
    def test_one_review_per_order(self):
        store = InMemoryStore()
        review = Review("r-1", "o-1", "contractor-1", "supplier-1", 5, NOW)
        store.create_review(review)
        with pytest.raises(DuplicateRecordError):
            store.create_review(dataclasses.replace(review, review_id="r-2"))
        assert store.list_reviews_for_supplier("supplier-1") == [review]

    def test_rating_bounds(self):
        with pytest.raises(ValueError, match="between 1 and 5"):
            Review("r-1", "o-1", "contractor-1", "supplier-1", 6, NOW)


class TestNotifications:
    def test_create_is_idempotent(self):
        store = InMemoryStore()
        first, created = store.create_notification(make_notification())
        again, created_again = store.create_notification(make_notification())
        assert created is True
        assert created_again is False
        assert again == first

    def test_unread_filter_and_mark_read(self):
        store = InMemoryStore()
        store.create_notification(make_notification("n-1"))
        store.create_notification(make_notification("n-2", created_at=NOW + timedelta(minutes=1)))
        store.mark_notification_read("n-1")

        unread = store.list_notifications("supplier-1", unread_only=True)
        assert [n.notification_id for n in unread] == ["n-2"]
        assert store.mark_all_notifications_read("supplier-1") == 1
        assert store.list_notifications("supplier-1", unread_only=True) == []
