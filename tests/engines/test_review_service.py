"""
Tests — Review Eligibility
==============================
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.commands.rejection import ReasonCode
from core.context.actor_context import ROLE_CONTRACTOR, ROLE_SUPPLIER, ActorContext
from core.events import EventPublisher
from core.primitives.order import Order, OrderLine, OrderStatus, ProofOfDelivery
from core.primitives.review import Review
from core.repository import InMemoryStore
from core.time.clock import FixedClock
from engines.reviews.events import REVIEWS_REVIEW_SUBMITTED_V1
from engines.reviews.services import ReviewService

NOW = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)

CONTRACTOR = ActorContext("contractor-1", ROLE_CONTRACTOR, "Casey")
SUPPLIER = ActorContext("supplier-1", ROLE_SUPPLIER)


class RacingStore(InMemoryStore):
    """Another submission lands between the eligibility check and the insert."""

    def create_review(self, review):
        super().create_review(dataclasses.replace(review, review_id="r-other"))
        return super().create_review(review)


def _setup(status=OrderStatus.COMPLETED, store=None):
    store = store if store is not None else InMemoryStore()
    store.create_order(Order(
        order_id="order-0005",
        order_number="ORD-0005",
        contractor_id="contractor-1",
        supplier_id="supplier-1",
        lines=(OrderLine("p-1", "Plasterboard", 30, Decimal("8.25")),),
        status=status,
        created_at=NOW,
        proof_of_delivery=(
            ProofOfDelivery("img://1", "sig://1", NOW)
            if status == OrderStatus.COMPLETED else None
        ),
    ))
    publisher = EventPublisher(clock=FixedClock(NOW))
    events = []
    publisher.registry.register_subscriber(
        REVIEWS_REVIEW_SUBMITTED_V1, events.append, "tests",
    )
    service = ReviewService(store=store, publisher=publisher, clock=FixedClock(NOW))
    return service, store, events


class TestCanReview:
    def test_completed_and_unreviewed(self):
        service, _, _ = _setup()
        assert service.can_review("order-0005", "contractor-1") is True

    def test_not_completed(self):
        service, _, _ = _setup(status=OrderStatus.OUT_FOR_DELIVERY)
        assert service.can_review("order-0005", "contractor-1") is False

    def test_already_reviewed(self):
        service, store, _ = _setup()
        store.create_review(Review("r-1", "order-0005", "contractor-1", "supplier-1", 4, NOW))
        assert service.can_review("order-0005", "contractor-1") is False

    def test_other_contractor_or_unknown_order(self):
        service, _, _ = _setup()
        assert service.can_review("order-0005", "contractor-2") is False
        assert service.can_review("nope", "contractor-1") is False


class TestSubmitReview:
    def test_submit(self):
        service, store, events = _setup()
        outcome = service.submit_review(
            "order-0005", actor=CONTRACTOR, rating=5, comment="On time, well packed.",
        )
        assert outcome.is_accepted
        assert store.get_review_for_order("order-0005").rating == 5
        assert events[0].payload["order_number"] == "ORD-0005"
        assert service.get_review_for_order("order-0005").value == outcome.value
        assert service.list_reviews_for_supplier("supplier-1") == [outcome.value]

    def test_second_submission_is_duplicate(self):
        service, _, events = _setup()
        service.submit_review("order-0005", actor=CONTRACTOR, rating=5)
        outcome = service.submit_review("order-0005", actor=CONTRACTOR, rating=1)
        assert outcome.code == ReasonCode.DUPLICATE_REVIEW
        assert len(events) == 1

    def test_race_lost_at_insert_is_duplicate(self):
        service, store, events = _setup(store=RacingStore())
        outcome = service.submit_review("order-0005", actor=CONTRACTOR, rating=3)
        assert outcome.code == ReasonCode.DUPLICATE_REVIEW
        assert store.get_review_for_order("order-0005").review_id == "r-other"
        assert events == []

    def test_order_not_completed(self):
        service, _, _ = _setup(status=OrderStatus.PROCESSING)
        outcome = service.submit_review("order-0005", actor=CONTRACTOR, rating=4)
        assert outcome.code == ReasonCode.INVALID_TRANSITION

    def test_supplier_cannot_review(self):
        service, _, _ = _setup()
        outcome = service.submit_review("order-0005", actor=SUPPLIER, rating=5)
        assert outcome.code == ReasonCode.UNAUTHORIZED

    def test_rating_out_of_range_is_a_programmer_error(self):
        service, _, _ = _setup()
        with pytest.raises(ValueError, match="rating"):
            service.submit_review("order-0005", actor=CONTRACTOR, rating=0)

    def test_missing_review(self):
        service, _, _ = _setup()
        assert service.get_review_for_order("order-0005").code == ReasonCode.NOT_FOUND
