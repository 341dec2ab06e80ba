"""
Tests — Order Lifecycle Service
===================================
Transitions, compare-and-set, proof-of-delivery, settlement.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.commands.rejection import ReasonCode
from core.context.actor_context import (
    ROLE_ADMIN,
    ROLE_CONTRACTOR,
    ROLE_DRIVER,
    ROLE_SUPPLIER,
    ActorContext,
)
from core.events import EventPublisher
from core.primitives.dispute import (
    DisputeReason,
    ResolutionOutcome,
)
from core.primitives.order import (
    Coordinates,
    DeliveryDetails,
    OrderLine,
    OrderStatus,
    ProofOfDelivery,
)
from core.repository import InMemoryStore
from core.time.clock import FixedClock
from engines.orders.commands import OrderCreateRequest
from engines.orders.events import (
    ORDERS_DELIVERY_COMPLETED_V1,
    ORDERS_DISPUTE_SETTLED_V1,
    ORDERS_ORDER_CREATED_V1,
    ORDERS_ORDER_STATUS_CHANGED_V1,
)
from engines.orders.services import OrderLifecycleService

NOW = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)

CONTRACTOR = ActorContext("contractor-1", ROLE_CONTRACTOR, "Casey")
SUPPLIER = ActorContext("supplier-1", ROLE_SUPPLIER, "Sam's Supplies")
DRIVER = ActorContext("driver-1", ROLE_DRIVER, "Dee")
ADMIN = ActorContext("admin-1", ROLE_ADMIN, "Ops")

POD = ProofOfDelivery("img://pod-1", "sig://pod-1", NOW)


class EventLog:
    def __init__(self, publisher):
        self.events = []
        self._publisher = publisher

    def listen(self, *event_types):
        for event_type in event_types:
            self._publisher.registry.register_subscriber(
                event_type, self.events.append, "tests",
            )
        return self

    @property
    def types(self):
        return [e.event_type for e in self.events]


def _setup():
    store = InMemoryStore()
    publisher = EventPublisher(clock=FixedClock(NOW))
    log = EventLog(publisher).listen(
        ORDERS_ORDER_CREATED_V1,
        ORDERS_ORDER_STATUS_CHANGED_V1,
        ORDERS_DELIVERY_COMPLETED_V1,
        ORDERS_DISPUTE_SETTLED_V1,
    )
    service = OrderLifecycleService(
        store=store, publisher=publisher, clock=FixedClock(NOW),
    )
    return service, store, log


def _request(**overrides):
    fields = dict(
        contractor_id="contractor-1",
        supplier_id="supplier-1",
        lines=(OrderLine("p-1", "Cement 25kg", 4, Decimal("7.50")),),
        delivery_address="12 Quarry Rd",
        order_id="order-0001",
    )
    fields.update(overrides)
    return OrderCreateRequest(**fields)


def _create(service):
    return service.create_order(_request(), actor=CONTRACTOR).value


def _put_out_for_delivery(store, order_id="order-0001"):
    delivery = DeliveryDetails(
        driver_id="driver-1",
        driver_name="Dee",
        vehicle_ref="TRK-7",
        start=Coordinates(51.50, -0.12),
        destination=Coordinates(51.52, -0.10),
        dispatched_at=NOW,
        planned_duration_seconds=1800,
    )
    current = store.get_order(order_id)
    return store.update_order(
        order_id, current.version,
        lambda o: dataclasses.replace(
            o, status=OrderStatus.OUT_FOR_DELIVERY, delivery=delivery,
        ),
    )


class TestCreateRequest:
    def test_lines_required(self):
        with pytest.raises(ValueError, match="lines"):
            _request(lines=())

    def test_parties_must_differ(self):
        with pytest.raises(ValueError, match="must differ"):
            _request(supplier_id="contractor-1")

    def test_negative_quantity_is_a_programmer_error(self):
        with pytest.raises(ValueError, match="quantity"):
            OrderLine("p-1", "Cement", -1, Decimal("1"))


class TestCreateOrder:
    def test_new_order_starts_in_new(self):
        service, store, log = _setup()
        outcome = service.create_order(_request(), actor=CONTRACTOR)

        assert outcome.is_accepted
        order = outcome.value
        assert order.status == OrderStatus.NEW
        assert order.order_number == "ORD-ORDER-00"
        assert order.total == Decimal("30.00")
        assert order.version == 1
        assert store.get_order("order-0001") == order
        assert log.types == [ORDERS_ORDER_CREATED_V1]
        assert log.events[0].payload["supplier_id"] == "supplier-1"

    def test_contractor_cannot_order_for_someone_else(self):
        service, store, log = _setup()
        outcome = service.create_order(
            _request(contractor_id="contractor-2"), actor=CONTRACTOR,
        )
        assert outcome.code == ReasonCode.UNAUTHORIZED
        assert store.get_order("order-0001") is None
        assert log.events == []


class TestAdvance:
    def test_forward_chain(self):
        service, store, log = _setup()
        _create(service)

        first = service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
        )
        second = service.advance(
            "order-0001", OrderStatus.READY_FOR_PICKUP, OrderStatus.PROCESSING,
            actor=SUPPLIER,
        )
        assert first.is_accepted and second.is_accepted
        assert second.value.status == OrderStatus.READY_FOR_PICKUP
        assert second.value.version == 3
        assert log.events[-1].payload["previous_status"] == "PROCESSING"

    def test_skipping_a_state_is_invalid(self):
        service, store, _ = _setup()
        _create(service)
        outcome = service.advance(
            "order-0001", OrderStatus.OUT_FOR_DELIVERY, OrderStatus.NEW,
            actor=SUPPLIER,
        )
        assert outcome.code == ReasonCode.INVALID_TRANSITION
        assert store.get_order("order-0001").status == OrderStatus.NEW
        assert "next states: CANCELLED, DISPUTED, PROCESSING" in outcome.reason.message

    def test_out_for_delivery_needs_an_assigned_driver(self):
        service, store, log = _setup()
        _create(service)
        service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
        )
        service.advance(
            "order-0001", OrderStatus.READY_FOR_PICKUP, OrderStatus.PROCESSING,
            actor=SUPPLIER,
        )
        events_before = len(log.events)

        outcome = service.advance(
            "order-0001", OrderStatus.OUT_FOR_DELIVERY, OrderStatus.READY_FOR_PICKUP,
            actor=SUPPLIER,
        )

        assert outcome.code == ReasonCode.INVALID_TRANSITION
        assert "no driver assigned" in outcome.reason.message
        stored = store.get_order("order-0001")
        assert stored.status == OrderStatus.READY_FOR_PICKUP
        assert stored.delivery is None
        assert len(log.events) == events_before

    def test_stale_expectation(self):
        service, store, log = _setup()
        _create(service)
        service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
        )
        outcome = service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
        )
        assert outcome.code == ReasonCode.STALE_STATE
        assert store.get_order("order-0001").version == 2

    def test_advance_requires_the_supplier(self):
        service, _, _ = _setup()
        _create(service)
        outcome = service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.NEW, actor=CONTRACTOR,
        )
        assert outcome.code == ReasonCode.UNAUTHORIZED

    def test_unknown_order(self):
        service, _, _ = _setup()
        outcome = service.advance(
            "nope", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
        )
        assert outcome.code == ReasonCode.NOT_FOUND

    def test_disputed_is_not_a_source_for_advance(self):
        service, store, _ = _setup()
        _create(service)
        service.mark_disputed("order-0001", OrderStatus.NEW, actor=CONTRACTOR)
        outcome = service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.DISPUTED,
            actor=SUPPLIER,
        )
        assert outcome.code == ReasonCode.INVALID_TRANSITION


class TestCancel:
    def test_contractor_cancels_new_order(self):
        service, _, log = _setup()
        _create(service)
        outcome = service.cancel("order-0001", OrderStatus.NEW, actor=CONTRACTOR)
        assert outcome.value.status == OrderStatus.CANCELLED
        assert outcome.operation == "orders.order.cancel"
        assert log.events[-1].payload["status"] == "CANCELLED"

    def test_terminal_order_cannot_be_cancelled(self):
        service, _, _ = _setup()
        _create(service)
        service.cancel("order-0001", OrderStatus.NEW, actor=CONTRACTOR)
        outcome = service.cancel("order-0001", OrderStatus.CANCELLED, actor=ADMIN)
        assert outcome.code == ReasonCode.INVALID_TRANSITION


class TestCompleteDelivery:
    def test_completes_with_both_artifacts(self):
        service, store, log = _setup()
        _create(service)
        _put_out_for_delivery(store)

        outcome = service.complete_delivery("order-0001", POD, actor=DRIVER)

        assert outcome.is_accepted
        stored = store.get_order("order-0001")
        assert stored.status == OrderStatus.COMPLETED
        assert stored.proof_of_delivery == POD
        assert log.types[-1] == ORDERS_DELIVERY_COMPLETED_V1

    @pytest.mark.parametrize("image_ref,signature_ref", [
        ("", "sig://1"),
        ("img://1", ""),
        ("   ", "sig://1"),
    ])
    def test_missing_artifact_leaves_status(self, image_ref, signature_ref):
        service, store, _ = _setup()
        _create(service)
        _put_out_for_delivery(store)

        outcome = service.complete_delivery(
            "order-0001",
            ProofOfDelivery(image_ref, signature_ref, NOW),
            actor=DRIVER,
        )
        assert outcome.code == ReasonCode.MISSING_ARTIFACT
        stored = store.get_order("order-0001")
        assert stored.status == OrderStatus.OUT_FOR_DELIVERY
        assert stored.proof_of_delivery is None

    def test_no_artifact_at_all(self):
        service, store, _ = _setup()
        _create(service)
        _put_out_for_delivery(store)
        outcome = service.complete_delivery("order-0001", None, actor=DRIVER)
        assert outcome.code == ReasonCode.MISSING_ARTIFACT

    def test_not_out_for_delivery_without_expectation(self):
        service, _, _ = _setup()
        _create(service)
        outcome = service.complete_delivery(
            "order-0001", POD, actor=ADMIN, expected_status=None,
        )
        assert outcome.code == ReasonCode.MISSING_ARTIFACT

    def test_stale_reported_before_missing_artifact(self):
        service, store, _ = _setup()
        _create(service)
        _put_out_for_delivery(store)
        service.mark_disputed(
            "order-0001", OrderStatus.OUT_FOR_DELIVERY, actor=CONTRACTOR,
        )
        outcome = service.complete_delivery("order-0001", None, actor=DRIVER)
        assert outcome.code == ReasonCode.STALE_STATE

    def test_unassigned_driver_rejected(self):
        service, store, _ = _setup()
        _create(service)
        _put_out_for_delivery(store)
        outcome = service.complete_delivery(
            "order-0001", POD, actor=ActorContext("driver-2", ROLE_DRIVER),
        )
        assert outcome.code == ReasonCode.UNAUTHORIZED


class TestMarkDisputed:
    def test_flips_without_event(self):
        service, store, log = _setup()
        _create(service)
        outcome = service.mark_disputed("order-0001", OrderStatus.NEW, actor=CONTRACTOR)
        assert outcome.value.status == OrderStatus.DISPUTED
        assert log.types == [ORDERS_ORDER_CREATED_V1]

    def test_already_disputed(self):
        service, _, _ = _setup()
        _create(service)
        service.mark_disputed("order-0001", OrderStatus.NEW, actor=CONTRACTOR)
        outcome = service.mark_disputed(
            "order-0001", OrderStatus.DISPUTED, actor=CONTRACTOR,
        )
        assert outcome.code == ReasonCode.DUPLICATE_DISPUTE

    def test_terminal_order(self):
        service, _, _ = _setup()
        _create(service)
        service.cancel("order-0001", OrderStatus.NEW, actor=CONTRACTOR)
        outcome = service.mark_disputed(
            "order-0001", OrderStatus.CANCELLED, actor=CONTRACTOR,
        )
        assert outcome.code == ReasonCode.INVALID_TRANSITION


class TestSettleDispute:
    def _resolved(self, outcome):
        from engines.disputes.services import DisputeResolutionService

        service, store, log = _setup()
        _create(service)
        service.advance(
            "order-0001", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
        )
        disputes = DisputeResolutionService(
            store=store,
            lifecycle=service,
            publisher=EventPublisher(clock=FixedClock(NOW)),
            clock=FixedClock(NOW),
        )
        dispute = disputes.create_dispute(
            "order-0001",
            actor=CONTRACTOR,
            reason=DisputeReason.INCORRECT,
            initial_message="Wrong grade of cement.",
        ).value
        disputes.resolve(dispute.dispute_id, actor=ADMIN, outcome=outcome, note="ok")
        return service, store, log

    def test_resume_returns_to_status_at_opening(self):
        service, store, log = self._resolved(ResolutionOutcome.RESUME_FULFILMENT)
        outcome = service.settle_dispute(
            "order-0001", ResolutionOutcome.RESUME_FULFILMENT, actor=ADMIN,
        )
        assert outcome.value.status == OrderStatus.PROCESSING
        assert log.types[-1] == ORDERS_DISPUTE_SETTLED_V1
        assert log.events[-1].payload["outcome"] == "RESUME_FULFILMENT"

    def test_cancel_outcome(self):
        service, _, _ = self._resolved(ResolutionOutcome.CANCEL_ORDER)
        outcome = service.settle_dispute(
            "order-0001", ResolutionOutcome.CANCEL_ORDER, actor=ADMIN,
        )
        assert outcome.value.status == OrderStatus.CANCELLED

    def test_leave_disputed_writes_nothing(self):
        service, store, log = self._resolved(ResolutionOutcome.LEAVE_DISPUTED)
        before = store.get_order("order-0001")
        outcome = service.settle_dispute(
            "order-0001", ResolutionOutcome.LEAVE_DISPUTED, actor=ADMIN,
        )
        assert outcome.is_accepted
        assert store.get_order("order-0001") == before
        assert ORDERS_DISPUTE_SETTLED_V1 not in log.types

    def test_outcome_must_match_resolution(self):
        service, _, _ = self._resolved(ResolutionOutcome.CANCEL_ORDER)
        outcome = service.settle_dispute(
            "order-0001", ResolutionOutcome.COMPLETE_ORDER, actor=ADMIN,
        )
        assert outcome.code == ReasonCode.INVALID_TRANSITION

    def test_admin_only(self):
        service, _, _ = self._resolved(ResolutionOutcome.CANCEL_ORDER)
        outcome = service.settle_dispute(
            "order-0001", ResolutionOutcome.CANCEL_ORDER, actor=SUPPLIER,
        )
        assert outcome.code == ReasonCode.UNAUTHORIZED

    def test_no_dispute(self):
        service, _, _ = _setup()
        _create(service)
        outcome = service.settle_dispute(
            "order-0001", ResolutionOutcome.CANCEL_ORDER, actor=ADMIN,
        )
        assert outcome.code == ReasonCode.NOT_FOUND


class TestReads:
    def test_get_and_list(self):
        service, _, _ = _setup()
        _create(service)
        assert service.get_order("order-0001").value.order_id == "order-0001"
        assert service.get_order("nope").code == ReasonCode.NOT_FOUND
        assert len(service.list_orders_for_party("supplier-1")) == 1
        assert service.list_orders_for_party("someone-else") == []
