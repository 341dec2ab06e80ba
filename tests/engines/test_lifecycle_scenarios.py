"""
Tests — End-to-End Lifecycle Scenarios
==========================================
Whole engine wired through adapters.wiring on the in-memory store.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from adapters.wiring import build_engine
from core.commands.rejection import ReasonCode
from core.config.settings import EngineSettings
from core.context.actor_context import (
    ROLE_ADMIN,
    ROLE_CONTRACTOR,
    ROLE_DRIVER,
    ROLE_SUPPLIER,
    ActorContext,
)
from core.primitives.dispute import DisputeReason, ResolutionOutcome
from core.primitives.notification import NotificationType
from core.primitives.order import Coordinates, OrderLine, OrderStatus, ProofOfDelivery
from core.time.clock import FixedClock
from engines.orders.commands import OrderCreateRequest

NOW = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)

CONTRACTOR = ActorContext("contractor-1", ROLE_CONTRACTOR, "Casey")
SUPPLIER = ActorContext("supplier-1", ROLE_SUPPLIER, "Sam's Supplies")
DRIVER = ActorContext("driver-1", ROLE_DRIVER, "Dee")
ADMIN = ActorContext("admin-1", ROLE_ADMIN, "Ops")


class RecordingSink:
    def __init__(self):
        self.sent = []

    def emit(self, notification):
        self.sent.append(notification)


def _engine():
    sink = RecordingSink()
    clock = FixedClock(NOW)
    engine = build_engine(
        sink=sink, clock=clock, settings=EngineSettings(), inline_notifications=True,
    )
    return engine, sink, clock


def _out_for_delivery(engine, order_id):
    engine.lifecycle.create_order(
        OrderCreateRequest(
            contractor_id="contractor-1",
            supplier_id="supplier-1",
            lines=(OrderLine("p-1", "Bricks (pallet)", 2, Decimal("310.00")),),
            delivery_address="4 Kiln Lane",
            order_id=order_id,
        ),
        actor=CONTRACTOR,
    )
    engine.lifecycle.advance(
        order_id, OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
    )
    return engine.delivery.assign_delivery(
        order_id,
        driver_id="driver-1",
        driver_name="Dee",
        vehicle_ref="TRK-7",
        start=Coordinates(51.50, -0.12),
        destination=Coordinates(51.52, -0.10),
        planned_duration_seconds=15 * 60,
        actor=SUPPLIER,
        expected_status=OrderStatus.PROCESSING,
    )


def test_scenario_delivered_order_cannot_be_disputed() -> None:
    engine, sink, clock = _engine()

    assigned = _out_for_delivery(engine, "O1")
    assert assigned.is_accepted
    assert assigned.value.delivery.planned_eta == NOW + timedelta(minutes=15)

    clock.advance(14 * 60)
    completed = engine.lifecycle.complete_delivery(
        "O1", ProofOfDelivery("img://o1", "sig://o1", clock.now_utc()), actor=DRIVER,
    )
    assert completed.value.status == OrderStatus.COMPLETED

    dispute = engine.disputes.create_dispute(
        "O1",
        actor=CONTRACTOR,
        reason=DisputeReason.DAMAGED,
        initial_message="Two pallets cracked.",
    )
    assert dispute.code == ReasonCode.INVALID_TRANSITION
    assert engine.store.get_order("O1").status == OrderStatus.COMPLETED

    assert engine.reviews.can_review("O1", "contractor-1") is True
    supplier_types = [
        n.notification_type for n in sink.sent if n.recipient_id == "supplier-1"
    ]
    assert supplier_types[0] == NotificationType.NEW_ORDER
    assert NotificationType.ORDER_STATUS_UPDATE in supplier_types


def test_scenario_stale_delivery_after_dispute() -> None:
    engine, sink, _ = _engine()
    _out_for_delivery(engine, "O2")

    opened = engine.disputes.create_dispute(
        "O2",
        actor=CONTRACTOR,
        reason=DisputeReason.LATE,
        initial_message="Site closes at noon.",
        expected_status=OrderStatus.OUT_FOR_DELIVERY,
    )
    assert opened.is_accepted
    assert engine.store.get_order("O2").status == OrderStatus.DISPUTED

    stale = engine.lifecycle.complete_delivery(
        "O2",
        ProofOfDelivery("img://o2", "sig://o2", NOW),
        actor=DRIVER,
        expected_status=OrderStatus.OUT_FOR_DELIVERY,
    )
    assert stale.code == ReasonCode.STALE_STATE
    assert stale.reason.user_message.startswith("This record was changed")
    assert engine.store.get_order("O2").proof_of_delivery is None

    dispute_notes = [
        n for n in sink.sent if n.notification_type == NotificationType.DISPUTE_UPDATE
    ]
    assert [n.recipient_id for n in dispute_notes] == ["supplier-1"]


def test_dispute_settled_back_into_fulfilment() -> None:
    engine, _, _ = _engine()
    _out_for_delivery(engine, "O3")
    dispute = engine.disputes.create_dispute(
        "O3", actor=SUPPLIER, reason=DisputeReason.OTHER,
        initial_message="Site gate locked.",
    ).value
    engine.disputes.add_message(dispute.dispute_id, actor=CONTRACTOR, text="Gate open now.")
    engine.disputes.escalate(dispute.dispute_id, actor=ADMIN)
    engine.disputes.resolve(
        dispute.dispute_id, actor=ADMIN, outcome=ResolutionOutcome.RESUME_FULFILMENT,
    )

    settled = engine.lifecycle.settle_dispute(
        "O3", ResolutionOutcome.RESUME_FULFILMENT, actor=ADMIN,
    )
    assert settled.value.status == OrderStatus.OUT_FOR_DELIVERY

    done = engine.lifecycle.complete_delivery(
        "O3", ProofOfDelivery("img://o3", "sig://o3", NOW), actor=DRIVER,
    )
    assert done.value.status == OrderStatus.COMPLETED


def test_concurrent_dispute_and_delivery_exactly_one_wins() -> None:
    for attempt in range(20):
        engine, _, _ = _engine()
        order_id = f"R{attempt}"
        _out_for_delivery(engine, order_id)
        barrier = threading.Barrier(2)
        results = {}

        def dispute():
            barrier.wait()
            results["dispute"] = engine.disputes.create_dispute(
                order_id,
                actor=CONTRACTOR,
                reason=DisputeReason.MISSING,
                initial_message="Nothing arrived.",
                expected_status=OrderStatus.OUT_FOR_DELIVERY,
            )

        def deliver():
            barrier.wait()
            results["deliver"] = engine.lifecycle.complete_delivery(
                order_id,
                ProofOfDelivery("img://r", "sig://r", NOW),
                actor=DRIVER,
                expected_status=OrderStatus.OUT_FOR_DELIVERY,
            )

        threads = [threading.Thread(target=dispute), threading.Thread(target=deliver)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        accepted = [name for name, outcome in results.items() if outcome.is_accepted]
        assert len(accepted) == 1
        final = engine.store.get_order(order_id)
        if accepted == ["dispute"]:
            assert final.status == OrderStatus.DISPUTED
            assert final.proof_of_delivery is None
            assert results["deliver"].code == ReasonCode.STALE_STATE
        else:
            assert final.status == OrderStatus.COMPLETED
            assert engine.store.get_dispute_for_order(order_id) is None
            assert results["dispute"].code in (
                ReasonCode.STALE_STATE, ReasonCode.INVALID_TRANSITION,
            )
