"""
Tests — Advisory Gateway, Mediation Advisor and Delivery Assistant
======================================================================
The external service is always a stub; nothing here writes state.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ai.advisory import (
    AdvisoryErrorCode,
    AdvisoryGateway,
    DeliveryAssistant,
    MediationAdvisor,
    build_dispute_context,
)
from core.commands.rejection import ReasonCode
from core.context.actor_context import (
    ROLE_CONTRACTOR,
    ROLE_DRIVER,
    ROLE_SUPPLIER,
    ActorContext,
)
from core.events import EventPublisher
from core.primitives.dispute import DisputeReason
from core.primitives.order import Coordinates, OrderLine, OrderStatus
from core.repository import InMemoryStore
from core.time.clock import FixedClock
from engines.delivery.services import DeliveryCoordinator
from engines.disputes.services import DisputeResolutionService
from engines.orders.commands import OrderCreateRequest
from engines.orders.services import OrderLifecycleService

NOW = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)

CONTRACTOR = ActorContext("contractor-1", ROLE_CONTRACTOR, "Casey")
SUPPLIER = ActorContext("supplier-1", ROLE_SUPPLIER, "Sam's Supplies")
OUTSIDER = ActorContext("supplier-9", ROLE_SUPPLIER)


class StubPort:
    def __init__(self, suggestion="Offer a 20% credit.", answer="About 10 minutes away."):
        self.suggestion = suggestion
        self.answer = answer
        self.calls = []

    def suggest_resolution(self, dispute_context):
        self.calls.append(("suggest", dispute_context))
        return self.suggestion

    def answer_delivery_question(self, delivery_context, question):
        self.calls.append(("ask", delivery_context, question))
        return self.answer


class SlowPort(StubPort):
    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def suggest_resolution(self, dispute_context):
        self.release.wait(5)
        return "too late"


class BrokenPort(StubPort):
    def suggest_resolution(self, dispute_context):
        raise ConnectionError("service unavailable")


def _world():
    clock = FixedClock(NOW)
    store = InMemoryStore()
    publisher = EventPublisher(clock=clock)
    lifecycle = OrderLifecycleService(store=store, publisher=publisher, clock=clock)
    disputes = DisputeResolutionService(
        store=store, lifecycle=lifecycle, publisher=publisher, clock=clock,
    )
    coordinator = DeliveryCoordinator(
        store=store, lifecycle=lifecycle, publisher=publisher, clock=clock,
    )
    lifecycle.create_order(
        OrderCreateRequest(
            contractor_id="contractor-1",
            supplier_id="supplier-1",
            lines=(OrderLine("p-1", "Roof tiles", 400, Decimal("0.85")),),
            order_id="order-0006",
        ),
        actor=CONTRACTOR,
    )
    lifecycle.advance(
        "order-0006", OrderStatus.PROCESSING, OrderStatus.NEW, actor=SUPPLIER,
    )
    return store, disputes, coordinator


def _dispute(disputes, both_spoke=True):
    dispute = disputes.create_dispute(
        "order-0006",
        actor=CONTRACTOR,
        reason=DisputeReason.INCORRECT,
        initial_message="Wrong colour tiles.",
    ).value
    if both_spoke:
        dispute = disputes.add_message(
            dispute.dispute_id, actor=SUPPLIER, text="Colour matches the order sheet.",
        ).value
    return dispute


class TestGateway:
    def test_success_is_stripped(self):
        gateway = AdvisoryGateway(StubPort(suggestion="  Split the cost.\n"))
        result = gateway.suggest_resolution({"dispute_id": "d-1"})
        gateway.close()
        assert result.ok
        assert result.text == "Split the cost."

    def test_timeout(self):
        port = SlowPort()
        gateway = AdvisoryGateway(port, timeout_seconds=0.05)
        result = gateway.suggest_resolution({})
        port.release.set()
        gateway.close()
        assert not result.ok
        assert result.error_code == AdvisoryErrorCode.ADVISORY_TIMEOUT

    def test_port_error(self):
        gateway = AdvisoryGateway(BrokenPort())
        result = gateway.suggest_resolution({})
        gateway.close()
        assert result.error_code == AdvisoryErrorCode.ADVISORY_FAILED
        assert "service unavailable" in result.error_message

    def test_blank_answer(self):
        gateway = AdvisoryGateway(StubPort(suggestion="   "))
        result = gateway.suggest_resolution({})
        gateway.close()
        assert result.error_code == AdvisoryErrorCode.ADVISORY_EMPTY

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            AdvisoryGateway(StubPort(), timeout_seconds=0)

    def test_pool_size_must_be_positive(self):
        with pytest.raises(ValueError, match="max_workers"):
            AdvisoryGateway(StubPort(), max_workers=0)

    def test_hung_calls_saturate_the_pool(self, caplog):
        port = SlowPort()
        gateway = AdvisoryGateway(port, timeout_seconds=0.05, max_workers=1)

        first = gateway.suggest_resolution({})
        assert first.error_code == AdvisoryErrorCode.ADVISORY_TIMEOUT
        # the timed-out call still holds the only worker
        assert gateway.in_flight == 1

        with caplog.at_level(logging.WARNING, logger="handover.advisory"):
            second = gateway.suggest_resolution({})

        assert second.error_code == AdvisoryErrorCode.ADVISORY_TIMEOUT
        assert "pool saturated" in caplog.text
        assert gateway.in_flight == 1

        port.release.set()
        deadline = time.monotonic() + 5
        while gateway.in_flight and time.monotonic() < deadline:
            time.sleep(0.01)
        assert gateway.in_flight == 0
        gateway.close()


class TestMediationAdvisor:
    def test_suggestion_after_both_parties_spoke(self):
        store, disputes, _ = _world()
        dispute = _dispute(disputes)
        port = StubPort()
        advisor = MediationAdvisor(store=store, gateway=AdvisoryGateway(port))

        outcome = advisor.request_suggestion(dispute.dispute_id, actor=CONTRACTOR)

        assert outcome.is_accepted
        assert outcome.value.text == "Offer a 20% credit."
        assert port.calls[0][1] == build_dispute_context(dispute)
        assert len(store.get_dispute(dispute.dispute_id).messages) == 2

    def test_not_eligible_never_calls_port(self):
        store, disputes, _ = _world()
        dispute = _dispute(disputes, both_spoke=False)
        port = StubPort()
        advisor = MediationAdvisor(store=store, gateway=AdvisoryGateway(port))

        outcome = advisor.request_suggestion(dispute.dispute_id, actor=CONTRACTOR)

        assert outcome.code == ReasonCode.INVALID_TRANSITION
        assert port.calls == []

    def test_outsider_rejected(self):
        store, disputes, _ = _world()
        dispute = _dispute(disputes)
        advisor = MediationAdvisor(store=store, gateway=AdvisoryGateway(StubPort()))
        outcome = advisor.request_suggestion(dispute.dispute_id, actor=OUTSIDER)
        assert outcome.code == ReasonCode.UNAUTHORIZED

    def test_failed_generation_writes_nothing(self):
        store, disputes, _ = _world()
        dispute = _dispute(disputes)
        advisor = MediationAdvisor(store=store, gateway=AdvisoryGateway(BrokenPort()))

        outcome = advisor.request_suggestion(dispute.dispute_id, actor=SUPPLIER)

        assert outcome.is_accepted
        assert not outcome.value.ok
        assert store.get_dispute(dispute.dispute_id) == dispute


class TestDeliveryAssistant:
    def _assigned(self):
        store, _, coordinator = _world()
        coordinator.assign_delivery(
            "order-0006",
            driver_id="driver-1",
            driver_name="Dee",
            vehicle_ref="TRK-7",
            start=Coordinates(51.50, -0.12),
            destination=Coordinates(51.52, -0.10),
            planned_duration_seconds=1200,
            actor=SUPPLIER,
        )
        return store, coordinator

    def test_question_answered_from_context(self):
        store, coordinator = self._assigned()
        port = StubPort()
        assistant = DeliveryAssistant(
            store=store, coordinator=coordinator, gateway=AdvisoryGateway(port),
        )

        outcome = assistant.ask("order-0006", "Where is my driver?", actor=CONTRACTOR)

        assert outcome.value.text == "About 10 minutes away."
        _, context, question = port.calls[0]
        assert context["driver_name"] == "Dee"
        assert context["progress"] == 0.0
        assert question == "Where is my driver?"

    def test_driver_may_ask_about_own_delivery(self):
        store, coordinator = self._assigned()
        assistant = DeliveryAssistant(
            store=store, coordinator=coordinator, gateway=AdvisoryGateway(StubPort()),
        )
        outcome = assistant.ask(
            "order-0006", "Gate code?", actor=ActorContext("driver-1", ROLE_DRIVER),
        )
        assert outcome.is_accepted

    def test_no_delivery_yet(self):
        store, _, coordinator = _world()
        assistant = DeliveryAssistant(
            store=store, coordinator=coordinator, gateway=AdvisoryGateway(StubPort()),
        )
        outcome = assistant.ask("order-0006", "Where is it?", actor=CONTRACTOR)
        assert outcome.code == ReasonCode.NOT_FOUND

    def test_blank_question(self):
        store, coordinator = self._assigned()
        assistant = DeliveryAssistant(
            store=store, coordinator=coordinator, gateway=AdvisoryGateway(StubPort()),
        )
        with pytest.raises(ValueError, match="question"):
            assistant.ask("order-0006", " ", actor=CONTRACTOR)
