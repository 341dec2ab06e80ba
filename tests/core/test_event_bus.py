"""
Tests — Event Bus (registry, dispatcher, publisher)
=======================================================
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.events import (
    DomainEvent,
    DuplicateSubscriberError,
    EventPublisher,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
    SubscriberRegistry,
    dispatch,
)
from core.time.clock import FixedClock

NOW = datetime(2026, 3, 2, 10, 0, 0, tzinfo=timezone.utc)
EVENT_TYPE = "orders.order.created.v1"


def _event(event_type=EVENT_TYPE):
    return DomainEvent(
        event_type=event_type,
        occurred_at=NOW,
        actor_id="contractor-1",
        payload={"order_id": "o-1"},
    )


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


class TestSubscriberRegistry:
    def test_register_and_lookup(self):
        registry = SubscriberRegistry()
        handler = Recorder()
        registry.register_subscriber(EVENT_TYPE, handler, "notifications")
        assert registry.has_subscribers(EVENT_TYPE)
        assert registry.subscriber_count(EVENT_TYPE) == 1
        assert registry.get_all_event_types() == frozenset({EVENT_TYPE})

    @pytest.mark.parametrize("bad", ["", "orders", "orders.created", "orders..created"])
    def test_event_type_format(self, bad):
        with pytest.raises(InvalidEventTypeFormat):
            SubscriberRegistry.validate_event_type(bad)

    def test_duplicate_handler_rejected(self):
        registry = SubscriberRegistry()
        handler = Recorder()
        registry.register_subscriber(EVENT_TYPE, handler, "notifications")
        with pytest.raises(DuplicateSubscriberError):
            registry.register_subscriber(EVENT_TYPE, handler, "notifications")

    def test_self_subscription_requires_opt_in(self):
        registry = SubscriberRegistry()
        with pytest.raises(SelfSubscriptionError):
            registry.register_subscriber(EVENT_TYPE, Recorder(), "orders")
        registry.register_subscriber(
            EVENT_TYPE, Recorder(), "orders", allow_self_subscription=True,
        )
        assert registry.subscriber_count(EVENT_TYPE) == 1

    def test_unregister(self):
        registry = SubscriberRegistry()
        handler = Recorder()
        registry.register_subscriber(EVENT_TYPE, handler, "notifications")
        assert registry.unregister_subscriber(EVENT_TYPE, handler) is True
        assert registry.unregister_subscriber(EVENT_TYPE, handler) is False
        assert not registry.has_subscribers(EVENT_TYPE)


class TestDispatch:
    def test_handlers_run_in_registration_order(self):
        registry = SubscriberRegistry()
        calls = []
        registry.register_subscriber(EVENT_TYPE, lambda e: calls.append("a"), "x")
        registry.register_subscriber(EVENT_TYPE, lambda e: calls.append("b"), "y")
        result = dispatch(_event(), registry)
        assert calls == ["a", "b"]
        assert result["subscribers_notified"] == 2
        assert result["subscribers_failed"] == 0

    def test_failing_subscriber_does_not_stop_others(self):
        registry = SubscriberRegistry()
        recorder = Recorder()

        def boom(event):
            raise RuntimeError("sink down")

        registry.register_subscriber(EVENT_TYPE, boom, "x")
        registry.register_subscriber(EVENT_TYPE, recorder, "y")
        result = dispatch(_event(), registry)

        assert len(recorder.events) == 1
        assert result["subscribers_failed"] == 1
        assert result["failures"][0]["error_type"] == "RuntimeError"

    def test_no_subscribers(self):
        result = dispatch(_event(), SubscriberRegistry())
        assert result["subscribers_notified"] == 0
        assert result["failures"] == []


class TestEventPublisher:
    def test_publish_builds_envelope_with_clock_time(self):
        publisher = EventPublisher(clock=FixedClock(NOW))
        recorder = Recorder()
        publisher.registry.register_subscriber(EVENT_TYPE, recorder, "notifications")

        event = publisher.publish(EVENT_TYPE, {"order_id": "o-1"}, "contractor-1")

        assert event.occurred_at == NOW
        assert event.source_engine == "orders"
        assert recorder.events == [event]
        assert event.to_dict()["payload"] == {"order_id": "o-1"}

    def test_publish_rejects_malformed_type(self):
        with pytest.raises(InvalidEventTypeFormat):
            EventPublisher().publish("bad", {}, "actor")

    def test_envelope_validation(self):
        with pytest.raises(ValueError, match="actor_id"):
            DomainEvent(event_type=EVENT_TYPE, occurred_at=NOW, actor_id="")
