"""
Handover Event Bus — Errors
=============================
Raised at subscription time only. Publishing never raises for
subscriber failures; those are logged by the dispatcher.
"""


class EventBusError(Exception):
    """Base error for event bus wiring problems."""
    pass


class InvalidEventTypeFormat(EventBusError):
    """Event type is not engine.domain.action[.vN]."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Event type '{event_type}' does not follow "
            f"engine.domain.action format."
        )


class DuplicateSubscriberError(EventBusError):
    """The same handler is already listening to this event type."""

    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(
            f"Handler '{handler_name}' already registered "
            f"for event type '{event_type}'."
        )


class SelfSubscriptionError(EventBusError):
    """An engine tried to listen to its own events without opting in."""

    def __init__(self, engine: str, event_type: str):
        self.engine = engine
        self.event_type = event_type
        super().__init__(
            f"Engine '{engine}' cannot subscribe to its own "
            f"event type '{event_type}' without explicit allow."
        )
