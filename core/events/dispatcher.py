"""
Handover Event Bus — Dispatcher
=================================
Routes committed domain events to registered subscribers.

1. Look up subscribers by event_type
2. Run handlers in registration order
3. Catch and log each handler failure, then continue

dispatch() never raises. A failing subscriber cannot undo the write
that produced the event, nor stop other subscribers hearing it.
"""

import logging

from core.events.envelope import DomainEvent
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("handover.events")


def dispatch(event: DomainEvent, registry: SubscriberRegistry) -> dict:
    """
    Dispatch a committed event to all subscribers of its type.

    Returns:
        {
            'event_type': str,
            'event_id': str,
            'subscribers_notified': int,
            'subscribers_failed': int,
            'failures': list[dict]
        }
    """
    event_type = event.event_type
    event_id = str(event.event_id)

    result = {
        "event_type": event_type,
        "event_id": event_id,
        "subscribers_notified": 0,
        "subscribers_failed": 0,
        "failures": [],
    }

    subscribers = registry.get_subscribers(event_type)
    if not subscribers:
        logger.debug(f"No subscribers for '{event_type}' ({event_id})")
        return result

    for handler, subscriber_engine in subscribers:
        handler_name = getattr(handler, "__qualname__", repr(handler))
        try:
            handler(event)
        except Exception as exc:
            result["subscribers_failed"] += 1
            result["failures"].append({
                "handler": handler_name,
                "engine": subscriber_engine,
                "error": str(exc),
                "error_type": type(exc).__name__,
            })
            logger.error(
                f"Subscriber failed: {handler_name} for "
                f"{event_type} ({event_id}): {exc}",
                exc_info=True,
            )
            continue

        result["subscribers_notified"] += 1
        logger.debug(
            f"Dispatched {event_type} → {handler_name} "
            f"(engine: {subscriber_engine})"
        )

    logger.info(
        f"Dispatch complete: {event_type} ({event_id}): "
        f"{result['subscribers_notified']} notified, "
        f"{result['subscribers_failed']} failed"
    )
    return result
