"""
Handover Notifications — Event Dispatcher
===========================================
Subscribes to lifecycle, dispute and review events and turns each one
into per-recipient notifications.

Delivery is at-least-once:
- notification_id = uuid5(event_id, recipient_id), so a redelivered
  event maps onto the same stored row and the same sink key
- the store create is idempotent
- sink failures raising TransientError are retried with bounded
  exponential backoff; anything else, or exhausted retries, is logged
  and dropped without affecting the operation that caused the event
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Callable, Optional

from core.config.settings import EngineSettings
from core.events.envelope import DomainEvent
from core.events.registry import SubscriberRegistry
from core.primitives.notification import Notification
from core.repository.protocol import StoreProtocol
from integration.adapters import TransientError
from integration.notifications.routing import NOTIFICATION_ROUTES
from integration.notifications.sink import NotificationSink

logger = logging.getLogger("handover.notifications")

SUBSCRIBER_ENGINE = "notifications"


@dataclass(frozen=True)
class DeliveryResult:
    notification_id: str
    recipient_id: str
    success: bool
    attempts: int
    error_message: Optional[str] = None


def notification_id_for(event_id: uuid.UUID, recipient_id: str) -> str:
    return str(uuid.uuid5(event_id, recipient_id))


class NotificationDispatcher:

    def __init__(
        self,
        *,
        store: StoreProtocol,
        sink: NotificationSink,
        settings: Optional[EngineSettings] = None,
        executor: Optional[Executor] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = settings or EngineSettings()
        self._store = store
        self._sink = sink
        self._max_retries = settings.notification_max_retries
        self._backoff_base = settings.notification_backoff_base_seconds
        self._backoff_max = settings.notification_backoff_max_seconds
        self._executor = executor
        self._sleep = sleep

    def subscribe(self, registry: SubscriberRegistry) -> None:
        for event_type in sorted(NOTIFICATION_ROUTES):
            registry.register_subscriber(
                event_type, self.handle, subscriber_engine=SUBSCRIBER_ENGINE,
            )

    def handle(self, event: DomainEvent) -> None:
        """Bus entry point. Hands off to the executor when one is set."""
        if self._executor is None:
            self.deliver_event(event)
            return
        future = self._executor.submit(self.deliver_event, event)
        future.add_done_callback(
            lambda f, event=event: self._log_background_failure(f, event)
        )

    @staticmethod
    def _log_background_failure(future: Future, event: DomainEvent) -> None:
        if future.cancelled():
            logger.warning(
                f"Notification delivery cancelled for {event.event_type} "
                f"({event.event_id})"
            )
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                f"Notification delivery crashed for {event.event_type} "
                f"({event.event_id}): {exc}",
                exc_info=exc,
            )

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number `attempt + 1` (attempt counts from 0)."""
        return min(self._backoff_base * (2 ** attempt), self._backoff_max)

    def deliver_event(self, event: DomainEvent) -> list[DeliveryResult]:
        route = NOTIFICATION_ROUTES.get(event.event_type)
        if route is None:
            return []

        message = route.render(event.payload)
        results = []
        for recipient_id in route.recipients(event):
            notification, created = self._store.create_notification(Notification(
                notification_id=notification_id_for(event.event_id, recipient_id),
                recipient_id=recipient_id,
                notification_type=route.notification_type,
                message=message,
                created_at=event.occurred_at,
                source_event_id=str(event.event_id),
            ))
            if not created:
                logger.debug(
                    f"Notification {notification.notification_id} already "
                    f"stored; re-emitting"
                )
            results.append(self._emit_with_retry(notification))
        return results

    def _emit_with_retry(self, notification: Notification) -> DeliveryResult:
        last_error = ""
        attempts = 0
        for attempt in range(self._max_retries + 1):
            attempts = attempt + 1
            try:
                self._sink.emit(notification)
            except TransientError as exc:
                last_error = str(exc)
                if attempt < self._max_retries:
                    delay = self.backoff_delay(attempt)
                    logger.info(
                        f"Notification {notification.notification_id} retry "
                        f"{attempts}/{self._max_retries} in {delay}s: {exc}"
                    )
                    self._sleep(delay)
                continue
            except Exception as exc:
                last_error = str(exc) or type(exc).__name__
                logger.error(
                    f"Notification {notification.notification_id} to "
                    f"{notification.recipient_id} failed permanently: {exc}",
                    exc_info=True,
                )
                break
            return DeliveryResult(
                notification_id=notification.notification_id,
                recipient_id=notification.recipient_id,
                success=True,
                attempts=attempts,
            )
        else:
            logger.error(
                f"Notification {notification.notification_id} to "
                f"{notification.recipient_id} dropped after {attempts} "
                f"attempts: {last_error}"
            )

        return DeliveryResult(
            notification_id=notification.notification_id,
            recipient_id=notification.recipient_id,
            success=False,
            attempts=attempts,
            error_message=last_error,
        )
