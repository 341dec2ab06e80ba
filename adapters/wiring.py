"""
Handover Adapter Wiring
=========================
Composition root: builds one store, one event bus and every engine
service on top of them.

build_engine() wires whatever ports it is given and falls back to
in-memory / logging defaults for the rest. Notifications are sent on a
bounded worker pool owned by the engine (shut down by close()) unless an
executor is passed in; inline_notifications=True sends on the caller's
thread and is meant for tests.

get_engine() is the lazy process singleton for a configured Django
runtime and persists through DjangoStore.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from ai.advisory import AdvisoryGateway, AdvisoryPort, DeliveryAssistant, MediationAdvisor
from core.config.settings import EngineSettings, load_engine_settings
from core.events.publisher import EventPublisher
from core.events.registry import SubscriberRegistry
from core.repository.memory import InMemoryStore
from core.repository.protocol import StoreProtocol
from core.time.clock import Clock, SystemClock
from engines.delivery.services import DeliveryCoordinator
from engines.disputes.services import DisputeResolutionService
from engines.orders.services import OrderLifecycleService
from engines.reorder.services import CatalogLookup, ReorderService
from engines.reviews.services import ReviewService
from integration.notifications import (
    LoggingNotificationSink,
    NotificationDispatcher,
    NotificationService,
    NotificationSink,
)


_ENGINE_LOCK = threading.Lock()
_ENGINE: "HandoverEngine | None" = None

NOTIFICATION_WORKERS = 4


class _NoCatalog:
    """Catalog used when none is wired: every product is available."""

    def is_available(self, product_id: str) -> bool:
        return True


@dataclass(frozen=True)
class HandoverEngine:
    store: StoreProtocol
    publisher: EventPublisher
    settings: EngineSettings
    lifecycle: OrderLifecycleService
    delivery: DeliveryCoordinator
    disputes: DisputeResolutionService
    reorder: ReorderService
    reviews: ReviewService
    notification_dispatcher: NotificationDispatcher
    notifications: NotificationService
    advisory_gateway: Optional[AdvisoryGateway] = None
    mediation: Optional[MediationAdvisor] = None
    delivery_assistant: Optional[DeliveryAssistant] = None
    notification_executor: Optional[Executor] = None
    owns_notification_executor: bool = False

    @property
    def registry(self) -> SubscriberRegistry:
        return self.publisher.registry

    def close(self) -> None:
        if self.owns_notification_executor and self.notification_executor is not None:
            self.notification_executor.shutdown(wait=True)
        if self.advisory_gateway is not None:
            self.advisory_gateway.close()


def build_engine(
    store: Optional[StoreProtocol] = None,
    sink: Optional[NotificationSink] = None,
    advisory_port: Optional[AdvisoryPort] = None,
    catalog: Optional[CatalogLookup] = None,
    clock: Optional[Clock] = None,
    settings: Optional[EngineSettings] = None,
    notification_executor: Optional[Executor] = None,
    inline_notifications: bool = False,
) -> HandoverEngine:
    store = store if store is not None else InMemoryStore()
    clock = clock or SystemClock()
    settings = settings or load_engine_settings()

    publisher = EventPublisher(registry=SubscriberRegistry(), clock=clock)

    lifecycle = OrderLifecycleService(store=store, publisher=publisher, clock=clock)
    delivery = DeliveryCoordinator(
        store=store, lifecycle=lifecycle, publisher=publisher, clock=clock,
    )
    disputes = DisputeResolutionService(
        store=store,
        lifecycle=lifecycle,
        publisher=publisher,
        clock=clock,
        settings=settings,
    )
    reorder = ReorderService(store=store, catalog=catalog or _NoCatalog())
    reviews = ReviewService(store=store, publisher=publisher, clock=clock)

    owns_executor = notification_executor is None and not inline_notifications
    if owns_executor:
        notification_executor = ThreadPoolExecutor(
            max_workers=NOTIFICATION_WORKERS, thread_name_prefix="handover-notify",
        )

    dispatcher = NotificationDispatcher(
        store=store,
        sink=sink or LoggingNotificationSink(),
        settings=settings,
        executor=notification_executor,
    )
    dispatcher.subscribe(publisher.registry)

    gateway = mediation = assistant = None
    if advisory_port is not None:
        gateway = AdvisoryGateway(
            advisory_port,
            timeout_seconds=settings.advisory_timeout_seconds,
            max_workers=settings.advisory_max_workers,
        )
        mediation = MediationAdvisor(store=store, gateway=gateway)
        assistant = DeliveryAssistant(
            store=store, coordinator=delivery, gateway=gateway,
        )

    return HandoverEngine(
        store=store,
        publisher=publisher,
        settings=settings,
        lifecycle=lifecycle,
        delivery=delivery,
        disputes=disputes,
        reorder=reorder,
        reviews=reviews,
        notification_dispatcher=dispatcher,
        notifications=NotificationService(store=store),
        advisory_gateway=gateway,
        mediation=mediation,
        delivery_assistant=assistant,
        notification_executor=notification_executor,
        owns_notification_executor=owns_executor,
    )


def get_engine() -> HandoverEngine:
    """
    Lazy singleton wiring for the Django runtime.
    """
    global _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is None:
            # Model imports need the app registry to be ready.
            from core.order_store.repository import DjangoStore

            _ENGINE = build_engine(store=DjangoStore())
        return _ENGINE
