"""
Handover Delivery Engine — Delivery Coordinator
=================================================
Assigns drivers and describes deliveries in flight.

Assignment attaches DeliveryDetails and moves the order to
OUT_FOR_DELIVERY through the lifecycle service, so the same
compare-and-set guards apply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.events.publisher import EventPublisher
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.primitives.order import (
    Coordinates,
    DeliveryDetails,
    Order,
    OrderStatus,
)
from core.repository.protocol import StoreProtocol
from core.time.clock import Clock, SystemClock
from engines.delivery.commands import (
    DELIVERY_CONTEXT_DESCRIBE,
    DELIVERY_DRIVER_ASSIGN,
)
from engines.delivery.eta import DeliveryProjection, project_delivery
from engines.delivery.events import (
    DELIVERY_DRIVER_ASSIGNED_V1,
    build_driver_assigned_payload,
)
from engines.orders.policies import order_must_exist_policy
from engines.orders.services import OrderLifecycleService

logger = logging.getLogger("handover.delivery")


@dataclass(frozen=True)
class DeliveryContext:
    """Read-only view handed to the delivery assistant."""
    order: Order
    driver_id: str
    driver_name: str
    vehicle_ref: str
    projection: DeliveryProjection
    as_of: datetime

    @property
    def eta(self) -> datetime:
        return self.projection.eta

    @property
    def progress(self) -> float:
        return self.projection.progress

    @property
    def position(self) -> Coordinates:
        return self.projection.position

    def to_dict(self) -> dict:
        return {
            "order_id": self.order.order_id,
            "order_number": self.order.order_number,
            "status": self.order.status.value,
            "delivery_address": self.order.delivery_address,
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "vehicle_ref": self.vehicle_ref,
            "as_of": self.as_of.isoformat(),
            **self.projection.to_dict(),
        }


class DeliveryCoordinator:

    def __init__(
        self,
        *,
        store: StoreProtocol,
        lifecycle: OrderLifecycleService,
        publisher: EventPublisher,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._lifecycle = lifecycle
        self._publisher = publisher
        self._clock = clock or SystemClock()

    def assign_delivery(
        self,
        order_id: str,
        *,
        driver_id: str,
        driver_name: str,
        vehicle_ref: str,
        start: Coordinates,
        destination: Coordinates,
        planned_duration_seconds: int,
        actor: ActorContext,
        expected_status: Optional[OrderStatus] = None,
    ) -> OperationOutcome:
        operation = DELIVERY_DRIVER_ASSIGN
        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is None:
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_order(order),
            )
        if rejection is not None:
            logger.info(f"{operation} rejected [{rejection.code}]: {rejection.message}")
            return OperationOutcome.rejected(operation, rejection)

        details = DeliveryDetails(
            driver_id=driver_id,
            driver_name=driver_name,
            vehicle_ref=vehicle_ref,
            start=start,
            destination=destination,
            dispatched_at=self._clock.now_utc(),
            planned_duration_seconds=planned_duration_seconds,
        )
        dispatched = self._lifecycle.dispatch_for_delivery(
            order_id,
            details,
            expected_status if expected_status is not None else order.status,
            actor=actor,
        )
        if dispatched.is_rejected:
            return OperationOutcome.rejected(operation, dispatched.reason)

        updated = dispatched.value
        logger.info(
            f"Driver {driver_id} assigned to order {updated.order_number}, "
            f"planned ETA {details.planned_eta.isoformat()}"
        )
        self._publisher.publish(
            DELIVERY_DRIVER_ASSIGNED_V1,
            build_driver_assigned_payload(updated, order.status),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    def project(self, order_id: str) -> Optional[DeliveryProjection]:
        """ETA projection for an order, or None if it has no driver yet."""
        order = self._store.get_order(order_id)
        if order is None or order.delivery is None:
            return None
        return project_delivery(order.delivery, self._clock.now_utc())

    def describe_delivery_context(self, order_id: str) -> OperationOutcome:
        operation = DELIVERY_CONTEXT_DESCRIBE
        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is None and order.delivery is None:
            rejection = RejectionReason(
                code=ReasonCode.NOT_FOUND,
                message=f"Order '{order_id}' has no delivery assigned.",
                policy_name="delivery_must_be_assigned_policy",
            )
        if rejection is not None:
            return OperationOutcome.rejected(operation, rejection)

        now = self._clock.now_utc()
        delivery = order.delivery
        return OperationOutcome.accepted(
            operation,
            DeliveryContext(
                order=order,
                driver_id=delivery.driver_id,
                driver_name=delivery.driver_name,
                vehicle_ref=delivery.vehicle_ref,
                projection=project_delivery(delivery, now),
                as_of=now,
            ),
        )
