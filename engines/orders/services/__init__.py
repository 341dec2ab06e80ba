"""
Handover Orders Engine — Lifecycle Service
============================================
Guards every order status change.

Every mutation runs the same checks in the same order:
    NOT_FOUND → UNAUTHORIZED → STALE_STATE → transition validity
then writes through the store's version guard. A write that loses a
race to another writer comes back as STALE_STATE, never as an
overwrite.

Events are published only after the store write has returned.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Callable, Optional

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.events.publisher import EventPublisher
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.primitives.dispute import ResolutionOutcome
from core.primitives.order import (
    DeliveryDetails,
    Order,
    OrderStatus,
    ProofOfDelivery,
)
from core.primitives.workflow import ORDER_WORKFLOW
from core.repository.errors import StaleWriteError
from core.repository.protocol import StoreProtocol
from core.time.clock import Clock, SystemClock
from engines.orders.commands import (
    ORDERS_DELIVERY_COMPLETE,
    ORDERS_DISPUTE_SETTLE,
    ORDERS_ORDER_ADVANCE,
    ORDERS_ORDER_CANCEL,
    ORDERS_ORDER_CREATE,
    ORDERS_ORDER_DISPATCH,
    ORDERS_ORDER_GET,
    ORDERS_ORDER_MARK_DISPUTED,
    OrderCreateRequest,
)
from engines.orders.events import (
    ORDERS_DELIVERY_COMPLETED_V1,
    ORDERS_DISPUTE_SETTLED_V1,
    ORDERS_ORDER_CREATED_V1,
    ORDERS_ORDER_STATUS_CHANGED_V1,
    build_delivery_completed_payload,
    build_dispute_settled_payload,
    build_order_created_payload,
    build_status_changed_payload,
)
from engines.orders.policies import (
    advance_edge_must_be_allowed_policy,
    delivery_must_be_completable_policy,
    expected_status_must_match_policy,
    order_must_be_dispatchable_policy,
    order_must_be_disputable_policy,
    order_must_exist_policy,
    settlement_must_match_resolution_policy,
    settlement_target_status,
)

logger = logging.getLogger("handover.orders")


class OrderLifecycleService:
    """Order state machine with compare-and-set writes."""

    def __init__(
        self,
        *,
        store: StoreProtocol,
        publisher: EventPublisher,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._publisher = publisher
        self._clock = clock or SystemClock()

    # ── helpers ───────────────────────────────────────────────

    def _rejected(
        self, operation: str, reason: RejectionReason,
    ) -> OperationOutcome:
        if reason.code == ReasonCode.STALE_STATE:
            logger.warning(f"{operation} lost a race: {reason.message}")
        else:
            logger.info(f"{operation} rejected [{reason.code}]: {reason.message}")
        return OperationOutcome.rejected(operation, reason)

    def _load_authorized(
        self,
        operation: str,
        order_id: str,
        actor: Optional[ActorContext],
    ) -> tuple[Optional[Order], Optional[RejectionReason]]:
        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is None and operation not in (
            ORDERS_ORDER_MARK_DISPUTED, ORDERS_ORDER_DISPATCH,
        ):
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_order(order),
            )
        return order, rejection

    def _guarded_write(
        self,
        order: Order,
        mutation: Callable[[Order], Order],
    ) -> tuple[Optional[Order], Optional[RejectionReason]]:
        try:
            return self._store.update_order(
                order.order_id, order.version, mutation,
            ), None
        except StaleWriteError as exc:
            return None, RejectionReason(
                code=ReasonCode.STALE_STATE,
                message=str(exc),
                policy_name="order_version_guard",
            )

    # ══════════════════════════════════════════════════════════
    # CREATE
    # ══════════════════════════════════════════════════════════

    def create_order(
        self, request: OrderCreateRequest, *, actor: ActorContext,
    ) -> OperationOutcome:
        operation = ORDERS_ORDER_CREATE
        rejection = evaluate_authorization(
            operation,
            actor,
            PartyScope(
                contractor_id=request.contractor_id,
                supplier_id=request.supplier_id,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        order_id = request.order_id or str(uuid.uuid4())
        order = Order(
            order_id=order_id,
            order_number=request.order_number or f"ORD-{order_id[:8].upper()}",
            contractor_id=request.contractor_id,
            supplier_id=request.supplier_id,
            lines=request.lines,
            status=OrderStatus(ORDER_WORKFLOW.initial_state),
            created_at=self._clock.now_utc(),
            delivery_address=request.delivery_address,
        )
        order = self._store.create_order(order)

        logger.info(
            f"Order created: {order.order_number} ({order.order_id}) "
            f"{order.contractor_id} → {order.supplier_id}"
        )
        self._publisher.publish(
            ORDERS_ORDER_CREATED_V1,
            build_order_created_payload(order),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, order)

    # ══════════════════════════════════════════════════════════
    # ADVANCE / CANCEL
    # ══════════════════════════════════════════════════════════

    def advance(
        self,
        order_id: str,
        target_status: OrderStatus,
        expected_status: OrderStatus,
        *,
        actor: ActorContext,
    ) -> OperationOutcome:
        operation = (
            ORDERS_ORDER_CANCEL
            if target_status == OrderStatus.CANCELLED
            else ORDERS_ORDER_ADVANCE
        )
        order, rejection = self._load_authorized(operation, order_id, actor)
        if rejection is None:
            rejection = (
                expected_status_must_match_policy(order, expected_status)
                or advance_edge_must_be_allowed_policy(order, target_status)
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        now = self._clock.now_utc()
        updated, rejection = self._guarded_write(
            order,
            lambda current: dataclasses.replace(
                current, status=target_status, updated_at=now,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Order {updated.order_number}: {order.status.value} → "
            f"{updated.status.value} by {actor.actor_id}"
        )
        self._publisher.publish(
            ORDERS_ORDER_STATUS_CHANGED_V1,
            build_status_changed_payload(updated, order.status),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    def cancel(
        self,
        order_id: str,
        expected_status: OrderStatus,
        *,
        actor: ActorContext,
    ) -> OperationOutcome:
        return self.advance(
            order_id, OrderStatus.CANCELLED, expected_status, actor=actor,
        )

    # ══════════════════════════════════════════════════════════
    # DELIVERY
    # ══════════════════════════════════════════════════════════

    def complete_delivery(
        self,
        order_id: str,
        proof_of_delivery: Optional[ProofOfDelivery],
        *,
        actor: ActorContext,
        expected_status: OrderStatus = OrderStatus.OUT_FOR_DELIVERY,
    ) -> OperationOutcome:
        """
        Complete a delivery against a proof-of-delivery artifact.

        The artifact and the COMPLETED status land in one write. A stale
        expectation is reported before a missing artifact.
        """
        operation = ORDERS_DELIVERY_COMPLETE
        order, rejection = self._load_authorized(operation, order_id, actor)
        if rejection is None:
            rejection = (
                expected_status_must_match_policy(order, expected_status)
                or delivery_must_be_completable_policy(order, proof_of_delivery)
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        now = self._clock.now_utc()
        updated, rejection = self._guarded_write(
            order,
            lambda current: dataclasses.replace(
                current,
                status=OrderStatus.COMPLETED,
                proof_of_delivery=proof_of_delivery,
                updated_at=now,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Order {updated.order_number} delivered by {actor.actor_id}"
        )
        self._publisher.publish(
            ORDERS_DELIVERY_COMPLETED_V1,
            build_delivery_completed_payload(updated, order.status),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    def dispatch_for_delivery(
        self,
        order_id: str,
        delivery: DeliveryDetails,
        expected_status: Optional[OrderStatus],
        *,
        actor: ActorContext,
    ) -> OperationOutcome:
        """
        Attach a driver and move to OUT_FOR_DELIVERY in one write.

        Called by the delivery coordinator after it has authorized the
        actor; publishes nothing itself.
        """
        operation = ORDERS_ORDER_DISPATCH
        order, rejection = self._load_authorized(operation, order_id, actor)
        if rejection is None:
            rejection = (
                expected_status_must_match_policy(order, expected_status)
                or order_must_be_dispatchable_policy(order)
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        now = self._clock.now_utc()
        updated, rejection = self._guarded_write(
            order,
            lambda current: dataclasses.replace(
                current,
                status=OrderStatus.OUT_FOR_DELIVERY,
                delivery=delivery,
                updated_at=now,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Order {updated.order_number} out for delivery with "
            f"driver {delivery.driver_id}"
        )
        return OperationOutcome.accepted(operation, updated)

    # ══════════════════════════════════════════════════════════
    # DISPUTES
    # ══════════════════════════════════════════════════════════

    def mark_disputed(
        self,
        order_id: str,
        expected_status: OrderStatus,
        *,
        actor: ActorContext,
    ) -> OperationOutcome:
        """
        Flip an order to DISPUTED.

        Only the disputes engine calls this, inside the same store
        transaction that inserts the dispute. No event is published here.
        """
        operation = ORDERS_ORDER_MARK_DISPUTED
        order, rejection = self._load_authorized(operation, order_id, actor)
        if rejection is None:
            rejection = (
                order_must_be_disputable_policy(order)
                or expected_status_must_match_policy(order, expected_status)
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        now = self._clock.now_utc()
        updated, rejection = self._guarded_write(
            order,
            lambda current: dataclasses.replace(
                current, status=OrderStatus.DISPUTED, updated_at=now,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)
        return OperationOutcome.accepted(operation, updated)

    def settle_dispute(
        self,
        order_id: str,
        resolution_outcome: ResolutionOutcome,
        *,
        actor: ActorContext,
    ) -> OperationOutcome:
        """
        Apply a resolved dispute's outcome to its order.

        LEAVE_DISPUTED     → order stays DISPUTED
        COMPLETE_ORDER     → COMPLETED
        CANCEL_ORDER       → CANCELLED
        RESUME_FULFILMENT  → the status held when the dispute opened
        """
        operation = ORDERS_DISPUTE_SETTLE
        order, rejection = self._load_authorized(operation, order_id, actor)
        dispute = None
        if rejection is None:
            dispute = self._store.get_dispute_for_order(order_id)
            rejection = settlement_must_match_resolution_policy(
                order, dispute, resolution_outcome,
            )
        if rejection is not None:
            return self._rejected(operation, rejection)

        target = settlement_target_status(resolution_outcome, dispute)
        if target == OrderStatus.DISPUTED:
            logger.info(
                f"Order {order.order_number} left DISPUTED by {actor.actor_id}"
            )
            return OperationOutcome.accepted(operation, order)

        now = self._clock.now_utc()
        updated, rejection = self._guarded_write(
            order,
            lambda current: dataclasses.replace(
                current, status=target, updated_at=now,
            ),
        )
        if rejection is not None:
            return self._rejected(operation, rejection)

        logger.info(
            f"Order {updated.order_number} settled to {target.value} "
            f"({resolution_outcome.value}) by {actor.actor_id}"
        )
        self._publisher.publish(
            ORDERS_DISPUTE_SETTLED_V1,
            build_dispute_settled_payload(
                updated,
                order.status,
                dispute.dispute_id,
                resolution_outcome.value,
                dispute.resolution.note,
            ),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, updated)

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_order(self, order_id: str) -> OperationOutcome:
        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is not None:
            return OperationOutcome.rejected(ORDERS_ORDER_GET, rejection)
        return OperationOutcome.accepted(ORDERS_ORDER_GET, order)

    def list_orders_for_party(self, party_id: str) -> list[Order]:
        return self._store.list_orders_for_party(party_id)
