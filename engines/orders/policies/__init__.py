"""
Handover Orders Engine — Policies
===================================
Order-specific checks. Each returns a RejectionReason or None and
never touches the store.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.dispute import Dispute, ResolutionOutcome
from core.primitives.order import Order, OrderStatus, ProofOfDelivery
from core.primitives.workflow import ORDER_WORKFLOW


# Forward edges advance() may take. Cancellation is handled separately.
ADVANCE_EDGES = frozenset({
    (OrderStatus.NEW, OrderStatus.PROCESSING),
    (OrderStatus.PROCESSING, OrderStatus.READY_FOR_PICKUP),
    (OrderStatus.READY_FOR_PICKUP, OrderStatus.OUT_FOR_DELIVERY),
})

CANCELLABLE_STATUSES = frozenset({
    OrderStatus.NEW,
    OrderStatus.PROCESSING,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.OUT_FOR_DELIVERY,
})

DISPATCHABLE_STATUSES = frozenset({
    OrderStatus.PROCESSING,
    OrderStatus.READY_FOR_PICKUP,
})


def order_must_exist_policy(
    order: Optional[Order], order_id: str,
) -> Optional[RejectionReason]:
    if order is None:
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=f"Order '{order_id}' not found.",
            policy_name="order_must_exist_policy",
        )
    return None


def expected_status_must_match_policy(
    order: Order, expected_status: Optional[OrderStatus],
) -> Optional[RejectionReason]:
    """The caller's last observed status must still be the stored one."""
    if expected_status is None or order.status == expected_status:
        return None
    return RejectionReason(
        code=ReasonCode.STALE_STATE,
        message=(
            f"Order '{order.order_id}' is {order.status.value}, "
            f"caller expected {expected_status.value}."
        ),
        policy_name="expected_status_must_match_policy",
    )


def advance_edge_must_be_allowed_policy(
    order: Order, target: OrderStatus,
) -> Optional[RejectionReason]:
    current = order.status
    if target == OrderStatus.CANCELLED:
        allowed = current in CANCELLABLE_STATUSES
    else:
        allowed = (current, target) in ADVANCE_EDGES
    allowed = allowed and ORDER_WORKFLOW.is_valid_transition(
        current.value, target.value,
    )
    if not allowed:
        reachable = sorted(ORDER_WORKFLOW.allowed_next_states(current.value))
        return RejectionReason(
            code=ReasonCode.INVALID_TRANSITION,
            message=(
                f"Order '{order.order_id}' cannot move "
                f"{current.value} → {target.value} "
                f"(next states: {', '.join(reachable) or 'none'})."
            ),
            policy_name="advance_edge_must_be_allowed_policy",
        )
    # Going out for delivery needs a driver; assign_delivery attaches one.
    if target == OrderStatus.OUT_FOR_DELIVERY and order.delivery is None:
        return RejectionReason(
            code=ReasonCode.INVALID_TRANSITION,
            message=(
                f"Order '{order.order_id}' has no driver assigned; "
                f"use assign_delivery to send it out."
            ),
            policy_name="advance_edge_must_be_allowed_policy",
        )
    return None


def delivery_must_be_completable_policy(
    order: Order, proof: Optional[ProofOfDelivery],
) -> Optional[RejectionReason]:
    """Completion needs OUT_FOR_DELIVERY plus both artifact refs."""
    if order.status != OrderStatus.OUT_FOR_DELIVERY:
        return RejectionReason(
            code=ReasonCode.MISSING_ARTIFACT,
            message=(
                f"Order '{order.order_id}' is {order.status.value}; "
                f"delivery can only complete from OUT_FOR_DELIVERY."
            ),
            policy_name="delivery_must_be_completable_policy",
        )
    if proof is None or not proof.is_complete:
        return RejectionReason(
            code=ReasonCode.MISSING_ARTIFACT,
            message=(
                f"Order '{order.order_id}' needs both a photo and a "
                f"signature to complete delivery."
            ),
            policy_name="delivery_must_be_completable_policy",
        )
    return None


def order_must_be_disputable_policy(order: Order) -> Optional[RejectionReason]:
    if order.status == OrderStatus.DISPUTED:
        return RejectionReason(
            code=ReasonCode.DUPLICATE_DISPUTE,
            message=f"Order '{order.order_id}' is already disputed.",
            policy_name="order_must_be_disputable_policy",
        )
    if order.is_terminal:
        return RejectionReason(
            code=ReasonCode.INVALID_TRANSITION,
            message=(
                f"Order '{order.order_id}' is {order.status.value} "
                f"and can no longer be disputed."
            ),
            policy_name="order_must_be_disputable_policy",
        )
    return None


def order_must_be_dispatchable_policy(order: Order) -> Optional[RejectionReason]:
    if order.status in DISPATCHABLE_STATUSES:
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_TRANSITION,
        message=(
            f"Order '{order.order_id}' is {order.status.value}; a driver "
            f"can only be assigned while PROCESSING or READY_FOR_PICKUP."
        ),
        policy_name="order_must_be_dispatchable_policy",
    )


def settlement_must_match_resolution_policy(
    order: Order,
    dispute: Optional[Dispute],
    outcome: ResolutionOutcome,
) -> Optional[RejectionReason]:
    """Only a RESOLVED dispute with the same outcome can be settled."""
    if dispute is None:
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=f"Order '{order.order_id}' has no dispute to settle.",
            policy_name="settlement_must_match_resolution_policy",
        )
    if order.status != OrderStatus.DISPUTED:
        return RejectionReason(
            code=ReasonCode.INVALID_TRANSITION,
            message=(
                f"Order '{order.order_id}' is {order.status.value}, "
                f"not DISPUTED."
            ),
            policy_name="settlement_must_match_resolution_policy",
        )
    if not dispute.is_resolved or dispute.resolution.outcome != outcome:
        return RejectionReason(
            code=ReasonCode.INVALID_TRANSITION,
            message=(
                f"Dispute '{dispute.dispute_id}' has not been resolved "
                f"with outcome {outcome.value}."
            ),
            policy_name="settlement_must_match_resolution_policy",
        )
    return None


def settlement_target_status(
    outcome: ResolutionOutcome, dispute: Dispute,
) -> OrderStatus:
    """Map a resolution outcome onto the order status it settles to."""
    if outcome == ResolutionOutcome.COMPLETE_ORDER:
        return OrderStatus.COMPLETED
    if outcome == ResolutionOutcome.CANCEL_ORDER:
        return OrderStatus.CANCELLED
    if outcome == ResolutionOutcome.RESUME_FULFILMENT:
        return dispute.order_status_at_opening
    return OrderStatus.DISPUTED
