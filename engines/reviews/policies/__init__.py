"""
Handover Reviews Engine — Policies
====================================
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.order import Order, OrderStatus
from core.primitives.review import Review


def order_must_be_completed_for_review_policy(
    order: Order,
) -> Optional[RejectionReason]:
    if order.status == OrderStatus.COMPLETED:
        return None
    return RejectionReason(
        code=ReasonCode.INVALID_TRANSITION,
        message=(
            f"Order '{order.order_id}' is {order.status.value}; only "
            f"completed orders can be reviewed."
        ),
        policy_name="order_must_be_completed_for_review_policy",
    )


def order_must_not_be_reviewed_policy(
    order: Order, existing: Optional[Review],
) -> Optional[RejectionReason]:
    if existing is None:
        return None
    return RejectionReason(
        code=ReasonCode.DUPLICATE_REVIEW,
        message=(
            f"Order '{order.order_id}' already has review "
            f"'{existing.review_id}'."
        ),
        policy_name="order_must_not_be_reviewed_policy",
    )
