"""
Handover Reviews Engine — Review Service
=========================================
One review per completed order, by that order's contractor.

submit_review re-checks eligibility at write time and the store's
uniqueness constraint settles any race between two submissions.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from core.commands.outcomes import OperationOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import ActorContext
from core.events.publisher import EventPublisher
from core.permissions.evaluator import PartyScope, evaluate_authorization
from core.primitives.order import OrderStatus
from core.primitives.review import Review
from core.repository.errors import DuplicateRecordError
from core.repository.protocol import StoreProtocol
from core.time.clock import Clock, SystemClock
from engines.orders.policies import order_must_exist_policy
from engines.reviews.commands import REVIEWS_REVIEW_GET, REVIEWS_REVIEW_SUBMIT
from engines.reviews.events import (
    REVIEWS_REVIEW_SUBMITTED_V1,
    build_review_submitted_payload,
)
from engines.reviews.policies import (
    order_must_be_completed_for_review_policy,
    order_must_not_be_reviewed_policy,
)

logger = logging.getLogger("handover.reviews")


class ReviewService:

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

    def can_review(self, order_id: str, contractor_id: str) -> bool:
        order = self._store.get_order(order_id)
        if order is None or order.contractor_id != contractor_id:
            return False
        return (
            order.status == OrderStatus.COMPLETED
            and self._store.get_review_for_order(order_id) is None
        )

    def submit_review(
        self,
        order_id: str,
        *,
        actor: ActorContext,
        rating: int,
        comment: str = "",
    ) -> OperationOutcome:
        operation = REVIEWS_REVIEW_SUBMIT
        order = self._store.get_order(order_id)
        rejection = order_must_exist_policy(order, order_id)
        if rejection is None:
            rejection = evaluate_authorization(
                operation, actor, PartyScope.for_order(order),
            )
        if rejection is None:
            rejection = (
                order_must_be_completed_for_review_policy(order)
                or order_must_not_be_reviewed_policy(
                    order, self._store.get_review_for_order(order_id),
                )
            )
        if rejection is not None:
            logger.info(f"{operation} rejected [{rejection.code}]: {rejection.message}")
            return OperationOutcome.rejected(operation, rejection)

        review = Review(
            review_id=str(uuid.uuid4()),
            order_id=order.order_id,
            contractor_id=order.contractor_id,
            supplier_id=order.supplier_id,
            rating=rating,
            comment=comment,
            created_at=self._clock.now_utc(),
        )
        try:
            review = self._store.create_review(review)
        except DuplicateRecordError as exc:
            logger.warning(f"{operation} lost a race on order {order_id}: {exc}")
            return OperationOutcome.rejected(
                operation,
                RejectionReason(
                    code=ReasonCode.DUPLICATE_REVIEW,
                    message=str(exc),
                    policy_name="review_unique_per_order",
                ),
            )

        logger.info(
            f"Review {review.review_id} ({review.rating}/5) on order "
            f"{order.order_number}"
        )
        self._publisher.publish(
            REVIEWS_REVIEW_SUBMITTED_V1,
            build_review_submitted_payload(review, order),
            actor.actor_id,
        )
        return OperationOutcome.accepted(operation, review)

    def get_review_for_order(self, order_id: str) -> OperationOutcome:
        review = self._store.get_review_for_order(order_id)
        if review is None:
            return OperationOutcome.rejected(
                REVIEWS_REVIEW_GET,
                RejectionReason(
                    code=ReasonCode.NOT_FOUND,
                    message=f"Order '{order_id}' has no review.",
                    policy_name="review_must_exist_policy",
                ),
            )
        return OperationOutcome.accepted(REVIEWS_REVIEW_GET, review)

    def list_reviews_for_supplier(self, supplier_id: str) -> list[Review]:
        return self._store.list_reviews_for_supplier(supplier_id)
