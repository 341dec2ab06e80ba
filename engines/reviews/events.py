"""
Handover Reviews Engine — Event Types and Payload Builders
============================================================
"""

from __future__ import annotations

from core.primitives.order import Order
from core.primitives.review import Review


REVIEWS_REVIEW_SUBMITTED_V1 = "reviews.review.submitted.v1"

REVIEWS_EVENT_TYPES = (
    REVIEWS_REVIEW_SUBMITTED_V1,
)


def build_review_submitted_payload(review: Review, order: Order) -> dict:
    payload = review.to_dict()
    payload["order_number"] = order.order_number
    return payload
