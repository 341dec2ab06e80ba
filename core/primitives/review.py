"""
Handover Review Primitive
===========================
A contractor's rating of a supplier for one completed order.
At most one review exists per order; the store enforces it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class Review:
    review_id: str
    order_id: str
    contractor_id: str
    supplier_id: str
    rating: int
    created_at: datetime
    comment: str = ""

    def __post_init__(self):
        if not self.review_id:
            raise ValueError("review_id must be non-empty.")
        if not self.order_id:
            raise ValueError("order_id must be non-empty.")
        if not isinstance(self.rating, int) or isinstance(self.rating, bool):
            raise ValueError("rating must be an int.")
        if not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(
                f"rating must be between {MIN_RATING} and {MAX_RATING}."
            )

    def to_dict(self) -> dict:
        return {
            "review_id": self.review_id,
            "order_id": self.order_id,
            "contractor_id": self.contractor_id,
            "supplier_id": self.supplier_id,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at.isoformat(),
        }
