"""
Handover Reorder Engine — Reorder Service
===========================================
Rebuilds a cart from a past order's lines, keeping only the products
the catalog still has available.

Read-only: nothing is written and no event is published.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Tuple

from core.primitives.order import OrderLine
from core.repository.protocol import StoreProtocol

logger = logging.getLogger("handover.reorder")


class CatalogLookup(Protocol):
    def is_available(self, product_id: str) -> bool:
        ...


@dataclass(frozen=True)
class ReorderResult:
    """
    success is False only when the source order does not exist.
    An order whose every line is unavailable still succeeds, with an
    empty cart.
    """
    success: bool
    cart_items: Tuple[OrderLine, ...] = ()
    unavailable_count: int = 0

    def __post_init__(self):
        if self.unavailable_count < 0:
            raise ValueError("unavailable_count must be >= 0.")


class ReorderService:

    def __init__(self, *, store: StoreProtocol, catalog: CatalogLookup):
        self._store = store
        self._catalog = catalog

    def _line_available(self, order_id: str, line: OrderLine) -> bool:
        try:
            return bool(self._catalog.is_available(line.product_id))
        except Exception as exc:
            logger.warning(
                f"Catalog lookup failed for product {line.product_id} "
                f"(reorder of {order_id}): {exc}",
                exc_info=True,
            )
            return False

    def reorder_items(self, order_id: str) -> ReorderResult:
        order = self._store.get_order(order_id)
        if order is None:
            logger.info(f"Reorder of unknown order {order_id}")
            return ReorderResult(success=False)

        available = tuple(
            line for line in order.lines
            if self._line_available(order_id, line)
        )
        unavailable = len(order.lines) - len(available)
        if unavailable:
            logger.info(
                f"Reorder of {order.order_number}: {unavailable} of "
                f"{len(order.lines)} lines unavailable"
            )
        return ReorderResult(
            success=True,
            cart_items=available,
            unavailable_count=unavailable,
        )
