"""
Handover Orders Engine — Operations and Requests
==================================================
Operation names (also the permission table keys) and the typed
request for order creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from core.primitives.order import OrderLine


# ══════════════════════════════════════════════════════════════
# OPERATION CONSTANTS
# ══════════════════════════════════════════════════════════════

ORDERS_ORDER_CREATE = "orders.order.create"
ORDERS_ORDER_ADVANCE = "orders.order.advance"
ORDERS_ORDER_CANCEL = "orders.order.cancel"
ORDERS_DELIVERY_COMPLETE = "orders.delivery.complete"
ORDERS_ORDER_MARK_DISPUTED = "orders.order.mark_disputed"
ORDERS_ORDER_DISPATCH = "orders.order.dispatch"
ORDERS_DISPUTE_SETTLE = "orders.dispute.settle"
ORDERS_ORDER_GET = "orders.order.get"


# ══════════════════════════════════════════════════════════════
# REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderCreateRequest:
    """Checkout hand-off: a new order always starts in NEW."""
    contractor_id: str
    supplier_id: str
    lines: Tuple[OrderLine, ...]
    delivery_address: str = ""
    order_id: Optional[str] = None
    order_number: Optional[str] = None

    def __post_init__(self):
        if not self.contractor_id:
            raise ValueError("contractor_id must be non-empty.")
        if not self.supplier_id:
            raise ValueError("supplier_id must be non-empty.")
        if self.contractor_id == self.supplier_id:
            raise ValueError("contractor_id and supplier_id must differ.")
        if not isinstance(self.lines, tuple) or len(self.lines) == 0:
            raise ValueError("lines must be non-empty tuple.")
        for line in self.lines:
            if not isinstance(line, OrderLine):
                raise TypeError("lines must contain OrderLine instances.")
        if self.order_id is not None and not self.order_id.strip():
            raise ValueError("order_id must be non-empty when given.")
