"""
Handover Orders Engine — Event Types and Payload Builders
===========================================================
Orders owns: creation → fulfilment advances → delivery completion,
plus settlement of a resolved dispute back onto the order.

Dispute opening flips the order to DISPUTED without an orders event;
the disputes engine announces the combined change.
"""

from __future__ import annotations

from typing import Optional

from core.primitives.order import Order, OrderStatus


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

ORDERS_ORDER_CREATED_V1 = "orders.order.created.v1"
ORDERS_ORDER_STATUS_CHANGED_V1 = "orders.order.status_changed.v1"
ORDERS_DELIVERY_COMPLETED_V1 = "orders.delivery.completed.v1"
ORDERS_DISPUTE_SETTLED_V1 = "orders.dispute.settled.v1"

ORDERS_EVENT_TYPES = (
    ORDERS_ORDER_CREATED_V1,
    ORDERS_ORDER_STATUS_CHANGED_V1,
    ORDERS_DELIVERY_COMPLETED_V1,
    ORDERS_DISPUTE_SETTLED_V1,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def _base_payload(order: Order) -> dict:
    return {
        "order_id": order.order_id,
        "order_number": order.order_number,
        "contractor_id": order.contractor_id,
        "supplier_id": order.supplier_id,
        "driver_id": order.driver_id,
        "status": order.status.value,
        "version": order.version,
    }


def build_order_created_payload(order: Order) -> dict:
    payload = _base_payload(order)
    payload.update({
        "lines": [line.to_dict() for line in order.lines],
        "total": str(order.total),
        "delivery_address": order.delivery_address,
        "created_at": order.created_at.isoformat(),
    })
    return payload


def build_status_changed_payload(order: Order, previous: OrderStatus) -> dict:
    payload = _base_payload(order)
    payload.update({
        "previous_status": previous.value,
        "changed_at": order.updated_at.isoformat(),
    })
    return payload


def build_delivery_completed_payload(order: Order, previous: OrderStatus) -> dict:
    payload = build_status_changed_payload(order, previous)
    payload["proof_of_delivery"] = order.proof_of_delivery.to_dict()
    return payload


def build_dispute_settled_payload(
    order: Order,
    previous: OrderStatus,
    dispute_id: str,
    outcome: str,
    note: Optional[str] = None,
) -> dict:
    payload = build_status_changed_payload(order, previous)
    payload.update({
        "dispute_id": dispute_id,
        "outcome": outcome,
        "note": note or "",
    })
    return payload
