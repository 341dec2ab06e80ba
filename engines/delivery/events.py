"""
Handover Delivery Engine — Event Types and Payload Builders
=============================================================
"""

from __future__ import annotations

from core.primitives.order import Order, OrderStatus


DELIVERY_DRIVER_ASSIGNED_V1 = "delivery.driver.assigned.v1"

DELIVERY_EVENT_TYPES = (
    DELIVERY_DRIVER_ASSIGNED_V1,
)


def build_driver_assigned_payload(order: Order, previous: OrderStatus) -> dict:
    delivery = order.delivery
    return {
        "order_id": order.order_id,
        "order_number": order.order_number,
        "contractor_id": order.contractor_id,
        "supplier_id": order.supplier_id,
        "driver_id": delivery.driver_id,
        "driver_name": delivery.driver_name,
        "vehicle_ref": delivery.vehicle_ref,
        "dispatched_at": delivery.dispatched_at.isoformat(),
        "planned_eta": delivery.planned_eta.isoformat(),
        "previous_status": previous.value,
        "status": order.status.value,
        "version": order.version,
    }
