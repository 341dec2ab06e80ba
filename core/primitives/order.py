"""
Handover Order Primitive — Orders, Lines and Delivery Artifacts
=================================================================
Immutable snapshots of a purchase order between a contractor and a
supplier, plus the delivery details and proof-of-delivery attached to
it during fulfilment.

RULES:
- Money is Decimal, never float
- Status only changes through a guarded engine transition
- proof_of_delivery is set together with COMPLETED and never cleared
- version starts at 1 and moves on every stored write

This file contains NO persistence logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class OrderStatus(Enum):
    """Order lifecycle status (see ORDER_WORKFLOW)."""
    NEW = "NEW"
    PROCESSING = "PROCESSING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


TERMINAL_ORDER_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
})


# ══════════════════════════════════════════════════════════════
# ORDER LINE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OrderLine:
    """One product line on an order, priced at checkout time."""
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal

    def __post_init__(self):
        if not self.product_id or not isinstance(self.product_id, str):
            raise ValueError("product_id must be a non-empty string.")
        if not isinstance(self.quantity, int) or isinstance(self.quantity, bool):
            raise ValueError("quantity must be an int.")
        if self.quantity <= 0:
            raise ValueError("quantity must be positive.")
        if not isinstance(self.unit_price, Decimal):
            raise TypeError("unit_price must be Decimal.")
        if self.unit_price < 0:
            raise ValueError("unit_price must not be negative.")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> OrderLine:
        return cls(
            product_id=data["product_id"],
            name=data.get("name", ""),
            quantity=int(data["quantity"]),
            unit_price=Decimal(str(data["unit_price"])),
        )


# ══════════════════════════════════════════════════════════════
# DELIVERY DETAILS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Coordinates:
    """WGS84 point."""
    lat: float
    lon: float

    def __post_init__(self):
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError("lat must be within [-90, 90].")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError("lon must be within [-180, 180].")

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, data: dict) -> Coordinates:
        return cls(lat=float(data["lat"]), lon=float(data["lon"]))


@dataclass(frozen=True)
class DeliveryDetails:
    """
    Driver assignment for an order out for delivery.

    ETA, progress and position are projected on read from these fields
    (engines.delivery.eta); they are never stored.
    """
    driver_id: str
    driver_name: str
    vehicle_ref: str
    start: Coordinates
    destination: Coordinates
    dispatched_at: datetime
    planned_duration_seconds: int

    def __post_init__(self):
        if not self.driver_id or not isinstance(self.driver_id, str):
            raise ValueError("driver_id must be a non-empty string.")
        if not isinstance(self.start, Coordinates):
            raise TypeError("start must be Coordinates.")
        if not isinstance(self.destination, Coordinates):
            raise TypeError("destination must be Coordinates.")
        if not isinstance(self.dispatched_at, datetime):
            raise TypeError("dispatched_at must be a datetime.")
        if self.planned_duration_seconds <= 0:
            raise ValueError("planned_duration_seconds must be positive.")

    @property
    def planned_eta(self) -> datetime:
        return self.dispatched_at + timedelta(
            seconds=self.planned_duration_seconds
        )

    def to_dict(self) -> dict:
        return {
            "driver_id": self.driver_id,
            "driver_name": self.driver_name,
            "vehicle_ref": self.vehicle_ref,
            "start": self.start.to_dict(),
            "destination": self.destination.to_dict(),
            "dispatched_at": self.dispatched_at.isoformat(),
            "planned_duration_seconds": self.planned_duration_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> DeliveryDetails:
        return cls(
            driver_id=data["driver_id"],
            driver_name=data.get("driver_name", ""),
            vehicle_ref=data.get("vehicle_ref", ""),
            start=Coordinates.from_dict(data["start"]),
            destination=Coordinates.from_dict(data["destination"]),
            dispatched_at=datetime.fromisoformat(data["dispatched_at"]),
            planned_duration_seconds=int(data["planned_duration_seconds"]),
        )


@dataclass(frozen=True)
class ProofOfDelivery:
    """
    Handover artifact captured by the driver.

    image_ref and signature_ref are opaque references into whatever
    media storage the caller uses. Both must be non-empty for delivery
    to complete; the engine checks that, not this constructor.
    """
    image_ref: str
    signature_ref: str
    captured_at: datetime

    @property
    def is_complete(self) -> bool:
        return bool(
            self.image_ref and self.image_ref.strip()
            and self.signature_ref and self.signature_ref.strip()
        )

    def to_dict(self) -> dict:
        return {
            "image_ref": self.image_ref,
            "signature_ref": self.signature_ref,
            "captured_at": self.captured_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ProofOfDelivery:
        return cls(
            image_ref=data["image_ref"],
            signature_ref=data["signature_ref"],
            captured_at=datetime.fromisoformat(data["captured_at"]),
        )


# ══════════════════════════════════════════════════════════════
# ORDER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Order:
    """
    A purchase order snapshot.

    Fields:
        order_id:          Stable identifier
        order_number:      Human-facing number shown to both parties
        contractor_id:     Buyer
        supplier_id:       Seller / logistics operator
        lines:             Ordered product lines
        total:             Sum of line totals (computed when omitted)
        status:            Lifecycle status
        created_at:        Checkout time
        updated_at:        Last stored write
        delivery:          Driver assignment, once dispatched
        proof_of_delivery: Handover artifact, once completed
        delivery_address:  Free-text drop-off address
        version:           Compare-and-set guard for stored writes
    """
    order_id: str
    order_number: str
    contractor_id: str
    supplier_id: str
    lines: Tuple[OrderLine, ...]
    status: OrderStatus
    created_at: datetime
    total: Optional[Decimal] = None
    updated_at: Optional[datetime] = None
    delivery: Optional[DeliveryDetails] = None
    proof_of_delivery: Optional[ProofOfDelivery] = None
    delivery_address: str = ""
    version: int = 1

    def __post_init__(self):
        if not self.order_id or not isinstance(self.order_id, str):
            raise ValueError("order_id must be a non-empty string.")
        if not self.contractor_id:
            raise ValueError("contractor_id must be non-empty.")
        if not self.supplier_id:
            raise ValueError("supplier_id must be non-empty.")
        if not isinstance(self.lines, tuple):
            raise TypeError("lines must be a tuple.")
        if not isinstance(self.status, OrderStatus):
            raise ValueError("status must be OrderStatus enum.")
        if self.version < 1:
            raise ValueError("version must be >= 1.")
        if (
            self.proof_of_delivery is not None
            and self.status != OrderStatus.COMPLETED
        ):
            raise ValueError(
                "proof_of_delivery may only be present on a COMPLETED order."
            )
        if self.total is None:
            object.__setattr__(
                self, "total",
                sum((line.line_total for line in self.lines), Decimal("0")),
            )
        if self.updated_at is None:
            object.__setattr__(self, "updated_at", self.created_at)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ORDER_STATUSES

    @property
    def driver_id(self) -> Optional[str]:
        return self.delivery.driver_id if self.delivery else None

    def involves(self, party_id: str) -> bool:
        return party_id in (self.contractor_id, self.supplier_id, self.driver_id)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "contractor_id": self.contractor_id,
            "supplier_id": self.supplier_id,
            "lines": [line.to_dict() for line in self.lines],
            "total": str(self.total),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "delivery": self.delivery.to_dict() if self.delivery else None,
            "proof_of_delivery": (
                self.proof_of_delivery.to_dict()
                if self.proof_of_delivery else None
            ),
            "delivery_address": self.delivery_address,
            "version": self.version,
        }
