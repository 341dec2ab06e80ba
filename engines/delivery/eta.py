"""
Handover Delivery Engine — ETA Projection
===========================================
Pure projection of a delivery in flight. Nothing here is stored;
it is recomputed from DeliveryDetails and the current time on every
read.

    progress = clamp(elapsed / planned, 0, 1)
    position = lerp(start, destination, progress)
    eta      = now + (planned_eta - now) * (1 - progress)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from core.primitives.order import Coordinates, DeliveryDetails


@dataclass(frozen=True)
class DeliveryProjection:
    progress: float
    position: Coordinates
    eta: datetime

    @property
    def is_arrived(self) -> bool:
        return self.progress >= 1.0

    def to_dict(self) -> dict:
        return {
            "progress": self.progress,
            "position": self.position.to_dict(),
            "eta": self.eta.isoformat(),
        }


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def lerp(start: Coordinates, end: Coordinates, fraction: float) -> Coordinates:
    """Straight-line interpolation; good enough at city scale."""
    return Coordinates(
        lat=start.lat + (end.lat - start.lat) * fraction,
        lon=start.lon + (end.lon - start.lon) * fraction,
    )


def project_delivery(details: DeliveryDetails, now: datetime) -> DeliveryProjection:
    elapsed = (now - details.dispatched_at).total_seconds()
    progress = clamp(elapsed / details.planned_duration_seconds)
    return DeliveryProjection(
        progress=progress,
        position=lerp(details.start, details.destination, progress),
        eta=now + (details.planned_eta - now) * (1 - progress),
    )
