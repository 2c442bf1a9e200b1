"""
Domain value objects for route progress.

All types here are frozen dataclasses: the engine receives a snapshot of a
shipment, computes on it, and never mutates or keeps it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import SHIPMENT_TRANSITIONS, ShipmentStatus


class InsufficientRouteData(Exception):
    """Raised when a distance breakdown is requested without required points."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            "Cannot compute route distance, missing: " + ", ".join(missing)
        )


class InvalidStateTransition(Exception):
    """Raised when a shipment status change violates the state machine."""


def check_transition(current: ShipmentStatus, new: ShipmentStatus) -> None:
    """Raise ``InvalidStateTransition`` unless *current* -> *new* is legal."""
    allowed = SHIPMENT_TRANSITIONS.get(current, set())
    if new not in allowed:
        raise InvalidStateTransition(
            f"Cannot transition from {current.value} to {new.value}"
        )


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    longitude: float
    latitude: float


@dataclass(frozen=True)
class Checkpoint:
    name: str
    location: GeoPoint
    address: str = ""
    reached: bool = False
    estimated_arrival: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class RouteSnapshot:
    origin: Optional[GeoPoint]
    destination: Optional[GeoPoint]
    current_location: Optional[GeoPoint] = None
    checkpoints: tuple[Checkpoint, ...] = ()
    status: ShipmentStatus = ShipmentStatus.PENDING

    def missing_points(self) -> list[str]:
        """Names of the mandatory route points that are absent."""
        fields = (
            ("origin", self.origin),
            ("destination", self.destination),
            ("current_location", self.current_location),
        )
        return [name for name, point in fields if point is None]


@dataclass(frozen=True)
class DistanceResult:
    total_distance_km: float
    distance_traveled_km: float
    remaining_distance_km: float

    def rounded(self, ndigits: int = 2) -> DistanceResult:
        return DistanceResult(
            total_distance_km=round(self.total_distance_km, ndigits),
            distance_traveled_km=round(self.distance_traveled_km, ndigits),
            remaining_distance_km=round(self.remaining_distance_km, ndigits),
        )
