"""
Delivery Progress Estimator
===========================

Percentage
----------
progress = min(round(dist(origin, current) / dist(origin, destination) x 100), 95)

* The percentage uses the **direct** origin -> destination distance, never
  the checkpoint route, so a shipment that leaves the planned path does not
  see its percentage jump backwards.
* Position alone never reaches 100: it is capped at ``MAX_PROGRESS_IN_TRANSIT``
  and only an explicit ``delivered`` status yields 100.
* Missing points or a zero-length trip give 0 instead of an error.

Distance breakdown
------------------
total     = route(origin, checkpoints..., destination)
traveled  = route(origin, reached checkpoints..., current)
remaining = max(total - traveled, 0)

Unlike the percentage, the breakdown refuses to guess: a snapshot without
origin, destination or current location raises ``InsufficientRouteData``.

Complexity: O(1) for the percentage, O(n log n) in checkpoints for the
breakdown (ordering dominates).
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from .distance import point_distance, route_distance
from .entities import DistanceResult, InsufficientRouteData, RouteSnapshot
from .enums import ShipmentStatus
from .route import planned_route, traveled_route

logger = logging.getLogger(__name__)

MAX_PROGRESS_IN_TRANSIT = 95
DELIVERED_PROGRESS = 100


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_progress(snapshot: RouteSnapshot) -> int:
    """Bounded delivery percentage in [0, 100]; never raises."""
    if snapshot.missing_points():
        return 0

    if snapshot.status == ShipmentStatus.DELIVERED:
        return DELIVERED_PROGRESS

    total = point_distance(snapshot.origin, snapshot.destination)
    if total == 0:
        return 0

    traveled = point_distance(snapshot.origin, snapshot.current_location)
    ratio = traveled / total
    if not math.isfinite(ratio):
        logger.debug("Non-finite progress ratio for snapshot %r", snapshot)
        return 0

    return min(_round_half_up(ratio * 100), MAX_PROGRESS_IN_TRANSIT)


def compute_distance_breakdown(snapshot: RouteSnapshot) -> DistanceResult:
    """Total / traveled / remaining km along the checkpoint route."""
    missing = snapshot.missing_points()
    if missing:
        raise InsufficientRouteData(missing)

    total = route_distance(planned_route(snapshot))
    traveled = route_distance(traveled_route(snapshot))
    return DistanceResult(
        total_distance_km=total,
        distance_traveled_km=traveled,
        remaining_distance_km=max(total - traveled, 0.0),
    )


def estimate_eta(
    breakdown: DistanceResult,
    status: ShipmentStatus,
    average_speed_kmh: float,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    Arrival estimate from the remaining distance at a constant speed.

    Returns ``None`` for delivered shipments.
    """
    if average_speed_kmh <= 0:
        raise ValueError("average_speed_kmh must be positive")
    if status == ShipmentStatus.DELIVERED:
        return None

    now = now or datetime.now(timezone.utc)
    hours = breakdown.remaining_distance_km / average_speed_kmh
    return now + timedelta(hours=hours)
