"""
Distance calculation using the Haversine formula.

Assumption
----------
Shipments are tracked with great-circle (Haversine) distance rather than
road distance from a routing engine.  The figures shown to customers are
estimates, and the whole module stays free of external services.

Inputs are not range-checked here; request schemas validate coordinates
before they are stored.  Out-of-range values still produce a number
(NaN when the coordinate difference overflows a float).

Complexity: O(1) per leg, O(n) per route.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from .entities import GeoPoint

EARTH_RADIUS_KM = 6_371.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    if not (math.isfinite(dlat) and math.isfinite(dlng)):
        # Differences of huge coordinates overflow; sin(inf) would raise.
        return math.nan

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    # Rounding (or out-of-range input) can push h outside [0, 1].
    h = min(max(h, 0.0), 1.0)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def point_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Distance in km between two ``GeoPoint`` values."""
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def route_distance(points: Sequence[GeoPoint]) -> float:
    """Sum of the legs between consecutive points; 0 for fewer than two."""
    total = 0.0
    for j in range(len(points) - 1):
        total += point_distance(points[j], points[j + 1])
    return total
