"""
Route assembly
==============

Builds the ordered point sequences the distance engine measures.

Checkpoint ordering
-------------------
Checkpoints are sorted ascending by ``estimated_arrival`` with a stable
sort.  The comparator reports a tie whenever *either* side has no
timestamp, so an undated checkpoint never moves relative to its
neighbours.  This is a weak ordering: with a mix of dated and undated
checkpoints the result depends on insertion order.  When no checkpoint is
dated the insertion order is kept as-is.

Complexity: O(n log n) for ordering, O(n) for everything else.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from functools import cmp_to_key

from .distance import point_distance
from .entities import Checkpoint, GeoPoint, RouteSnapshot


def _utc(value: datetime) -> datetime:
    # Naive timestamps (e.g. read back from SQLite) are taken as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _compare_arrival(a: Checkpoint, b: Checkpoint) -> int:
    if a.estimated_arrival is None or b.estimated_arrival is None:
        return 0
    left, right = _utc(a.estimated_arrival), _utc(b.estimated_arrival)
    return (left > right) - (left < right)


def order_checkpoints(checkpoints: Iterable[Checkpoint]) -> list[Checkpoint]:
    """Return checkpoints in route order (see module docstring)."""
    return sorted(checkpoints, key=cmp_to_key(_compare_arrival))


def planned_route(snapshot: RouteSnapshot) -> list[GeoPoint]:
    """origin -> every checkpoint in route order -> destination."""
    return [
        snapshot.origin,
        *(cp.location for cp in order_checkpoints(snapshot.checkpoints)),
        snapshot.destination,
    ]


def traveled_route(snapshot: RouteSnapshot) -> list[GeoPoint]:
    """origin -> reached checkpoints in route order -> current location."""
    return [
        snapshot.origin,
        *(
            cp.location
            for cp in order_checkpoints(snapshot.checkpoints)
            if cp.reached
        ),
        snapshot.current_location,
    ]


def checkpoints_within(
    checkpoints: Sequence[Checkpoint], location: GeoPoint, radius_km: float
) -> list[int]:
    """
    Indices of the not-yet-reached checkpoints lying within *radius_km* of
    *location*.  Used to flag arrivals when a new position is reported.
    """
    return [
        i
        for i, cp in enumerate(checkpoints)
        if not cp.reached and point_distance(cp.location, location) <= radius_km
    ]
