"""Unit tests for the delivery progress estimator."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from src.domain.distance import EARTH_RADIUS_KM, point_distance
from src.domain.entities import (
    Checkpoint,
    DistanceResult,
    GeoPoint,
    InsufficientRouteData,
    RouteSnapshot,
)
from src.domain.enums import ShipmentStatus
from src.domain.progress import (
    MAX_PROGRESS_IN_TRANSIT,
    compute_distance_breakdown,
    compute_progress,
    estimate_eta,
)

ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180
T0 = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


def _snapshot(origin=(0, 0), destination=(0, 1), current=(0, 0.5), **kwargs):
    return RouteSnapshot(
        origin=GeoPoint(*origin) if origin else None,
        destination=GeoPoint(*destination) if destination else None,
        current_location=GeoPoint(*current) if current else None,
        **kwargs,
    )


class TestComputeProgress:
    def test_halfway_is_fifty_percent(self):
        assert compute_progress(_snapshot(status=ShipmentStatus.IN_TRANSIT)) == 50

    def test_at_origin_is_zero(self):
        assert compute_progress(_snapshot(current=(0, 0))) == 0

    @pytest.mark.parametrize("missing", ["origin", "destination", "current"])
    def test_missing_point_gives_zero(self, missing):
        assert compute_progress(_snapshot(**{missing: None})) == 0

    def test_missing_point_wins_over_delivered(self):
        snap = _snapshot(current=None, status=ShipmentStatus.DELIVERED)
        assert compute_progress(snap) == 0

    @pytest.mark.parametrize("current", [(0, 0), (0, 0.5), (50, 50)])
    def test_delivered_is_always_100(self, current):
        snap = _snapshot(current=current, status=ShipmentStatus.DELIVERED)
        assert compute_progress(snap) == 100

    def test_capped_at_95_when_past_destination(self):
        # GPS noise: current is further from origin than the destination
        snap = _snapshot(
            destination=(1, 1), current=(2, 2), status=ShipmentStatus.IN_TRANSIT
        )
        assert compute_progress(snap) == MAX_PROGRESS_IN_TRANSIT == 95

    def test_capped_at_95_at_destination(self):
        snap = _snapshot(current=(0, 1), status=ShipmentStatus.OUT_FOR_DELIVERY)
        assert compute_progress(snap) == 95

    def test_zero_length_trip_is_zero(self):
        assert compute_progress(_snapshot(destination=(0, 0), current=(3, 3))) == 0

    @pytest.mark.parametrize(
        "status",
        [ShipmentStatus.PENDING, ShipmentStatus.EXCEPTION, ShipmentStatus.IN_TRANSIT],
    )
    def test_non_delivered_statuses_use_distance(self, status):
        assert compute_progress(_snapshot(current=(0, 0.3), status=status)) == 30

    def test_checkpoints_do_not_affect_percentage(self):
        detour = (
            Checkpoint("detour", GeoPoint(5, 0.2), reached=True),
        )
        with_cps = _snapshot(checkpoints=detour, status=ShipmentStatus.IN_TRANSIT)
        without = _snapshot(status=ShipmentStatus.IN_TRANSIT)
        assert compute_progress(with_cps) == compute_progress(without) == 50

    def test_result_is_int(self):
        assert isinstance(compute_progress(_snapshot()), int)

    def test_overflowing_coordinates_give_zero(self):
        snap = _snapshot(
            origin=(0, -1e308), destination=(0, 1), current=(0, 1e308)
        )
        assert compute_progress(snap) == 0


class TestDistanceBreakdown:
    def test_no_checkpoints(self):
        result = compute_distance_breakdown(_snapshot())
        assert result.total_distance_km == pytest.approx(ONE_DEGREE_KM)
        assert result.distance_traveled_km == pytest.approx(ONE_DEGREE_KM / 2)
        assert result.remaining_distance_km == pytest.approx(ONE_DEGREE_KM / 2)

    def test_halfway_example(self):
        result = compute_distance_breakdown(_snapshot())
        assert result.total_distance_km == pytest.approx(111.2, abs=0.05)
        assert result.distance_traveled_km == pytest.approx(55.6, abs=0.05)

    def test_reached_checkpoints_summed_in_arrival_order(self):
        # Inserted out of order; estimated arrival puts "a" before "b".
        b = Checkpoint("b", GeoPoint(0, 2), reached=True, estimated_arrival=T0 + timedelta(hours=2))
        a = Checkpoint("a", GeoPoint(0, 1), reached=True, estimated_arrival=T0 + timedelta(hours=1))
        snap = _snapshot(destination=(0, 3), current=(0, 2), checkpoints=(b, a))

        result = compute_distance_breakdown(snap)

        # origin -> a -> b -> current = 2 degrees; insertion order would be 4
        assert result.distance_traveled_km == pytest.approx(2 * ONE_DEGREE_KM)
        assert result.total_distance_km == pytest.approx(3 * ONE_DEGREE_KM)
        assert result.remaining_distance_km == pytest.approx(ONE_DEGREE_KM)

    def test_unreached_checkpoints_count_only_in_total(self):
        cp = Checkpoint("side", GeoPoint(1, 0.5), reached=False)
        snap = _snapshot(current=(0, 0.5), checkpoints=(cp,))
        result = compute_distance_breakdown(snap)

        o, side, d = GeoPoint(0, 0), GeoPoint(1, 0.5), GeoPoint(0, 1)
        assert result.total_distance_km == pytest.approx(
            point_distance(o, side) + point_distance(side, d)
        )
        assert result.distance_traveled_km == pytest.approx(ONE_DEGREE_KM / 2)

    def test_remaining_is_clamped_at_zero(self):
        # Traveled via a long detour, longer than the planned route
        detour = Checkpoint("detour", GeoPoint(10, 0), reached=True)
        snap = _snapshot(current=(0, 2), checkpoints=(detour,))
        result = compute_distance_breakdown(snap)
        assert result.distance_traveled_km > 0
        assert result.remaining_distance_km == 0.0

    def test_coincident_points_give_zeros(self):
        result = compute_distance_breakdown(
            _snapshot(origin=(5, 5), destination=(5, 5), current=(5, 5))
        )
        assert result == DistanceResult(0.0, 0.0, 0.0)

    def test_missing_current_location_raises(self):
        with pytest.raises(InsufficientRouteData) as excinfo:
            compute_distance_breakdown(_snapshot(current=None))
        assert excinfo.value.missing == ["current_location"]
        assert "current_location" in str(excinfo.value)

    def test_missing_all_points_lists_all(self):
        snap = RouteSnapshot(origin=None, destination=None)
        with pytest.raises(InsufficientRouteData) as excinfo:
            compute_distance_breakdown(snap)
        assert excinfo.value.missing == ["origin", "destination", "current_location"]

    def test_breakdown_ignores_status(self):
        delivered = _snapshot(status=ShipmentStatus.DELIVERED)
        in_transit = _snapshot(status=ShipmentStatus.IN_TRANSIT)
        assert compute_distance_breakdown(delivered) == compute_distance_breakdown(
            in_transit
        )

    def test_rounded(self):
        result = DistanceResult(111.19492, 55.59746, 55.59746).rounded(2)
        assert result == DistanceResult(111.19, 55.6, 55.6)


class TestEstimateEta:
    def test_constant_speed(self):
        breakdown = DistanceResult(300.0, 180.0, 120.0)
        eta = estimate_eta(breakdown, ShipmentStatus.IN_TRANSIT, 60.0, now=T0)
        assert eta == T0 + timedelta(hours=2)

    def test_delivered_has_no_eta(self):
        breakdown = DistanceResult(300.0, 300.0, 0.0)
        assert estimate_eta(breakdown, ShipmentStatus.DELIVERED, 60.0, now=T0) is None

    def test_defaults_to_now(self):
        eta = estimate_eta(DistanceResult(1, 0, 0), ShipmentStatus.PENDING, 60.0)
        assert eta.tzinfo is not None

    def test_rejects_non_positive_speed(self):
        with pytest.raises(ValueError):
            estimate_eta(DistanceResult(1, 0, 1), ShipmentStatus.IN_TRANSIT, 0)
