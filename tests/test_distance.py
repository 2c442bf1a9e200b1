"""Unit tests for the Haversine distance engine."""

import math

import pytest

from src.domain.distance import (
    EARTH_RADIUS_KM,
    haversine_km,
    point_distance,
    route_distance,
)
from src.domain.entities import GeoPoint

ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180  # ~111.195 km

MUMBAI = GeoPoint(longitude=72.8777, latitude=19.0760)
DELHI = GeoPoint(longitude=77.2090, latitude=28.6139)
PUNE = GeoPoint(longitude=73.8567, latitude=18.5204)


class TestPointDistance:
    def test_same_point_is_zero(self):
        assert point_distance(MUMBAI, MUMBAI) == 0.0

    def test_symmetric(self):
        assert point_distance(MUMBAI, DELHI) == pytest.approx(
            point_distance(DELHI, MUMBAI), abs=1e-9
        )

    def test_one_degree_of_latitude(self):
        d = point_distance(GeoPoint(0, 0), GeoPoint(0, 1))
        assert d == pytest.approx(ONE_DEGREE_KM, rel=1e-9)
        assert 111.1 < d < 111.3

    def test_antipodal_points_are_half_the_circumference(self):
        d = point_distance(GeoPoint(0, 0), GeoPoint(180, 0))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)
        assert d == pytest.approx(20015.1, abs=0.1)

    def test_known_city_pair(self):
        # Mumbai -> Pune is roughly 120 km as the crow flies
        assert 110 < point_distance(MUMBAI, PUNE) < 130

    def test_triangle_inequality(self):
        direct = point_distance(MUMBAI, DELHI)
        via_pune = point_distance(MUMBAI, PUNE) + point_distance(PUNE, DELHI)
        assert direct <= via_pune + 1e-9

    def test_argument_order_matches_lat_lng_helper(self):
        assert point_distance(MUMBAI, DELHI) == haversine_km(
            MUMBAI.latitude, MUMBAI.longitude, DELHI.latitude, DELHI.longitude
        )

    def test_out_of_range_input_still_returns_a_number(self):
        d = point_distance(GeoPoint(400, 95), GeoPoint(-500, -120))
        assert isinstance(d, float)
        assert math.isfinite(d)
        assert d >= 0

    def test_overflowing_coordinate_difference_gives_nan(self):
        d = point_distance(GeoPoint(0, 1e308), GeoPoint(0, -1e308))
        assert math.isnan(d)


class TestRouteDistance:
    def test_empty_route_is_zero(self):
        assert route_distance([]) == 0.0

    def test_single_point_is_zero(self):
        assert route_distance([MUMBAI]) == 0.0

    def test_two_points_equal_point_distance(self):
        assert route_distance([MUMBAI, DELHI]) == point_distance(MUMBAI, DELHI)

    def test_additive_over_consecutive_legs(self):
        expected = point_distance(MUMBAI, PUNE) + point_distance(PUNE, DELHI)
        assert route_distance([MUMBAI, PUNE, DELHI]) == pytest.approx(expected)

    def test_accepts_tuples(self):
        assert route_distance((MUMBAI, PUNE)) == point_distance(MUMBAI, PUNE)

    def test_collinear_meridian_route_matches_direct(self):
        points = [GeoPoint(0, 0), GeoPoint(0, 0.25), GeoPoint(0, 0.75), GeoPoint(0, 1)]
        assert route_distance(points) == pytest.approx(ONE_DEGREE_KM, rel=1e-9)
