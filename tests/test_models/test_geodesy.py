"""Tests for geodesy primitives."""

import pytest

from route_wx.geodesy import (
    EARTH_RADIUS_NM,
    great_circle_distance,
    initial_bearing,
    point_to_segment_distance,
)
from route_wx.models import Coordinate

JFK = Coordinate(latitude=40.6398, longitude=-73.7789)
BOS = Coordinate(latitude=42.3656, longitude=-71.0096)
LHR = Coordinate(latitude=51.4700, longitude=-0.4543)


class TestGreatCircleDistance:

    def test_symmetric(self):
        for a, b in [(JFK, BOS), (JFK, LHR), (BOS, LHR)]:
            assert great_circle_distance(a, b) == pytest.approx(great_circle_distance(b, a))

    def test_zero_for_same_point(self):
        assert great_circle_distance(JFK, JFK) == 0
        assert great_circle_distance(LHR, LHR) == 0

    def test_jfk_bos(self):
        assert great_circle_distance(JFK, BOS) == pytest.approx(163, abs=2)

    def test_one_degree_of_latitude(self):
        a = Coordinate(latitude=0, longitude=0)
        b = Coordinate(latitude=1, longitude=0)
        assert great_circle_distance(a, b) == pytest.approx(EARTH_RADIUS_NM * 3.141592653589793 / 180)

    def test_coordinate_method(self):
        assert JFK.distance_to(BOS) == great_circle_distance(JFK, BOS)


class TestInitialBearing:

    def test_north(self):
        a = Coordinate(latitude=0, longitude=0)
        b = Coordinate(latitude=1, longitude=0)
        assert initial_bearing(a, b) == pytest.approx(0)

    def test_east_on_equator(self):
        a = Coordinate(latitude=0, longitude=0)
        b = Coordinate(latitude=0, longitude=1)
        assert initial_bearing(a, b) == pytest.approx(90)

    def test_west_is_in_range(self):
        a = Coordinate(latitude=0, longitude=1)
        b = Coordinate(latitude=0, longitude=0)
        bearing = initial_bearing(a, b)
        assert 0 <= bearing < 360
        assert bearing == pytest.approx(270)

    def test_jfk_to_bos_is_north_east(self):
        assert 45 < JFK.bearing_to(BOS) < 58


class TestPointToSegmentDistance:

    A = Coordinate(latitude=0, longitude=0)
    B = Coordinate(latitude=1, longitude=0)

    def test_perpendicular_foot_inside_segment(self):
        p = Coordinate(latitude=0.5, longitude=0.5)
        assert point_to_segment_distance(p, self.A, self.B) == pytest.approx(30.0, rel=1e-3)

    def test_point_on_segment(self):
        p = Coordinate(latitude=0.25, longitude=0)
        assert point_to_segment_distance(p, self.A, self.B) == pytest.approx(0.0, abs=1e-9)

    def test_foot_beyond_end_uses_nearer_endpoint(self):
        p = Coordinate(latitude=2, longitude=0)
        expected = great_circle_distance(p, self.B)
        assert point_to_segment_distance(p, self.A, self.B) == pytest.approx(expected, rel=1e-3)

    def test_foot_before_start_uses_nearer_endpoint(self):
        p = Coordinate(latitude=-0.5, longitude=0.1)
        expected = great_circle_distance(p, self.A)
        assert point_to_segment_distance(p, self.A, self.B) == pytest.approx(expected, rel=1e-3)

    def test_degenerate_segment(self):
        p = Coordinate(latitude=1, longitude=0)
        assert point_to_segment_distance(p, self.A, self.A) == pytest.approx(great_circle_distance(p, self.A))

    def test_coordinate_method(self):
        p = Coordinate(latitude=0.5, longitude=0.5)
        assert p.distance_to_segment(self.A, self.B) == pytest.approx(30.0, rel=1e-3)


class TestCoordinate:

    def test_latitude_range(self):
        with pytest.raises(ValueError):
            Coordinate(latitude=91, longitude=0)

    def test_longitude_range(self):
        with pytest.raises(ValueError):
            Coordinate(latitude=0, longitude=-181)

    def test_dict_round_trip(self):
        assert Coordinate.from_dict(JFK.to_dict()) == JFK
