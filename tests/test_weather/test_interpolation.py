"""Tests for ghost station interpolation."""

from unittest.mock import MagicMock

import pytest

from route_wx.models import Calm, Coordinate, FromDegrees, InterpolatedObservation, Variable
from route_wx.weather.analysis import WeatherAnalyzer
from route_wx.weather.interpolation import (
    GhostStationService,
    SpatialInterpolator,
    average_wind_direction,
    idw,
)


def circular_difference(a, b):
    d = abs(a - b) % 360
    return min(d, 360 - d)


class TestIdw:

    def test_closer_to_nearer_neighbour(self):
        value = idw([(10.0, 5.0), (20.0, 10.0)])
        assert value == pytest.approx(12.0)
        assert abs(value - 10.0) < abs(15.0 - 10.0)

    def test_missing_values_ignored(self):
        assert idw([(None, 1.0), (7.0, 3.0)]) == pytest.approx(7.0)
        assert idw([(None, 1.0)]) is None
        assert idw([]) is None

    def test_colocated_station_dominates(self):
        value = idw([(10.0, 0.0), (20.0, 10.0)])
        assert value == pytest.approx(10.0, abs=0.01)


class TestAverageWindDirection:

    def test_across_north(self):
        direction = average_wind_direction([
            (FromDegrees(degrees=350, speed=10), 5.0),
            (FromDegrees(degrees=10, speed=10), 5.0),
        ])
        assert circular_difference(direction, 0) < 1e-6

    def test_weighted_by_speed(self):
        direction = average_wind_direction([
            (FromDegrees(degrees=0, speed=30), 5.0),
            (FromDegrees(degrees=90, speed=5), 5.0),
        ])
        assert 0 < direction < 45

    def test_no_direction(self):
        assert average_wind_direction([(Calm(), 5.0), (Variable(speed=4), 3.0)]) is None


class TestSpatialInterpolator:

    def _target(self):
        # Between La Guardia and Islip
        return Coordinate(latitude=40.79, longitude=-73.45)

    def test_fewer_than_two_neighbours(self, stations, make_obs):
        lga = stations.get("KLGA")
        interpolator = SpatialInterpolator()
        assert interpolator.interpolate(self._target(), []) is None
        assert interpolator.interpolate(self._target(), [(lga, make_obs("KLGA"))]) is None

    def test_degraded_neighbours_not_usable(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA")),
            (stations.get("KISP"), make_obs("KISP", degraded=True)),
        ]
        assert SpatialInterpolator().interpolate(self._target(), pairs) is None

    def test_interpolated_values(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", temperature_c=20.0, visibility_sm=10.0)),
            (stations.get("KISP"), make_obs("KISP", temperature_c=10.0, visibility_sm=4.0)),
        ]
        ghost = SpatialInterpolator().interpolate(self._target(), pairs, identifier="KXYZ")

        assert isinstance(ghost, InterpolatedObservation)
        assert ghost.station == "KXYZ"
        assert ghost.is_synthetic
        assert 10.0 < ghost.temperature_c < 20.0
        assert {s.identifier for s in ghost.source_stations} == {"KLGA", "KISP"}
        assert ghost.raw_text.startswith("[ESTIMATED]")

    def test_category_rederived(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", visibility_sm=10.0, layers=[("OVC", 800)])),
            (stations.get("KISP"), make_obs("KISP", visibility_sm=1.5)),
        ]
        ghost = SpatialInterpolator().interpolate(self._target(), pairs)
        assert ghost.flight_category == WeatherAnalyzer.flight_category(ghost.ceiling_ft, ghost.visibility_sm)

    def test_clouds_from_nearest_station(self, stations, make_obs):
        target = stations.get("KISP").coordinate
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", layers=[("OVC", 800)])),
            (stations.get("KISP"), make_obs("KISP", layers=[("FEW", 4000), ("BKN", 6000)])),
        ]
        ghost = SpatialInterpolator().interpolate(target, pairs)
        assert [layer.cover for layer in ghost.cloud_layers] == ["FEW", "BKN"]
        assert ghost.ceiling_ft == 6000

    def test_no_gust_noise(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", wind=FromDegrees(270, 10, gust=12))),
            (stations.get("KISP"), make_obs("KISP", wind=FromDegrees(270, 10))),
        ]
        ghost = SpatialInterpolator().interpolate(self._target(), pairs)
        assert ghost.wind_gust is None

    def test_significant_gust_kept(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", wind=FromDegrees(270, 10, gust=25))),
            (stations.get("KISP"), make_obs("KISP", wind=FromDegrees(270, 10, gust=25))),
        ]
        ghost = SpatialInterpolator().interpolate(self._target(), pairs)
        assert ghost.wind == FromDegrees(degrees=270, speed=10, gust=25)

    def test_calm_when_all_calm(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", wind=Calm())),
            (stations.get("KISP"), make_obs("KISP", wind=Calm())),
        ]
        assert SpatialInterpolator().interpolate(self._target(), pairs).wind == Calm()

    def test_variable_when_all_variable(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", wind=Variable(speed=6))),
            (stations.get("KISP"), make_obs("KISP", wind=Variable(speed=6))),
        ]
        assert SpatialInterpolator().interpolate(self._target(), pairs).wind == Variable(speed=6)

    def test_variable_excluded_from_direction(self, stations, make_obs):
        pairs = [
            (stations.get("KLGA"), make_obs("KLGA", wind=FromDegrees(90, 10))),
            (stations.get("KISP"), make_obs("KISP", wind=Variable(speed=15))),
        ]
        wind = SpatialInterpolator().interpolate(self._target(), pairs).wind
        assert isinstance(wind, FromDegrees)
        assert wind.degrees == 90
        assert 10 <= wind.speed <= 15

    def test_confidence(self, stations, make_obs):
        target = self._target()
        lga = stations.get("KLGA")
        isp = stations.get("KISP")
        pairs = [(lga, make_obs("KLGA")), (isp, make_obs("KISP"))]

        ghost = SpatialInterpolator().interpolate(target, pairs)

        mean = (target.distance_to(lga.coordinate) + target.distance_to(isp.coordinate)) / 2
        assert ghost.confidence == pytest.approx(max(0.0, 1 - mean / 60))
        assert 0.0 <= ghost.confidence <= 1.0

    def test_confidence_clamped_for_far_sources(self, stations, make_obs):
        target = Coordinate(latitude=44.5, longitude=-68.0)
        pairs = [
            (stations.get("KBOS"), make_obs("KBOS")),
            (stations.get("KALB"), make_obs("KALB")),
        ]
        ghost = SpatialInterpolator().interpolate(target, pairs)
        assert ghost.confidence == 0.0

    def test_max_sources_keeps_nearest(self, stations, make_obs):
        target = stations.get("KJFK").coordinate
        pairs = [(stations.get(i), make_obs(i)) for i in ("KBOS", "KLGA", "KISP")]
        ghost = SpatialInterpolator(max_sources=2).interpolate(target, pairs)
        assert [s.identifier for s in ghost.source_stations] == ["KLGA", "KISP"]

    def test_invalid_max_sources(self):
        with pytest.raises(ValueError):
            SpatialInterpolator(max_sources=1)


class TestGhostStationService:

    def test_estimate(self, stations, make_obs):
        source = MagicMock()
        source.fetch_latest.return_value = {
            "KLGA": make_obs("KLGA"),
            "KBDR": make_obs("KBDR"),
        }
        service = GhostStationService(stations, source=source)

        ghost = service.estimate("kjfk")

        requested = source.fetch_latest.call_args[0][0]
        assert "KJFK" not in requested
        assert set(requested) == {"KLGA", "KISP", "KBDR"}
        assert ghost.station == "KJFK"
        assert {s.identifier for s in ghost.source_stations} == {"KLGA", "KBDR"}

    def test_unknown_station(self, stations):
        source = MagicMock()
        assert GhostStationService(stations, source=source).estimate("ZZZZ") is None
        source.fetch_latest.assert_not_called()

    def test_single_reporting_neighbour(self, stations, make_obs):
        source = MagicMock()
        source.fetch_latest.return_value = {"KLGA": make_obs("KLGA")}
        assert GhostStationService(stations, source=source).estimate("KJFK") is None
