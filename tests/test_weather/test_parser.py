"""Tests for weather parser."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from route_wx.models import Calm, FlightCategory, FromDegrees, Variable
from route_wx.weather.parser import WeatherParser

NOW = datetime(2026, 10, 22, 0, 0, tzinfo=timezone.utc)


class TestParseMetar:
    """Test METAR parsing."""

    def test_basic_metar(self):
        raw = "METAR LFPG 211230Z 24015G25KT 9999 FEW040 18/09 Q1015"
        obs = WeatherParser.parse_metar(raw, now=NOW)

        assert obs is not None
        assert obs.station == "LFPG"
        assert obs.wind == FromDegrees(degrees=240, speed=15, gust=25)
        assert obs.temperature_c == 18
        assert obs.dewpoint_c == 9
        assert obs.raw_text == raw
        assert not obs.is_special
        assert not obs.degraded

    def test_observation_time(self):
        obs = WeatherParser.parse_metar("METAR LFPG 211230Z 24015KT 9999 FEW040 18/09 Q1015", now=NOW)
        assert obs.observed_at == datetime(2026, 10, 21, 12, 30, tzinfo=timezone.utc)

    def test_observation_time_rolls_back_a_month(self):
        now = datetime(2026, 10, 2, 0, 0, tzinfo=timezone.utc)
        obs = WeatherParser.parse_metar("METAR LFPG 211230Z 24015KT 9999 FEW040 18/09 Q1015", now=now)
        assert obs.observed_at == datetime(2026, 9, 21, 12, 30, tzinfo=timezone.utc)

    def test_metar_visibility_meters(self):
        obs = WeatherParser.parse_metar("METAR EGLL 211250Z 27010KT 9999 SCT030 BKN045 15/08 Q1020", now=NOW)
        assert obs.visibility_sm is not None
        assert obs.visibility_sm > 6

    def test_visibility_statute_miles(self):
        obs = WeatherParser.parse_metar("METAR KJFK 191251Z 27010KT 10SM FEW250 20/10 A2992", now=NOW)
        assert obs.visibility_sm == pytest.approx(10.0)
        assert obs.flight_category == FlightCategory.VFR

    def test_visibility_plus_six_statute_miles(self):
        obs = WeatherParser.parse_metar("METAR KBOS 191254Z 24008KT P6SM SCT200 18/06 A3001", now=NOW)
        assert obs.visibility_sm == pytest.approx(6.0)
        assert obs.flight_category == FlightCategory.VFR

    def test_visibility_mixed_fraction(self):
        obs = WeatherParser.parse_metar("METAR KJFK 191251Z 27010KT 1 1/2SM BR OVC008 12/11 A2990", now=NOW)
        assert obs.visibility_sm == pytest.approx(1.5)
        assert obs.flight_category == FlightCategory.IFR

    def test_metar_ceiling_and_category(self):
        obs = WeatherParser.parse_metar("METAR KJFK 211200Z 18008KT 2SM BR OVC005 12/11 A2990", now=NOW)

        assert obs.ceiling_ft == 500
        assert obs.visibility_sm == pytest.approx(2.0)
        assert obs.flight_category == FlightCategory.IFR
        assert obs.present_weather == "BR"

    def test_flight_category_vfr(self):
        obs = WeatherParser.parse_metar("METAR LFPG 211230Z 24015KT 9999 FEW040 18/09 Q1015", now=NOW)
        assert obs.flight_category == FlightCategory.VFR
        assert obs.ceiling_ft is None

    def test_cavok(self):
        obs = WeatherParser.parse_metar("METAR LFPG 211230Z 24005KT CAVOK 20/10 Q1015", now=NOW)
        assert obs.flight_category == FlightCategory.VFR

    def test_speci_prefix(self):
        obs = WeatherParser.parse_metar("SPECI LFPG 211230Z 24015KT 9999 FEW040 18/09 Q1015", now=NOW)
        assert obs.is_special
        assert obs.station == "LFPG"

    def test_calm_wind(self):
        obs = WeatherParser.parse_metar("METAR LFPG 211230Z 00000KT 9999 FEW040 18/09 Q1015", now=NOW)
        assert obs.wind == Calm()
        assert obs.wind_speed == 0

    def test_variable_wind(self):
        obs = WeatherParser.parse_metar("METAR LFPG 211230Z VRB03KT 9999 FEW040 18/09 Q1015", now=NOW)
        assert isinstance(obs.wind, Variable)
        assert obs.wind_speed == 3

    def test_weather_conditions(self):
        obs = WeatherParser.parse_metar("METAR EGLL 211300Z 09012KT 3000 RA BKN008 OVC015 10/09 Q1008", now=NOW)
        assert "RA" in obs.present_weather_codes
        assert len(obs.cloud_layers) >= 2
        assert obs.ceiling_ft == 800

    def test_nil_metar_returns_none(self):
        assert WeatherParser.parse_metar("METAR LFPG 211230Z NIL") is None

    def test_empty_string_returns_none(self):
        assert WeatherParser.parse_metar("") is None


class TestNormalize:

    def test_valid_report(self):
        obs = WeatherParser.normalize("METAR LFPG 211230Z 24015KT 9999 FEW040 18/09 Q1015", now=NOW)
        assert obs is not None
        assert not obs.degraded

    def test_nil_and_empty_return_none(self):
        assert WeatherParser.normalize("   ") is None
        assert WeatherParser.normalize("METAR LFPG 211230Z NIL") is None

    def test_parse_failure_becomes_degraded_placeholder(self):
        raw = "SPECI KJFK 211230Z ???"
        with patch("route_wx.weather.parser.MetarParser") as parser_cls:
            parser_cls.return_value.parse.side_effect = ValueError("bad token")
            obs = WeatherParser.normalize(raw, now=NOW)

        assert obs is not None
        assert obs.degraded
        assert obs.station == "KJFK"
        assert obs.is_special
        assert obs.flight_category is None
        assert obs.raw_text == raw


class TestExtractVisibility:

    @staticmethod
    def parsed(distance, unit=None):
        return SimpleNamespace(cavok=False, visibility=SimpleNamespace(distance=distance, unit=unit))

    def test_separate_statute_mile_unit(self):
        assert WeatherParser._extract_visibility(self.parsed("2", "SM")) == pytest.approx(2.0)
        assert WeatherParser._extract_visibility(self.parsed("P6", "SM")) == pytest.approx(6.0)
        assert WeatherParser._extract_visibility(self.parsed("1 1/2", "SM")) == pytest.approx(1.5)

    def test_enum_unit(self):
        unit = SimpleNamespace(value="SM")
        assert WeatherParser._extract_visibility(self.parsed("10", unit)) == pytest.approx(10.0)

    def test_metric_units(self):
        assert WeatherParser._extract_visibility(self.parsed("3000", "m")) == pytest.approx(1.864113)
        assert WeatherParser._extract_visibility(self.parsed("> 10", "km")) == pytest.approx(6.21371)

    def test_suffix_without_unit(self):
        assert WeatherParser._extract_visibility(self.parsed("1/2SM")) == pytest.approx(0.5)
        assert WeatherParser._extract_visibility(self.parsed("> 10km")) == pytest.approx(6.21371)
        assert WeatherParser._extract_visibility(self.parsed("9999")) == pytest.approx(6.2130886)
