import pytest
from datetime import datetime, timezone
from pathlib import Path

from route_wx.models import Coordinate, StationRecord, WeatherObservation, FromDegrees, CloudLayer
from route_wx.stations import StationTable
from route_wx.weather.analysis import WeatherAnalyzer

# North east US stations, real positions
STATIONS = [
    ("KJFK", 40.6398, -73.7789, "John F Kennedy International Airport", ("JFK",)),
    ("KLGA", 40.7772, -73.8726, "La Guardia Airport", ("LGA",)),
    ("KISP", 40.7952, -73.1002, "Long Island Mac Arthur Airport", ("ISP",)),
    ("KBDR", 41.1635, -73.1262, "Igor I Sikorsky Memorial Airport", ("BDR",)),
    ("KPVD", 41.7240, -71.4282, "Theodore Francis Green State Airport", ("PVD",)),
    ("KBOS", 42.3656, -71.0096, "General Edward Lawrence Logan International Airport", ("BOS",)),
    ("KALB", 42.7483, -73.8017, "Albany International Airport", ("ALB",)),
]

AIRPORTS_CSV = """\
"id","ident","type","name","latitude_deg","longitude_deg","elevation_ft","continent","iso_country","iso_region","municipality","scheduled_service","gps_code","iata_code","local_code"
3622,"KJFK","large_airport","John F Kennedy International Airport",40.639801,-73.7789,13,"NA","US","US-NY","New York","yes","KJFK","JFK","JFK"
3486,"KBOS","large_airport","General Edward Lawrence Logan International Airport",42.3643,-71.005203,20,"NA","US","US-MA","Boston","yes","KBOS","BOS","BOS"
3497,"KBDR","medium_airport","Igor I Sikorsky Memorial Airport",41.163502,-73.126198,9,"NA","US","US-CT","Bridgeport","no","KBDR","BDR","BDR"
3697,"KLGA","large_airport","La Guardia Airport",40.777199,-73.872597,21,"NA","US","US-NY","New York","yes","KLGA","LGA","LGA"
3622,"KISP","medium_airport","Long Island Mac Arthur Airport",40.795200,-73.100197,99,"NA","US","US-NY","Islip","yes","KISP","ISP","ISP"
20001,"NY22","heliport","Some Hospital Heliport",40.7,-73.9,50,"NA","US","US-NY","New York","no","NY22","","NY22"
20002,"XXNC","closed","Closed Field",41.0,-72.0,50,"NA","US","US-NY","Nowhere","no","","",""
20003,"XNOC","small_airport","No Coordinates Field",,,50,"NA","US","US-NY","Nowhere","no","","",""
"""

NOW = datetime(2026, 10, 19, 13, 0, tzinfo=timezone.utc)


@pytest.fixture
def station_records() -> list:
    return [
        StationRecord(
            identifier=ident,
            coordinate=Coordinate(latitude=lat, longitude=lon),
            display_name=name,
            aliases=aliases,
        )
        for ident, lat, lon, name, aliases in STATIONS
    ]


@pytest.fixture
def stations(station_records) -> StationTable:
    """Small station table around New York and Boston."""
    return StationTable(station_records)


@pytest.fixture
def airports_csv(tmp_path) -> Path:
    """OurAirports style airports.csv with a few rows to skip."""
    path = tmp_path / 'airports.csv'
    path.write_text(AIRPORTS_CSV, encoding='utf-8')
    return path


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_obs():
    """Factory for WeatherObservation with a consistent flight category."""

    def _make(
        station="KJFK",
        wind=None,
        visibility_sm=10.0,
        layers=(),
        present_weather=None,
        is_special=False,
        temperature_c=20.0,
        dewpoint_c=10.0,
        altimeter=29.92,
        observed_at=NOW,
        degraded=False,
    ) -> WeatherObservation:
        cloud_layers = tuple(CloudLayer(cover=cover, base_ft=base) for cover, base in layers)
        ceiling = WeatherAnalyzer.ceiling_from_layers(cloud_layers)
        return WeatherObservation(
            station=station,
            observed_at=observed_at,
            temperature_c=temperature_c,
            dewpoint_c=dewpoint_c,
            wind=wind if wind is not None else FromDegrees(degrees=270, speed=10),
            visibility_sm=visibility_sm,
            cloud_layers=cloud_layers,
            ceiling_ft=ceiling,
            flight_category=WeatherAnalyzer.flight_category(ceiling, visibility_sm),
            present_weather=present_weather,
            is_special=is_special,
            degraded=degraded,
            altimeter=altimeter,
            raw_text=f"{station} TEST",
        )

    return _make
