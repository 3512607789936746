"""
Weather module for normalizing, interpolating and comparing observations.

Provides:
- WeatherParser: Parse raw METAR/SPECI text into WeatherObservation
- WeatherAnalyzer: Flight categories, ceilings, category comparison
- SpatialInterpolator: Ghost station estimate from nearby observations
- GhostStationService: Fetch neighbours and interpolate for one station
- WeatherChangeDetector: Classify changes between two observations

Example:
    from route_wx.weather import WeatherParser, WeatherChangeDetector

    before = WeatherParser.parse_metar("KJFK 181251Z 27008KT 10SM FEW250 20/10 A2992")
    after = WeatherParser.parse_metar("KJFK 181351Z 27030KT 2SM BR OVC005 18/16 A2980")
    for change in WeatherChangeDetector().detect(before, after):
        print(change.severity.value, change.title)
"""

from route_wx.weather.analysis import WeatherAnalyzer
from route_wx.weather.parser import WeatherParser
from route_wx.weather.interpolation import (
    SpatialInterpolator,
    GhostStationService,
    idw,
    average_wind_direction,
)
from route_wx.weather.change_detector import (
    ChangeKind,
    Severity,
    WeatherChangeEvent,
    WeatherChangeDetector,
)

__all__ = [
    'WeatherAnalyzer',
    'WeatherParser',
    'SpatialInterpolator',
    'GhostStationService',
    'idw',
    'average_wind_direction',
    'ChangeKind',
    'Severity',
    'WeatherChangeEvent',
    'WeatherChangeDetector',
]
