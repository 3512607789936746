from .coordinate import Coordinate, StationRecord, Waypoint
from .observation import (
    FlightCategory,
    Calm,
    FromDegrees,
    Variable,
    Wind,
    CloudLayer,
    WeatherObservation,
    InterpolatedObservation,
    SourceStation,
)
from .route import RouteLeg, CoverageGap, RouteWeatherPoint, RouteBriefing

__all__ = [
    'Coordinate',
    'StationRecord',
    'Waypoint',
    'FlightCategory',
    'Calm',
    'FromDegrees',
    'Variable',
    'Wind',
    'CloudLayer',
    'WeatherObservation',
    'InterpolatedObservation',
    'SourceStation',
    'RouteLeg',
    'CoverageGap',
    'RouteWeatherPoint',
    'RouteBriefing',
]
