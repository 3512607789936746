"""
Route weather intelligence library.

This package provides tools for assessing weather along a planned multi-leg
route where reporting stations are sparse.

The main public API includes:
- StationTable: Static station reference table
- StationCorridorResolver: Stations within a corridor around a route
- RouteBriefingService: Route level weather briefing
- SpatialInterpolator / GhostStationService: Estimated observations
- WeatherChangeDetector: Classify changes between two observations
- PreflightMonitor / PreflightSession: Pre-departure change monitoring
"""

__version__ = '0.1.0'
__all__ = [
    'StationTable',
    'StationCorridorResolver',
    'RouteBriefingService',
    'SpatialInterpolator',
    'GhostStationService',
    'WeatherChangeDetector',
    'PreflightMonitor',
    'PreflightSession',
    'Coordinate',
    'Waypoint',
    'StationRecord',
    'WeatherObservation',
    'FlightCategory',
]

from route_wx.models import Coordinate, FlightCategory, StationRecord, Waypoint, WeatherObservation
from route_wx.stations import StationTable
from route_wx.route import RouteBriefingService, StationCorridorResolver
from route_wx.weather import GhostStationService, SpatialInterpolator, WeatherChangeDetector
from route_wx.preflight import PreflightMonitor, PreflightSession
