"""
Route module: station corridor resolution and route briefing aggregation.

Example:
    from route_wx.route import RouteBriefingService

    briefing = RouteBriefingService(stations).build_briefing(["KJFK", "KBOS"])
"""

from route_wx.route.corridor import (
    CorridorResult,
    CorridorStation,
    StationCorridorResolver,
    find_coverage_gaps,
)
from route_wx.route.briefing import RouteBriefingService, build_legs

__all__ = [
    'CorridorResult',
    'CorridorStation',
    'StationCorridorResolver',
    'find_coverage_gaps',
    'RouteBriefingService',
    'build_legs',
]
