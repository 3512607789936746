"""Route briefing service: corridor stations + weather fetch + leg geometry."""

import logging
from typing import List, Optional, Sequence, Union, TYPE_CHECKING

from route_wx.geodesy import great_circle_distance, initial_bearing
from route_wx.models.coordinate import Waypoint
from route_wx.models.route import RouteBriefing, RouteLeg, RouteWeatherPoint
from route_wx.route.corridor import StationCorridorResolver
from route_wx.weather.analysis import WeatherAnalyzer

if TYPE_CHECKING:
    from route_wx.sources.avwx import AvWxSource
    from route_wx.stations import StationTable

logger = logging.getLogger(__name__)


def build_legs(waypoints: Sequence[Waypoint]) -> List[RouteLeg]:
    """Legs between consecutive waypoints with distance and initial bearing."""
    return [
        RouteLeg(
            origin=start,
            destination=end,
            distance_nm=great_circle_distance(start.coordinate, end.coordinate),
            initial_bearing_deg=initial_bearing(start.coordinate, end.coordinate),
        )
        for start, end in zip(waypoints, waypoints[1:])
    ]


class RouteBriefingService:
    """Aggregates corridor stations and their latest observations into a briefing.

    One batched fetch is issued per call. Stations without an observation are
    left out; estimating them is up to the caller (see GhostStationService).

    Example:
        stations = StationTable.from_csv("airports.csv")
        service = RouteBriefingService(stations)
        briefing = service.build_briefing(["KJFK", "KBOS"])
        if briefing is not None:
            print(briefing.worst_flight_category)
            for gap in briefing.gaps:
                print(gap.advisory_message)
    """

    def __init__(
        self,
        stations: 'StationTable',
        source: Optional['AvWxSource'] = None,
        corridor_nm: float = StationCorridorResolver.DEFAULT_CORRIDOR_NM,
        gap_threshold_nm: float = StationCorridorResolver.DEFAULT_GAP_THRESHOLD_NM,
    ):
        """
        Args:
            stations: Station reference table.
            source: AvWxSource instance. Created automatically if not provided.
            corridor_nm: Corridor half-width in nautical miles.
            gap_threshold_nm: Station spacing reported as a coverage gap.
        """
        self._stations = stations
        self._source = source
        self._resolver = StationCorridorResolver(
            stations, corridor_nm=corridor_nm, gap_threshold_nm=gap_threshold_nm,
        )

    def _get_source(self) -> 'AvWxSource':
        if self._source is None:
            from route_wx.sources.avwx import AvWxSource
            self._source = AvWxSource()
        return self._source

    def resolve_waypoints(self, waypoints: Sequence[Union[str, Waypoint]]) -> List[Waypoint]:
        """
        Turn identifiers into waypoints via the station table.

        Unknown identifiers are skipped with a warning.
        """
        resolved = []
        for item in waypoints:
            if isinstance(item, Waypoint):
                resolved.append(item)
                continue
            station = self._stations.get(item)
            if station is None:
                logger.warning("Skipping unknown waypoint %s", item)
                continue
            resolved.append(station.to_waypoint())
        return resolved

    def build_briefing(
        self,
        waypoints: Sequence[Union[str, Waypoint]],
        timeout: Optional[float] = None,
    ) -> Optional[RouteBriefing]:
        """
        Build the weather briefing for a route.

        Args:
            waypoints: Identifiers or Waypoint objects, in flight order.
            timeout: Fetch timeout in seconds, defaults to the source timeout.

        Returns:
            RouteBriefing, or None when fewer than 2 waypoints resolve.
        """
        route = self.resolve_waypoints(waypoints)
        if len(route) < 2:
            logger.info("Not enough resolvable waypoints for a briefing (%d)", len(route))
            return None

        # 1. Stations along the route
        corridor = self._resolver.resolve(route)

        # 2. One batched fetch for all of them
        observations = {}
        if corridor.stations:
            observations = self._get_source().fetch_latest(corridor.identifiers, timeout=timeout)

        # 3. Pair stations with observations, dropping those without one
        points = []
        for entry in corridor.stations:
            observation = observations.get(entry.station.identifier)
            if observation is None:
                logger.debug("No observation for %s, leaving it out", entry.station.identifier)
                continue
            points.append(RouteWeatherPoint(
                waypoint=entry.station.to_waypoint(),
                distance_from_start_nm=entry.along_path_nm,
                observation=observation,
                flight_category=observation.flight_category,
            ))

        worst = WeatherAnalyzer.worst_category(p.flight_category for p in points)

        return RouteBriefing(
            legs=build_legs(route),
            weather_points=points,
            gaps=corridor.gaps,
            total_distance_nm=great_circle_distance(route[0].coordinate, route[-1].coordinate),
            worst_flight_category=worst,
        )
