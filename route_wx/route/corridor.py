"""Station corridor resolution: which stations matter for a route."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from route_wx.geodesy import great_circle_distance, point_to_segment_distance
from route_wx.models.coordinate import StationRecord, Waypoint
from route_wx.models.route import CoverageGap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorridorStation:
    """
    A station claimed by one leg of the route.

    Attributes:
        station: The station record
        along_path_nm: Approximate distance along the route from departure
        offset_nm: Distance from the claiming leg's centerline
        leg_index: Index of the leg that claimed the station
    """

    station: StationRecord
    along_path_nm: float
    offset_nm: float = 0.0
    leg_index: int = 0


@dataclass
class CorridorResult:
    """Stations along a route, sorted by along-path position, and coverage gaps."""

    stations: List[CorridorStation] = field(default_factory=list)
    gaps: List[CoverageGap] = field(default_factory=list)

    @property
    def identifiers(self) -> List[str]:
        return [s.station.identifier for s in self.stations]


def find_coverage_gaps(
    stations: Sequence[CorridorStation],
    gap_threshold_nm: float,
) -> List[CoverageGap]:
    """
    Gaps between consecutive stations spaced more than the threshold apart.

    Args:
        stations: Stations sorted by along-path position
        gap_threshold_nm: Maximum acceptable spacing

    Returns:
        One CoverageGap per offending consecutive pair
    """
    gaps = []
    for before, after in zip(stations, stations[1:]):
        spacing = after.along_path_nm - before.along_path_nm
        if spacing > gap_threshold_nm:
            gaps.append(CoverageGap(
                from_station=before.station,
                to_station=after.station,
                gap_distance_nm=spacing,
                advisory_message=(
                    f"No reporting stations for {round(spacing)} nm between "
                    f"{before.station.identifier} and {after.station.identifier}. "
                    f"Conditions in this segment can only be estimated."
                ),
            ))
    return gaps


class StationCorridorResolver:
    """
    Select reporting stations inside a corridor around a multi-leg route.

    Each leg tests every station not already claimed; a station within the
    corridor half-width belongs to the first leg that qualifies it. The
    along-path position is approximated as the cumulative distance to the
    leg start plus the station's distance from that leg start.

    Example:
        resolver = StationCorridorResolver(stations, corridor_nm=25)
        result = resolver.resolve(waypoints)
        for gap in result.gaps:
            print(gap.advisory_message)
    """

    DEFAULT_CORRIDOR_NM = 25.0
    DEFAULT_GAP_THRESHOLD_NM = 60.0

    def __init__(
        self,
        stations: Iterable[StationRecord],
        corridor_nm: float = DEFAULT_CORRIDOR_NM,
        gap_threshold_nm: float = DEFAULT_GAP_THRESHOLD_NM,
    ):
        """
        Args:
            stations: Station reference table (any iterable of StationRecord)
            corridor_nm: Corridor half-width in nautical miles
            gap_threshold_nm: Spacing above which a coverage gap is reported
        """
        if corridor_nm <= 0:
            raise ValueError(f"corridor_nm must be positive, got {corridor_nm}")
        if gap_threshold_nm <= 0:
            raise ValueError(f"gap_threshold_nm must be positive, got {gap_threshold_nm}")
        self._stations = stations
        self.corridor_nm = corridor_nm
        self.gap_threshold_nm = gap_threshold_nm

    def resolve(self, waypoints: Sequence[Waypoint]) -> CorridorResult:
        """
        Find the stations along the route and the gaps between them.

        Args:
            waypoints: Ordered route waypoints

        Returns:
            CorridorResult; empty with fewer than 2 waypoints
        """
        if len(waypoints) < 2:
            return CorridorResult()

        claimed = set()
        found: List[CorridorStation] = []
        cumulative = 0.0

        for leg_index, (start, end) in enumerate(zip(waypoints, waypoints[1:])):
            for station in self._stations:
                if station.identifier in claimed:
                    continue
                offset = point_to_segment_distance(station.coordinate, start.coordinate, end.coordinate)
                if offset > self.corridor_nm:
                    continue
                claimed.add(station.identifier)
                found.append(CorridorStation(
                    station=station,
                    along_path_nm=cumulative + great_circle_distance(start.coordinate, station.coordinate),
                    offset_nm=offset,
                    leg_index=leg_index,
                ))
            cumulative += great_circle_distance(start.coordinate, end.coordinate)

        found.sort(key=lambda s: s.along_path_nm)
        gaps = find_coverage_gaps(found, self.gap_threshold_nm)

        logger.info(
            "Found %d stations within %gnm of route %s, %d coverage gaps",
            len(found), self.corridor_nm, "-".join(w.identifier for w in waypoints), len(gaps),
        )
        return CorridorResult(stations=found, gaps=gaps)
