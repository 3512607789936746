"""Route data models."""

from dataclasses import dataclass, field
from typing import Optional, List

from route_wx.models.coordinate import StationRecord, Waypoint
from route_wx.models.observation import FlightCategory, WeatherObservation


@dataclass(frozen=True)
class RouteLeg:
    """
    A single leg between two consecutive waypoints.

    Attributes:
        origin: Leg start waypoint
        destination: Leg end waypoint
        distance_nm: Great circle length of the leg
        initial_bearing_deg: Initial true bearing from origin to destination
    """

    origin: Waypoint
    destination: Waypoint
    distance_nm: float
    initial_bearing_deg: float

    def to_dict(self) -> dict:
        return {
            'from': self.origin.to_dict(),
            'to': self.destination.to_dict(),
            'distance_nm': round(self.distance_nm, 1),
            'initial_bearing_deg': round(self.initial_bearing_deg),
        }


@dataclass(frozen=True)
class CoverageGap:
    """
    Stretch of route where consecutive reporting stations are too far apart.

    Attributes:
        from_station: Last station before the gap
        to_station: First station after the gap
        gap_distance_nm: Along-path spacing between the two stations
        advisory_message: Pilot facing advisory text
    """

    from_station: StationRecord
    to_station: StationRecord
    gap_distance_nm: float
    advisory_message: str

    def to_dict(self) -> dict:
        return {
            'from_station': self.from_station.to_dict(),
            'to_station': self.to_station.to_dict(),
            'gap_distance_nm': round(self.gap_distance_nm, 1),
            'advisory_message': self.advisory_message,
        }


@dataclass(frozen=True)
class RouteWeatherPoint:
    """Weather at one station along the route."""

    waypoint: Waypoint
    distance_from_start_nm: float
    observation: Optional[WeatherObservation] = None
    flight_category: Optional[FlightCategory] = None

    @property
    def has_data(self) -> bool:
        return self.observation is not None and not self.observation.degraded

    def to_dict(self) -> dict:
        return {
            'waypoint': self.waypoint.to_dict(),
            'distance_from_start_nm': round(self.distance_from_start_nm, 1),
            'observation': self.observation.to_dict() if self.observation else None,
            'flight_category': self.flight_category.value if self.flight_category else None,
        }


@dataclass
class RouteBriefing:
    """
    Route level weather summary.

    ``total_distance_nm`` is the direct great circle distance between the
    first and last waypoint, while ``route_distance_nm`` sums the legs.
    The two diverge on routes with turns and both are reported.

    Attributes:
        legs: Route legs in flight order
        weather_points: Stations with observations, sorted by along-path position
        gaps: Coverage gaps along the route
        total_distance_nm: Direct distance first -> last waypoint
        worst_flight_category: Worst category over points with data
    """

    legs: List[RouteLeg] = field(default_factory=list)
    weather_points: List[RouteWeatherPoint] = field(default_factory=list)
    gaps: List[CoverageGap] = field(default_factory=list)
    total_distance_nm: float = 0.0
    worst_flight_category: Optional[FlightCategory] = None

    @property
    def route_distance_nm(self) -> float:
        """Sum of per-leg distances along the flown route."""
        return sum(leg.distance_nm for leg in self.legs)

    @property
    def has_gaps(self) -> bool:
        return len(self.gaps) > 0

    def points_in_category(self, category: FlightCategory) -> List[RouteWeatherPoint]:
        return [p for p in self.weather_points if p.flight_category == category]

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            'legs': [leg.to_dict() for leg in self.legs],
            'weather_points': [p.to_dict() for p in self.weather_points],
            'gaps': [g.to_dict() for g in self.gaps],
            'total_distance_nm': round(self.total_distance_nm, 1),
            'route_distance_nm': round(self.route_distance_nm, 1),
            'worst_flight_category': (
                self.worst_flight_category.value if self.worst_flight_category else None
            ),
        }
