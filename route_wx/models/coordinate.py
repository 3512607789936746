#!/usr/bin/env python3

from dataclasses import dataclass, field
from typing import Optional, Tuple

from route_wx.geodesy import (
    great_circle_distance,
    initial_bearing,
    point_to_segment_distance,
)


@dataclass(frozen=True)
class Coordinate:
    """
    A position on the earth.

    All coordinates are stored in decimal degrees:
    - Latitude: -90 to +90 degrees (negative for South, positive for North)
    - Longitude: -180 to +180 degrees (negative for West, positive for East)
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate coordinates after initialization."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be between -90 and 90 degrees, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be between -180 and 180 degrees, got {self.longitude}")

    def distance_to(self, other: 'Coordinate') -> float:
        """Great circle distance in nautical miles."""
        return great_circle_distance(self, other)

    def bearing_to(self, other: 'Coordinate') -> float:
        """Initial bearing in degrees [0, 360)."""
        return initial_bearing(self, other)

    def distance_to_segment(self, start: 'Coordinate', end: 'Coordinate') -> float:
        """Distance in nautical miles to the segment start-end."""
        return point_to_segment_distance(self, start, end)

    def to_dict(self) -> dict:
        return {'latitude': self.latitude, 'longitude': self.longitude}

    @classmethod
    def from_dict(cls, data: dict) -> 'Coordinate':
        return cls(latitude=data['latitude'], longitude=data['longitude'])

    def __str__(self) -> str:
        return f"({self.latitude}, {self.longitude})"


@dataclass(frozen=True)
class StationRecord:
    """
    Static reference entry for a weather reporting station.

    Loaded once with the station table and never mutated.

    Attributes:
        identifier: ICAO-style identifier (e.g. "KJFK")
        coordinate: Station position
        display_name: Human readable name
        aliases: Alternative identifiers (IATA, local codes)
    """

    identifier: str
    coordinate: Coordinate
    display_name: str = ""
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def to_waypoint(self) -> 'Waypoint':
        return Waypoint(
            identifier=self.identifier,
            coordinate=self.coordinate,
            display_name=self.display_name,
        )

    def to_dict(self) -> dict:
        return {
            'identifier': self.identifier,
            'latitude': self.coordinate.latitude,
            'longitude': self.coordinate.longitude,
            'display_name': self.display_name,
        }

    def __repr__(self) -> str:
        return f"StationRecord({self.identifier} {self.coordinate})"


@dataclass(frozen=True)
class Waypoint:
    """A named point along a planned route."""

    identifier: str
    coordinate: Coordinate
    display_name: Optional[str] = None

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def to_dict(self) -> dict:
        return {
            'identifier': self.identifier,
            'latitude': self.coordinate.latitude,
            'longitude': self.coordinate.longitude,
            'display_name': self.display_name,
        }

    def __str__(self) -> str:
        return f"{self.identifier} {self.coordinate}"
