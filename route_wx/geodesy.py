#!/usr/bin/env python3
"""
Geodesy primitives on the sphere and on a local flat-earth plane.

All functions take any object exposing ``latitude`` and ``longitude`` in
decimal degrees (``Coordinate``, ``Waypoint.coordinate``, ...).

All distance calculations use nautical miles.
All bearing calculations use degrees (0-360, where 0/360 is North, 90 is East, etc.)
"""

import math

EARTH_RADIUS_NM = 3440.065

# One degree of latitude in nautical miles
_NM_PER_DEGREE = 60.0


def great_circle_distance(a, b) -> float:
    """
    Great circle distance between two points using the Haversine formula.

    Args:
        a: Start point
        b: End point

    Returns:
        Distance in nautical miles. Symmetric, zero for coincident points.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_NM * c


def initial_bearing(a, b) -> float:
    """
    Initial bearing (forward azimuth) from a to b.

    Returns:
        Bearing in degrees, in [0, 360)
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlon = math.radians(b.longitude - a.longitude)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def point_to_segment_distance(p, a, b) -> float:
    """
    Distance from point p to the segment a-b.

    Projects onto a local flat-earth plane centred on a (adequate below
    ~200nm). The projection parameter is clamped to [0, 1], so a point whose
    perpendicular foot lies outside the segment gets the distance to the
    nearer endpoint rather than to the infinite line.

    Returns:
        Distance in nautical miles
    """
    cos_lat = math.cos(math.radians((a.latitude + b.latitude) / 2))

    bx = (b.longitude - a.longitude) * cos_lat * _NM_PER_DEGREE
    by = (b.latitude - a.latitude) * _NM_PER_DEGREE
    px = (p.longitude - a.longitude) * cos_lat * _NM_PER_DEGREE
    py = (p.latitude - a.latitude) * _NM_PER_DEGREE

    length_sq = bx * bx + by * by
    if length_sq == 0:
        return great_circle_distance(p, a)

    t = (px * bx + py * by) / length_sq
    t = max(0.0, min(1.0, t))

    dx = px - t * bx
    dy = py - t * by
    return math.sqrt(dx * dx + dy * dy)
