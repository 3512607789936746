"""Ghost station interpolation: estimate an observation from nearby stations."""

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from route_wx.geodesy import great_circle_distance
from route_wx.models.coordinate import Coordinate, StationRecord
from route_wx.models.observation import (
    Calm,
    FromDegrees,
    InterpolatedObservation,
    SourceStation,
    Variable,
    WeatherObservation,
    Wind,
)
from route_wx.weather.analysis import WeatherAnalyzer

if TYPE_CHECKING:
    from route_wx.sources.avwx import AvWxSource
    from route_wx.stations import StationTable

logger = logging.getLogger(__name__)

# Distances are floored so a co-located station cannot get an infinite weight
_MIN_DISTANCE_NM = 0.1

# Interpolated gusts within this margin of the sustained speed are noise
_GUST_MARGIN_KT = 3

# Mean source distance at which confidence reaches zero
_CONFIDENCE_RANGE_NM = 60.0


def idw_weight(distance_nm: float) -> float:
    """Inverse distance squared weight."""
    d = max(distance_nm, _MIN_DISTANCE_NM)
    return 1.0 / (d * d)


def idw(samples: Sequence[Tuple[Optional[float], float]]) -> Optional[float]:
    """
    Inverse Distance Weighting over (value, distance_nm) samples.

    value = sum(w_i * v_i) / sum(w_i) with w_i = 1 / max(d_i, 0.1)^2.
    Samples without a value are ignored.

    Returns:
        Interpolated value, or None when no sample has a value
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for value, distance in samples:
        if value is None:
            continue
        weight = idw_weight(distance)
        weighted_sum += weight * value
        total_weight += weight
    if total_weight == 0:
        return None
    return weighted_sum / total_weight


def average_wind_direction(samples: Sequence[Tuple[Wind, float]]) -> Optional[float]:
    """
    Weighted circular mean of wind directions.

    Each directional wind contributes a vector of length weight * speed, so
    350 and 010 average to 360 rather than 180. Calm and variable winds have
    no direction and are left out.

    Returns:
        Direction in degrees [0, 360), or None if no sample has a direction
    """
    u_sum = 0.0
    v_sum = 0.0
    for wind, distance in samples:
        if not isinstance(wind, FromDegrees):
            continue
        weight = idw_weight(distance)
        rad = math.radians(wind.degrees)
        u_sum += weight * wind.speed * math.sin(rad)
        v_sum += weight * wind.speed * math.cos(rad)

    if u_sum == 0 and v_sum == 0:
        return None
    return (math.degrees(math.atan2(u_sum, v_sum)) + 360) % 360


class SpatialInterpolator:
    """
    Synthesize an observation at an unreported coordinate.

    Scalars use inverse distance weighting, wind direction a vector mean,
    clouds come from the nearest station only and the flight category is
    re-derived from the interpolated ceiling and visibility.

    Example:
        interpolator = SpatialInterpolator()
        ghost = interpolator.interpolate(target, [(station, obs), ...], "KXYZ")
        if ghost is not None:
            print(ghost.label, ghost.flight_category)
    """

    DEFAULT_MAX_SOURCES = 5
    MIN_SOURCES = 2

    def __init__(self, max_sources: int = DEFAULT_MAX_SOURCES):
        if max_sources < self.MIN_SOURCES:
            raise ValueError(f"max_sources must be at least {self.MIN_SOURCES}, got {max_sources}")
        self.max_sources = max_sources

    def interpolate(
        self,
        target: Coordinate,
        neighbors: Iterable[Tuple[StationRecord, WeatherObservation]],
        identifier: str = "",
        now: Optional[datetime] = None,
    ) -> Optional[InterpolatedObservation]:
        """
        Estimate the observation at target from its nearest neighbours.

        Args:
            target: Coordinate to estimate
            neighbors: (station, observation) pairs; degraded observations are skipped
            identifier: Station identifier to give the estimate
            now: Fallback observation time when no source carries one

        Returns:
            InterpolatedObservation, or None with fewer than 2 usable neighbours
        """
        usable = [
            (station, obs, great_circle_distance(target, station.coordinate))
            for station, obs in neighbors
            if obs is not None and not obs.degraded
        ]
        if len(usable) < self.MIN_SOURCES:
            logger.debug(
                "Not interpolating %s: %d usable neighbours", identifier or target, len(usable),
            )
            return None

        usable.sort(key=lambda item: item[2])
        closest = usable[:self.max_sources]

        observations = [obs for _, obs, _ in closest]
        distances = [dist for _, _, dist in closest]

        def scalar(getter) -> Optional[float]:
            return idw([(getter(obs), dist) for obs, dist in zip(observations, distances)])

        temperature = scalar(lambda o: o.temperature_c)
        dewpoint = scalar(lambda o: o.dewpoint_c)
        altimeter = scalar(lambda o: o.altimeter)
        visibility = scalar(lambda o: o.visibility_sm)
        wind = self._interpolate_wind(observations, distances)

        nearest = observations[0]
        layers = nearest.cloud_layers
        ceiling = WeatherAnalyzer.ceiling_from_layers(layers)

        mean_distance = sum(distances) / len(distances)
        confidence = max(0.0, min(1.0, 1 - mean_distance / _CONFIDENCE_RANGE_NM))

        sources = tuple(
            SourceStation(identifier=station.identifier, distance_nm=round(dist, 1))
            for station, _, dist in closest
        )

        observed_times = [o.observed_at for o in observations if o.observed_at is not None]
        observed_at = max(observed_times) if observed_times else (now or datetime.now(timezone.utc))

        return InterpolatedObservation(
            station=identifier,
            observed_at=observed_at,
            temperature_c=_round(temperature, 1),
            dewpoint_c=_round(dewpoint, 1),
            wind=wind,
            visibility_sm=_round(visibility, 1),
            cloud_layers=layers,
            ceiling_ft=ceiling,
            flight_category=WeatherAnalyzer.flight_category(ceiling, visibility),
            present_weather=None,
            is_special=False,
            altimeter=_round(altimeter, 2),
            raw_text=f"[ESTIMATED] {identifier} from {', '.join(s.identifier for s in sources)}",
            source_stations=sources,
            confidence=confidence,
        )

    @staticmethod
    def _interpolate_wind(
        observations: List[WeatherObservation],
        distances: List[float],
    ) -> Wind:
        speed = idw([(o.wind_speed, d) for o, d in zip(observations, distances)]) or 0.0
        gust_value = idw([(o.wind_gust or 0, d) for o, d in zip(observations, distances)]) or 0.0
        direction = average_wind_direction([(o.wind, d) for o, d in zip(observations, distances)])

        rounded_speed = int(round(speed))
        if rounded_speed == 0:
            return Calm()

        gust = int(round(gust_value)) if gust_value > speed + _GUST_MARGIN_KT else None
        if direction is None:
            return Variable(speed=rounded_speed, gust=gust)
        return FromDegrees(degrees=int(round(direction)) % 360, speed=rounded_speed, gust=gust)


class GhostStationService:
    """
    Opt-in fallback for a single station whose own report is unavailable.

    Finds the nearest other stations in the reference table, fetches their
    latest observations in one batch and interpolates.

    Example:
        service = GhostStationService(stations)
        ghost = service.estimate("KXYZ")
    """

    SEARCH_RADIUS_NM = 100.0

    def __init__(
        self,
        stations: 'StationTable',
        source: Optional['AvWxSource'] = None,
        interpolator: Optional[SpatialInterpolator] = None,
        search_radius_nm: float = SEARCH_RADIUS_NM,
    ):
        """
        Args:
            stations: Station reference table
            source: AvWxSource instance. Created automatically if not provided.
            interpolator: SpatialInterpolator to use
            search_radius_nm: Radius for neighbour candidates
        """
        self._stations = stations
        self._source = source
        self._interpolator = interpolator or SpatialInterpolator()
        self.search_radius_nm = search_radius_nm

    def _get_source(self) -> 'AvWxSource':
        if self._source is None:
            from route_wx.sources.avwx import AvWxSource
            self._source = AvWxSource()
        return self._source

    def estimate(self, identifier: str) -> Optional[InterpolatedObservation]:
        """
        Estimate the observation for a known station.

        Returns:
            InterpolatedObservation, or None if the station is unknown or
            fewer than 2 neighbours report
        """
        station = self._stations.get(identifier)
        if station is None:
            logger.warning("Cannot estimate weather for unknown station %s", identifier)
            return None
        return self.estimate_at(station.coordinate, station.identifier, exclude=[station.identifier])

    def estimate_at(
        self,
        coordinate: Coordinate,
        identifier: str = "",
        exclude: Iterable[str] = (),
    ) -> Optional[InterpolatedObservation]:
        """Estimate the observation at an arbitrary coordinate."""
        candidates = self._stations.nearest(
            coordinate,
            radius_nm=self.search_radius_nm,
            max_results=self._interpolator.max_sources,
            exclude=exclude,
        )
        if len(candidates) < SpatialInterpolator.MIN_SOURCES:
            logger.info("Only %d stations near %s, no estimate", len(candidates), identifier or coordinate)
            return None

        observations = self._get_source().fetch_latest([s.identifier for s in candidates])
        pairs = [
            (station, observations[station.identifier])
            for station in candidates
            if station.identifier in observations
        ]
        return self._interpolator.interpolate(coordinate, pairs, identifier=identifier)


def _round(value: Optional[float], digits: int) -> Optional[float]:
    return round(value, digits) if value is not None else None
