"""Weather observation data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Tuple, Union

from dateutil.parser import isoparse


class FlightCategory(Enum):
    """
    FAA flight category based on ceiling and visibility.

    Ordered from worst to best: LIFR < IFR < MVFR < VFR, so the worst of
    several categories is ``min()``.

    Thresholds (ceiling OR visibility, whichever is worse):
        LIFR:  visibility < 1 SM  or  ceiling < 500 ft
        IFR:   1 <= vis < 3 SM    or  500 <= ceiling < 1000 ft
        MVFR:  3 <= vis <= 5 SM   or  1000 <= ceiling <= 3000 ft
        VFR:   visibility > 5 SM  and ceiling > 3000 ft
    """

    LIFR = "LIFR"
    IFR = "IFR"
    MVFR = "MVFR"
    VFR = "VFR"

    @property
    def order(self) -> int:
        """Numeric ordering from worst (0) to best (3)."""
        return _CATEGORY_ORDER[self]

    @property
    def severity(self) -> int:
        """Numeric severity from best (VFR=0) to worst (LIFR=3)."""
        return 3 - self.order

    def __lt__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order >= other.order


_CATEGORY_ORDER = {
    FlightCategory.LIFR: 0,
    FlightCategory.IFR: 1,
    FlightCategory.MVFR: 2,
    FlightCategory.VFR: 3,
}


# --- Wind variants ---

@dataclass(frozen=True)
class Calm:
    """Calm wind (00000KT)."""

    @property
    def speed(self) -> int:
        return 0

    @property
    def gust(self) -> Optional[int]:
        return None

    def to_dict(self) -> dict:
        return {'kind': 'calm'}


@dataclass(frozen=True)
class FromDegrees:
    """Wind from a definite true direction."""

    degrees: int
    speed: int
    gust: Optional[int] = None

    def to_dict(self) -> dict:
        return {'kind': 'from', 'degrees': self.degrees, 'speed': self.speed, 'gust': self.gust}


@dataclass(frozen=True)
class Variable:
    """Variable wind (VRB) with no single direction."""

    speed: int
    gust: Optional[int] = None

    def to_dict(self) -> dict:
        return {'kind': 'variable', 'speed': self.speed, 'gust': self.gust}


Wind = Union[Calm, FromDegrees, Variable]


def wind_from_dict(data: Optional[dict]) -> Wind:
    """Rebuild a wind variant from its ``to_dict()`` form."""
    if not data:
        return Calm()
    kind = data.get('kind')
    if kind == 'from':
        return FromDegrees(degrees=data['degrees'], speed=data['speed'], gust=data.get('gust'))
    if kind == 'variable':
        return Variable(speed=data['speed'], gust=data.get('gust'))
    return Calm()


@dataclass(frozen=True)
class CloudLayer:
    """
    A reported cloud layer.

    Attributes:
        cover: FEW, SCT, BKN, OVC, VV (vertical visibility), ...
        base_ft: Layer base in feet AGL (None when not reported)
    """

    cover: str
    base_ft: Optional[int] = None

    @property
    def is_ceiling(self) -> bool:
        """Broken, overcast or obscured layers form a ceiling."""
        return self.cover in ('BKN', 'OVC', 'VV')

    def to_dict(self) -> dict:
        return {'cover': self.cover, 'base_ft': self.base_ft}

    @classmethod
    def from_dict(cls, data: dict) -> 'CloudLayer':
        return cls(cover=data['cover'], base_ft=data.get('base_ft'))


@dataclass(frozen=True)
class WeatherObservation:
    """
    Normalized point-in-time surface observation (METAR/SPECI).

    Observations are values: each fetch produces new instances and nothing
    mutates an existing one.

    Attributes:
        station: Station identifier
        observed_at: Observation time (timezone aware, UTC)
        temperature_c: Temperature in Celsius
        dewpoint_c: Dewpoint in Celsius
        wind: Calm, FromDegrees or Variable
        visibility_sm: Visibility in statute miles
        cloud_layers: Reported cloud layers, lowest first
        ceiling_ft: Lowest broken/overcast base in feet
        flight_category: Derived flight category
        present_weather: Present weather codes, space separated (e.g. "-TSRA BR")
        is_special: True for SPECI observations
        degraded: True for placeholders substituted for malformed records
        altimeter: Altimeter setting as reported (hPa or inHg)
        raw_text: Original report text
    """

    station: str = ""
    observed_at: Optional[datetime] = None
    temperature_c: Optional[float] = None
    dewpoint_c: Optional[float] = None
    wind: Wind = field(default_factory=Calm)
    visibility_sm: Optional[float] = None
    cloud_layers: Tuple[CloudLayer, ...] = ()
    ceiling_ft: Optional[int] = None
    flight_category: Optional[FlightCategory] = None
    present_weather: Optional[str] = None
    is_special: bool = False
    degraded: bool = False
    altimeter: Optional[float] = None
    raw_text: str = ""

    @property
    def wind_speed(self) -> int:
        """Sustained wind speed in knots (0 when calm)."""
        return self.wind.speed

    @property
    def wind_gust(self) -> Optional[int]:
        return self.wind.gust

    @property
    def present_weather_codes(self) -> List[str]:
        """Individual present weather groups."""
        if not self.present_weather:
            return []
        return self.present_weather.split()

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            'station': self.station,
            'observed_at': self.observed_at.isoformat() if self.observed_at else None,
            'temperature_c': self.temperature_c,
            'dewpoint_c': self.dewpoint_c,
            'wind': self.wind.to_dict(),
            'visibility_sm': self.visibility_sm,
            'cloud_layers': [layer.to_dict() for layer in self.cloud_layers],
            'ceiling_ft': self.ceiling_ft,
            'flight_category': self.flight_category.value if self.flight_category else None,
            'present_weather': self.present_weather,
            'is_special': self.is_special,
            'degraded': self.degraded,
            'altimeter': self.altimeter,
            'raw_text': self.raw_text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WeatherObservation':
        """Create WeatherObservation from dictionary."""
        return cls(**_observation_kwargs(data))

    def __repr__(self) -> str:
        cat = f" {self.flight_category.value}" if self.flight_category else ""
        flag = " degraded" if self.degraded else ""
        return f"WeatherObservation({self.station}{cat}{flag})"


@dataclass(frozen=True)
class SourceStation:
    """A real station that contributed to an interpolated observation."""

    identifier: str
    distance_nm: float

    def to_dict(self) -> dict:
        return {'identifier': self.identifier, 'distance_nm': self.distance_nm}


@dataclass(frozen=True)
class InterpolatedObservation(WeatherObservation):
    """
    Synthetic "ghost station" observation estimated from nearby stations.

    Attributes:
        source_stations: Contributing stations with their distance, nearest first
        confidence: 0..1, decreasing with the mean source distance
    """

    source_stations: Tuple[SourceStation, ...] = ()
    confidence: float = 0.0

    @property
    def is_synthetic(self) -> bool:
        return True

    @property
    def label(self) -> str:
        return f"Estimated ({round(self.confidence * 100)}% confidence)"

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({
            'is_synthetic': True,
            'source_stations': [s.to_dict() for s in self.source_stations],
            'confidence': self.confidence,
            'label': self.label,
        })
        return result

    def __repr__(self) -> str:
        ids = ",".join(s.identifier for s in self.source_stations)
        return f"InterpolatedObservation({self.station} from {ids} conf={self.confidence:.2f})"


def _observation_kwargs(data: dict) -> dict:
    observed_at = None
    if data.get('observed_at'):
        observed_at = isoparse(data['observed_at'])

    flight_category = None
    if data.get('flight_category'):
        try:
            flight_category = FlightCategory(data['flight_category'])
        except ValueError:
            pass

    return {
        'station': data.get('station', ''),
        'observed_at': observed_at,
        'temperature_c': data.get('temperature_c'),
        'dewpoint_c': data.get('dewpoint_c'),
        'wind': wind_from_dict(data.get('wind')),
        'visibility_sm': data.get('visibility_sm'),
        'cloud_layers': tuple(CloudLayer.from_dict(c) for c in data.get('cloud_layers', [])),
        'ceiling_ft': data.get('ceiling_ft'),
        'flight_category': flight_category,
        'present_weather': data.get('present_weather'),
        'is_special': data.get('is_special', False),
        'degraded': data.get('degraded', False),
        'altimeter': data.get('altimeter'),
        'raw_text': data.get('raw_text', ''),
    }
