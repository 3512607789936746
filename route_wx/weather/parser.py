"""METAR parser wrapping the metar_taf_parser library."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Tuple

from dateutil.relativedelta import relativedelta
from metar_taf_parser.parser.parser import MetarParser

from route_wx.models.observation import (
    Calm,
    CloudLayer,
    FromDegrees,
    Variable,
    WeatherObservation,
    Wind,
)
from route_wx.weather.analysis import WeatherAnalyzer

logger = logging.getLogger(__name__)

# Meters to statute miles conversion
_METERS_TO_SM = 0.000621371

_TO_KNOTS = {
    'KT': 1.0,
    'MPS': 1.94384,
    'KMH': 0.539957,
}

# Reports stamped slightly ahead of the local clock are still current
_FUTURE_TOLERANCE = timedelta(hours=1)


class WeatherParser:
    """
    Parse METAR/SPECI reports into WeatherObservation values.

    Uses the metar_taf_parser library for the heavy lifting, then
    normalizes fields into our WeatherObservation dataclass.

    Example:
        obs = WeatherParser.parse_metar(
            "METAR KJFK 181251Z 27008KT 10SM FEW250 20/10 A2992"
        )
    """

    @classmethod
    def parse_metar(cls, raw_text: str, now: Optional[datetime] = None) -> Optional[WeatherObservation]:
        """
        Parse a METAR string.

        Args:
            raw_text: Raw METAR text (may include "METAR" or "SPECI" prefix)
            now: Reference time used to resolve the day-of-month timestamp

        Returns:
            WeatherObservation or None if parsing fails or the report is NIL
        """
        text = raw_text.strip()
        if not text:
            return None

        is_special, clean = cls._strip_prefix(text)

        if "NIL" in clean.upper().split():
            return None

        try:
            parsed = MetarParser().parse(clean)
        except Exception as e:
            logger.debug("Failed to parse METAR: %s - %s", raw_text[:80], e)
            return None

        if getattr(parsed, 'nil', False):
            return None

        return cls._build_observation(parsed, is_special, text, now or datetime.now(timezone.utc))

    @classmethod
    def normalize(cls, raw_text: str, now: Optional[datetime] = None) -> Optional[WeatherObservation]:
        """
        Parse a METAR, substituting a degraded placeholder on failure.

        One malformed record must not abort a whole briefing, so this never
        raises: unparseable text yields an observation flagged ``degraded``.

        Returns:
            WeatherObservation, or None for empty and NIL reports
        """
        text = raw_text.strip()
        if not text:
            return None
        _, clean = cls._strip_prefix(text)
        if "NIL" in clean.upper().split():
            return None

        observation = cls.parse_metar(text, now=now)
        if observation is not None:
            return observation

        logger.warning("Malformed observation, substituting degraded placeholder: %s", text[:80])
        return cls.degraded(text)

    @classmethod
    def degraded(cls, raw_text: str, station: Optional[str] = None) -> WeatherObservation:
        """Placeholder for a record that could not be parsed."""
        is_special, clean = cls._strip_prefix(raw_text.strip())
        if station is None:
            tokens = clean.split()
            station = tokens[0].upper() if tokens else ""
        return WeatherObservation(
            station=station,
            is_special=is_special,
            degraded=True,
            raw_text=raw_text.strip(),
        )

    # --- Internal builders ---

    @staticmethod
    def _strip_prefix(text: str) -> Tuple[bool, str]:
        """Remove METAR/SPECI/COR prefixes. Returns (is_special, remaining text)."""
        is_special = False
        clean = text
        if clean.upper().startswith("SPECI"):
            is_special = True
            clean = clean[5:].strip()
        elif clean.upper().startswith("METAR"):
            clean = clean[5:].strip()

        if clean.upper().startswith("COR"):
            clean = clean[3:].strip()
        return is_special, clean

    @classmethod
    def _build_observation(
        cls,
        parsed,
        is_special: bool,
        raw_text: str,
        now: datetime,
    ) -> WeatherObservation:
        """Build WeatherObservation from a parsed Metar object."""
        observed_at = cls._observation_time(
            getattr(parsed, 'day', None),
            getattr(parsed, 'time', None),
            now,
        )
        wind = cls._extract_wind(parsed)
        visibility_sm = cls._extract_visibility(parsed)
        layers = cls._extract_clouds(parsed)
        ceiling = WeatherAnalyzer.ceiling_from_layers(layers)
        conditions = cls._extract_weather_conditions(parsed)

        return WeatherObservation(
            station=(parsed.station or "").upper(),
            observed_at=observed_at,
            temperature_c=getattr(parsed, 'temperature', None),
            dewpoint_c=getattr(parsed, 'dew_point', None),
            wind=wind,
            visibility_sm=visibility_sm,
            cloud_layers=tuple(layers),
            ceiling_ft=ceiling,
            flight_category=WeatherAnalyzer.flight_category(ceiling, visibility_sm),
            present_weather=" ".join(conditions) if conditions else None,
            is_special=is_special,
            altimeter=getattr(parsed, 'altimeter', None),
            raw_text=raw_text,
        )

    @staticmethod
    def _observation_time(day, time, now: datetime) -> Optional[datetime]:
        """
        Resolve a METAR day/hour/minute group to a UTC datetime.

        The report only carries the day of month; a result in the future
        belongs to the previous month.
        """
        if day is None or time is None:
            return None

        for months_back in (0, 1):
            base = now - relativedelta(months=months_back)
            try:
                candidate = datetime(
                    base.year, base.month, day,
                    time.hour, time.minute,
                    tzinfo=timezone.utc,
                )
            except ValueError:
                continue
            if candidate <= now + _FUTURE_TOLERANCE:
                return candidate
        return None

    # --- Field extraction helpers ---

    @classmethod
    def _extract_wind(cls, parsed) -> Wind:
        """Extract wind as a Calm / FromDegrees / Variable variant in knots."""
        wind = getattr(parsed, 'wind', None)
        if not wind or getattr(wind, 'speed', None) is None:
            return Calm()

        unit = (getattr(wind, 'unit', 'KT') or 'KT').upper()
        factor = _TO_KNOTS.get(unit, 1.0)
        speed = int(round(wind.speed * factor))
        gust = getattr(wind, 'gust', None)
        if gust is not None:
            gust = int(round(gust * factor))

        degrees = getattr(wind, 'degrees', None)
        if speed == 0:
            return Calm()
        if degrees is None or getattr(wind, 'direction', None) == 'VRB':
            return Variable(speed=speed, gust=gust)
        return FromDegrees(degrees=int(degrees) % 360, speed=speed, gust=gust)

    @classmethod
    def _extract_visibility(cls, parsed) -> Optional[float]:
        """
        Extract visibility in statute miles.

        Uses safe arithmetic for fraction parsing (no eval()).
        """
        if getattr(parsed, 'cavok', False):
            return 10000 * _METERS_TO_SM

        vis = getattr(parsed, 'visibility', None)
        if not vis:
            return None

        distance = getattr(vis, 'distance', None)
        if distance is None:
            return None

        vis_str = str(distance).replace('>', '').replace('<', '').strip()
        if not vis_str:
            return None

        # Recent metar_taf_parser releases report the unit separately
        unit = getattr(vis, 'unit', None)
        unit = str(getattr(unit, 'value', unit) or '').strip().upper()
        if unit == 'SM':
            return cls._safe_parse_fraction(vis_str.upper().replace('SM', ''))
        if unit in ('M', 'KM'):
            try:
                meters = float(vis_str.upper().rstrip('KM').strip())
            except ValueError:
                return None
            if unit == 'KM':
                meters *= 1000
            return meters * _METERS_TO_SM

        upper = vis_str.upper()

        # Statute miles (e.g. "2SM", "1/2SM")
        if upper.endswith('SM'):
            return cls._safe_parse_fraction(upper[:-2].strip())
        # Kilometers (e.g. "10km" from metar_taf_parser)
        if upper.endswith('KM'):
            try:
                return float(upper[:-2].strip()) * 1000 * _METERS_TO_SM
            except ValueError:
                return None
        # Meters (e.g. "3000m")
        if upper.endswith('M'):
            try:
                return float(upper[:-1].strip()) * _METERS_TO_SM
            except ValueError:
                return None
        # Plain number, assume meters
        try:
            return float(vis_str) * _METERS_TO_SM
        except ValueError:
            return None

    @classmethod
    def _safe_parse_fraction(cls, text: str) -> Optional[float]:
        """
        Safely parse a fractional number string.

        Handles: "1/2", "2 1/2", "1", "0.5", "M1/4" (M = less than), "P6" (more than)
        """
        text = text.strip()
        if not text:
            return None

        if text.upper().startswith("M") or text.upper().startswith("P"):
            text = text[1:].strip()

        try:
            return float(text)
        except ValueError:
            pass

        # Mixed number: "2 1/2"
        if " " in text and "/" in text:
            whole, frac = text.split(None, 1)
            try:
                value = cls._parse_simple_fraction(frac)
                if value is not None:
                    return float(whole) + value
            except ValueError:
                pass

        if "/" in text:
            return cls._parse_simple_fraction(text)

        return None

    @staticmethod
    def _parse_simple_fraction(text: str) -> Optional[float]:
        """Parse a simple fraction like '1/2' or '3/4'."""
        parts = text.split("/")
        if len(parts) != 2:
            return None
        try:
            num = float(parts[0])
            den = float(parts[1])
        except ValueError:
            return None
        if den == 0:
            return None
        return num / den

    @classmethod
    def _extract_clouds(cls, parsed) -> List[CloudLayer]:
        """Extract cloud layers, adding a VV layer for vertical visibility."""
        layers = []
        for cloud in getattr(parsed, 'clouds', None) or []:
            quantity = getattr(cloud, 'quantity', None)
            if quantity is None:
                continue
            cover = getattr(quantity, 'name', str(quantity))
            layers.append(CloudLayer(cover=cover, base_ft=getattr(cloud, 'height', None)))

        vertical_visibility = getattr(parsed, 'vertical_visibility', None)
        if vertical_visibility is not None:
            layers.append(CloudLayer(cover='VV', base_ft=vertical_visibility))

        return sorted(layers, key=lambda l: l.base_ft if l.base_ft is not None else float('inf'))

    @classmethod
    def _extract_weather_conditions(cls, parsed) -> List[str]:
        """Extract weather conditions as METAR style codes (e.g. "-TSRA")."""
        conditions = getattr(parsed, 'weather_conditions', None)
        if not conditions:
            return []

        result = []
        for wc in conditions:
            parts = []
            intensity = getattr(wc, 'intensity', None)
            if intensity:
                parts.append(intensity.value if hasattr(intensity, 'value') else str(intensity))
            descriptive = getattr(wc, 'descriptive', None)
            if descriptive:
                parts.append(descriptive.value if hasattr(descriptive, 'value') else str(descriptive))
            for p in getattr(wc, 'phenomenons', None) or []:
                parts.append(p.value if hasattr(p, 'value') else str(p))
            if parts:
                result.append("".join(parts))
        return result
