"""
Weather change detection.

Compares the observation captured when a preflight session started against
the latest observation and classifies significant changes.

Severity levels:
- amber: noteworthy change, pilot should review
- red: critical change, flight safety may be compromised
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from dateutil.parser import isoparse

from route_wx.models.observation import FlightCategory, WeatherObservation
from route_wx.weather.analysis import WeatherAnalyzer


class ChangeKind(Enum):
    CATEGORY = "category"
    WIND = "wind"
    GUST = "gust"
    VISIBILITY = "visibility"
    CEILING = "ceiling"
    WEATHER = "weather"
    SPECIAL = "special"


class Severity(Enum):
    RED = "red"
    AMBER = "amber"


# Present weather tokens that make a new phenomenon red
HAZARDOUS_TOKENS = ("TS", "FZ", "FC", "GR", "VA", "FG", "+RA", "+SN")


@dataclass(frozen=True)
class WeatherChangeEvent:
    """
    A classified change between the snapshot and a later observation.

    Attributes:
        id: Unique event id
        kind: Which field changed
        severity: RED or AMBER
        title: Short headline, used in notifications
        description: One line explanation
        previous_value: Snapshot value as display text
        current_value: Latest value as display text
        detected_at: When the change was detected
    """

    kind: ChangeKind
    severity: Severity
    title: str
    description: str
    previous_value: str = ""
    current_value: str = ""
    detected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_red(self) -> bool:
        return self.severity == Severity.RED

    @property
    def signature(self) -> tuple:
        """Identity of the condition reported, independent of when it was seen."""
        return (self.kind, self.severity, self.current_value)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'kind': self.kind.value,
            'severity': self.severity.value,
            'title': self.title,
            'description': self.description,
            'previous_value': self.previous_value,
            'current_value': self.current_value,
            'detected_at': self.detected_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WeatherChangeEvent':
        return cls(
            id=data['id'],
            kind=ChangeKind(data['kind']),
            severity=Severity(data['severity']),
            title=data.get('title', ''),
            description=data.get('description', ''),
            previous_value=data.get('previous_value', ''),
            current_value=data.get('current_value', ''),
            detected_at=isoparse(data['detected_at']),
        )


def sort_changes(changes: List[WeatherChangeEvent]) -> List[WeatherChangeEvent]:
    """Red first, then newest first."""
    return sorted(
        changes,
        key=lambda c: (0 if c.is_red else 1, -c.detected_at.timestamp()),
    )


class WeatherChangeDetector:
    """
    Detect significant changes between two observations.

    All thresholds are class attributes. The detector holds no state.

    Example:
        changes = WeatherChangeDetector().detect(snapshot, latest)
        urgent = [c for c in changes if c.is_red]
    """

    WIND_RED_KT = 16
    WIND_AMBER_KT = 6
    GUST_RED_KT = 10
    VISIBILITY_RED_SM = 3.0
    VISIBILITY_DROP_SM = 2.0
    CEILING_RED_FT = 1000
    CEILING_DROP_FT = 500

    def detect(
        self,
        snapshot: WeatherObservation,
        current: WeatherObservation,
        now: Optional[datetime] = None,
    ) -> List[WeatherChangeEvent]:
        """
        Compare current against snapshot field by field.

        Returns:
            Detected changes, red before amber. Empty when nothing changed.
        """
        now = now or datetime.now(timezone.utc)
        changes = []
        for check in (
            self._category_change,
            self._wind_change,
            self._gust_change,
            self._visibility_change,
            self._ceiling_change,
            self._weather_change,
            self._special_change,
        ):
            change = check(snapshot, current, now)
            if change is not None:
                changes.append(change)
        return sort_changes(changes)

    # --- Individual checks ---

    def _category_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        previous = snapshot.flight_category
        latest = current.flight_category
        if previous is None or latest is None:
            return None

        direction = WeatherAnalyzer.compare_categories(previous, latest)
        if direction == "same":
            return None

        degraded = direction == "worse"
        to_critical = latest <= FlightCategory.IFR
        if degraded:
            description = f"Conditions degraded from {previous.value} to {latest.value}"
        else:
            description = f"Conditions improved from {previous.value} to {latest.value}"

        return WeatherChangeEvent(
            kind=ChangeKind.CATEGORY,
            severity=Severity.RED if degraded and to_critical else Severity.AMBER,
            title="Flight Category Changed",
            description=description,
            previous_value=previous.value,
            current_value=latest.value,
            detected_at=now,
        )

    def _wind_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        increase = current.wind_speed - snapshot.wind_speed
        if increase >= self.WIND_RED_KT:
            severity = Severity.RED
            title = "Significant Wind Increase"
        elif increase >= self.WIND_AMBER_KT:
            severity = Severity.AMBER
            title = "Wind Speed Increase"
        else:
            return None

        return WeatherChangeEvent(
            kind=ChangeKind.WIND,
            severity=severity,
            title=title,
            description=f"Wind increased by {increase} kt",
            previous_value=f"{snapshot.wind_speed} kt",
            current_value=f"{current.wind_speed} kt",
            detected_at=now,
        )

    def _gust_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        previous = snapshot.wind_gust
        latest = current.wind_gust
        if latest is None:
            return None

        if previous is None:
            return WeatherChangeEvent(
                kind=ChangeKind.GUST,
                severity=Severity.RED,
                title="Gusts Detected",
                description=f"Gusting to {latest} kt (no gusts at briefing time)",
                previous_value="No gusts",
                current_value=f"G{latest} kt",
                detected_at=now,
            )

        increase = latest - previous
        if increase < self.GUST_RED_KT:
            return None
        return WeatherChangeEvent(
            kind=ChangeKind.GUST,
            severity=Severity.RED,
            title="Gusts Increasing",
            description=f"Gusts increased by {increase} kt",
            previous_value=f"G{previous} kt",
            current_value=f"G{latest} kt",
            detected_at=now,
        )

    def _visibility_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        previous = snapshot.visibility_sm
        latest = current.visibility_sm
        if previous is None or latest is None or latest >= previous:
            return None

        drop = previous - latest
        if latest < self.VISIBILITY_RED_SM:
            severity = Severity.RED
            title = "Visibility Below 3 SM"
            description = f"Visibility dropped to {latest:g} SM (was {previous:g} SM)"
        elif drop > self.VISIBILITY_DROP_SM:
            severity = Severity.AMBER
            title = "Visibility Decreasing"
            description = f"Visibility dropped {drop:.1f} SM"
        else:
            return None

        return WeatherChangeEvent(
            kind=ChangeKind.VISIBILITY,
            severity=severity,
            title=title,
            description=description,
            previous_value=f"{previous:g} SM",
            current_value=f"{latest:g} SM",
            detected_at=now,
        )

    def _ceiling_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        previous = snapshot.ceiling_ft
        latest = current.ceiling_ft
        if latest is None:
            return None

        if previous is None:
            low = latest < self.CEILING_RED_FT
            return WeatherChangeEvent(
                kind=ChangeKind.CEILING,
                severity=Severity.RED if low else Severity.AMBER,
                title="Low Ceiling Developing" if low else "Ceiling Developing",
                description=f"Ceiling formed at {latest} ft AGL (previously none)",
                previous_value="None",
                current_value=f"{latest} ft AGL",
                detected_at=now,
            )

        drop = previous - latest
        if drop <= 0:
            return None
        if latest < self.CEILING_RED_FT:
            severity = Severity.RED
            title = "Ceiling Below 1000 ft"
            description = f"Ceiling dropped to {latest} ft AGL (was {previous} ft AGL)"
        elif drop > self.CEILING_DROP_FT:
            severity = Severity.AMBER
            title = "Ceiling Lowering"
            description = f"Ceiling dropped {drop} ft"
        else:
            return None

        return WeatherChangeEvent(
            kind=ChangeKind.CEILING,
            severity=severity,
            title=title,
            description=description,
            previous_value=f"{previous} ft AGL",
            current_value=f"{latest} ft AGL",
            detected_at=now,
        )

    def _weather_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        previous_codes = set(snapshot.present_weather_codes)
        new_codes = [c for c in current.present_weather_codes if c not in previous_codes]
        if not new_codes:
            return None

        previous_hazards = set(hazard_tokens(snapshot.present_weather))
        new_hazards = [h for h in hazard_tokens(current.present_weather) if h not in previous_hazards]

        if new_hazards:
            severity = Severity.RED
            title = "Hazardous Weather Reported"
            description = f"New weather phenomena: {', '.join(new_hazards)}"
        else:
            severity = Severity.AMBER
            title = "Weather Phenomena Reported"
            description = f"New weather: {' '.join(new_codes)}"

        return WeatherChangeEvent(
            kind=ChangeKind.WEATHER,
            severity=severity,
            title=title,
            description=description,
            previous_value=snapshot.present_weather or "None",
            current_value=current.present_weather or "None",
            detected_at=now,
        )

    def _special_change(self, snapshot, current, now) -> Optional[WeatherChangeEvent]:
        if not current.is_special or snapshot.is_special:
            return None
        return WeatherChangeEvent(
            kind=ChangeKind.SPECIAL,
            severity=Severity.RED,
            title="SPECI Observation Issued",
            description="A special (unscheduled) observation was issued for a significant change at the station",
            previous_value="METAR",
            current_value="SPECI",
            detected_at=now,
        )


def hazard_tokens(present_weather: Optional[str]) -> List[str]:
    """Hazard tokens contained in a present weather string."""
    if not present_weather:
        return []
    upper = present_weather.upper()
    return [token for token in HAZARDOUS_TOKENS if token in upper]
