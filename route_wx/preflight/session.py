"""Preflight monitoring session state."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from dateutil.parser import isoparse

from route_wx.models.observation import WeatherObservation
from route_wx.weather.change_detector import WeatherChangeEvent, sort_changes

SESSION_TIMEOUT = timedelta(minutes=90)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PreflightSession:
    """
    One preflight monitoring window for a single station.

    The session is owned by the caller and handed to PreflightMonitor for
    each poll. Expiry is derived from the wall clock every time it is read,
    so skipped polls never extend a session.

    Attributes:
        station: Monitored station identifier
        snapshot: Observation captured at briefing time
        started_at: Session start (timezone aware)
        last_checked_at: Time of the last successful poll
        changes: Detected changes, at most one per kind, red first then newest
        active: False once stopped or observed expired
        generation: Bumped on stop so in-flight polls can be discarded
        timeout: Session lifetime
    """

    station: str
    snapshot: WeatherObservation
    started_at: datetime
    last_checked_at: Optional[datetime] = None
    changes: List[WeatherChangeEvent] = field(default_factory=list)
    active: bool = True
    generation: int = 0
    timeout: timedelta = SESSION_TIMEOUT

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True once more than ``timeout`` has elapsed since start."""
        now = now or _utcnow()
        return now - self.started_at > self.timeout

    def is_running(self, now: Optional[datetime] = None) -> bool:
        return self.active and not self.is_expired(now)

    def elapsed_minutes(self, now: Optional[datetime] = None) -> int:
        """Whole minutes since the session started (0 when inactive)."""
        if not self.active:
            return 0
        now = now or _utcnow()
        return max(0, int((now - self.started_at).total_seconds() // 60))

    @property
    def has_urgent_change(self) -> bool:
        return any(change.is_red for change in self.changes)

    def last_checked_text(self, now: Optional[datetime] = None) -> Optional[str]:
        """Human readable age of the last check, e.g. "3 min ago"."""
        if self.last_checked_at is None:
            return None
        now = now or _utcnow()
        minutes = int((now - self.last_checked_at).total_seconds() // 60)
        if minutes < 1:
            return "Just now"
        if minutes == 1:
            return "1 min ago"
        return f"{minutes} min ago"

    def merge_changes(self, events: List[WeatherChangeEvent]) -> List[WeatherChangeEvent]:
        """
        Merge detected events into the session, keeping the latest per kind.

        Args:
            events: Events from one poll

        Returns:
            The events whose condition was not already reported in the session
        """
        if not events:
            return []

        known = {change.signature for change in self.changes}
        fresh = [event for event in events if event.signature not in known]

        by_kind = {change.kind: change for change in self.changes}
        for event in events:
            by_kind[event.kind] = event

        # Replaced wholesale so readers never see a half merged list
        self.changes = sort_changes(list(by_kind.values()))
        return fresh

    def clear_changes(self) -> None:
        self.changes = []

    def to_dict(self) -> dict:
        """Serialize to dictionary; instants become ISO-8601 strings."""
        return {
            'station': self.station,
            'snapshot': self.snapshot.to_dict(),
            'started_at': self.started_at.isoformat(),
            'last_checked_at': self.last_checked_at.isoformat() if self.last_checked_at else None,
            'changes': [change.to_dict() for change in self.changes],
            'active': self.active,
            'generation': self.generation,
            'timeout_minutes': self.timeout.total_seconds() / 60,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PreflightSession':
        """Create PreflightSession from dictionary."""
        last_checked = data.get('last_checked_at')
        timeout_minutes = data.get('timeout_minutes')
        return cls(
            station=data['station'],
            snapshot=WeatherObservation.from_dict(data['snapshot']),
            started_at=isoparse(data['started_at']),
            last_checked_at=isoparse(last_checked) if last_checked else None,
            changes=[WeatherChangeEvent.from_dict(c) for c in data.get('changes', [])],
            active=data.get('active', True),
            generation=data.get('generation', 0),
            timeout=timedelta(minutes=timeout_minutes) if timeout_minutes else SESSION_TIMEOUT,
        )

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"PreflightSession({self.station} {state}, {len(self.changes)} changes)"
