"""Preflight monitor: periodic re-check of a station against its briefing snapshot."""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, TYPE_CHECKING

from route_wx.errors import WeatherSourceError
from route_wx.models.observation import WeatherObservation
from route_wx.preflight.notifications import LoggingNotifier, Notifier
from route_wx.preflight.session import SESSION_TIMEOUT, PreflightSession
from route_wx.weather.change_detector import WeatherChangeDetector, WeatherChangeEvent

if TYPE_CHECKING:
    from route_wx.sources.avwx import AvWxSource

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PreflightMonitor:
    """
    Drives preflight sessions: start, poll, stop.

    The monitor keeps no per-session state; everything lives in the
    PreflightSession passed to each call. A poll fetches the latest
    observation, compares it with the snapshot, merges the changes into the
    session and sends at most one notification.

    Example:
        monitor = PreflightMonitor(notifier=LoggingNotifier())
        session = monitor.start("KJFK", snapshot)
        task = monitor.run_in_background(session)
        ...
        task.stop()
    """

    POLL_INTERVAL = timedelta(minutes=2)
    SESSION_TIMEOUT = SESSION_TIMEOUT
    DEFAULT_FETCH_TIMEOUT = 15

    def __init__(
        self,
        source: Optional['AvWxSource'] = None,
        notifier: Optional[Notifier] = None,
        detector: Optional[WeatherChangeDetector] = None,
        clock: Optional[Callable[[], datetime]] = None,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        poll_interval: Optional[timedelta] = None,
        session_timeout: Optional[timedelta] = None,
    ):
        """
        Args:
            source: AvWxSource instance. Created automatically if not provided.
            notifier: Notification delivery, defaults to LoggingNotifier.
            detector: WeatherChangeDetector to classify changes.
            clock: Callable returning the current aware datetime.
            fetch_timeout: Timeout in seconds for each observation fetch.
            poll_interval: Override of POLL_INTERVAL.
            session_timeout: Override of SESSION_TIMEOUT for new sessions.
        """
        self._source = source
        self.notifier = notifier or LoggingNotifier()
        self.detector = detector or WeatherChangeDetector()
        self._clock = clock or _utcnow
        self.fetch_timeout = fetch_timeout
        self.poll_interval = poll_interval or self.POLL_INTERVAL
        self.session_timeout = session_timeout or self.SESSION_TIMEOUT

    def _get_source(self) -> 'AvWxSource':
        if self._source is None:
            from route_wx.sources.avwx import AvWxSource
            self._source = AvWxSource()
        return self._source

    def now(self) -> datetime:
        return self._clock()

    def start(self, station: str, snapshot: WeatherObservation) -> PreflightSession:
        """
        Begin monitoring a station against its briefing observation.

        Returns:
            A new active PreflightSession
        """
        started = self.now()
        session = PreflightSession(
            station=station.strip().upper(),
            snapshot=snapshot,
            started_at=started,
            last_checked_at=started,
            timeout=self.session_timeout,
        )
        logger.info("Preflight monitoring started for %s", session.station)
        return session

    def stop(self, session: PreflightSession) -> None:
        """Stop immediately; a poll already in flight will be discarded."""
        session.generation += 1
        if session.active:
            session.active = False
            logger.info(
                "Preflight monitoring stopped for %s after %d min",
                session.station, int((self.now() - session.started_at).total_seconds() // 60),
            )

    def check(self, session: PreflightSession) -> bool:
        """
        Whether the session is still running.

        A session found expired is stopped here.
        """
        if not session.active:
            return False
        if session.is_expired(self.now()):
            logger.info("Preflight session for %s expired", session.station)
            self.stop(session)
            return False
        return True

    def poll(self, session: PreflightSession) -> List[WeatherChangeEvent]:
        """
        One fetch, compare and merge cycle.

        A failed fetch leaves the session untouched; the next poll retries.

        Returns:
            Events not previously reported in the session (empty when none,
            on failure, or when the session stopped during the fetch)
        """
        if not self.check(session):
            return []

        generation = session.generation
        try:
            latest = self._get_source().fetch_latest(
                [session.station], timeout=self.fetch_timeout, raise_errors=True,
            )
        except WeatherSourceError as e:
            logger.warning("Preflight poll failed for %s: %s", session.station, e)
            return []

        if session.generation != generation or not session.active:
            logger.debug("Discarding poll result for stopped session %s", session.station)
            return []

        current = latest.get(session.station)
        if current is None or current.degraded:
            logger.warning("Preflight poll for %s returned no usable observation", session.station)
            return []

        now = self.now()
        events = self.detector.detect(session.snapshot, current, now=now)
        fresh = session.merge_changes(events)
        session.last_checked_at = now

        if fresh:
            logger.info("%d new weather changes for %s", len(fresh), session.station)
            self._notify(session.station, fresh)
        return fresh

    def _notify(self, station: str, fresh: List[WeatherChangeEvent]) -> None:
        red = [event for event in fresh if event.is_red]
        if red:
            titles = ", ".join(event.title for event in red)
            self._send(f"Weather Alert - {station}", f"{titles}. Review conditions before departure.")
            return

        count = len(fresh)
        plural = "s" if count > 1 else ""
        self._send(f"Weather Update - {station}", f"{count} change{plural} detected since your briefing.")

    def _send(self, title: str, body: str) -> None:
        try:
            self.notifier.send(title, body)
        except Exception as e:
            logger.warning("Notification failed (%s): %s", title, e)

    def run_in_background(self, session: PreflightSession) -> 'MonitorTask':
        """Start a daemon thread polling the session every poll_interval."""
        task = MonitorTask(self, session)
        task.start()
        return task


class MonitorTask:
    """
    Fixed interval timer for one session.

    The thread waits one interval, polls, and repeats until stopped or the
    session is no longer running.
    """

    def __init__(self, monitor: PreflightMonitor, session: PreflightSession):
        self.monitor = monitor
        self.session = session
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            name=f"preflight-{session.station}",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        interval = self.monitor.poll_interval.total_seconds()
        while not self._stop_event.wait(interval):
            if not self.monitor.check(self.session):
                break
            self.monitor.poll(self.session)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the session and wait for the thread to finish."""
        self._stop_event.set()
        self.monitor.stop(self.session)
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout=timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()
