"""Aviation Weather (aviationweather.gov) API source for live METAR data."""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional

import requests

from route_wx.errors import WeatherSourceError
from route_wx.models.observation import WeatherObservation
from route_wx.weather.parser import WeatherParser

logger = logging.getLogger(__name__)


class AvWxSource:
    """
    Fetch latest METARs from the aviationweather.gov API.

    Returns raw text format, normalized via WeatherParser into
    WeatherObservation objects. A malformed line becomes a degraded
    placeholder instead of being dropped. Identifiers are sent comma-joined,
    in batches of at most BATCH_SIZE per request.

    Example:
        source = AvWxSource(timeout=10)
        latest = source.fetch_latest(["KJFK", "KBOS"])
        print(latest["KJFK"].flight_category)
    """

    BASE_URL = "https://aviationweather.gov/api/data"
    BATCH_SIZE = 400
    DEFAULT_TIMEOUT = 15
    USER_AGENT = "route-wx/0.1 (aviation weather tool)"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: Optional[str] = None,
    ):
        """
        Args:
            session: Optional requests.Session for dependency injection (testing).
            timeout: HTTP request timeout in seconds.
            base_url: Override of BASE_URL.
        """
        self._session = session or requests.Session()
        self._timeout = timeout
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._session.headers.setdefault("User-Agent", self.USER_AGENT)

    def fetch_observations(
        self,
        identifiers: List[str],
        timeout: Optional[float] = None,
        raise_errors: bool = False,
    ) -> List[WeatherObservation]:
        """
        Fetch the latest METAR for each station.

        Args:
            identifiers: Station identifiers.
            timeout: Per request timeout, defaults to the source timeout.
            raise_errors: Raise WeatherSourceError instead of logging and
                returning what was fetched so far.

        Returns:
            List of observations (degraded placeholders for malformed lines).
        """
        now = datetime.now(timezone.utc)
        observations = []
        for batch in self._batches(identifiers):
            raw = self._fetch_raw("metar", {
                "ids": ",".join(batch),
                "format": "raw",
            }, timeout=timeout, raise_errors=raise_errors)
            for line in raw.splitlines():
                line = line.strip()
                if not line:
                    continue
                observation = WeatherParser.normalize(line, now=now)
                if observation is not None:
                    observations.append(observation)
        return observations

    def fetch_latest(
        self,
        identifiers: List[str],
        timeout: Optional[float] = None,
        raise_errors: bool = False,
    ) -> Dict[str, WeatherObservation]:
        """
        Fetch observations and keep the most recent one per station.

        A parsed observation always wins over a degraded placeholder.

        Returns:
            Dict mapping station identifier to its latest observation.
        """
        latest: Dict[str, WeatherObservation] = {}
        for obs in self.fetch_observations(identifiers, timeout=timeout, raise_errors=raise_errors):
            current = latest.get(obs.station)
            if current is None or _newer(obs, current):
                latest[obs.station] = obs
        return latest

    def _fetch_raw(
        self,
        endpoint: str,
        params: dict,
        timeout: Optional[float] = None,
        raise_errors: bool = False,
    ) -> str:
        """
        Make HTTP GET request and return raw text.

        Handles 204 (no data) by returning empty string.
        """
        url = f"{self._base_url}/{endpoint}"
        try:
            response = self._session.get(url, params=params, timeout=timeout or self._timeout)
            if response.status_code == 204:
                return ""
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            if raise_errors:
                raise WeatherSourceError(f"AvWx fetch failed for {endpoint}: {e}") from e
            logger.warning("AvWx fetch failed for %s: %s", endpoint, e)
            return ""

    def _batches(self, identifiers: List[str]) -> Iterator[List[str]]:
        """Yield batches of identifiers respecting the API batch size limit."""
        cleaned = list(dict.fromkeys(i.strip().upper() for i in identifiers if i.strip()))
        for i in range(0, len(cleaned), self.BATCH_SIZE):
            yield cleaned[i:i + self.BATCH_SIZE]


def _newer(candidate: WeatherObservation, current: WeatherObservation) -> bool:
    if candidate.degraded != current.degraded:
        return current.degraded
    if candidate.observed_at is None:
        return False
    if current.observed_at is None:
        return True
    return candidate.observed_at > current.observed_at
