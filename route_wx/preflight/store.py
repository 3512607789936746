"""Persistence of preflight sessions in a key-value store."""

import json
import logging
from datetime import datetime, timezone
from typing import MutableMapping, Optional

from route_wx.preflight.session import PreflightSession

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Saves the preflight session as a JSON document under a single key.

    Any mutable string to string mapping works as backend (a dict, a shelve,
    a key-value client wrapper). Instants are stored as ISO-8601 strings and
    come back as aware datetimes.

    Example:
        store = SessionStore(backend)
        store.save(session)
        restored = store.load()
    """

    DEFAULT_KEY = "preflight"

    def __init__(self, backend: MutableMapping[str, str], key: str = DEFAULT_KEY):
        self._backend = backend
        self.key = key

    def save(self, session: PreflightSession) -> None:
        self._backend[self.key] = json.dumps(session.to_dict())

    def load(self, now: Optional[datetime] = None) -> Optional[PreflightSession]:
        """
        Load the stored session.

        Expired or unreadable sessions are removed and None is returned.
        """
        raw = self._backend.get(self.key)
        if raw is None:
            return None

        try:
            session = PreflightSession.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable preflight session: %s", e)
            self.clear()
            return None

        if session.is_expired(now or datetime.now(timezone.utc)):
            logger.info("Stored preflight session for %s expired, clearing", session.station)
            self.clear()
            return None
        return session

    def clear(self) -> None:
        self._backend.pop(self.key, None)
