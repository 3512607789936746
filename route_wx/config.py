#!/usr/bin/env python3

"""
Application settings read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from route_wx.route.corridor import StationCorridorResolver
from route_wx.sources.avwx import AvWxSource

logger = logging.getLogger(__name__)


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, value, default)
        return default


@dataclass(frozen=True)
class Settings:
    """
    Settings for the command line and embedding applications.

    Environment variables:
        ROUTE_WX_STATIONS: Path to the station CSV (OurAirports format)
        ROUTE_WX_AVWX_URL: Aviation weather API base URL
        ROUTE_WX_TIMEOUT: Fetch timeout in seconds
        ROUTE_WX_CORRIDOR_NM: Corridor half-width
        ROUTE_WX_GAP_NM: Coverage gap threshold
        LOG_LEVEL: Logging level name
    """

    stations_path: Optional[str] = None
    avwx_url: str = AvWxSource.BASE_URL
    timeout: float = AvWxSource.DEFAULT_TIMEOUT
    corridor_nm: float = StationCorridorResolver.DEFAULT_CORRIDOR_NM
    gap_threshold_nm: float = StationCorridorResolver.DEFAULT_GAP_THRESHOLD_NM
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        env = os.environ if env is None else env
        return cls(
            stations_path=env.get("ROUTE_WX_STATIONS") or None,
            avwx_url=env.get("ROUTE_WX_AVWX_URL") or AvWxSource.BASE_URL,
            timeout=_float_env(env, "ROUTE_WX_TIMEOUT", AvWxSource.DEFAULT_TIMEOUT),
            corridor_nm=_float_env(env, "ROUTE_WX_CORRIDOR_NM", StationCorridorResolver.DEFAULT_CORRIDOR_NM),
            gap_threshold_nm=_float_env(env, "ROUTE_WX_GAP_NM", StationCorridorResolver.DEFAULT_GAP_THRESHOLD_NM),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def logging_level(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO
