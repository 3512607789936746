"""Exception types raised by route_wx."""


class RouteWxError(Exception):
    """Base class for route_wx errors."""


class StationNotFoundError(RouteWxError):
    """Raised when a station identifier is not in the reference table."""

    def __init__(self, identifier: str):
        super().__init__(f"Station {identifier} not found in reference table")
        self.identifier = identifier


class WeatherSourceError(RouteWxError):
    """Raised when an observation fetch fails at the HTTP boundary."""
