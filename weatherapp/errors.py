"""Failure types raised at the geocoding, transport and parsing boundaries.

"Place not found" is not in this list: the resolver returns ``None`` for it,
because an unknown place name is an ordinary answer, not a failure.
"""

from __future__ import annotations

from typing import Optional


class WeatherAppError(Exception):
    """Base class for every error this package raises on purpose."""


class TransportError(WeatherAppError):
    """The weather provider could not be reached or answered with an HTTP error."""

    def __init__(self, message: str, *, endpoint: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class LookupFailed(WeatherAppError):
    """Geocoding broke down (network error, HTTP error, or an unreadable answer)."""

    def __init__(self, message: str, *, place_name: Optional[str] = None):
        super().__init__(message)
        self.place_name = place_name


class ParseError(WeatherAppError):
    """A provider payload did not have the expected JSON shape."""

    DEFAULT_MESSAGE = "could not parse weather data"

    def __init__(self, message: str = DEFAULT_MESSAGE, *, context: Optional[str] = None):
        super().__init__(message if not context else f"{message}: {context}")
        self.context = context
