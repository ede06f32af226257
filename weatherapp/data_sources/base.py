"""Interfaces for the two remote collaborators of the weather pipeline."""

from __future__ import annotations

from typing import Optional, Protocol

from weatherapp.models import Coordinates


class Geocoder(Protocol):
    """Anything that can turn a place name into coordinates."""

    def resolve(self, place_name: str) -> Optional[Coordinates]:
        """Return the first match, or None when the place is unknown."""
        ...


class WeatherDataSource(Protocol):
    """Anything that can return raw current-weather and forecast payloads."""

    def fetch_current(self, coords: Coordinates) -> str:
        """Return the raw current-weather response body."""
        ...

    def fetch_forecast(self, coords: Coordinates) -> str:
        """Return the raw forecast response body."""
        ...
