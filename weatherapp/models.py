"""Typed records handed from the pipeline to whatever presents them."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Coordinates:
    """A geocoded point. ``display_name`` is the geocoder's label for the match."""
    latitude: float
    longitude: float
    display_name: Optional[str] = None


@dataclass(frozen=True)
class CurrentWeather:
    """Point-in-time conditions from the current-weather endpoint."""
    observed_at: dt.datetime  # timezone-aware
    temperature_c: float
    wind_speed_ms: float
    icon_code: str
    rain_mm: float = 0.0

    @property
    def observed_time(self) -> str:
        """Observation time as ``HH:MM`` in the location's own offset."""
        return self.observed_at.strftime("%H:%M")


@dataclass(frozen=True)
class ForecastEntry:
    """One 3-hour forecast step.

    ``timestamp`` is the provider's ``dt_txt`` string, kept verbatim; it is
    already in the local time the forecast is meant to be read in.
    """
    timestamp: str
    temperature_c: float
    wind_speed_ms: float
    icon_code: str
    rain_mm: float = 0.0

    @property
    def date_key(self) -> str:
        """Calendar date (``YYYY-MM-DD``) taken from the timestamp text."""
        return self.timestamp[:10]

    @property
    def hour_label(self) -> str:
        """Hour of day as ``HH.00``."""
        return f"{self.timestamp[11:13]}.00"


@dataclass(frozen=True)
class DailySummary:
    """Min/max temperature and icon for one calendar date.

    ``None`` min/max means the day had no temperatures to fold.
    """
    date: str
    min_temperature_c: Optional[float]
    max_temperature_c: Optional[float]
    representative_icon: str

    @property
    def calendar_date(self) -> dt.date:
        return dt.date.fromisoformat(self.date)
