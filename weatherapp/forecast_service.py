"""Place name in, current conditions plus daily forecast summaries out."""
from __future__ import annotations

import argparse
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from weatherapp import config
from weatherapp.aggregation import DateLike, entries_for_date, summarize_by_day
from weatherapp.data_sources import GeoResolver, OpenWeatherGateway
from weatherapp.data_sources.base import Geocoder, WeatherDataSource
from weatherapp.errors import WeatherAppError
from weatherapp.models import Coordinates, CurrentWeather, DailySummary, ForecastEntry
from weatherapp.parsing import parse_current, parse_forecast
from utils.logging_utils import get_tagged_logger, setup_logging
logger = get_tagged_logger(__name__, tag="forecast_service")


@dataclass(frozen=True)
class WeatherReport:
    """Everything one refresh produces for a place."""
    place_name: str
    coordinates: Coordinates
    current: CurrentWeather
    forecast: Tuple[ForecastEntry, ...]
    daily: Tuple[DailySummary, ...]

    def entries_for_date(self, date: DateLike) -> List[ForecastEntry]:
        """Drill down into the raw forecast steps of one day."""
        return entries_for_date(self.forecast, date)


class WeatherService:
    """Run geocoding, both weather fetches, parsing and daily aggregation."""

    def __init__(
        self,
        geocoder: Geocoder,
        data_source: WeatherDataSource,
        *,
        concurrent_fetches: bool = True,
    ) -> None:
        self.geocoder = geocoder
        self.data_source = data_source
        self.concurrent_fetches = concurrent_fetches

    def lookup(self, place_name: str) -> Optional[Coordinates]:
        """Resolve ``place_name``; None when the geocoder has no match."""
        return self.geocoder.resolve(place_name)

    def get_report(self, place_name: str) -> Optional[WeatherReport]:
        """
        Build a full report for ``place_name``.

        Returns None when the place cannot be found. LookupFailed,
        TransportError and ParseError propagate unchanged so callers can tell
        them apart.
        """
        coords = self.lookup(place_name)
        if coords is None:
            return None
        return self.get_report_for(coords, place_name=place_name)

    def get_report_for(self, coords: Coordinates, *, place_name: str = "") -> WeatherReport:
        """Build a report for already-resolved coordinates."""
        logger.info(
            "Fetching weather",
            extra={"place_name": place_name, "latitude": coords.latitude, "longitude": coords.longitude},
        )
        current_raw, forecast_raw = self._fetch_both(coords)

        current = parse_current(current_raw)
        forecast = parse_forecast(forecast_raw)
        daily = summarize_by_day(forecast)

        logger.info(
            "Built weather report",
            extra={"place_name": place_name, "entries_count": len(forecast), "days_count": len(daily)},
        )
        return WeatherReport(
            place_name=place_name,
            coordinates=coords,
            current=current,
            forecast=tuple(forecast),
            daily=tuple(daily),
        )

    def _fetch_both(self, coords: Coordinates) -> Tuple[str, str]:
        # The two requests do not depend on each other.
        if not self.concurrent_fetches:
            return self.data_source.fetch_current(coords), self.data_source.fetch_forecast(coords)

        with ThreadPoolExecutor(max_workers=2) as pool:
            current_future = pool.submit(self.data_source.fetch_current, coords)
            forecast_future = pool.submit(self.data_source.fetch_forecast, coords)
            # exceptions from either worker re-raise here
            return current_future.result(), forecast_future.result()


def build_weather_service(settings: config.Settings | None = None) -> WeatherService:
    """Wire configuration into the resolver, gateway and service."""
    settings = settings or config.settings
    geocoder = GeoResolver(
        base_url=settings.geocoding_url,
        timeout=settings.http_timeout_seconds,
        user_agent=settings.user_agent,
    )
    gateway = OpenWeatherGateway(
        api_key=settings.openweather_api_key,
        base_url=settings.openweather_base_url,
        timeout=settings.http_timeout_seconds,
        user_agent=settings.user_agent,
    )
    return WeatherService(geocoder, gateway, concurrent_fetches=settings.concurrent_fetches)


def format_report(report: WeatherReport) -> str:
    """Plain-text rendering used by the command line."""
    cur = report.current
    lines = [
        f"{report.place_name} ({report.coordinates.latitude:.4f}, {report.coordinates.longitude:.4f})",
        f"  now {cur.observed_time}: {cur.temperature_c}°C, rain {cur.rain_mm} mm, "
        f"wind {cur.wind_speed_ms} m/s [{cur.icon_code}]",
    ]
    for day in report.daily:
        low = "?" if day.min_temperature_c is None else day.min_temperature_c
        high = "?" if day.max_temperature_c is None else day.max_temperature_c
        lines.append(f"  {day.date}: {low}...{high}°C [{day.representative_icon}]")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point: print the report for a place name."""
    parser = argparse.ArgumentParser(description="Current weather and daily forecast for a place.")
    parser.add_argument("place", nargs="+", help="place name, e.g. 'Tampere, Finland'")
    parser.add_argument("--day", help="also list the forecast steps for this date (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    setup_logging(level=config.settings.log_level, job_name="weatherapp-cli")
    place_name = " ".join(args.place)

    try:
        service = build_weather_service()
        report = service.get_report(place_name)
    except (ValueError, WeatherAppError) as exc:
        logger.error(f"Could not get weather for {place_name!r}: {exc}")
        return 1

    if report is None:
        print(f"Coordinates not found for location: {place_name}")
        return 2

    print(format_report(report))
    if args.day:
        for entry in report.entries_for_date(args.day):
            print(f"    {entry.hour_label}  {entry.temperature_c}°C  rain {entry.rain_mm} mm  "
                  f"wind {entry.wind_speed_ms} m/s [{entry.icon_code}]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
