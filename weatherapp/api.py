"""HTTP API exposing weather reports for free-text place names."""

from datetime import date as date_type, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from .config import settings
from .errors import LookupFailed, ParseError, TransportError
from .forecast_service import WeatherReport, WeatherService, build_weather_service
from .models import CurrentWeather, DailySummary, ForecastEntry
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")

router = APIRouter()

_service: Optional[WeatherService] = None


def get_weather_service() -> WeatherService:
    """Build the service on first use so a missing API key fails per request, not at import."""
    global _service
    if _service is None:
        try:
            _service = build_weather_service(settings)
        except ValueError as exc:
            logger.error("Weather service is not configured", extra={"error": str(exc)})
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                                detail="Weather service is not configured.")
    return _service


def icon_url(icon_code: str) -> str:
    """Map a provider icon code to its image URL."""
    return f"{settings.icon_base_url}/{icon_code}.png"


def _fmt_temp(value: Optional[float]) -> str:
    return "?" if value is None else str(value)


class CoordinatesOut(BaseModel):
    """Resolved location."""
    latitude: float
    longitude: float
    display_name: Optional[str] = None


class CurrentWeatherOut(BaseModel):
    """Current conditions as shown in the weather panel."""
    observed_at: datetime
    observed_time: str
    temperature_c: float
    rain_mm: float
    wind_speed_ms: float
    icon_code: str
    icon_url: str

    @classmethod
    def from_record(cls, cur: CurrentWeather) -> "CurrentWeatherOut":
        return cls(
            observed_at=cur.observed_at,
            observed_time=cur.observed_time,
            temperature_c=cur.temperature_c,
            rain_mm=cur.rain_mm,
            wind_speed_ms=cur.wind_speed_ms,
            icon_code=cur.icon_code,
            icon_url=icon_url(cur.icon_code),
        )


class DailySummaryOut(BaseModel):
    """One day tile of the forecast strip."""
    date: str
    min_temperature_c: Optional[float] = None
    max_temperature_c: Optional[float] = None
    temperature_range: str
    icon_code: str
    icon_url: str

    @classmethod
    def from_record(cls, day: DailySummary) -> "DailySummaryOut":
        return cls(
            date=day.date,
            min_temperature_c=day.min_temperature_c,
            max_temperature_c=day.max_temperature_c,
            temperature_range=f"{_fmt_temp(day.min_temperature_c)}...{_fmt_temp(day.max_temperature_c)}°C",
            icon_code=day.representative_icon,
            icon_url=icon_url(day.representative_icon),
        )


class ForecastEntryOut(BaseModel):
    """One 3-hour step of the per-day drill-down."""
    timestamp: str
    hour: str
    temperature_c: float
    rain_mm: float
    wind_speed_ms: float
    icon_code: str
    icon_url: str

    @classmethod
    def from_record(cls, entry: ForecastEntry) -> "ForecastEntryOut":
        return cls(
            timestamp=entry.timestamp,
            hour=entry.hour_label,
            temperature_c=entry.temperature_c,
            rain_mm=entry.rain_mm,
            wind_speed_ms=entry.wind_speed_ms,
            icon_code=entry.icon_code,
            icon_url=icon_url(entry.icon_code),
        )


class WeatherResponse(BaseModel):
    """Current conditions plus the daily forecast strip."""
    place: str
    coordinates: CoordinatesOut
    current: CurrentWeatherOut
    daily: list[DailySummaryOut]


class DayDetailResponse(BaseModel):
    """Forecast steps for a single date."""
    place: str
    date: str
    entries: list[ForecastEntryOut]


def _load_report(service: WeatherService, place: str) -> WeatherReport:
    """Run the pipeline and translate its outcomes into HTTP errors."""
    try:
        report = service.get_report(place)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    except LookupFailed as exc:
        logger.warning("Geocoding failed", extra={"place_name": place, "error": str(exc)})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Location lookup failed.")
    except TransportError as exc:
        logger.warning("Weather provider unreachable", extra={"place_name": place, "error": str(exc)})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Weather provider unavailable.")
    except ParseError as exc:
        logger.warning("Unparseable weather data", extra={"place_name": place, "error": str(exc)})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=ParseError.DEFAULT_MESSAGE)

    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail=f"Coordinates not found for location: {place}")
    return report


@router.get("/weather", response_model=WeatherResponse)
def get_weather(
    place: str = Query(..., min_length=1, description="Free-text place name"),
    service: WeatherService = Depends(get_weather_service),
):
    """Current weather and up to six daily summaries for ``place``."""
    report = _load_report(service, place)
    coords = report.coordinates
    return WeatherResponse(
        place=report.place_name,
        coordinates=CoordinatesOut(latitude=coords.latitude, longitude=coords.longitude,
                                   display_name=coords.display_name),
        current=CurrentWeatherOut.from_record(report.current),
        daily=[DailySummaryOut.from_record(d) for d in report.daily],
    )


@router.get("/weather/days/{day}", response_model=DayDetailResponse)
def get_day_detail(
    day: date_type,
    place: str = Query(..., min_length=1, description="Free-text place name"),
    service: WeatherService = Depends(get_weather_service),
):
    """The raw forecast steps of one date, in time order."""
    report = _load_report(service, place)
    entries = report.entries_for_date(day)
    if not entries:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail=f"No forecast data for {day.isoformat()}.")
    return DayDetailResponse(
        place=report.place_name,
        date=day.isoformat(),
        entries=[ForecastEntryOut.from_record(e) for e in entries],
    )
