"""Decode OpenWeatherMap payloads into :mod:`weatherapp.models` records.

The provider reports temperatures in Kelvin. Current conditions are converted
to Celsius with two decimals, forecast steps with one; downstream comparisons
(daily min/max) are made on those rounded values, so the two precisions are
not interchangeable.

Anything that does not look like the documented payload surfaces as
:class:`~weatherapp.errors.ParseError`; pydantic and JSON decoding errors stop
here.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictStr, ValidationError

from weatherapp.errors import ParseError
from weatherapp.models import CurrentWeather, ForecastEntry
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="parsing")

KELVIN_OFFSET = 273.15
CURRENT_TEMPERATURE_DIGITS = 2
FORECAST_TEMPERATURE_DIGITS = 1

RawPayload = Union[str, bytes, bytearray, Mapping[str, Any]]


def _reject_text(value: Any) -> Any:
    """Numbers must arrive as JSON numbers, not strings or booleans."""
    if isinstance(value, (str, bytes, bool)):
        raise ValueError("expected a number")
    return value


Number = Annotated[float, BeforeValidator(_reject_text)]
Integer = Annotated[int, BeforeValidator(_reject_text)]


class _ProviderModel(BaseModel):
    """Extra-tolerant base for provider payload shapes."""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class _Main(_ProviderModel):
    temp: Number


class _Wind(_ProviderModel):
    speed: Number


class _Condition(_ProviderModel):
    icon: StrictStr


class _Rain(_ProviderModel):
    last_hour: Optional[Number] = Field(default=None, alias="1h")
    last_3_hours: Optional[Number] = Field(default=None, alias="3h")


class _CurrentPayload(_ProviderModel):
    observed_epoch: Integer = Field(alias="dt")
    utc_offset_seconds: Integer = Field(default=0, alias="timezone")
    main: _Main
    wind: _Wind
    weather: List[_Condition] = Field(min_length=1)
    rain: Optional[_Rain] = None


class _ForecastStep(_ProviderModel):
    dt_txt: StrictStr = Field(pattern=r"^\d{4}-\d{2}-\d{2} \d{2}")
    main: _Main
    wind: _Wind
    weather: List[_Condition] = Field(min_length=1)
    rain: Optional[_Rain] = None


class _ForecastPayload(_ProviderModel):
    steps: List[_ForecastStep] = Field(alias="list", min_length=1)


_M = TypeVar("_M", bound=_ProviderModel)


def kelvin_to_celsius(kelvin: float, ndigits: int) -> float:
    """Convert Kelvin to Celsius, rounded to ``ndigits`` decimals."""
    return round(kelvin - KELVIN_OFFSET, ndigits)


def _describe(exc: ValidationError) -> str:
    """Short 'where and what' for the first validation problem."""
    errors = exc.errors()
    if not errors:
        return "unexpected payload"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{location}: {first.get('msg', 'invalid value')}"


def _validate(model: Type[_M], payload: RawPayload, *, what: str) -> _M:
    """Decode ``payload`` (raw JSON or an already-decoded mapping) into ``model``."""
    try:
        if isinstance(payload, (str, bytes, bytearray)):
            return model.model_validate_json(payload)
        return model.model_validate(payload)
    except ValidationError as exc:
        context = f"{what} {_describe(exc)}"
        logger.warning("Rejected provider payload", extra={"context": context})
        raise ParseError(context=context) from exc


def _rain_mm(rain: Optional[_Rain], *, period: str) -> float:
    """Precipitation for ``period`` ("1h" or "3h"); absent means 0."""
    if rain is None:
        return 0.0
    value = rain.last_hour if period == "1h" else rain.last_3_hours
    return float(value) if value is not None else 0.0


def parse_current(payload: RawPayload) -> CurrentWeather:
    """Build a :class:`CurrentWeather` from a current-weather response."""
    data = _validate(_CurrentPayload, payload, what="current weather")

    try:
        offset = timezone(timedelta(seconds=data.utc_offset_seconds))
        observed_at = datetime.fromtimestamp(data.observed_epoch, tz=offset)
    except (OverflowError, OSError, ValueError) as exc:
        raise ParseError(context=f"current weather dt/timezone: out of range ({exc})") from exc

    return CurrentWeather(
        observed_at=observed_at,
        temperature_c=kelvin_to_celsius(data.main.temp, CURRENT_TEMPERATURE_DIGITS),
        rain_mm=_rain_mm(data.rain, period="1h"),
        wind_speed_ms=float(data.wind.speed),
        icon_code=data.weather[0].icon,
    )


def parse_forecast(payload: RawPayload) -> List[ForecastEntry]:
    """Build the ordered list of :class:`ForecastEntry` from a forecast response.

    Order is the provider's (ascending time); nothing is re-sorted.
    """
    data = _validate(_ForecastPayload, payload, what="forecast")

    entries = [
        ForecastEntry(
            timestamp=step.dt_txt,
            temperature_c=kelvin_to_celsius(step.main.temp, FORECAST_TEMPERATURE_DIGITS),
            rain_mm=_rain_mm(step.rain, period="3h"),
            wind_speed_ms=float(step.wind.speed),
            icon_code=step.weather[0].icon,
        )
        for step in data.steps
    ]
    logger.debug("Parsed forecast entries", extra={"entries_count": len(entries)})
    return entries
