"""Remote collaborators: the geocoder and the weather provider."""

from .base import Geocoder, WeatherDataSource
from .geocoding import GeoResolver
from .openweather_client import OpenWeatherGateway

__all__ = [
    "Geocoder",
    "WeatherDataSource",
    "GeoResolver",
    "OpenWeatherGateway",
]
