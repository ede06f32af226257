import datetime as dt
import unittest

from fastapi.testclient import TestClient

from weatherapp.api import get_weather_service
from weatherapp.data_sources.geocoding import GeoResolver
from weatherapp.errors import LookupFailed, ParseError, TransportError
from weatherapp.forecast_service import WeatherReport, WeatherService
from weatherapp.main import app as fastapi_app
from weatherapp.models import Coordinates, CurrentWeather, DailySummary, ForecastEntry


def _mock_report(place="Tampere") -> WeatherReport:
    tz = dt.timezone(dt.timedelta(hours=2))
    forecast = (
        ForecastEntry(timestamp="2024-01-01 03:00:00", temperature_c=-3.0, wind_speed_ms=3.0,
                      icon_code="01n", rain_mm=0.0),
        ForecastEntry(timestamp="2024-01-01 06:00:00", temperature_c=-1.0, wind_speed_ms=4.0,
                      icon_code="02d", rain_mm=0.5),
        ForecastEntry(timestamp="2024-01-02 03:00:00", temperature_c=-5.0, wind_speed_ms=2.0,
                      icon_code="03d"),
    )
    return WeatherReport(
        place_name=place,
        coordinates=Coordinates(latitude=61.5, longitude=23.76, display_name="Tampere, Finland"),
        current=CurrentWeather(observed_at=dt.datetime(2024, 1, 1, 12, 0, tzinfo=tz),
                               temperature_c=26.85, wind_speed_ms=3.6, icon_code="04d", rain_mm=0.2),
        forecast=forecast,
        daily=(
            DailySummary(date="2024-01-01", min_temperature_c=-3.0, max_temperature_c=-1.0,
                         representative_icon="01n"),
            DailySummary(date="2024-01-02", min_temperature_c=-5.0, max_temperature_c=-5.0,
                         representative_icon="03d"),
        ),
    )


class StubService:
    def __init__(self, report=None, exc=None):
        self.report = report
        self.exc = exc
        self.places = []

    def get_report(self, place_name):
        self.places.append(place_name)
        if self.exc is not None:
            raise self.exc
        return self.report


class TestApi(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(fastapi_app)

    def tearDown(self):
        fastapi_app.dependency_overrides.clear()

    def _use(self, service):
        fastapi_app.dependency_overrides[get_weather_service] = lambda: service
        return service

    def test_weather_200(self):
        service = self._use(StubService(report=_mock_report()))
        resp = self.client.get("/v1/weather", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(service.places, ["Tampere"])
        self.assertEqual(data["place"], "Tampere")
        self.assertEqual(data["coordinates"]["latitude"], 61.5)
        self.assertEqual(data["current"]["temperature_c"], 26.85)
        self.assertEqual(data["current"]["observed_time"], "12:00")
        self.assertTrue(data["current"]["icon_url"].endswith("/04d.png"))
        self.assertEqual(len(data["daily"]), 2)
        self.assertEqual(data["daily"][0]["temperature_range"], "-3.0...-1.0°C")
        self.assertEqual(data["daily"][0]["icon_code"], "01n")

    def test_weather_unknown_place_404(self):
        self._use(StubService(report=None))
        resp = self.client.get("/v1/weather", params={"place": "Nowhereville"})
        self.assertEqual(resp.status_code, 404)
        self.assertIn("Nowhereville", resp.json()["detail"])

    def test_weather_lookup_failed_502(self):
        self._use(StubService(exc=LookupFailed("down", place_name="Tampere")))
        resp = self.client.get("/v1/weather", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 502)

    def test_weather_transport_error_502(self):
        self._use(StubService(exc=TransportError("HTTP 500", endpoint="weather", status_code=500)))
        resp = self.client.get("/v1/weather", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["detail"], "Weather provider unavailable.")

    def test_weather_parse_error_502(self):
        self._use(StubService(exc=ParseError(context="forecast list: Field required")))
        resp = self.client.get("/v1/weather", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["detail"], "could not parse weather data")

    def test_weather_requires_place(self):
        self._use(StubService(report=_mock_report()))
        self.assertEqual(self.client.get("/v1/weather").status_code, 422)

    def test_weather_blank_place_422(self):
        self._use(WeatherService(GeoResolver(), data_source=None))
        resp = self.client.get("/v1/weather", params={"place": "   "})
        self.assertEqual(resp.status_code, 422)
        self.assertIn("place_name", resp.json()["detail"])

    def test_day_detail_blank_place_422(self):
        self._use(StubService(exc=ValueError("place_name must be a non-empty string")))
        resp = self.client.get("/v1/weather/days/2024-01-01", params={"place": "\t"})
        self.assertEqual(resp.status_code, 422)

    def test_day_detail_200(self):
        self._use(StubService(report=_mock_report()))
        resp = self.client.get("/v1/weather/days/2024-01-01", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["date"], "2024-01-01")
        self.assertEqual([e["hour"] for e in data["entries"]], ["03.00", "06.00"])
        self.assertEqual(data["entries"][1]["rain_mm"], 0.5)

    def test_day_detail_unknown_date_404(self):
        self._use(StubService(report=_mock_report()))
        resp = self.client.get("/v1/weather/days/2024-02-01", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 404)

    def test_day_detail_bad_date_422(self):
        self._use(StubService(report=_mock_report()))
        resp = self.client.get("/v1/weather/days/tomorrow", params={"place": "Tampere"})
        self.assertEqual(resp.status_code, 422)

    def test_unconfigured_service_503(self):
        import weatherapp.api as api_mod
        from weatherapp.config import settings

        orig_key = settings.openweather_api_key
        orig_service = api_mod._service
        try:
            settings.openweather_api_key = None
            api_mod._service = None
            resp = self.client.get("/v1/weather", params={"place": "Tampere"})
            self.assertEqual(resp.status_code, 503)
        finally:
            settings.openweather_api_key = orig_key
            api_mod._service = orig_service


if __name__ == "__main__":
    unittest.main()
