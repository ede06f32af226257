"""Raw HTTP access to the OpenWeatherMap current-weather and forecast endpoints."""
from __future__ import annotations

from typing import Optional

import requests

from weatherapp.errors import TransportError
from weatherapp.models import Coordinates
from utils.logging_utils import get_tagged_logger, mask_url_secrets
logger = get_tagged_logger(__name__, tag="openweather_client")

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
CURRENT_ENDPOINT = "weather"
FORECAST_ENDPOINT = "forecast"
DEFAULT_TIMEOUT = 5.0


class OpenWeatherGateway:
    """Issue one GET per call and hand back the body text untouched.

    No retries: a failed call raises TransportError and the caller decides what
    to do next.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "weatherapp/0.1",
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise ValueError("An OpenWeatherMap API key is required (set WEATHERAPP_OPENWEATHER_API_KEY)")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # None means one short-lived connection per call (requests.get), so
        # concurrent fetches share no cookie jar or connection pool.
        self.session = session
        self.headers = {"User-Agent": user_agent}

    def fetch_current(self, coords: Coordinates) -> str:
        """Return the current-weather response body for ``coords``."""
        return self._get(CURRENT_ENDPOINT, coords)

    def fetch_forecast(self, coords: Coordinates) -> str:
        """Return the 5 day / 3 hour forecast response body for ``coords``."""
        return self._get(FORECAST_ENDPOINT, coords)

    def _get(self, endpoint: str, coords: Coordinates) -> str:
        url = f"{self.base_url}/{endpoint}"
        params = {"lat": coords.latitude, "lon": coords.longitude, "appid": self.api_key}

        try:
            http = self.session or requests
            resp = http.get(url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Request to {endpoint!r} failed: {exc}", endpoint=endpoint) from exc

        logger.debug(
            "OpenWeatherMap response",
            extra={"url": mask_url_secrets(str(getattr(resp, "url", url))), "status": resp.status_code},
        )

        if resp.status_code >= 400:
            snippet = (resp.text or "")[:200]
            raise TransportError(
                f"HTTP {resp.status_code} from {endpoint!r}. Body: {snippet}",
                endpoint=endpoint,
                status_code=resp.status_code,
            )
        return resp.text
