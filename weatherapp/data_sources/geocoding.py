"""Place-name lookup against the Nominatim search API."""
from __future__ import annotations

from typing import Optional

import requests
from pydantic import BaseModel, ValidationError

from weatherapp.errors import LookupFailed
from weatherapp.models import Coordinates
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="geocoding")

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_TIMEOUT = 5.0


class _Candidate(BaseModel):
    """One Nominatim result; lat/lon arrive as numeric strings."""
    lat: float
    lon: float
    display_name: Optional[str] = None


class GeoResolver:
    """Resolve free-text place names to coordinates, first match wins."""

    def __init__(
        self,
        *,
        base_url: str = NOMINATIM_SEARCH_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "weatherapp/0.1",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        # None means one short-lived connection per call (requests.get).
        self.session = session
        # Nominatim's usage policy rejects requests without an identifying agent.
        self.headers = {"User-Agent": user_agent}

    def resolve(self, place_name: str) -> Optional[Coordinates]:
        """
        Look up ``place_name`` and return the first candidate's coordinates.

        Returns None when the geocoder has no match. Raises LookupFailed when the
        lookup itself breaks (network, HTTP status, unreadable response).
        """
        if not place_name or not place_name.strip():
            raise ValueError("place_name must be a non-empty string")

        params = {"q": place_name, "format": "json"}
        try:
            http = self.session or requests
            resp = http.get(self.base_url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise LookupFailed(f"Geocoding request failed for {place_name!r}: {exc}",
                               place_name=place_name) from exc

        if resp.status_code >= 400:
            raise LookupFailed(f"Geocoding returned HTTP {resp.status_code} for {place_name!r}",
                               place_name=place_name)

        try:
            candidates = resp.json()
        except ValueError as exc:
            raise LookupFailed(f"Invalid geocoding JSON for {place_name!r}: {exc}",
                               place_name=place_name) from exc

        if not isinstance(candidates, list):
            raise LookupFailed(f"Unexpected geocoding response shape for {place_name!r}",
                               place_name=place_name)

        if not candidates:
            logger.info("No geocoding match", extra={"place_name": place_name})
            return None

        try:
            first = _Candidate.model_validate(candidates[0])
        except ValidationError as exc:
            raise LookupFailed(f"Geocoding candidate without coordinates for {place_name!r}",
                               place_name=place_name) from exc

        logger.info(
            "Resolved place name",
            extra={"place_name": place_name, "latitude": first.lat, "longitude": first.lon,
                   "candidates": len(candidates)},
        )
        return Coordinates(latitude=first.lat, longitude=first.lon, display_name=first.display_name)
