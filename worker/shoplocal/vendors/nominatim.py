"""Zip code / city lookups against OpenStreetMap Nominatim."""

import logging
from typing import Optional

import requests

from shoplocal.core.config import Settings
from shoplocal.models import Coordinate

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
USER_AGENT = "ShopLocal Marketplace Directory"


class GeocodingError(RuntimeError):
    """Raised when the geocoding service cannot be reached or errors out."""


def geocode(settings: Settings, query: str) -> Optional[Coordinate]:
    query = (query or "").strip()
    if not query:
        raise ValueError("Please enter a zip code or city name")

    params = {
        "format": "json",
        "q": query,
        "countrycodes": settings.geocode_country_codes,
        "limit": 1,
    }
    try:
        response = _SESSION.get(
            f"{settings.nominatim_url}/search",
            params=params,
            headers={"User-Agent": USER_AGENT},
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
        results = response.json()
    except (requests.RequestException, ValueError) as exc:
        logger.error("Geocoding failed for query=%s: %s", query, exc)
        raise GeocodingError(f"Unable to find location for {query!r}") from exc

    if not results:
        logger.info("No geocoding match for query=%s", query)
        return None

    first = results[0]
    try:
        return Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Malformed geocoding result for query=%s: %s", query, first)
        raise GeocodingError("Geocoding service returned a malformed result") from exc
