"""Application configuration helpers.

Settings are loaded once from the environment (optionally a `.env` file) and
then passed explicitly to every component that talks to the network.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DISTANCE_UNITS = {"mi", "km"}


class ConfigError(RuntimeError):
    """Raised when configuration values are unusable."""


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "https://shoplocal.kinsta.cloud"
    request_timeout: float = 10.0
    nominatim_url: str = "https://nominatim.openstreetmap.org"
    geocode_country_codes: str = "us"
    default_radius: float = 50.0
    max_radius: float = 500.0
    default_per_page: int = 12
    max_per_page: int = 100
    distance_unit: str = "mi"
    worker_port: int = 9000

    @property
    def custom_api_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/wp-json/custom-api/v1"

    @property
    def wordpress_api_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/wp-json/wp/v2"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    defaults = Settings()
    api_base_url = os.getenv("SHOPLOCAL_API_BASE_URL") or defaults.api_base_url
    nominatim_url = os.getenv("NOMINATIM_URL") or defaults.nominatim_url
    country_codes = (os.getenv("GEOCODE_COUNTRY_CODES") or defaults.geocode_country_codes).strip().lower()
    distance_unit = (os.getenv("DISTANCE_UNIT") or defaults.distance_unit).strip().lower()
    if distance_unit not in DISTANCE_UNITS:
        raise ConfigError(f"DISTANCE_UNIT must be one of {sorted(DISTANCE_UNITS)}, got {distance_unit!r}")

    default_radius = _get_float("DEFAULT_RADIUS", defaults.default_radius)
    max_radius = _get_float("MAX_RADIUS", defaults.max_radius)
    default_per_page = _get_int("DEFAULT_PER_PAGE", defaults.default_per_page)
    max_per_page = _get_int("MAX_PER_PAGE", defaults.max_per_page)

    if default_radius > max_radius:
        logger.warning(
            "DEFAULT_RADIUS (%s) exceeds MAX_RADIUS (%s); searches will be capped at MAX_RADIUS.",
            default_radius,
            max_radius,
        )
    if default_per_page > max_per_page:
        logger.warning(
            "DEFAULT_PER_PAGE (%s) exceeds MAX_PER_PAGE (%s); pages will be capped at MAX_PER_PAGE.",
            default_per_page,
            max_per_page,
        )
    if not api_base_url.startswith("https://"):
        logger.warning("SHOPLOCAL_API_BASE_URL is not https: %s", api_base_url)

    return Settings(
        api_base_url=api_base_url.rstrip("/"),
        request_timeout=_get_float("SHOPLOCAL_REQUEST_TIMEOUT", defaults.request_timeout),
        nominatim_url=nominatim_url.rstrip("/"),
        geocode_country_codes=country_codes,
        default_radius=default_radius,
        max_radius=max_radius,
        default_per_page=default_per_page,
        max_per_page=max_per_page,
        distance_unit=distance_unit,
        worker_port=_get_int("WORKER_PORT", defaults.worker_port),
    )
