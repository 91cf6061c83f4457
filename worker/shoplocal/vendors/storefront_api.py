"""Client utilities for the ShopLocal custom WooCommerce/Dokan REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shoplocal.core.config import Settings
from shoplocal.etl.mapping import normalize_product, normalize_vendor
from shoplocal.models import NormalizedProduct, NormalizedVendor

logger = logging.getLogger(__name__)

_HEADERS = {"Content-Type": "application/json"}


class StorefrontAPIError(RuntimeError):
    """Raised when the storefront API returns a non-successful response."""


def _build_session() -> requests.Session:
    session = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=1,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET",),
    )
    session.mount("http://", HTTPAdapter(max_retries=retries))
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


_SESSION = _build_session()


def _check(response: Any, what: str) -> Any:
    if not (200 <= response.status_code < 300):
        logger.error("%s failed: status=%s", what, response.status_code)
        raise StorefrontAPIError(f"{what} failed with status {response.status_code}")
    return response.json()


def _get(settings: Settings, url: str, what: str, params: Optional[Dict[str, Any]] = None) -> Any:
    response = _SESSION.get(url, params=params, headers=_HEADERS, timeout=settings.request_timeout)
    return _check(response, what)


def _extract(payload: Any, key: str) -> List[Dict[str, Any]]:
    """Endpoints return either a bare list or an object wrapping one."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        items = payload.get(key)
        if isinstance(items, list):
            return items
    return []


def fetch_products(
    settings: Settings,
    page: int = 1,
    per_page: Optional[int] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    per_page = min(per_page or settings.default_per_page, settings.max_per_page)
    params: Dict[str, Any] = {"page": page, "per_page": per_page}
    for key, value in (("category", category), ("brand", brand), ("search", search)):
        if value:
            params[key] = value
    return _get(settings, f"{settings.custom_api_url}/products", "fetch_products", params)


def list_products(
    settings: Settings,
    page: int = 1,
    per_page: Optional[int] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[NormalizedProduct], Dict[str, Any]]:
    """Fetch a page of products and return them normalized alongside the raw payload."""
    payload = fetch_products(settings, page, per_page, category, brand, search)
    raw_products = _extract(payload, "products")
    logger.info("Fetched %d products on page %d", len(raw_products), page)
    return [normalize_product(raw) for raw in raw_products], payload


def get_product_detail(settings: Settings, slug: str) -> NormalizedProduct:
    payload = _get(settings, f"{settings.custom_api_url}/product/{slug}", "get_product_detail")
    return normalize_product(payload)


def get_short_product_detail(settings: Settings, slug: str) -> NormalizedProduct:
    payload = _get(settings, f"{settings.custom_api_url}/product-short/{slug}", "get_short_product_detail")
    return normalize_product(payload)


def get_product_categories(settings: Settings) -> List[Dict[str, Any]]:
    payload = _get(settings, f"{settings.wordpress_api_url}/product_cat", "get_product_categories", {"per_page": 100})
    return _extract(payload, "categories")


def get_product_brands(settings: Settings) -> List[Dict[str, Any]]:
    payload = _get(settings, f"{settings.wordpress_api_url}/product_brand", "get_product_brands", {"per_page": 100})
    return _extract(payload, "brands")


def get_nearby_vendors(settings: Settings, lat: float, lng: float, radius: float) -> List[NormalizedVendor]:
    params = {"lat": lat, "lng": lng, "radius": radius}
    payload = _get(settings, f"{settings.custom_api_url}/vendors-nearby", "get_nearby_vendors", params)
    return [normalize_vendor(raw) for raw in _extract(payload, "vendors")]


def _vendor_slug_candidates(slug: str) -> List[str]:
    candidates = [slug]
    if slug.endswith("-store"):
        without_suffix = slug.replace("-store", "", 1)
        candidates.append(without_suffix)
        candidates.append(without_suffix.replace("-", ""))
    return candidates


def get_vendor_detail(settings: Settings, slug: str) -> Optional[NormalizedVendor]:
    """Look up a vendor by username, retrying common slug variants on 404."""
    for candidate in _vendor_slug_candidates(slug):
        response = _SESSION.get(
            f"{settings.custom_api_url}/vendor-by-username/{candidate}",
            headers=_HEADERS,
            timeout=settings.request_timeout,
        )
        if response.status_code == 404:
            logger.debug("Vendor %s not found, trying next variant", candidate)
            continue
        return normalize_vendor(_check(response, "get_vendor_detail"))

    logger.info("No vendor found for slug %s", slug)
    return None


def record_vendor_visit(settings: Settings, vendor_id_or_slug: str) -> None:
    response = _SESSION.post(
        f"{settings.custom_api_url}/visit/{vendor_id_or_slug}",
        json={},
        headers=_HEADERS,
        timeout=settings.request_timeout,
    )
    if not (200 <= response.status_code < 300):
        logger.error("record_vendor_visit failed: status=%s, vendor=%s", response.status_code, vendor_id_or_slug)
        raise StorefrontAPIError(f"record_vendor_visit failed with status {response.status_code}")
