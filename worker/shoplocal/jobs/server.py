"""HTTP entrypoint serving normalized catalog data and nearest-vendor ranking."""

from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, Optional

import requests
from flask import Flask, jsonify, request

from shoplocal.core.config import DISTANCE_UNITS, get_settings
from shoplocal.etl.ranking import clamp_radius, rank_vendors, sort_products_by_distance
from shoplocal.geo.distance import format_distance
from shoplocal.models import Coordinate
from shoplocal.vendors import nominatim, storefront_api

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)


class InvalidQuery(ValueError):
    """Raised for query parameters that cannot be parsed."""


@app.errorhandler(InvalidQuery)
def _bad_request(exc: InvalidQuery) -> Any:
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(storefront_api.StorefrontAPIError)
@app.errorhandler(nominatim.GeocodingError)
@app.errorhandler(requests.RequestException)
def _upstream_error(exc: Exception) -> Any:
    logger.error("Upstream request failed: %s", exc)
    return jsonify({"error": "upstream service unavailable"}), 502


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "worker_port_config": settings.worker_port,
                "api_base_url": settings.api_base_url,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/products")
def products_index() -> Any:
    settings = get_settings()
    page = _int_arg("page", 1)
    per_page = _int_arg("per_page", settings.default_per_page)
    if page <= 0 or per_page <= 0:
        raise InvalidQuery("page and per_page must be positive")

    products, payload = storefront_api.list_products(
        settings,
        page=page,
        per_page=per_page,
        category=request.args.get("category"),
        brand=request.args.get("brand"),
        search=request.args.get("search"),
    )
    meta = {key: value for key, value in payload.items() if key != "products"} if isinstance(payload, dict) else {}
    return jsonify({"data": [product.to_dict() for product in products], "meta": meta}), 200


@app.get("/products/<slug>")
def product_detail(slug: str) -> Any:
    short = request.args.get("short", "").lower() in {"1", "true", "yes"}
    settings = get_settings()
    if short:
        product = storefront_api.get_short_product_detail(settings, slug)
    else:
        product = storefront_api.get_product_detail(settings, slug)
    return jsonify({"data": product.to_dict()}), 200


@app.get("/vendors/nearby")
def nearby_vendors() -> Any:
    """
    Rank vendors by distance from the shopper.
    Location: `lat` + `lng`, or `location` (zip code / city) to geocode.
    Optional: radius, unit (mi|km), include_products.
    """
    settings = get_settings()
    unit = (request.args.get("unit") or settings.distance_unit).lower()
    if unit not in DISTANCE_UNITS:
        raise InvalidQuery(f"unit must be one of: {', '.join(sorted(DISTANCE_UNITS))}")

    origin = _resolve_origin()
    if origin is None:
        return jsonify({"error": "Location not found. Please try a valid US zip code or city name."}), 404

    radius = clamp_radius(_float_arg("radius"), settings)
    vendors = storefront_api.get_nearby_vendors(settings, origin.latitude, origin.longitude, radius)
    ranked = rank_vendors(vendors, origin, unit=unit, radius=radius)
    logger.info("Ranked %d of %d vendors within %.1f %s", len(ranked), len(vendors), radius, unit)

    data: Dict[str, Any] = {
        "origin": {"latitude": origin.latitude, "longitude": origin.longitude},
        "radius": radius,
        "unit": unit,
        "vendors": [_vendor_entry(vendor, unit) for vendor in ranked],
    }

    if request.args.get("include_products", "").lower() in {"1", "true", "yes"}:
        products, _ = storefront_api.list_products(settings, per_page=settings.max_per_page)
        data["products"] = [
            {
                **product.to_dict(),
                "distance": distance,
                "distanceLabel": format_distance(distance, unit) if distance is not None else None,
            }
            for product, distance in sort_products_by_distance(products, ranked)
        ]

    return jsonify({"data": data}), 200


@app.get("/vendors/<slug>")
def vendor_detail(slug: str) -> Any:
    vendor = storefront_api.get_vendor_detail(get_settings(), slug)
    if vendor is None:
        return jsonify({"error": f"vendor {slug} not found"}), 404
    return jsonify({"data": vendor.to_dict()}), 200


@app.post("/vendors/<slug>/visit")
def vendor_visit(slug: str) -> Any:
    storefront_api.record_vendor_visit(get_settings(), slug)
    return jsonify({"data": {"status": "recorded"}}), 202


# ---------- Internals ----------


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidQuery(f"{name} must be an integer") from exc


def _float_arg(name: str) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise InvalidQuery(f"{name} must be numeric") from exc
    if not math.isfinite(value):
        raise InvalidQuery(f"{name} must be a finite number")
    return value


def _resolve_origin() -> Optional[Coordinate]:
    lat = _float_arg("lat")
    lng = _float_arg("lng")
    if lat is not None and lng is not None:
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            raise InvalidQuery("lat/lng out of range")
        return Coordinate(lat, lng)

    location = request.args.get("location", "")
    if not location.strip():
        raise InvalidQuery("lat and lng, or location, are required")
    return nominatim.geocode(get_settings(), location)


def _vendor_entry(vendor, unit: str) -> Dict[str, Any]:
    entry = vendor.to_dict()
    entry["distanceLabel"] = format_distance(vendor.distance, unit) if vendor.distance is not None else None
    return entry


def main() -> None:
    env_port = os.getenv("PORT")
    port = int(env_port or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
