"""Utilities for mapping WordPress/WooCommerce/Dokan payloads into canonical records."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional

from shoplocal.models import NormalizedProduct, NormalizedVendor

logger = logging.getLogger(__name__)

DEFAULT_VENDOR_SLUG = "default-vendor"
DEFAULT_COLORS = ("#000000",)

DEFAULT_VENDOR_LOGO = "https://images.unsplash.com/photo-1560179707-f14e90ef3623?w=400"
DEFAULT_VENDOR_BANNER = "https://images.unsplash.com/photo-1441986300917-64674bd600d8?w=1200"
DEFAULT_SHIPPING_POLICY = "Standard shipping applies. Contact store for details."
DEFAULT_RETURN_POLICY = "30-day return policy. Items must be in original condition."
DEFAULT_FAQS = "Contact the store for any questions or concerns."

_VENDOR_OBJECT_SLUG_KEYS = ("username", "user_login", "slug", "user_nicename")
_FLAT_VENDOR_SLUG_KEYS = (
    "username",
    "store_username",
    "vendor_username",
    "user_login",
    "author",
    "author_name",
)
_FALLBACK_IMAGE_KEYS = ("featured_image", "thumbnail", "image_url")

# Applied in order, so "Corner Shop Store" loses both suffixes.
_STORE_SUFFIXES = (
    re.compile(r"\s+store$", re.IGNORECASE),
    re.compile(r"\s+shop$", re.IGNORECASE),
    re.compile(r"\s+market$", re.IGNORECASE),
)
_QUOTES = re.compile(r"['\"`]")
_WHITESPACE = re.compile(r"\s+")
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]")

_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _first(raw: Dict[str, Any], *keys: str) -> Any:
    """Return the first value that is not None (null-coalescing)."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _first_truthy(source: Dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = source.get(key)
        if value:
            return value
    return None


def _first_text(source: Dict[str, Any], keys: Iterable[str]) -> str:
    """Stringify before the emptiness check so a numeric id of 0 survives."""
    for key in keys:
        value = source.get(key)
        if value is not None and str(value):
            return str(value)
    return ""


def _safe_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _safe_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        if isinstance(value, (int, float)):
            return int(value)
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default


def _safe_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


def _string_list(value: Any, default: Iterable[str]) -> List[str]:
    """WooCommerce returns tags as term objects; keep their names."""
    if value is None:
        return list(default)
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [str(value)]

    items: List[str] = []
    for item in value:
        if isinstance(item, dict):
            name = item.get("name") or item.get("slug")
            if name:
                items.append(str(name))
        elif item is not None:
            items.append(str(item))
    return items


def derive_slug_from_name(vendor_name: str) -> str:
    """Build a URL slug from a vendor display name.

    The result is lossy: hyphens and punctuation are dropped, so distinct names
    can collide ("Mery-Joy" and "Mery Joy" both become "meryjoy").
    """
    slug = vendor_name.lower()
    for suffix in _STORE_SUFFIXES:
        slug = suffix.sub("", slug)
    slug = _QUOTES.sub("", slug)
    slug = _WHITESPACE.sub("", slug)
    return _NON_SLUG_CHARS.sub("", slug)


def resolve_vendor_slug(raw: Dict[str, Any]) -> str:
    """Pick the vendor slug from whichever key the upstream endpoint used."""
    slug = _first_truthy(raw, ("vendorSlug", "vendor_slug"))
    if slug:
        return str(slug)

    vendor = raw.get("vendor")
    if isinstance(vendor, dict):
        slug = _first_truthy(vendor, _VENDOR_OBJECT_SLUG_KEYS)
        if slug:
            return str(slug)

    slug = _first_truthy(raw, _FLAT_VENDOR_SLUG_KEYS)
    if slug:
        return str(slug)

    if isinstance(vendor, str):
        slug = derive_slug_from_name(vendor)
        if slug:
            logger.debug("Derived vendor slug %r from display name %r", slug, vendor)
            return slug

    return DEFAULT_VENDOR_SLUG


def resolve_image_url(raw: Dict[str, Any]) -> str:
    image = raw.get("image")
    if isinstance(image, dict):
        image = image.get("src")
    if image:
        return str(image)

    images = raw.get("images")
    if isinstance(images, list) and images:
        first = images[0]
        if isinstance(first, dict) and first.get("src"):
            return str(first["src"])

    image = _first_truthy(raw, _FALLBACK_IMAGE_KEYS)
    return str(image) if image else ""


def _vendor_name(vendor: Any) -> str:
    if vendor is None:
        return "Default Vendor"
    if isinstance(vendor, dict):
        name = _first_truthy(vendor, ("store_name", "shop_name", "name", "display_name"))
        return str(name) if name else "Default Vendor"
    return str(vendor)


def normalize_product(raw: Optional[Dict[str, Any]]) -> NormalizedProduct:
    """Map a raw product record to a NormalizedProduct.

    Never raises: every missing or unparseable field falls back to its
    default, so callers do not need to guard individual attributes.
    """
    if not isinstance(raw, dict):
        raw = {}

    price = _safe_float(raw.get("price"), 0)
    original_price = _safe_float(_first(raw, "originalPrice", "original_price", "regular_price"), price)

    return NormalizedProduct(
        id=_as_text(raw.get("id"), "0"),
        name=_as_text(raw.get("name"), "Unnamed Product"),
        slug=_as_text(raw.get("slug"), ""),
        price=price,
        original_price=original_price,
        image=resolve_image_url(raw),
        vendor=_vendor_name(raw.get("vendor")),
        vendor_slug=resolve_vendor_slug(raw),
        category=_as_text(raw.get("category"), "Uncategorized"),
        brand=_as_text(raw.get("brand"), "Unknown Brand"),
        upc=_as_text(raw.get("upc"), ""),
        description=_as_text(raw.get("description"), ""),
        tags=_string_list(raw.get("tags"), ()),
        accepts_offers=_safe_bool(_first(raw, "acceptsOffers", "accepts_offers"), True),
        is_new=_safe_bool(_first(raw, "isNew", "is_new"), True),
        is_trending=_safe_bool(_first(raw, "isTrending", "is_trending"), True),
        rating=_safe_float(raw.get("rating"), 0),
        review_count=_safe_int(_first(raw, "reviewCount", "review_count"), 0),
        stock=_safe_int(raw.get("stock"), 0),
        colors=_string_list(raw.get("colors"), DEFAULT_COLORS),
    )


def _optional_coordinate(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def normalize_vendor(raw: Optional[Dict[str, Any]]) -> NormalizedVendor:
    """Map a Dokan/GeoDirectory store payload to a NormalizedVendor."""
    if not isinstance(raw, dict):
        raw = {}

    address = raw.get("address") if isinstance(raw.get("address"), dict) else {}
    social = raw.get("social") if isinstance(raw.get("social"), dict) else {}
    policies = raw.get("policies") if isinstance(raw.get("policies"), dict) else {}
    categories = raw.get("categories") if isinstance(raw.get("categories"), list) else []
    first_category = categories[0] if categories and isinstance(categories[0], dict) else {}

    vendor_id = _first_text(raw, ("id", "vendor_id"))
    rating = _first_truthy(raw, ("rating", "average_rating"))
    distance = raw.get("distance")

    return NormalizedVendor(
        id=vendor_id,
        name=str(_first_truthy(raw, ("name", "store_name", "shop_name")) or ""),
        slug=str(_first_truthy(raw, ("slug", "store_slug")) or ""),
        logo=str(_first_truthy(raw, ("logo", "gravatar", "avatar")) or DEFAULT_VENDOR_LOGO),
        banner=str(_first_truthy(raw, ("banner", "banner_url")) or DEFAULT_VENDOR_BANNER),
        tagline=str(_first_truthy(raw, ("tagline", "shop_description")) or ""),
        bio=str(_first_truthy(raw, ("bio", "description", "about")) or "No description available"),
        location=str(
            raw.get("location")
            or address.get("city")
            or address.get("state")
            or raw.get("city")
            or "Location not specified"
        ),
        specialty=str(raw.get("specialty") or first_category.get("name") or raw.get("category") or "General"),
        rating=_safe_float(rating, 4.5),
        latitude=_optional_coordinate(raw.get("latitude") or raw.get("lat") or address.get("latitude")),
        longitude=_optional_coordinate(raw.get("longitude") or raw.get("lng") or address.get("longitude")),
        distance=_optional_coordinate(distance) if distance else None,
        social_links={
            "website": str(raw.get("website") or social.get("website") or ""),
            "instagram": str(raw.get("instagram") or social.get("instagram") or ""),
            "facebook": str(raw.get("facebook") or social.get("fb") or social.get("facebook") or ""),
            "twitter": str(raw.get("twitter") or social.get("twitter") or ""),
        },
        policies={
            "shipping": str(raw.get("shipping_policy") or policies.get("shipping") or DEFAULT_SHIPPING_POLICY),
            "returns": str(raw.get("return_policy") or policies.get("returns") or DEFAULT_RETURN_POLICY),
            "faqs": str(raw.get("faqs") or policies.get("faqs") or DEFAULT_FAQS),
        },
    )
