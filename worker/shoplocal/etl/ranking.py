"""Combine normalized records with distance from the shopper's location."""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Dict, Iterable, List, Optional, Tuple

from shoplocal.core.config import Settings
from shoplocal.geo.distance import distance_between
from shoplocal.models import Coordinate, NormalizedProduct, NormalizedVendor

logger = logging.getLogger(__name__)


def clamp_radius(radius: Optional[float], settings: Settings) -> float:
    if radius is None or math.isnan(radius) or radius <= 0:
        return settings.default_radius
    return min(radius, settings.max_radius)


def rank_vendors(
    vendors: Iterable[NormalizedVendor],
    origin: Coordinate,
    unit: str = "mi",
    radius: Optional[float] = None,
) -> List[NormalizedVendor]:
    """Return vendor copies with `distance` set, nearest first.

    Vendors without usable coordinates keep `distance=None` and sort last,
    unless a radius is given, in which case they are dropped along with
    everything farther away than the radius.
    """
    located: List[NormalizedVendor] = []
    unlocated: List[NormalizedVendor] = []

    for vendor in vendors:
        coordinate = vendor.coordinate
        distance = distance_between(origin, coordinate, unit) if coordinate else math.nan
        if math.isnan(distance):
            if radius is None:
                unlocated.append(dataclasses.replace(vendor, distance=None))
            else:
                logger.debug("Dropping vendor %s without coordinates", vendor.slug or vendor.id)
            continue
        if radius is not None and distance > radius:
            continue
        located.append(dataclasses.replace(vendor, distance=distance))

    located.sort(key=lambda vendor: vendor.distance)
    return located + unlocated


def sort_products_by_distance(
    products: Iterable[NormalizedProduct],
    ranked_vendors: Iterable[NormalizedVendor],
) -> List[Tuple[NormalizedProduct, Optional[float]]]:
    """Order products by their vendor's distance; unknown vendors go last."""
    distances: Dict[str, float] = {}
    for vendor in ranked_vendors:
        if vendor.slug and vendor.distance is not None:
            distances.setdefault(vendor.slug, vendor.distance)

    paired = [(product, distances.get(product.vendor_slug)) for product in products]
    paired.sort(key=lambda item: (item[1] is None, item[1] if item[1] is not None else 0.0))
    return paired
