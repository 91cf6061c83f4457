"""Great-circle distance helpers used for "nearest to me" sorting."""

from __future__ import annotations

import math
from typing import Any, Optional

from shoplocal.models import Coordinate

EARTH_RADIUS_MI = 3959
EARTH_RADIUS_KM = 6371


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _round_half_up(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def calculate_distance(lat1: Any, lon1: Any, lat2: Any, lon2: Any, unit: str = "mi") -> float:
    """Haversine distance between two points, rounded to one decimal place.

    Any unit other than "mi" is treated as kilometres. Inputs are not range
    checked; non-numeric input returns NaN instead of raising.
    """
    coords = [_to_float(value) for value in (lat1, lon1, lat2, lon2)]
    if any(value is None or not math.isfinite(value) for value in coords):
        return math.nan
    lat1_f, lon1_f, lat2_f, lon2_f = coords

    radius = EARTH_RADIUS_MI if unit == "mi" else EARTH_RADIUS_KM
    d_lat = math.radians(lat2_f - lat1_f)
    d_lon = math.radians(lon2_f - lon1_f)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1_f)) * math.cos(math.radians(lat2_f)) * math.sin(d_lon / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    distance = radius * c
    return _round_half_up(distance)


def distance_between(origin: Coordinate, target: Coordinate, unit: str = "mi") -> float:
    return calculate_distance(origin.latitude, origin.longitude, target.latitude, target.longitude, unit)


def format_distance(distance: float, unit: str = "mi") -> str:
    unit_label = "mi" if unit == "mi" else "km"
    if distance < 0.1:
        return f"< 0.1 {unit_label} away"
    return f"{distance:.1f} {unit_label} away"
