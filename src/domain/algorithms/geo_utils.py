from __future__ import annotations

import math
from numbers import Real

from src.domain.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def _usable(point: GeoPoint | None) -> bool:
    if point is None:
        return False
    for value in (getattr(point, "lat", None), getattr(point, "lon", None)):
        if isinstance(value, bool) or not isinstance(value, Real):
            return False
        if not math.isfinite(value):
            return False
    return True


def haversine_distance_km(a: GeoPoint | None, b: GeoPoint | None) -> float:
    """Great-circle distance in kilometers on a spherical Earth.

    Returns `math.inf` when either point is missing or carries non-numeric
    coordinates; callers treat that as "no usable edge or heuristic".
    """

    if not (_usable(a) and _usable(b)):
        return math.inf

    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lon)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, s)))
