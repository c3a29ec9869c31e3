from __future__ import annotations

import math

import pytest

from src.domain.algorithms.geo_utils import haversine_distance_km
from src.domain.models.geo import GeoPoint


def test_haversine_zero_for_identical_points() -> None:
    p = GeoPoint(lat=48.4, lon=9.98)
    assert haversine_distance_km(p, p) == 0.0


def test_haversine_is_symmetric_and_reasonable_scale() -> None:
    # Rough sanity check: 1 degree of latitude is about 111km.
    a = GeoPoint(lat=0.0, lon=0.0)
    b = GeoPoint(lat=1.0, lon=0.0)

    d1 = haversine_distance_km(a, b)
    d2 = haversine_distance_km(b, a)

    assert d1 == d2
    assert 110.0 < d1 < 112.0


def test_haversine_infinite_when_point_missing() -> None:
    p = GeoPoint(lat=48.4, lon=9.98)
    assert haversine_distance_km(p, None) == math.inf
    assert haversine_distance_km(None, p) == math.inf


def test_haversine_infinite_for_non_numeric_coordinates() -> None:
    class _Loose:
        lat = "48.4"
        lon = 9.98

    p = GeoPoint(lat=48.4, lon=9.98)
    assert haversine_distance_km(_Loose(), p) == math.inf  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (-90.0001, 0.0),
        (90.0001, 0.0),
        (0.0, -180.0001),
        (0.0, 180.0001),
    ],
)
def test_geo_point_rejects_out_of_range_coordinates(lat: float, lon: float) -> None:
    with pytest.raises(ValueError, match="out of range"):
        GeoPoint(lat=lat, lon=lon)
