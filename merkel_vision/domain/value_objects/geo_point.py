"""GeoPoint value object and the single coordinate-normalization boundary.

Provider SDKs hand coordinates over in several shapes: plain numbers,
numeric strings, zero-argument accessors (``latLng.lat()``), mappings with
``lat``/``lng`` or ``latitude``/``longitude`` keys, or objects exposing the
same names as attributes or methods. Everything entering the core goes
through ``normalize_point`` / ``validate_coordinates`` below.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from merkel_vision.domain.errors import CoordinateError

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0

_LAT_NAMES = ("lat", "latitude")
_LNG_NAMES = ("lng", "lon", "longitude")


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def as_list(self) -> list[float]:
        return [self.latitude, self.longitude]


def is_valid_coordinates(latitude: Any, longitude: Any) -> bool:
    """True when both values are finite numbers inside the WGS84 ranges."""
    for value in (latitude, longitude):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return (
        MIN_LATITUDE <= latitude <= MAX_LATITUDE
        and MIN_LONGITUDE <= longitude <= MAX_LONGITUDE
    )


def validate_coordinates(latitude: Any, longitude: Any) -> GeoPoint:
    """Return a GeoPoint or raise CoordinateError.

    Used identically by every map and store entry point.
    """
    if not is_valid_coordinates(latitude, longitude):
        raise CoordinateError(f"Invalid coordinates: ({latitude!r}, {longitude!r})")
    return GeoPoint(latitude=float(latitude), longitude=float(longitude))


def normalize_coordinate(value: Any) -> float:
    """Turn one provider-supplied coordinate component into a float."""
    if callable(value):
        value = value()
    if isinstance(value, bool) or value is None:
        raise CoordinateError(f"Not a coordinate: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as e:
            raise CoordinateError(f"Not a coordinate: {value!r}") from e
    raise CoordinateError(f"Unsupported coordinate type: {type(value).__name__}")


def normalize_point(value: Any) -> GeoPoint:
    """Normalize any provider position shape into a range-checked GeoPoint."""
    if isinstance(value, GeoPoint):
        return validate_coordinates(value.latitude, value.longitude)

    if callable(value):
        return normalize_point(value())

    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise CoordinateError(f"Expected (lat, lng) pair, got {value!r}")
        lat, lng = value
    elif isinstance(value, Mapping):
        lat = _first_present(value.get, _LAT_NAMES)
        lng = _first_present(value.get, _LNG_NAMES)
    elif value is not None:
        lat = _first_present(lambda name: getattr(value, name, None), _LAT_NAMES)
        lng = _first_present(lambda name: getattr(value, name, None), _LNG_NAMES)
    else:
        raise CoordinateError("Position is missing")

    if lat is None or lng is None:
        raise CoordinateError(f"Position has no lat/lng: {value!r}")
    return validate_coordinates(normalize_coordinate(lat), normalize_coordinate(lng))


def _first_present(lookup, names: tuple[str, ...]) -> Any:
    for name in names:
        found = lookup(name)
        if found is not None:
            return found
    return None
