"""GeoBounds value object — bounding region and Web Mercator zoom fitting."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from merkel_vision.domain.value_objects.geo_point import GeoPoint

WORLD_TILE_PX = 256
MAX_ZOOM = 21
MIN_ZOOM = 0


@dataclass(frozen=True)
class GeoBounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[GeoPoint]) -> GeoBounds | None:
        """Smallest region containing every point, or None for no points."""
        bounds: GeoBounds | None = None
        for p in points:
            bounds = cls(p.latitude, p.longitude, p.latitude, p.longitude) if bounds is None else bounds.extend(p)
        return bounds

    def extend(self, point: GeoPoint) -> GeoBounds:
        return GeoBounds(
            south=min(self.south, point.latitude),
            west=min(self.west, point.longitude),
            north=max(self.north, point.latitude),
            east=max(self.east, point.longitude),
        )

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(
            latitude=(self.south + self.north) / 2,
            longitude=(self.west + self.east) / 2,
        )

    def zoom_to_fit(self, width_px: int, height_px: int) -> int:
        """Largest integer zoom at which the region fits a viewport of the given size."""
        lat_fraction = (_mercator_lat(self.north) - _mercator_lat(self.south)) / math.pi
        lng_diff = self.east - self.west
        lng_fraction = ((lng_diff + 360) if lng_diff < 0 else lng_diff) / 360

        lat_zoom = _zoom_for(height_px, lat_fraction)
        lng_zoom = _zoom_for(width_px, lng_fraction)
        return max(MIN_ZOOM, min(lat_zoom, lng_zoom, MAX_ZOOM))


def _mercator_lat(latitude: float) -> float:
    sin = math.sin(math.radians(latitude))
    rad_x2 = math.log((1 + sin) / (1 - sin)) / 2 if abs(sin) < 1 else math.copysign(math.pi, sin)
    return max(min(rad_x2, math.pi), -math.pi) / 2


def _zoom_for(map_px: int, fraction: float) -> int:
    if fraction <= 0:
        return MAX_ZOOM
    return math.floor(math.log(map_px / WORLD_TILE_PX / fraction) / math.log(2))
