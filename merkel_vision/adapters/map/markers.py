"""The two Marker implementations.

``LegacyMarker`` wraps a handle whose position is a plain field;
``AdvancedMarker`` wraps a handle whose position is only available through
an accessor returning a provider coordinate object. Both normalize through
``normalize_point`` so MapSurface always receives a GeoPoint.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from merkel_vision.application.ports.map_provider_port import Marker
from merkel_vision.domain.value_objects.enums import MarkerKind
from merkel_vision.domain.value_objects.geo_point import GeoPoint, normalize_point


class LegacyMarker(Marker):
    kind = MarkerKind.LEGACY

    def __init__(self, handle: Any):
        self._handle = handle

    def get_position(self) -> GeoPoint:
        return normalize_point(self._handle.position)

    def set_position(self, point: GeoPoint) -> None:
        self._handle.position = point.as_list()

    def remove(self) -> None:
        self._handle.detach()

    def on_click(self, callback: Callable[[], None]) -> None:
        self._handle.add_listener("click", callback)

    def click(self) -> None:
        self._handle.trigger("click")


class AdvancedMarker(Marker):
    kind = MarkerKind.ADVANCED

    def __init__(self, handle: Any):
        self._handle = handle

    def get_position(self) -> GeoPoint:
        return normalize_point(self._handle.get_position())

    def set_position(self, point: GeoPoint) -> None:
        self._handle.set_position({"lat": point.latitude, "lng": point.longitude})

    def remove(self) -> None:
        self._handle.detach()

    def on_click(self, callback: Callable[[], None]) -> None:
        self._handle.add_listener("click", callback)

    def click(self) -> None:
        self._handle.trigger("click")
