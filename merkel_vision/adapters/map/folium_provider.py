"""Folium (Leaflet) map provider — implements MapProviderPort.

The widget keeps the live view state (center, zoom, attached marker
handles) and renders a fresh folium document on every ``render()`` call,
so re-rendering never re-creates the widget itself.

Two marker handle shapes exist, mirroring the two marker generations of
hosted map SDKs:

- ``PinHandle`` — legacy pin; ``position`` is a plain ``[lat, lng]`` field.
- ``ElementHandle`` — HTML element marker; position is only reachable
  through ``get_position()``, which returns a ``LatLng`` with accessor
  methods. Requires a map id on the widget.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable
from typing import Any

import folium

from merkel_vision.adapters.map.markers import AdvancedMarker, LegacyMarker
from merkel_vision.application.ports.map_provider_port import (
    MapProviderPort,
    MapWidget,
    Marker,
    SurfaceHandle,
)
from merkel_vision.config import settings
from merkel_vision.domain.errors import MarkerUnavailableError, ServiceUnavailableError
from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.geo_point import GeoPoint, normalize_point

logger = logging.getLogger(__name__)


class LatLng:
    """Provider-style coordinate pair exposing zero-argument accessors."""

    def __init__(self, lat: float, lng: float):
        self._lat = lat
        self._lng = lng

    def lat(self) -> float:
        return self._lat

    def lng(self) -> float:
        return self._lng


class _Handle:
    def __init__(self, title: str):
        self.title = title
        self.widget: FoliumMapWidget | None = None
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def add_listener(self, event: str, callback: Callable[[], None]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def trigger(self, event: str) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback()

    def detach(self) -> None:
        if self.widget is not None:
            self.widget.detach_handle(self)
            self.widget = None
        self._listeners.clear()

    def to_folium(self) -> folium.Marker:
        raise NotImplementedError


class PinHandle(_Handle):
    def __init__(self, position: list[float], title: str):
        super().__init__(title)
        self.position = position

    def to_folium(self) -> folium.Marker:
        return folium.Marker(location=list(self.position), tooltip=self.title)


class ElementHandle(_Handle):
    def __init__(self, position: LatLng, title: str, map_id: str):
        super().__init__(title)
        self._position = position
        self._map_id = map_id

    def get_position(self) -> LatLng:
        return self._position

    def set_position(self, position: Any) -> None:
        """Accepts a LatLng or a {"lat", "lng"} literal."""
        point = normalize_point(position)
        self._position = LatLng(point.latitude, point.longitude)

    def to_folium(self) -> folium.Marker:
        content = (
            f'<div class="mv-marker" data-map-id="{html.escape(self._map_id)}">'
            f"{html.escape(self.title)}</div>"
        )
        return folium.Marker(
            location=[self._position.lat(), self._position.lng()],
            tooltip=self.title,
            icon=folium.DivIcon(html=content),
        )


class FoliumMapWidget(MapWidget):
    def __init__(
        self,
        surface: SurfaceHandle,
        center: GeoPoint,
        zoom: int,
        map_id: str | None,
        tiles: str,
    ):
        self._surface = surface
        self._center = center
        self._zoom = zoom
        self._map_id = map_id or None
        self._tiles = tiles
        self._handles: list[_Handle] = []
        self._click_listeners: list[Callable[[GeoPoint], None]] = []
        self._destroyed = False

    @property
    def center(self) -> GeoPoint:
        return self._center

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def map_id(self) -> str | None:
        return self._map_id

    @property
    def handles(self) -> list[Any]:
        return list(self._handles)

    def is_idle(self) -> bool:
        return not self._destroyed

    def set_center(self, point: GeoPoint) -> None:
        self._center = point

    def set_zoom(self, zoom: int) -> None:
        self._zoom = zoom

    def fit_bounds(self, bounds: GeoBounds) -> None:
        self._center = bounds.center
        self._zoom = bounds.zoom_to_fit(self._surface.width_px, self._surface.height_px)

    def attach_handle(self, handle: _Handle) -> None:
        handle.widget = self
        self._handles.append(handle)

    def detach_handle(self, handle: _Handle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    def on_click(self, callback: Callable[[GeoPoint], None]) -> None:
        self._click_listeners.append(callback)

    def click(self, point: GeoPoint) -> None:
        for callback in list(self._click_listeners):
            callback(point)

    def render(self) -> str:
        m = folium.Map(
            location=self._center.as_list(),
            zoom_start=self._zoom,
            tiles=self._tiles,
            width=self._surface.width_px,
            height=self._surface.height_px,
            control_scale=True,
        )
        for handle in self._handles:
            handle.to_folium().add_to(m)
        folium.LatLngPopup().add_to(m)
        return m.get_root().render()

    def destroy(self) -> None:
        for handle in list(self._handles):
            handle.detach()
        self._click_listeners.clear()
        self._destroyed = True


class FoliumMapProvider(MapProviderPort):
    """Folium implementation of MapProviderPort."""

    def __init__(self, tiles: str | None = None, advanced_markers: bool = True):
        self._tiles = tiles or settings.map_tiles
        self._advanced_markers = advanced_markers
        self._loaded = False

    async def load(self) -> bool:
        if not self._loaded:
            self._loaded = bool(self._tiles)
            if self._loaded:
                logger.info("Map provider loaded (tiles=%s)", self._tiles)
            else:
                logger.error("Map provider has no tile source configured")
        return self._loaded

    def is_loaded(self) -> bool:
        return self._loaded

    def create_map(
        self, surface: SurfaceHandle, center: GeoPoint, zoom: int, map_id: str | None = None
    ) -> FoliumMapWidget:
        if not self._loaded:
            raise ServiceUnavailableError("Map provider is not loaded")
        return FoliumMapWidget(surface, center, zoom, map_id, self._tiles)

    def supports_advanced_markers(self) -> bool:
        return self._advanced_markers

    def create_legacy_marker(self, widget: MapWidget, point: GeoPoint, title: str) -> Marker:
        handle = PinHandle(point.as_list(), title)
        _folium_widget(widget).attach_handle(handle)
        return LegacyMarker(handle)

    def create_advanced_marker(self, widget: MapWidget, point: GeoPoint, title: str) -> Marker:
        if not self._advanced_markers:
            raise MarkerUnavailableError("Advanced markers are disabled")
        if not widget.map_id:
            raise MarkerUnavailableError("Advanced markers require a map id")
        point = normalize_point(point)
        handle = ElementHandle(LatLng(point.latitude, point.longitude), title, widget.map_id)
        _folium_widget(widget).attach_handle(handle)
        return AdvancedMarker(handle)


def _folium_widget(widget: MapWidget) -> FoliumMapWidget:
    if not isinstance(widget, FoliumMapWidget):
        raise TypeError(f"Expected FoliumMapWidget, got {type(widget).__name__}")
    return widget
