"""MapSurface — the single authoritative view state and marker registry.

Owns at most one map widget (created by ``attach``, destroyed by
``detach``), the registry of location markers keyed by location id, and at
most one temporary marker. Every coordinate entering through a public
method is checked with ``validate_coordinates``; invalid input returns
False/None and leaves the view untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from merkel_vision.application.ports.map_provider_port import (
    MapProviderPort,
    MapWidget,
    Marker,
    SurfaceHandle,
)
from merkel_vision.domain.errors import CoordinateError, MarkerUnavailableError
from merkel_vision.domain.events import EventChannel
from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.enums import AttachStatus, MarkerKind
from merkel_vision.domain.value_objects.geo_point import GeoPoint, validate_coordinates

logger = logging.getLogger(__name__)

TEMPORARY_MARKER_TITLE = "Selected Location"


@dataclass(frozen=True)
class MapViewConfig:
    default_center: GeoPoint
    default_zoom: int
    single_result_zoom: int
    map_id: str | None = None


@dataclass(frozen=True)
class MapView:
    center: GeoPoint
    zoom: int


class MapSurface:
    def __init__(self, provider: MapProviderPort, config: MapViewConfig):
        self._provider = provider
        self._config = config
        self._widget: MapWidget | None = None
        self._markers: dict[str, Marker] = {}
        self._temporary: Marker | None = None
        self.error: str | None = None

        self.marker_clicked: EventChannel[str] = EventChannel("marker_clicked")
        self.map_clicked: EventChannel[GeoPoint] = EventChannel("map_clicked")

    # ─── Lifecycle ───────────────────────────────────────────────────

    @property
    def is_attached(self) -> bool:
        return self._widget is not None

    async def attach(self, surface: SurfaceHandle) -> AttachStatus:
        """Create the map widget once the provider library is available."""
        if self._widget is not None:
            return AttachStatus.ALREADY_ATTACHED

        try:
            if not await self._provider.load():
                self.error = "Map provider failed to load"
                logger.error("Cannot attach map to '%s': provider not loaded", surface.element_id)
                return AttachStatus.FAILED
            # A concurrent attach may have completed while the provider loaded.
            if self._widget is not None:
                return AttachStatus.ALREADY_ATTACHED
            widget = self._provider.create_map(
                surface,
                self._config.default_center,
                self._config.default_zoom,
                self._config.map_id,
            )
        except Exception as e:
            self.error = f"Map initialization error: {e}"
            logger.exception("Error initializing map on '%s'", surface.element_id)
            return AttachStatus.FAILED

        widget.on_click(self.map_clicked.emit)
        self._widget = widget
        self.error = None
        logger.info("Map attached to '%s'", surface.element_id)
        return AttachStatus.ATTACHED

    def detach(self) -> None:
        """Tear down markers and the widget. The surface can be attached again."""
        for marker in self._markers.values():
            marker.remove()
        self._markers.clear()
        self.clear_temporary_marker()
        if self._widget is not None:
            self._widget.destroy()
            self._widget = None

    # ─── View ────────────────────────────────────────────────────────

    @property
    def view(self) -> MapView | None:
        if self._widget is None:
            return None
        return MapView(center=self._widget.center, zoom=self._widget.zoom)

    def set_center(self, latitude: float, longitude: float, zoom: int | None = None) -> bool:
        point = self._checked(latitude, longitude)
        if point is None or self._widget is None or not self._widget.is_idle():
            return False
        self._widget.set_center(point)
        if zoom is not None:
            self._widget.set_zoom(zoom)
        return True

    def fit_bounds(self, bounds: GeoBounds) -> bool:
        """Fit an externally supplied region, e.g. a geocoder viewport."""
        if self._widget is None:
            return False
        self._widget.fit_bounds(bounds)
        return True

    def fit_all_markers(self) -> bool:
        """Fit the view to every registered marker.

        Returns False and leaves the view untouched when there is nothing
        to fit. A single marker is shown at ``single_result_zoom``.
        """
        if self._widget is None or not self._markers:
            return False

        positions = [p for p in (self._position_of(i, m) for i, m in self._markers.items()) if p]
        bounds = GeoBounds.from_points(positions)
        if bounds is None:
            return False

        self._widget.fit_bounds(bounds)
        if len(self._markers) == 1:
            self._widget.set_zoom(self._config.single_result_zoom)
        return True

    # ─── Markers ─────────────────────────────────────────────────────

    def upsert_marker(
        self, location_id: str, latitude: float, longitude: float, title: str
    ) -> Marker | None:
        point = self._checked(latitude, longitude)
        if point is None or self._widget is None:
            return None

        existing = self._markers.get(location_id)
        if existing is not None:
            existing.set_position(point)
            return existing

        marker = self._create_marker(point, title or "Location")
        marker.on_click(lambda: self.marker_clicked.emit(location_id))
        self._markers[location_id] = marker
        return marker

    def remove_marker(self, location_id: str) -> bool:
        marker = self._markers.pop(location_id, None)
        if marker is None:
            return False
        marker.remove()
        return True

    def set_temporary_marker(self, latitude: float, longitude: float) -> Marker | None:
        point = self._checked(latitude, longitude)
        if point is None or self._widget is None:
            return None
        self.clear_temporary_marker()
        self._temporary = self._create_marker(point, TEMPORARY_MARKER_TITLE)
        return self._temporary

    def clear_temporary_marker(self) -> None:
        if self._temporary is not None:
            try:
                self._temporary.remove()
            except Exception:
                logger.warning("Error clearing previous temporary marker", exc_info=True)
            self._temporary = None

    @property
    def temporary_position(self) -> GeoPoint | None:
        if self._temporary is None:
            return None
        return self._position_of("temporary", self._temporary)

    def marker_ids(self) -> set[str]:
        return set(self._markers)

    def marker_positions(self) -> dict[str, GeoPoint]:
        positions = {}
        for location_id, marker in self._markers.items():
            point = self._position_of(location_id, marker)
            if point is not None:
                positions[location_id] = point
        return positions

    def marker_kind(self, location_id: str) -> MarkerKind | None:
        marker = self._markers.get(location_id)
        return marker.kind if marker else None

    # ─── Surface events ──────────────────────────────────────────────

    def receive_marker_click(self, location_id: str) -> bool:
        """A marker was clicked on the display surface."""
        marker = self._markers.get(location_id)
        if marker is None:
            return False
        marker.click()
        return True

    def receive_map_click(self, latitude: float, longitude: float) -> bool:
        """The map background was clicked on the display surface."""
        point = self._checked(latitude, longitude)
        if point is None or self._widget is None:
            return False
        self._widget.click(point)
        return True

    def render(self) -> str | None:
        return self._widget.render() if self._widget is not None else None

    # ─── Internals ───────────────────────────────────────────────────

    def _create_marker(self, point: GeoPoint, title: str) -> Marker:
        if self._provider.supports_advanced_markers():
            try:
                return self._provider.create_advanced_marker(self._widget, point, title)
            except MarkerUnavailableError as e:
                logger.warning("Advanced marker not available, using legacy marker: %s", e)
        return self._provider.create_legacy_marker(self._widget, point, title)

    @staticmethod
    def _checked(latitude: float, longitude: float) -> GeoPoint | None:
        try:
            return validate_coordinates(latitude, longitude)
        except CoordinateError:
            logger.warning("Rejected coordinates (%r, %r)", latitude, longitude)
            return None

    @staticmethod
    def _position_of(location_id: str, marker: Marker) -> GeoPoint | None:
        try:
            return marker.get_position()
        except (CoordinateError, AttributeError, TypeError):
            logger.warning("Skipping marker '%s': position cannot be determined", location_id)
            return None
