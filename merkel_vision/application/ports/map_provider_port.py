"""Port interfaces for the mapping provider: map widget and markers.

MapSurface only ever talks to ``MapWidget`` and ``Marker``; the provider
adapter decides what a widget or marker is underneath.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.enums import MarkerKind
from merkel_vision.domain.value_objects.geo_point import GeoPoint


@dataclass(frozen=True)
class SurfaceHandle:
    """The display surface a map or widget is attached to."""

    element_id: str
    width_px: int = 1024
    height_px: int = 500


class Marker(ABC):
    kind: MarkerKind

    @abstractmethod
    def get_position(self) -> GeoPoint:
        """Current position. Raises CoordinateError if it cannot be determined."""
        ...

    @abstractmethod
    def set_position(self, point: GeoPoint) -> None:
        ...

    @abstractmethod
    def remove(self) -> None:
        """Detach from the map. Safe to call twice."""
        ...

    @abstractmethod
    def on_click(self, callback: Callable[[], None]) -> None:
        ...

    @abstractmethod
    def click(self) -> None:
        """Deliver a click coming from the display surface."""
        ...


class MapWidget(ABC):
    @property
    @abstractmethod
    def center(self) -> GeoPoint:
        ...

    @property
    @abstractmethod
    def zoom(self) -> int:
        ...

    @property
    @abstractmethod
    def map_id(self) -> str | None:
        ...

    @abstractmethod
    def is_idle(self) -> bool:
        """False while the widget is still settling and cannot move."""
        ...

    @abstractmethod
    def set_center(self, point: GeoPoint) -> None:
        ...

    @abstractmethod
    def set_zoom(self, zoom: int) -> None:
        ...

    @abstractmethod
    def fit_bounds(self, bounds: GeoBounds) -> None:
        ...

    @abstractmethod
    def on_click(self, callback: Callable[[GeoPoint], None]) -> None:
        ...

    @abstractmethod
    def click(self, point: GeoPoint) -> None:
        """Deliver a map click coming from the display surface."""
        ...

    @abstractmethod
    def render(self) -> str:
        """HTML document for the current view and attached markers."""
        ...

    @abstractmethod
    def destroy(self) -> None:
        ...


class MapProviderPort(ABC):
    @abstractmethod
    async def load(self) -> bool:
        """Load the provider library once. Returns False if it is unavailable."""
        ...

    @abstractmethod
    def is_loaded(self) -> bool:
        ...

    @abstractmethod
    def create_map(
        self, surface: SurfaceHandle, center: GeoPoint, zoom: int, map_id: str | None = None
    ) -> MapWidget:
        ...

    @abstractmethod
    def supports_advanced_markers(self) -> bool:
        ...

    @abstractmethod
    def create_legacy_marker(self, widget: MapWidget, point: GeoPoint, title: str) -> Marker:
        ...

    @abstractmethod
    def create_advanced_marker(self, widget: MapWidget, point: GeoPoint, title: str) -> Marker:
        """Raises MarkerUnavailableError when the widget has no map id
        or the provider lacks the advanced marker constructor."""
        ...
