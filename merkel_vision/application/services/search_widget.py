"""SearchWidget — wraps the provider's place autocomplete element."""

from __future__ import annotations

import logging
from typing import Any

from merkel_vision.application.ports.map_provider_port import SurfaceHandle
from merkel_vision.application.ports.places_port import AutocompleteHandle, PlacesPort
from merkel_vision.domain.entities.place import (
    PlaceSelection,
    PlaceSuggestion,
    SearchRestrictions,
)
from merkel_vision.domain.errors import (
    CoordinateError,
    MountError,
    NotFoundError,
    ServiceUnavailableError,
)
from merkel_vision.domain.events import EventChannel
from merkel_vision.domain.policies.address_components import parse_address_components
from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.geo_point import normalize_point

logger = logging.getLogger(__name__)


class SearchWidget:
    def __init__(self, places: PlacesPort, fields: list[str]):
        self._places = places
        self._fields = list(fields)
        self._handle: AutocompleteHandle | None = None
        self.mount_error: MountError | None = None
        self.place_selected: EventChannel[PlaceSelection] = EventChannel("place_selected")

    @property
    def is_mounted(self) -> bool:
        return self._handle is not None

    def mount(
        self, container: SurfaceHandle, restrictions: SearchRestrictions
    ) -> AutocompleteHandle | None:
        """Attach the autocomplete element to a container.

        On failure the MountError is logged and kept in ``mount_error``;
        None is returned and manual coordinate entry keeps working.
        """
        if self._handle is not None:
            return self._handle
        try:
            if not self._places.is_available():
                raise MountError("Places autocomplete is not available")
            self._handle = self._places.create_autocomplete(container.element_id, restrictions)
        except MountError as e:
            self.mount_error = e
            logger.error("Failed to initialize search component on '%s': %s", container.element_id, e)
            return None

        self.mount_error = None
        logger.info("Place autocomplete mounted on '%s'", container.element_id)
        return self._handle

    async def suggest(self, text: str) -> list[PlaceSuggestion]:
        handle = self._require_handle()
        text = (text or "").strip()
        if not text:
            return []
        return await self._places.suggest(handle, text)

    async def select(self, place_id: str) -> PlaceSelection:
        """Fetch place details, then notify subscribers with the normalized place."""
        self._require_handle()
        raw = await self._places.fetch_details(place_id, self._fields)
        selection = self._normalize(place_id, raw)
        logger.info("Place selected: %s", selection.formatted_address)
        self.place_selected.emit(selection)
        return selection

    def _require_handle(self) -> AutocompleteHandle:
        if self._handle is None:
            raise ServiceUnavailableError(
                str(self.mount_error) if self.mount_error else "Search component is not mounted"
            )
        return self._handle

    @staticmethod
    def _normalize(place_id: str, raw: dict[str, Any]) -> PlaceSelection:
        try:
            point = normalize_point(raw.get("location"))
        except CoordinateError as e:
            raise NotFoundError(f"Selected place {place_id} has no location data") from e

        display_name = raw.get("displayName")
        if isinstance(display_name, dict):
            display_name = display_name.get("text")
        display_name = display_name or ""

        return PlaceSelection(
            latitude=point.latitude,
            longitude=point.longitude,
            formatted_address=raw.get("formattedAddress") or display_name,
            parts=parse_address_components(raw.get("addressComponents")),
            viewport=_viewport(raw.get("viewport")),
            name=display_name,
        )


def _viewport(raw: dict[str, Any] | None) -> GeoBounds | None:
    if not raw:
        return None
    try:
        low = normalize_point(raw.get("low"))
        high = normalize_point(raw.get("high"))
    except CoordinateError:
        return None
    return GeoBounds(south=low.latitude, west=low.longitude, north=high.latitude, east=high.longitude)
