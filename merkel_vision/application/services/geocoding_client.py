"""GeocodingClient — address ↔ coordinate lookups with a uniform error contract.

This client has no map side effects; callers decide whether to re-center
the view or drop a temporary marker. Overlapping calls are not serialized:
if two lookups are in flight, whichever response the caller applies last
wins.
"""

from __future__ import annotations

import logging

from merkel_vision.application.ports.geocoder_port import GeocoderPort
from merkel_vision.domain.entities.place import GeocodeResult, ReverseGeocodeResult
from merkel_vision.domain.errors import (
    CoordinateError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from merkel_vision.domain.value_objects.geo_point import validate_coordinates

logger = logging.getLogger(__name__)


class GeocodingClient:
    def __init__(self, geocoder: GeocoderPort | None):
        self._geocoder = geocoder

    @property
    def is_available(self) -> bool:
        return self._geocoder is not None

    async def forward_lookup(self, address_text: str) -> GeocodeResult:
        address_text = (address_text or "").strip()
        if not address_text:
            raise ValidationError({"address": "Please enter an address to search"})

        geocoder = self._require_geocoder()
        result = await geocoder.forward(address_text)
        if result is None:
            logger.info("No geocoding result for '%s'", address_text)
            raise NotFoundError(f"No results found for '{address_text}'")
        return result

    async def reverse_lookup(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        try:
            point = validate_coordinates(latitude, longitude)
        except CoordinateError as e:
            raise ValidationError({"coordinates": str(e)}) from e

        geocoder = self._require_geocoder()
        result = await geocoder.reverse(point.latitude, point.longitude)
        if result is None:
            logger.info("No address for (%f, %f)", point.latitude, point.longitude)
            raise NotFoundError(f"No address found for ({point.latitude}, {point.longitude})")
        return result

    def _require_geocoder(self) -> GeocoderPort:
        if self._geocoder is None:
            logger.error("Geocoder not initialized")
            raise ServiceUnavailableError("Geocoding service not available")
        return self._geocoder
