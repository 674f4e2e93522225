"""Nominatim geocoder adapter — implements GeocoderPort.

Used when no Google Maps API key is configured.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from merkel_vision.application.ports.geocoder_port import GeocoderPort
from merkel_vision.config import settings
from merkel_vision.domain.entities.place import GeocodeResult, ReverseGeocodeResult
from merkel_vision.domain.errors import CoordinateError, ServiceUnavailableError
from merkel_vision.domain.policies.address_components import parse_nominatim_address
from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.geo_point import validate_coordinates

logger = logging.getLogger(__name__)

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"


class NominatimAdapter(GeocoderPort):
    """OpenStreetMap Nominatim implementation of GeocoderPort."""

    def __init__(
        self,
        user_agent: str | None = None,
        language: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._user_agent = user_agent or settings.geocoder_user_agent
        self._language = language or settings.geocoder_language
        self._timeout = timeout
        self._transport = transport

    async def forward(self, address: str) -> GeocodeResult | None:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    NOMINATIM_SEARCH_URL,
                    params={"q": address, "format": "json", "limit": 1, "addressdetails": 1},
                    headers=self._headers(),
                    timeout=self._timeout,
                )
                response.raise_for_status()
                results = response.json()
                if not results:
                    logger.info("Nominatim returned no results for '%s'", address)
                    return None
                result = self._to_geocode_result(results[0], address)
        except (httpx.HTTPError, ValueError, CoordinateError) as e:
            logger.error("Nominatim API error for '%s': %s", address, e)
            raise ServiceUnavailableError(f"Geocoding request failed: {e}") from e

        logger.info(
            "Nominatim resolved '%s' → (%f, %f)", address, result.latitude, result.longitude
        )
        return result

    async def reverse(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    NOMINATIM_REVERSE_URL,
                    params={"lat": latitude, "lon": longitude, "format": "json", "addressdetails": 1},
                    headers=self._headers(),
                    timeout=self._timeout,
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Nominatim reverse error for (%f, %f): %s", latitude, longitude, e)
            raise ServiceUnavailableError(f"Reverse geocoding request failed: {e}") from e

        # Nominatim answers an unresolvable point with {"error": "Unable to geocode"}.
        if not data or "error" in data or not data.get("display_name"):
            return None
        return ReverseGeocodeResult(
            formatted_address=data["display_name"],
            parts=parse_nominatim_address(data.get("address")),
        )

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent, "Accept-Language": self._language}

    @staticmethod
    def _to_geocode_result(raw: dict[str, Any], address: str) -> GeocodeResult:
        point = validate_coordinates(float(raw["lat"]), float(raw["lon"]))
        return GeocodeResult(
            latitude=point.latitude,
            longitude=point.longitude,
            formatted_address=raw.get("display_name") or address,
            parts=parse_nominatim_address(raw.get("address")),
            viewport=_viewport(raw.get("boundingbox")),
        )


def _viewport(raw: list[str] | None) -> GeoBounds | None:
    """Nominatim boundingbox is [south, north, west, east] as strings."""
    if not raw or len(raw) != 4:
        return None
    try:
        south, north, west, east = (float(v) for v in raw)
    except (TypeError, ValueError):
        return None
    return GeoBounds(south=south, west=west, north=north, east=east)
