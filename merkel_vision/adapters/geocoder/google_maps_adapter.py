"""Google Maps geocoder adapter — implements GeocoderPort."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from merkel_vision.application.ports.geocoder_port import GeocoderPort
from merkel_vision.config import settings
from merkel_vision.domain.entities.place import GeocodeResult, ReverseGeocodeResult
from merkel_vision.domain.errors import CoordinateError, ServiceUnavailableError
from merkel_vision.domain.policies.address_components import parse_address_components
from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.geo_point import normalize_point

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GoogleMapsAdapter(GeocoderPort):
    """Google Maps implementation of GeocoderPort."""

    def __init__(
        self,
        api_key: str | None = None,
        region: str | None = None,
        language: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key or settings.google_maps_api_key
        self._region = region or settings.geocoder_region
        self._language = language or settings.geocoder_language
        self._timeout = timeout
        self._transport = transport

    async def forward(self, address: str) -> GeocodeResult | None:
        """Geocode address using Google Maps Geocoding API."""
        results = await self._request({"address": address}, address)
        if not results:
            return None

        first = results[0]
        geometry = first.get("geometry") or {}
        try:
            point = normalize_point(geometry.get("location"))
        except CoordinateError as e:
            raise ServiceUnavailableError(f"Geocoder returned no usable location for '{address}'") from e

        result = GeocodeResult(
            latitude=point.latitude,
            longitude=point.longitude,
            formatted_address=first.get("formatted_address") or address,
            parts=parse_address_components(first.get("address_components")),
            viewport=_viewport(geometry.get("viewport")),
        )
        logger.info("Google Maps resolved '%s' → (%f, %f)", address, result.latitude, result.longitude)
        return result

    async def reverse(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        label = f"{latitude},{longitude}"
        results = await self._request({"latlng": label}, label)
        if not results:
            return None

        first = results[0]
        return ReverseGeocodeResult(
            formatted_address=first.get("formatted_address") or "",
            parts=parse_address_components(first.get("address_components")),
        )

    async def _request(self, params: dict[str, str], label: str) -> list[dict[str, Any]]:
        if not self._api_key:
            raise ServiceUnavailableError("Google Maps API key is not set")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    GOOGLE_GEOCODE_URL,
                    params={
                        **params,
                        "key": self._api_key,
                        "region": self._region,
                        "language": self._language,
                    },
                    timeout=self._timeout,
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Google Maps API error for '%s': %s", label, e)
            raise ServiceUnavailableError(f"Geocoding request failed: {e}") from e

        status = data.get("status")
        if status == "OK":
            return data.get("results") or []
        if status == "ZERO_RESULTS":
            logger.info("Google Maps found nothing for '%s'", label)
            return []

        logger.warning("Google Maps could not resolve '%s': %s", label, status)
        raise ServiceUnavailableError(
            data.get("error_message") or f"Geocoding failed with status {status}"
        )


def _viewport(raw: dict[str, Any] | None) -> GeoBounds | None:
    if not raw:
        return None
    try:
        southwest = normalize_point(raw.get("southwest"))
        northeast = normalize_point(raw.get("northeast"))
    except CoordinateError:
        return None
    return GeoBounds(
        south=southwest.latitude,
        west=southwest.longitude,
        north=northeast.latitude,
        east=northeast.longitude,
    )
