"""Google Places API (New) adapter — implements PlacesPort."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from merkel_vision.application.ports.places_port import AutocompleteHandle, PlacesPort
from merkel_vision.config import settings
from merkel_vision.domain.entities.place import PlaceSuggestion, SearchRestrictions
from merkel_vision.domain.errors import MountError, NotFoundError, ServiceUnavailableError

logger = logging.getLogger(__name__)

PLACES_BASE_URL = "https://places.googleapis.com/v1"


class GooglePlacesAdapter(PlacesPort):
    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.google_maps_api_key
        self._language = language or settings.geocoder_language
        self._timeout = timeout
        self._transport = transport

    def is_available(self) -> bool:
        return bool(self._api_key)

    def create_autocomplete(
        self, container_id: str, restrictions: SearchRestrictions
    ) -> AutocompleteHandle:
        if not self.is_available():
            raise MountError("Places API key is not configured")
        if not container_id:
            raise MountError("Search container is missing")
        return AutocompleteHandle(container_id=container_id, restrictions=restrictions)

    async def suggest(self, handle: AutocompleteHandle, text: str) -> list[PlaceSuggestion]:
        body: dict[str, Any] = {"input": text, "languageCode": self._language}
        if handle.restrictions.countries:
            body["includedRegionCodes"] = list(handle.restrictions.countries)
        if handle.restrictions.types:
            body["includedPrimaryTypes"] = list(handle.restrictions.types)

        data = await self._send("POST", "/places:autocomplete", json=body, label=text)

        suggestions = []
        for item in data.get("suggestions") or []:
            prediction = item.get("placePrediction")
            if not prediction or not prediction.get("placeId"):
                continue
            structured = prediction.get("structuredFormat") or {}
            suggestions.append(
                PlaceSuggestion(
                    place_id=prediction["placeId"],
                    text=_text(prediction.get("text")),
                    main_text=_text(structured.get("mainText")),
                    secondary_text=_text(structured.get("secondaryText")),
                )
            )
        return suggestions

    async def fetch_details(self, place_id: str, fields: list[str]) -> dict[str, Any]:
        return await self._send(
            "GET",
            f"/places/{place_id}",
            field_mask=",".join(fields),
            params={"languageCode": self._language},
            label=place_id,
        )

    async def _send(
        self,
        method: str,
        path: str,
        label: str,
        field_mask: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        headers = {"X-Goog-Api-Key": self._api_key}
        if field_mask:
            headers["X-Goog-FieldMask"] = field_mask

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.request(
                    method,
                    f"{PLACES_BASE_URL}{path}",
                    headers=headers,
                    timeout=self._timeout,
                    **kwargs,
                )
                if response.status_code == 404:
                    raise NotFoundError(f"Place '{label}' not found")
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Places API error for '%s': %s", label, e)
            raise ServiceUnavailableError(f"Places request failed: {e}") from e


def _text(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("text") or ""
    return value or ""
