"""Tests for GooglePlacesAdapter (httpx.MockTransport, no network)."""

from __future__ import annotations

import json

import httpx
import pytest

from merkel_vision.adapters.places.google_places_adapter import GooglePlacesAdapter
from merkel_vision.domain.entities.place import SearchRestrictions
from merkel_vision.domain.errors import MountError, NotFoundError, ServiceUnavailableError


def test_autocomplete_requires_key():
    adapter = GooglePlacesAdapter(api_key="")
    assert not adapter.is_available()
    with pytest.raises(MountError):
        adapter.create_autocomplete("place-autocomplete", SearchRestrictions())


@pytest.mark.asyncio
async def test_suggest_sends_restrictions():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={
            "suggestions": [
                {
                    "placePrediction": {
                        "placeId": "gp",
                        "text": {"text": "Googleplex, Mountain View, CA"},
                        "structuredFormat": {
                            "mainText": {"text": "Googleplex"},
                            "secondaryText": {"text": "Mountain View, CA"},
                        },
                    }
                },
                {"queryPrediction": {"text": {"text": "google offices"}}},
            ]
        })

    adapter = GooglePlacesAdapter(api_key="k", transport=httpx.MockTransport(handler))
    handle = adapter.create_autocomplete("place-autocomplete", SearchRestrictions(countries=("us",)))
    suggestions = await adapter.suggest(handle, "googleplex")

    assert [s.place_id for s in suggestions] == ["gp"]
    assert suggestions[0].main_text == "Googleplex"
    body = json.loads(seen[0].content)
    assert body["input"] == "googleplex"
    assert body["includedRegionCodes"] == ["us"]
    assert seen[0].headers["X-Goog-Api-Key"] == "k"


@pytest.mark.asyncio
async def test_fetch_details_sends_field_mask():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"location": {"latitude": 1, "longitude": 2}})

    adapter = GooglePlacesAdapter(api_key="k", transport=httpx.MockTransport(handler))
    details = await adapter.fetch_details("gp", ["location", "formattedAddress"])

    assert details["location"]["latitude"] == 1
    assert seen[0].url.path == "/v1/places/gp"
    assert seen[0].headers["X-Goog-FieldMask"] == "location,formattedAddress"


@pytest.mark.asyncio
async def test_fetch_details_unknown_place():
    adapter = GooglePlacesAdapter(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(404)))
    with pytest.raises(NotFoundError):
        await adapter.fetch_details("missing", ["location"])


@pytest.mark.asyncio
async def test_fetch_details_server_error():
    adapter = GooglePlacesAdapter(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    with pytest.raises(ServiceUnavailableError):
        await adapter.fetch_details("gp", ["location"])
