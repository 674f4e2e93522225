"""Tests for SearchWidget mounting and place selection."""

from __future__ import annotations

import pytest

from conftest import PLACE_FIELDS, FakePlaces
from merkel_vision.application.ports.map_provider_port import SurfaceHandle
from merkel_vision.application.services.search_widget import SearchWidget
from merkel_vision.domain.entities.place import PlaceSuggestion, SearchRestrictions
from merkel_vision.domain.errors import MountError, NotFoundError, ServiceUnavailableError
from merkel_vision.domain.value_objects.bounds import GeoBounds

CONTAINER = SurfaceHandle("place-autocomplete")
RESTRICTIONS = SearchRestrictions(countries=("us",))

GOOGLEPLEX = {
    "displayName": {"text": "Googleplex", "languageCode": "en"},
    "formattedAddress": "1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA",
    "location": {"latitude": 37.4220, "longitude": -122.0841},
    "viewport": {
        "low": {"latitude": 37.4210, "longitude": -122.0850},
        "high": {"latitude": 37.4230, "longitude": -122.0830},
    },
    "addressComponents": [
        {"longText": "Mountain View", "shortText": "Mountain View", "types": ["locality"]},
        {"longText": "California", "shortText": "CA", "types": ["administrative_area_level_1"]},
    ],
}


def test_mount_returns_handle(places):
    widget = SearchWidget(places, PLACE_FIELDS)
    handle = widget.mount(CONTAINER, RESTRICTIONS)
    assert handle.container_id == "place-autocomplete"
    assert handle.restrictions == RESTRICTIONS
    assert widget.is_mounted
    assert widget.mount(CONTAINER, RESTRICTIONS) is handle


def test_mount_failure_degrades():
    widget = SearchWidget(FakePlaces(available=False), PLACE_FIELDS)
    assert widget.mount(CONTAINER, RESTRICTIONS) is None
    assert isinstance(widget.mount_error, MountError)
    assert not widget.is_mounted


@pytest.mark.asyncio
async def test_select_fetches_details_before_emitting(places):
    places.details["gp"] = GOOGLEPLEX
    widget = SearchWidget(places, PLACE_FIELDS)
    widget.mount(CONTAINER, RESTRICTIONS)
    seen = []
    widget.place_selected.subscribe(lambda p: seen.append((p, list(places.requested_fields))))

    selection = await widget.select("gp")

    assert selection.name == "Googleplex"
    assert selection.latitude == 37.4220
    assert selection.longitude == -122.0841
    assert selection.parts.city == "Mountain View"
    assert selection.parts.state == "CA"
    assert selection.viewport == GeoBounds(37.4210, -122.0850, 37.4230, -122.0830)
    assert seen == [(selection, [PLACE_FIELDS])]


@pytest.mark.asyncio
async def test_select_place_without_location(places):
    places.details["bad"] = {"displayName": {"text": "Nowhere"}}
    widget = SearchWidget(places, PLACE_FIELDS)
    widget.mount(CONTAINER, RESTRICTIONS)
    seen = []
    widget.place_selected.subscribe(seen.append)

    with pytest.raises(NotFoundError):
        await widget.select("bad")
    assert seen == []


@pytest.mark.asyncio
async def test_select_when_not_mounted():
    widget = SearchWidget(FakePlaces(available=False), PLACE_FIELDS)
    widget.mount(CONTAINER, RESTRICTIONS)
    with pytest.raises(ServiceUnavailableError):
        await widget.select("gp")


@pytest.mark.asyncio
async def test_suggest(places):
    places.suggestions = [
        PlaceSuggestion(place_id="gp", text="Googleplex, Mountain View"),
        PlaceSuggestion(place_id="sf", text="San Francisco, CA"),
    ]
    widget = SearchWidget(places, PLACE_FIELDS)
    widget.mount(CONTAINER, RESTRICTIONS)
    assert [s.place_id for s in await widget.suggest("google")] == ["gp"]
    assert await widget.suggest("  ") == []
