"""Place records produced by geocoding and autocomplete lookups."""

from __future__ import annotations

from dataclasses import dataclass, field

from merkel_vision.domain.value_objects.bounds import GeoBounds


@dataclass(frozen=True)
class AddressParts:
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None


@dataclass(frozen=True)
class ReverseGeocodeResult:
    formatted_address: str
    parts: AddressParts = field(default_factory=AddressParts)


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: str
    parts: AddressParts = field(default_factory=AddressParts)
    viewport: GeoBounds | None = None


@dataclass(frozen=True)
class PlaceSelection(GeocodeResult):
    """A selected autocomplete place: a forward-lookup record plus a display name."""

    name: str = ""


@dataclass(frozen=True)
class PlaceSuggestion:
    place_id: str
    text: str
    main_text: str = ""
    secondary_text: str = ""


@dataclass(frozen=True)
class SearchRestrictions:
    countries: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
