"""Extract city / state / country / postal code from provider address components.

Google Geocoding returns ``long_name``/``short_name``; Places API (New)
returns ``longText``/``shortText``. Both carry a ``types`` list.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from merkel_vision.domain.entities.place import AddressParts


def parse_address_components(components: Iterable[Mapping[str, Any]] | None) -> AddressParts:
    city = state = country = postal_code = None
    for component in components or ():
        types = component.get("types") or []
        long_text = component.get("long_name") or component.get("longText")
        short_text = component.get("short_name") or component.get("shortText")
        if "locality" in types:
            city = long_text
        elif "administrative_area_level_1" in types:
            state = short_text
        elif "country" in types:
            country = long_text
        elif "postal_code" in types:
            postal_code = long_text
    return AddressParts(city=city, state=state, country=country, postal_code=postal_code)


def parse_nominatim_address(address: Mapping[str, Any] | None) -> AddressParts:
    """Nominatim ``addressdetails`` block → AddressParts."""
    address = address or {}
    city = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("county")
    )
    return AddressParts(
        city=city,
        state=address.get("state"),
        country=address.get("country"),
        postal_code=address.get("postcode"),
    )
