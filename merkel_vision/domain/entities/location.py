"""Location entity — a named point of interest owned by a user."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from merkel_vision.domain.value_objects.geo_point import GeoPoint

# Fields a caller may change through an update; everything else is immutable.
MUTABLE_FIELDS = frozenset({"name", "address", "latitude", "longitude", "description", "notes"})


@dataclass
class Location:
    id: str
    owner_id: str
    name: str
    coordinates: GeoPoint
    address: str = ""
    description: str = ""
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def latitude(self) -> float:
        return self.coordinates.latitude

    @property
    def longitude(self) -> float:
        return self.coordinates.longitude

    def matches(self, term: str) -> bool:
        """Case-insensitive match over name, address and description."""
        needle = term.lower()
        return any(
            needle in (value or "").lower()
            for value in (self.name, self.address, self.description)
        )


@dataclass
class LocationDraft:
    """Unvalidated creation payload."""

    name: str
    latitude: float | None
    longitude: float | None
    address: str = ""
    description: str = ""
    notes: str = ""
