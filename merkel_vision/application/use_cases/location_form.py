"""LocationForm — state of the single add/edit location dialog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from merkel_vision.domain.entities.location import Location, LocationDraft
from merkel_vision.domain.entities.place import GeocodeResult, PlaceSelection
from merkel_vision.domain.policies.location_validation import parse_coordinate_text
from merkel_vision.domain.value_objects.enums import FormMode

TEXT_FIELDS = ("name", "address", "latitude", "longitude", "description", "notes")


@dataclass
class LocationForm:
    mode: FormMode = FormMode.CLOSED
    location_id: str | None = None
    name: str = ""
    address: str = ""
    latitude: str = ""
    longitude: str = ""
    description: str = ""
    notes: str = ""
    # Coordinates came from a search selection or map click and may still be
    # overwritten by geocoding the typed address.
    provisional: bool = False
    error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return self.mode != FormMode.CLOSED

    def open_new(self, place: PlaceSelection | None = None) -> None:
        self._reset()
        self.mode = FormMode.CREATING_NEW
        if place is not None:
            self.name = place.name
            self.address = place.formatted_address
            self.set_coordinates(place.latitude, place.longitude, provisional=True)

    def open_existing(self, location: Location) -> None:
        self._reset()
        self.mode = FormMode.EDITING_EXISTING
        self.location_id = location.id
        self.name = location.name
        self.address = location.address
        self.latitude = str(location.latitude)
        self.longitude = str(location.longitude)
        self.description = location.description
        self.notes = location.notes

    def close(self) -> None:
        self._reset()

    def clear(self) -> None:
        """Empty every field but keep the dialog and its mode."""
        for name in TEXT_FIELDS:
            setattr(self, name, "")
        self.provisional = False
        self.clear_errors()

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            if name not in TEXT_FIELDS:
                raise KeyError(name)
            if value is not None:
                setattr(self, name, str(value))
            if name in ("latitude", "longitude"):
                self.provisional = False

    def set_coordinates(self, latitude: float, longitude: float, provisional: bool = False) -> None:
        self.latitude = str(latitude)
        self.longitude = str(longitude)
        self.provisional = provisional

    def apply_geocode(self, result: GeocodeResult) -> None:
        self.set_coordinates(result.latitude, result.longitude)
        self.address = result.formatted_address

    def set_error(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        self.error = message
        self.field_errors = dict(field_errors or {})

    def clear_errors(self) -> None:
        self.error = None
        self.field_errors = {}

    def parsed_coordinates(self) -> tuple[float | None, float | None]:
        """Raises ValidationError for unparsable text."""
        return (
            parse_coordinate_text(self.latitude, "latitude"),
            parse_coordinate_text(self.longitude, "longitude"),
        )

    def to_draft(self) -> LocationDraft:
        latitude, longitude = self.parsed_coordinates()
        return LocationDraft(
            name=self.name,
            latitude=latitude,
            longitude=longitude,
            address=self.address,
            description=self.description,
            notes=self.notes,
        )

    def to_update_fields(self) -> dict[str, Any]:
        draft = self.to_draft()
        return {
            "name": draft.name,
            "address": draft.address,
            "latitude": draft.latitude,
            "longitude": draft.longitude,
            "description": draft.description,
            "notes": draft.notes,
        }

    def _reset(self) -> None:
        self.mode = FormMode.CLOSED
        self.location_id = None
        self.clear()
