"""Location input validation.

Rules:
- name must be non-empty after trimming
- latitude and longitude must both be present, finite and in range
- only MUTABLE_FIELDS may appear in an update
"""

from __future__ import annotations

import math
from typing import Any

from merkel_vision.domain.entities.location import MUTABLE_FIELDS, LocationDraft
from merkel_vision.domain.errors import ValidationError
from merkel_vision.domain.value_objects.geo_point import (
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
)


def parse_coordinate_text(text: str | float | None, field_name: str) -> float | None:
    """Parse a form value; None for blank input, ValidationError for garbage."""
    if text is None:
        return None
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    stripped = str(text).strip()
    if not stripped:
        return None
    try:
        return float(stripped)
    except ValueError:
        raise ValidationError({field_name: "Invalid coordinates"}) from None


def validate_draft(draft: LocationDraft) -> LocationDraft:
    """Return a cleaned copy of the draft or raise ValidationError."""
    errors: dict[str, str] = {}

    name = (draft.name or "").strip()
    if not name:
        errors["name"] = "Location name is required"

    if draft.latitude is None or draft.longitude is None:
        errors["coordinates"] = "Location coordinates are required"
    else:
        _check_latitude(draft.latitude, errors)
        _check_longitude(draft.longitude, errors)

    if errors:
        raise ValidationError(errors)

    return LocationDraft(
        name=name,
        latitude=float(draft.latitude),
        longitude=float(draft.longitude),
        address=(draft.address or "").strip(),
        description=draft.description or "",
        notes=draft.notes or "",
    )


def validate_update(fields: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial update; returns the cleaned field dict."""
    errors: dict[str, str] = {}

    unknown = set(fields) - MUTABLE_FIELDS
    for key in sorted(unknown):
        errors[key] = "Field cannot be changed"

    cleaned: dict[str, Any] = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}

    if "name" in cleaned:
        name = (cleaned["name"] or "").strip()
        if not name:
            errors["name"] = "Location name is required"
        cleaned["name"] = name

    if "latitude" in cleaned:
        if _check_latitude(cleaned["latitude"], errors):
            cleaned["latitude"] = float(cleaned["latitude"])
    if "longitude" in cleaned:
        if _check_longitude(cleaned["longitude"], errors):
            cleaned["longitude"] = float(cleaned["longitude"])

    for key in ("address", "description", "notes"):
        if key in cleaned and cleaned[key] is None:
            cleaned[key] = ""

    if errors:
        raise ValidationError(errors)
    return cleaned


def _check_latitude(value: Any, errors: dict[str, str]) -> bool:
    if not _is_number(value):
        errors["latitude"] = "Invalid coordinates"
        return False
    if not MIN_LATITUDE <= value <= MAX_LATITUDE:
        errors["latitude"] = "Latitude must be between -90 and 90"
        return False
    return True


def _check_longitude(value: Any, errors: dict[str, str]) -> bool:
    if not _is_number(value):
        errors["longitude"] = "Invalid coordinates"
        return False
    if not MIN_LONGITUDE <= value <= MAX_LONGITUDE:
        errors["longitude"] = "Longitude must be between -180 and 180"
        return False
    return True


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
