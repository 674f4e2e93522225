"""Convert domain objects to API response dicts."""

from __future__ import annotations

from merkel_vision.application.use_cases.dashboard import Dashboard
from merkel_vision.application.use_cases.location_form import LocationForm
from merkel_vision.domain.entities.location import Location
from merkel_vision.domain.entities.place import (
    AddressParts,
    GeocodeResult,
    PlaceSuggestion,
    ReverseGeocodeResult,
)
from merkel_vision.domain.entities.user import AuthSession, AuthUser
from merkel_vision.domain.value_objects.bounds import GeoBounds
from merkel_vision.domain.value_objects.geo_point import GeoPoint


def serialize_point(p: GeoPoint | None) -> dict | None:
    if p is None:
        return None
    return {"lat": p.latitude, "lng": p.longitude}


def serialize_location(loc: Location) -> dict:
    return {
        "id": loc.id,
        "name": loc.name,
        "address": loc.address,
        "latitude": loc.latitude,
        "longitude": loc.longitude,
        "description": loc.description,
        "notes": loc.notes,
        "dateCreated": loc.created_at.isoformat() if loc.created_at else None,
        "dateUpdated": loc.updated_at.isoformat() if loc.updated_at else None,
    }


def serialize_parts(parts: AddressParts) -> dict:
    return {
        "city": parts.city,
        "state": parts.state,
        "country": parts.country,
        "postalCode": parts.postal_code,
    }


def serialize_bounds(b: GeoBounds | None) -> dict | None:
    if b is None:
        return None
    return {"south": b.south, "west": b.west, "north": b.north, "east": b.east}


def serialize_geocode(r: GeocodeResult) -> dict:
    data = {
        "lat": r.latitude,
        "lng": r.longitude,
        "formattedAddress": r.formatted_address,
        "addressComponents": serialize_parts(r.parts),
        "viewport": serialize_bounds(r.viewport),
    }
    name = getattr(r, "name", None)
    if name is not None:
        data["name"] = name
    return data


def serialize_reverse(r: ReverseGeocodeResult) -> dict:
    return {"formattedAddress": r.formatted_address, "addressComponents": serialize_parts(r.parts)}


def serialize_suggestion(s: PlaceSuggestion) -> dict:
    return {
        "placeId": s.place_id,
        "text": s.text,
        "mainText": s.main_text,
        "secondaryText": s.secondary_text,
    }


def serialize_user(u: AuthUser) -> dict:
    return {"uid": u.uid, "email": u.email}


def serialize_session(s: AuthSession) -> dict:
    return {
        "user": serialize_user(s.user),
        "token": s.token,
        "refreshToken": s.refresh_token,
        "expiresAt": s.expires_at.isoformat() if s.expires_at else None,
    }


def serialize_form(f: LocationForm) -> dict:
    return {
        "mode": f.mode.value,
        "locationId": f.location_id,
        "name": f.name,
        "address": f.address,
        "latitude": f.latitude,
        "longitude": f.longitude,
        "description": f.description,
        "notes": f.notes,
        "provisional": f.provisional,
        "error": f.error,
        "fieldErrors": f.field_errors,
    }


def serialize_dashboard(d: Dashboard, locations: list[Location]) -> dict:
    """Full dashboard state. Reading it consumes the pending toast."""
    view = d.surface.view
    return {
        "user": serialize_user(d.user),
        "locations": [serialize_location(loc) for loc in locations],
        "focusedId": d.focused_id,
        "pendingDeleteId": d.pending_delete_id,
        "form": serialize_form(d.form),
        "map": {
            "attached": d.surface.is_attached,
            "error": d.map_error,
            "center": serialize_point(view.center) if view else None,
            "zoom": view.zoom if view else None,
            "markers": [
                {"id": location_id, "kind": d.surface.marker_kind(location_id).value, **serialize_point(p)}
                for location_id, p in d.surface.marker_positions().items()
            ],
            "temporaryMarker": serialize_point(d.surface.temporary_position),
        },
        "search": {"mounted": d.search.is_mounted, "error": d.search_error},
        "error": d.error,
        "toast": d.take_toast(),
    }
