"""Geocoding endpoints — forward and reverse lookups."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from merkel_vision.application.services.geocoding_client import GeocodingClient
from merkel_vision.domain.entities.user import AuthUser
from merkel_vision.infrastructure.api.dependencies import get_current_user, get_geocoding
from merkel_vision.infrastructure.api.serializers import serialize_geocode, serialize_reverse

router = APIRouter(prefix="/geocode", tags=["geocoding"])


@router.get("/forward")
async def forward(
    address: str = Query(default=""),
    geocoding: GeocodingClient = Depends(get_geocoding),
    user: AuthUser = Depends(get_current_user),
):
    return serialize_geocode(await geocoding.forward_lookup(address))


@router.get("/reverse")
async def reverse(
    lat: float = Query(...),
    lng: float = Query(...),
    geocoding: GeocodingClient = Depends(get_geocoding),
    user: AuthUser = Depends(get_current_user),
):
    return serialize_reverse(await geocoding.reverse_lookup(lat, lng))
