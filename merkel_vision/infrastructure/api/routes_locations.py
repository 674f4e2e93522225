"""Location endpoints — list, create, update, delete.

Every mutation goes through the session's LocationStore, so the map
markers are reconciled exactly as for dashboard actions.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel

from merkel_vision.application.use_cases.dashboard import Dashboard
from merkel_vision.domain.entities.location import LocationDraft
from merkel_vision.domain.value_objects.enums import SortField
from merkel_vision.infrastructure.api.dependencies import get_dashboard
from merkel_vision.infrastructure.api.serializers import serialize_location

router = APIRouter(prefix="/locations", tags=["locations"])


class LocationIn(BaseModel):
    name: str = ""
    latitude: float | None = None
    longitude: float | None = None
    address: str = ""
    description: str = ""
    notes: str = ""


@router.get("")
async def list_locations(
    q: str = Query(default=""),
    sort: SortField = Query(default=SortField.NAME),
    dashboard: Dashboard = Depends(get_dashboard),
):
    """List the signed-in user's locations, filtered and sorted."""
    locations = dashboard.visible_locations(q, sort)
    return {"total": len(locations), "locations": [serialize_location(loc) for loc in locations]}


@router.post("", status_code=201)
async def create_location(body: LocationIn, dashboard: Dashboard = Depends(get_dashboard)):
    location = await dashboard.store.create(dashboard.user.uid, LocationDraft(**body.model_dump()))
    return serialize_location(location)


@router.patch("/{location_id}")
async def update_location(
    location_id: str,
    fields: dict[str, Any] = Body(...),
    dashboard: Dashboard = Depends(get_dashboard),
):
    location = await dashboard.store.update(location_id, fields)
    return serialize_location(location)


@router.delete("/{location_id}")
async def delete_location(location_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.store.delete(location_id)
    return {"deleted": location_id}
