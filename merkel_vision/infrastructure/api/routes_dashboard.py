"""Dashboard endpoints — the per-session map, form and list interactions.

Each action returns the full dashboard state so the client can re-render
from one response.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from merkel_vision.application.use_cases.dashboard import Dashboard
from merkel_vision.domain.errors import ServiceUnavailableError
from merkel_vision.domain.value_objects.enums import SortField
from merkel_vision.infrastructure.api.dependencies import get_dashboard
from merkel_vision.infrastructure.api.serializers import (
    serialize_dashboard,
    serialize_location,
    serialize_suggestion,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


# ── Request schemas ─────────────────────────────────────────────────

class FormFields(BaseModel):
    name: str | None = None
    address: str | None = None
    latitude: str | float | None = None
    longitude: str | float | None = None
    description: str | None = None
    notes: str | None = None


class MapClick(BaseModel):
    lat: float
    lng: float


class AddressSearch(BaseModel):
    address: str = ""


class PlaceSelect(BaseModel):
    placeId: str


def _state(d: Dashboard, **extra) -> dict:
    return {**serialize_dashboard(d, d.visible_locations()), **extra}


# ── State & map ─────────────────────────────────────────────────────

@router.get("")
async def get_state(
    q: str = Query(default=""),
    sort: SortField = Query(default=SortField.NAME),
    dashboard: Dashboard = Depends(get_dashboard),
):
    return serialize_dashboard(dashboard, dashboard.visible_locations(q, sort))


@router.get("/map", response_class=HTMLResponse)
async def get_map(dashboard: Dashboard = Depends(get_dashboard)):
    html = dashboard.surface.render()
    if html is None:
        raise ServiceUnavailableError(dashboard.map_error or "Map is not available")
    return HTMLResponse(html)


@router.post("/map/click")
async def click_map(body: MapClick, dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.surface.receive_map_click(body.lat, body.lng)
    return _state(dashboard)


@router.post("/markers/{location_id}/click")
async def click_marker(location_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.surface.receive_marker_click(location_id)
    return _state(dashboard)


@router.post("/fit")
async def fit_all(dashboard: Dashboard = Depends(get_dashboard)):
    return _state(dashboard, fitted=dashboard.fit_all())


@router.post("/refresh")
async def refresh(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.refresh()
    return _state(dashboard)


# ── Form ────────────────────────────────────────────────────────────

@router.post("/form/open-add")
async def open_add(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.open_add()
    return _state(dashboard)


@router.post("/form/open-edit/{location_id}")
async def open_edit(location_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.open_edit(location_id)
    return _state(dashboard)


@router.patch("/form")
async def update_form(body: FormFields, dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.form.update(**body.model_dump(exclude_unset=True))
    return _state(dashboard)


@router.post("/form/clear")
async def clear_form(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.form.clear()
    return _state(dashboard)


@router.post("/form/close")
async def close_form(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.close_form()
    return _state(dashboard)


@router.post("/form/geocode")
async def geocode_form(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.geocode_form_address()
    return _state(dashboard)


@router.post("/form/lookup-address")
async def lookup_form_address(dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.lookup_form_address()
    return _state(dashboard)


@router.post("/form/submit")
async def submit_form(dashboard: Dashboard = Depends(get_dashboard)):
    location = await dashboard.submit_form()
    saved = serialize_location(location) if location else None
    return _state(dashboard, saved=saved)


# ── Location actions ────────────────────────────────────────────────

@router.post("/locations/{location_id}/view")
async def view_location(location_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    centered = await dashboard.view_location(location_id)
    return _state(dashboard, centered=centered)


@router.post("/locations/{location_id}/delete")
async def request_delete(location_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.request_delete(location_id)
    return _state(dashboard)


@router.post("/delete/confirm")
async def confirm_delete(dashboard: Dashboard = Depends(get_dashboard)):
    deleted = await dashboard.confirm_delete()
    return _state(dashboard, deleted=deleted)


@router.post("/delete/cancel")
async def cancel_delete(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.cancel_delete()
    return _state(dashboard)


# ── Search ──────────────────────────────────────────────────────────

@router.post("/search")
async def search_address(body: AddressSearch, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.search_address(body.address)
    return _state(dashboard)


@router.get("/search/suggest")
async def suggest(text: str = Query(default=""), dashboard: Dashboard = Depends(get_dashboard)):
    suggestions = await dashboard.search.suggest(text)
    return {"suggestions": [serialize_suggestion(s) for s in suggestions]}


@router.post("/search/select")
async def select_place(body: PlaceSelect, dashboard: Dashboard = Depends(get_dashboard)):
    await dashboard.search.select(body.placeId)
    return _state(dashboard)


# ── Messages ────────────────────────────────────────────────────────

@router.post("/messages/dismiss")
async def dismiss_error(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.dismiss_error()
    return _state(dashboard)
