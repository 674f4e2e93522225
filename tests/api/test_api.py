"""HTTP API tests with FastAPI TestClient and in-memory fakes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import FakeGeocoder, FakeIdentity, FakePlaces, InMemoryLocationRepo
from merkel_vision.adapters.map.folium_provider import FoliumMapProvider
from merkel_vision.config import Settings
from merkel_vision.domain.entities.place import GeocodeResult
from merkel_vision.infrastructure.api.dependencies import AppContainer
from merkel_vision.main import create_app


@pytest.fixture
def container():
    settings = Settings(GOOGLE_MAPS_MAP_ID="test-map-id", MAP_VIEW_RETRY_DELAYS=[0, 0, 0])
    geocoder = FakeGeocoder()
    geocoder.forward_results["1600 Amphitheatre Pkwy"] = GeocodeResult(
        latitude=37.4220, longitude=-122.0841, formatted_address="1600 Amphitheatre Pkwy, Mountain View"
    )
    return AppContainer(
        settings,
        repository=InMemoryLocationRepo(),
        geocoder=geocoder,
        places=FakePlaces(),
        map_provider=FoliumMapProvider(tiles="OpenStreetMap"),
        identity=FakeIdentity(),
    )


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as c:
        yield c


@pytest.fixture
def auth(client):
    resp = client.post("/api/auth/sign-up", json={"email": "ada@example.com", "password": "secret"})
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['token']}"}


HQ = {"name": "HQ", "latitude": 37.4220, "longitude": -122.0841, "address": "1600 Amphitheatre Pkwy"}


# ─── Health & auth ──────────────────────────────────────────────────


def test_health(client):
    body = client.get("/api/health").json()
    assert body["map"] == "loaded"
    assert body["database"] == "not configured"


def test_health_does_not_load_map_provider(container):
    client = TestClient(create_app(container))

    body = client.get("/api/health").json()

    assert body["map"] == "unavailable"
    assert body["status"] == "degraded"
    assert not container.map_provider.is_loaded()


def test_requires_authentication(client):
    resp = client.get("/api/locations")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User not authenticated"


def test_sign_in_and_me(client, auth):
    resp = client.post("/api/auth/sign-in", json={"email": "ada@example.com", "password": "secret"})
    assert resp.status_code == 200
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {resp.json()['token']}"})
    assert me.json() == {"uid": "uid-ada@example.com", "email": "ada@example.com"}


def test_sign_in_bad_password(client, auth):
    resp = client.post("/api/auth/sign-in", json={"email": "ada@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_sign_out_ends_session(client, auth):
    assert client.get("/api/dashboard", headers=auth).status_code == 200
    assert client.post("/api/auth/sign-out", headers=auth).status_code == 200
    assert client.get("/api/dashboard", headers=auth).status_code == 401


def test_expired_token_releases_dashboard():
    identity = FakeIdentity()
    identity.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
    container = AppContainer(
        Settings(MAP_VIEW_RETRY_DELAYS=[0, 0, 0]),
        repository=InMemoryLocationRepo(),
        geocoder=FakeGeocoder(),
        places=FakePlaces(),
        map_provider=FoliumMapProvider(tiles="OpenStreetMap"),
        identity=identity,
    )
    with TestClient(create_app(container)) as client:
        token = client.post("/api/auth/sign-up", json={"email": "ada@example.com", "password": "secret"}).json()["token"]
        assert container.dashboard_count == 1

        resp = client.get("/api/dashboard", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert container.dashboard_count == 0
    assert container.sessions.active_count == 0


# ─── Locations ──────────────────────────────────────────────────────


def test_create_list_update_delete(client, auth):
    created = client.post("/api/locations", json=HQ, headers=auth)
    assert created.status_code == 201
    location_id = created.json()["id"]

    listed = client.get("/api/locations", headers=auth).json()
    assert listed["total"] == 1
    assert listed["locations"][0]["name"] == "HQ"

    state = client.get("/api/dashboard", headers=auth).json()
    assert state["map"]["markers"] == [
        {"id": location_id, "kind": "advanced", "lat": 37.4220, "lng": -122.0841}
    ]
    assert state["map"]["zoom"] == 15

    patched = client.patch(f"/api/locations/{location_id}", json={"name": "Headquarters"}, headers=auth)
    assert patched.json()["name"] == "Headquarters"

    assert client.delete(f"/api/locations/{location_id}", headers=auth).status_code == 200
    assert client.get("/api/locations", headers=auth).json()["total"] == 0
    assert client.get("/api/dashboard", headers=auth).json()["map"]["markers"] == []


def test_create_invalid_location(client, auth):
    resp = client.post("/api/locations", json={"name": " ", "latitude": 95, "longitude": 0}, headers=auth)
    assert resp.status_code == 422
    assert resp.json()["errors"] == {
        "name": "Location name is required",
        "latitude": "Latitude must be between -90 and 90",
    }


def test_update_immutable_field_and_missing(client, auth):
    location_id = client.post("/api/locations", json=HQ, headers=auth).json()["id"]
    resp = client.patch(f"/api/locations/{location_id}", json={"owner_id": "x"}, headers=auth)
    assert resp.status_code == 422
    resp = client.patch("/api/locations/missing", json={"name": "x"}, headers=auth)
    assert resp.status_code == 404


def test_list_filter_and_sort(client, auth):
    client.post("/api/locations", json={**HQ, "name": "zoo"}, headers=auth)
    client.post("/api/locations", json={**HQ, "name": "Airport"}, headers=auth)
    names = [l["name"] for l in client.get("/api/locations?sort=name", headers=auth).json()["locations"]]
    assert names == ["Airport", "zoo"]
    names = [l["name"] for l in client.get("/api/locations?q=zo", headers=auth).json()["locations"]]
    assert names == ["zoo"]


# ─── Geocoding ──────────────────────────────────────────────────────


def test_geocode_forward(client, auth):
    resp = client.get("/api/geocode/forward", params={"address": "1600 Amphitheatre Pkwy"}, headers=auth)
    assert resp.status_code == 200
    assert resp.json()["lat"] == 37.4220


def test_geocode_errors(client, auth):
    assert client.get("/api/geocode/forward", params={"address": " "}, headers=auth).status_code == 422
    assert client.get("/api/geocode/forward", params={"address": "Nowhere"}, headers=auth).status_code == 404
    assert client.get("/api/geocode/reverse", params={"lat": 100, "lng": 0}, headers=auth).status_code == 422


# ─── Dashboard ──────────────────────────────────────────────────────


def test_dashboard_form_flow(client, auth):
    client.post("/api/dashboard/form/open-add", headers=auth)
    client.patch("/api/dashboard/form", json={"name": "HQ", "address": "1600 Amphitheatre Pkwy"}, headers=auth)
    state = client.post("/api/dashboard/form/geocode", headers=auth).json()
    assert state["form"]["latitude"] == "37.422"
    assert state["map"]["temporaryMarker"] == {"lat": 37.4220, "lng": -122.0841}

    state = client.post("/api/dashboard/form/submit", headers=auth).json()
    assert state["saved"]["name"] == "HQ"
    assert state["form"]["mode"] == "closed"
    assert state["toast"] == "Saved: HQ"
    assert state["map"]["temporaryMarker"] is None


def test_dashboard_submit_invalid_keeps_form(client, auth):
    client.post("/api/dashboard/form/open-add", headers=auth)
    state = client.post("/api/dashboard/form/submit", headers=auth).json()
    assert state["saved"] is None
    assert state["form"]["mode"] == "creating_new"
    assert "name" in state["form"]["fieldErrors"]


def test_dashboard_map_click_and_render(client, auth):
    client.post("/api/dashboard/form/open-add", headers=auth)
    state = client.post("/api/dashboard/map/click", json={"lat": 10.5, "lng": 20.25}, headers=auth).json()
    assert state["form"]["latitude"] == "10.5"
    assert state["form"]["provisional"] is True

    resp = client.get("/api/dashboard/map", headers=auth)
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    assert "leaflet" in resp.text.lower()


def test_dashboard_view_and_delete(client, auth):
    location_id = client.post("/api/locations", json=HQ, headers=auth).json()["id"]

    state = client.post(f"/api/dashboard/locations/{location_id}/view", headers=auth).json()
    assert state["centered"] is True
    assert state["focusedId"] == location_id
    assert state["map"]["zoom"] == 18

    state = client.post(f"/api/dashboard/locations/{location_id}/delete", headers=auth).json()
    assert state["pendingDeleteId"] == location_id
    state = client.post("/api/dashboard/delete/confirm", headers=auth).json()
    assert state["deleted"] is True
    assert state["locations"] == []
    assert state["focusedId"] is None


def test_dashboard_search_not_found_is_dismissible(client, auth):
    assert client.post("/api/dashboard/search", json={"address": "Nowhere"}, headers=auth).status_code == 404
    state = client.get("/api/dashboard", headers=auth).json()
    assert state["error"]
    state = client.post("/api/dashboard/messages/dismiss", headers=auth).json()
    assert state["error"] is None


def test_dashboard_unknown_location(client, auth):
    assert client.post("/api/dashboard/form/open-edit/missing", headers=auth).status_code == 404
