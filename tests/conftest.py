"""Pytest configuration, in-memory fakes and shared fixtures."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from merkel_vision.adapters.map.folium_provider import FoliumMapProvider, FoliumMapWidget
from merkel_vision.application.ports.geocoder_port import GeocoderPort
from merkel_vision.application.ports.identity_port import IdentityPort
from merkel_vision.application.ports.location_repo import LocationRepository
from merkel_vision.application.ports.map_provider_port import SurfaceHandle
from merkel_vision.application.ports.places_port import AutocompleteHandle, PlacesPort
from merkel_vision.application.services.geocoding_client import GeocodingClient
from merkel_vision.application.services.location_store import LocationStore
from merkel_vision.application.services.map_surface import MapSurface, MapViewConfig
from merkel_vision.application.services.search_widget import SearchWidget
from merkel_vision.application.use_cases.dashboard import Dashboard, DashboardConfig
from merkel_vision.domain.entities.location import Location
from merkel_vision.domain.entities.place import SearchRestrictions
from merkel_vision.domain.entities.user import AuthSession, AuthUser
from merkel_vision.domain.errors import AuthenticationError, MountError, NotFoundError
from merkel_vision.domain.value_objects.geo_point import GeoPoint

PLACE_FIELDS = ["displayName", "formattedAddress", "location", "viewport", "addressComponents"]

# ─── In-memory fakes ────────────────────────────────────────────────


class InMemoryLocationRepo(LocationRepository):
    def __init__(self):
        self.rows: dict[str, Location] = {}
        self.fail_with: Exception | None = None
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def list_by_owner(self, owner_id):
        self._maybe_fail()
        return [loc for loc in self.rows.values() if loc.owner_id == owner_id]

    async def insert(self, owner_id, draft):
        self._maybe_fail()
        now = self._tick()
        loc = Location(
            id=f"loc-{next(self._ids)}",
            owner_id=owner_id,
            name=draft.name,
            coordinates=GeoPoint(latitude=draft.latitude, longitude=draft.longitude),
            address=draft.address,
            description=draft.description,
            notes=draft.notes,
            created_at=now,
            updated_at=now,
        )
        self.rows[loc.id] = loc
        return loc

    async def merge_update(self, owner_id, location_id, fields):
        self._maybe_fail()
        loc = self.rows.get(location_id)
        if loc is None or loc.owner_id != owner_id:
            return None
        lat = fields.get("latitude", loc.latitude)
        lng = fields.get("longitude", loc.longitude)
        updated = Location(
            id=loc.id,
            owner_id=owner_id,
            name=fields.get("name", loc.name),
            coordinates=GeoPoint(latitude=lat, longitude=lng),
            address=fields.get("address", loc.address),
            description=fields.get("description", loc.description),
            notes=fields.get("notes", loc.notes),
            created_at=loc.created_at,
            updated_at=self._tick(),
        )
        self.rows[loc.id] = updated
        return updated

    async def delete(self, owner_id, location_id):
        self._maybe_fail()
        loc = self.rows.get(location_id)
        if loc is None or loc.owner_id != owner_id:
            return False
        del self.rows[location_id]
        return True


class FakeGeocoder(GeocoderPort):
    def __init__(self):
        self.forward_results = {}
        self.reverse_result = None
        self.fail_with: Exception | None = None
        self.calls: list[tuple] = []

    async def forward(self, address):
        self.calls.append(("forward", address))
        if self.fail_with is not None:
            raise self.fail_with
        return self.forward_results.get(address)

    async def reverse(self, latitude, longitude):
        self.calls.append(("reverse", latitude, longitude))
        if self.fail_with is not None:
            raise self.fail_with
        return self.reverse_result


class FakePlaces(PlacesPort):
    def __init__(self, available: bool = True):
        self.available = available
        self.details: dict[str, dict] = {}
        self.suggestions = []
        self.requested_fields: list[list[str]] = []

    def is_available(self):
        return self.available

    def create_autocomplete(self, container_id, restrictions):
        if not self.available:
            raise MountError("Places library not loaded")
        return AutocompleteHandle(container_id=container_id, restrictions=restrictions)

    async def suggest(self, handle, text):
        return [s for s in self.suggestions if text.lower() in s.text.lower()]

    async def fetch_details(self, place_id, fields):
        self.requested_fields.append(list(fields))
        if place_id not in self.details:
            raise NotFoundError(f"Place '{place_id}' not found")
        return self.details[place_id]


class FakeIdentity(IdentityPort):
    def __init__(self):
        self.passwords: dict[str, str] = {}
        self.signed_out: list[str] = []
        self.expires_at: datetime | None = None
        self._tokens = itertools.count(1)

    def _session(self, email):
        return AuthSession(
            user=AuthUser(uid=f"uid-{email}", email=email),
            token=f"token-{next(self._tokens)}",
            expires_at=self.expires_at,
        )

    async def sign_in(self, email, password):
        if self.passwords.get(email) != password:
            raise AuthenticationError("Invalid email or password")
        return self._session(email)

    async def sign_up(self, email, password):
        if email in self.passwords:
            raise AuthenticationError("An account with this email already exists")
        self.passwords[email] = password
        return self._session(email)

    async def sign_out(self, session):
        self.signed_out.append(session.token)


class SettlingWidget(FoliumMapWidget):
    """Reports busy for the first ``busy_checks`` idle checks."""

    busy_checks = 0

    def is_idle(self):
        if self.busy_checks > 0:
            self.busy_checks -= 1
            return False
        return super().is_idle()


class SettlingMapProvider(FoliumMapProvider):
    def __init__(self, busy_checks: int = 0, **kwargs):
        super().__init__(tiles="OpenStreetMap", **kwargs)
        self.busy_checks = busy_checks

    def create_map(self, surface, center, zoom, map_id=None):
        widget = SettlingWidget(surface, center, zoom, map_id, "OpenStreetMap")
        widget.busy_checks = self.busy_checks
        return widget


class UnloadableMapProvider(FoliumMapProvider):
    async def load(self):
        return False


# ─── Fixtures ───────────────────────────────────────────────────────


@pytest.fixture
def user():
    return AuthUser(uid="user-1", email="ada@example.com")


@pytest.fixture
def repo():
    return InMemoryLocationRepo()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def places():
    return FakePlaces()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def map_config():
    return MapViewConfig(
        default_center=GeoPoint(latitude=39.8283, longitude=-98.5795),
        default_zoom=4,
        single_result_zoom=15,
        map_id="test-map-id",
    )


@pytest.fixture
def map_element():
    return SurfaceHandle("map", 1024, 500)


@pytest.fixture
def make_dashboard(user, repo, geocoder, places, map_config):
    def _make(provider=None, map_id="test-map-id", places_port=None, delays=(0, 0, 0)):
        config = MapViewConfig(
            default_center=map_config.default_center,
            default_zoom=map_config.default_zoom,
            single_result_zoom=map_config.single_result_zoom,
            map_id=map_id,
        )
        return Dashboard(
            user=user,
            store=LocationStore(repo, owner_id=user.uid),
            surface=MapSurface(provider or FoliumMapProvider(tiles="OpenStreetMap"), config),
            geocoding=GeocodingClient(geocoder),
            search=SearchWidget(places_port or places, PLACE_FIELDS),
            config=DashboardConfig(
                map_surface=SurfaceHandle("map", 1024, 500),
                search_container=SurfaceHandle("place-autocomplete"),
                restrictions=SearchRestrictions(countries=("us",)),
                search_zoom=15,
                view_zoom=18,
                view_retry_delays=delays,
            ),
        )

    return _make
