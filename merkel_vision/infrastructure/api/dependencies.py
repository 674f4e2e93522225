"""FastAPI dependency injection — the composition root.

``AppContainer`` builds the shared adapters once and one Dashboard (with its
own LocationStore, MapSurface and SearchWidget) per signed-in session. It
subscribes to ``session_changed`` exactly once, at construction.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from merkel_vision.adapters.geocoder.google_maps_adapter import GoogleMapsAdapter
from merkel_vision.adapters.geocoder.nominatim_adapter import NominatimAdapter
from merkel_vision.adapters.identity.firebase_identity_adapter import FirebaseIdentityAdapter
from merkel_vision.adapters.map.folium_provider import FoliumMapProvider
from merkel_vision.adapters.persistence.database import async_session_factory
from merkel_vision.adapters.persistence.repositories import SqlLocationRepository
from merkel_vision.adapters.places.google_places_adapter import GooglePlacesAdapter
from merkel_vision.application.ports.geocoder_port import GeocoderPort
from merkel_vision.application.ports.identity_port import IdentityPort
from merkel_vision.application.ports.location_repo import LocationRepository
from merkel_vision.application.ports.map_provider_port import MapProviderPort, SurfaceHandle
from merkel_vision.application.ports.places_port import PlacesPort
from merkel_vision.application.services.geocoding_client import GeocodingClient
from merkel_vision.application.services.location_store import LocationStore
from merkel_vision.application.services.map_surface import MapSurface, MapViewConfig
from merkel_vision.application.services.search_widget import SearchWidget
from merkel_vision.application.services.session_manager import SessionChange, SessionManager
from merkel_vision.application.use_cases.dashboard import Dashboard, DashboardConfig
from merkel_vision.config import Settings, settings as default_settings
from merkel_vision.domain.entities.place import SearchRestrictions
from merkel_vision.domain.entities.user import AuthUser
from merkel_vision.domain.errors import AuthRequiredError
from merkel_vision.domain.value_objects.geo_point import GeoPoint

logger = logging.getLogger(__name__)

MAP_ELEMENT_ID = "map"
SEARCH_ELEMENT_ID = "place-autocomplete"

_bearer = HTTPBearer(auto_error=False)


def build_geocoder(settings: Settings) -> GeocoderPort:
    if settings.google_maps_api_key:
        logger.info("Using Google Maps for geocoding")
        return GoogleMapsAdapter(api_key=settings.google_maps_api_key)
    logger.info("Using Nominatim for geocoding")
    return NominatimAdapter(user_agent=settings.geocoder_user_agent)


class AppContainer:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        repository: LocationRepository | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        geocoder: GeocoderPort | None = None,
        places: PlacesPort | None = None,
        map_provider: MapProviderPort | None = None,
        identity: IdentityPort | None = None,
    ):
        self.settings = settings or default_settings
        if repository is None:
            session_factory = session_factory or async_session_factory
            repository = SqlLocationRepository(session_factory)
        self.session_factory = session_factory
        self.repository = repository
        self.geocoding = GeocodingClient(geocoder or build_geocoder(self.settings))
        self.places = places or GooglePlacesAdapter(api_key=self.settings.google_maps_api_key)
        self.map_provider = map_provider or FoliumMapProvider(tiles=self.settings.map_tiles)
        self.sessions = SessionManager(identity or FirebaseIdentityAdapter(api_key=self.settings.firebase_api_key))

        self._dashboards: dict[str, Dashboard] = {}
        self.sessions.session_changed.subscribe(self._on_session_changed)

    @property
    def dashboard_count(self) -> int:
        return len(self._dashboards)

    # ─── Sessions ────────────────────────────────────────────────────

    def _on_session_changed(self, change: SessionChange) -> None:
        if change.user is not None:
            self._dashboards[change.token] = self.build_dashboard(change.user)
            return

        dashboard = self._dashboards.pop(change.token, None)
        if dashboard is not None:
            dashboard.close()
            dashboard.store.clear()

    def build_dashboard(self, user: AuthUser) -> Dashboard:
        s = self.settings
        surface = MapSurface(
            self.map_provider,
            MapViewConfig(
                default_center=GeoPoint(latitude=s.map_default_lat, longitude=s.map_default_lng),
                default_zoom=s.map_default_zoom,
                single_result_zoom=s.map_search_zoom,
                map_id=s.google_maps_map_id or None,
            ),
        )
        config = DashboardConfig(
            map_surface=SurfaceHandle(MAP_ELEMENT_ID, s.map_width_px, s.map_height_px),
            search_container=SurfaceHandle(SEARCH_ELEMENT_ID),
            restrictions=SearchRestrictions(
                countries=(s.geocoder_region,) if s.geocoder_region else (),
                types=tuple(s.places_types),
            ),
            search_zoom=s.map_search_zoom,
            view_zoom=s.map_view_zoom,
            view_retry_delays=tuple(s.map_view_retry_delays),
        )
        return Dashboard(
            user=user,
            store=LocationStore(self.repository, owner_id=user.uid),
            surface=surface,
            geocoding=self.geocoding,
            search=SearchWidget(self.places, s.places_fields),
            config=config,
        )

    async def dashboard_for(self, token: str | None) -> Dashboard:
        """The started Dashboard for a session token."""
        user = self.sessions.current_user(token)
        dashboard = self._dashboards.get(token) if user is not None else None
        if dashboard is None:
            raise AuthRequiredError("User not authenticated")
        if not dashboard.started:
            await dashboard.start()
        return dashboard

    def close(self) -> None:
        for dashboard in self._dashboards.values():
            dashboard.close()
        self._dashboards.clear()


# ─── Dependencies ────────────────────────────────────────────────────


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_token(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> str | None:
    return credentials.credentials if credentials else None


def get_current_user(
    token: str | None = Depends(get_token),
    container: AppContainer = Depends(get_container),
) -> AuthUser:
    user = container.sessions.current_user(token)
    if user is None:
        raise AuthRequiredError("User not authenticated")
    return user


async def get_dashboard(
    token: str | None = Depends(get_token),
    container: AppContainer = Depends(get_container),
) -> Dashboard:
    return await container.dashboard_for(token)


def get_geocoding(container: AppContainer = Depends(get_container)) -> GeocodingClient:
    return container.geocoding
