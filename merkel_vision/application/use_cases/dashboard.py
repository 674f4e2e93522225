"""Dashboard — binds LocationStore, MapSurface, GeocodingClient and SearchWidget.

One Dashboard exists per signed-in session. It owns the location form
dialog, the focused location and the pending delete confirmation, and it
is the only subscriber to the store's and surface's events.

Every awaited call is a suspension point: after it returns, the Dashboard
checks ``is_alive`` before touching the surface or the form, so a result
arriving after sign-out is dropped. Overlapping lookups are not
serialized; the last response to arrive wins.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from merkel_vision.application.ports.map_provider_port import SurfaceHandle
from merkel_vision.application.services.geocoding_client import GeocodingClient
from merkel_vision.application.services.location_store import LocationStore
from merkel_vision.application.services.map_surface import MapSurface
from merkel_vision.application.services.search_widget import SearchWidget
from merkel_vision.application.use_cases.location_form import LocationForm
from merkel_vision.domain.entities.location import Location
from merkel_vision.domain.entities.place import GeocodeResult, PlaceSelection, SearchRestrictions
from merkel_vision.domain.entities.user import AuthUser
from merkel_vision.domain.errors import MerkelVisionError, NotFoundError, ValidationError
from merkel_vision.domain.policies.location_listing import filter_and_sort
from merkel_vision.domain.policies.location_validation import validate_draft
from merkel_vision.domain.value_objects.enums import AttachStatus, FormMode, SortField
from merkel_vision.domain.value_objects.geo_point import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardConfig:
    map_surface: SurfaceHandle
    search_container: SurfaceHandle
    restrictions: SearchRestrictions
    search_zoom: int = 15
    view_zoom: int = 18
    view_retry_delays: tuple[float, ...] = (0.1, 0.3, 0.6)


class Dashboard:
    def __init__(
        self,
        user: AuthUser,
        store: LocationStore,
        surface: MapSurface,
        geocoding: GeocodingClient,
        search: SearchWidget,
        config: DashboardConfig,
    ):
        self.user = user
        self.store = store
        self.surface = surface
        self.geocoding = geocoding
        self.search = search
        self._config = config

        self.form = LocationForm()
        self.focused_id: str | None = None
        self.pending_delete_id: str | None = None
        self.error: str | None = None
        self.map_error: str | None = None
        self.search_error: str | None = None
        self._toast: str | None = None

        self._started = False
        self._alive = True
        self._unsubscribers = []

    # ─── Lifecycle ───────────────────────────────────────────────────

    @property
    def is_alive(self) -> bool:
        return self._alive

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Attach the map, mount the search box and load the user's locations."""
        if self._started:
            return
        self._started = True
        self._unsubscribers = [
            self.store.changed.subscribe(self.reconcile),
            self.surface.marker_clicked.subscribe(self.on_marker_click),
            self.surface.map_clicked.subscribe(self.on_map_click),
            self.search.place_selected.subscribe(self.on_place_selected),
        ]

        status = await self.surface.attach(self._config.map_surface)
        if not self._alive:
            return
        if status == AttachStatus.FAILED:
            self.map_error = self.surface.error or "Failed to initialize map"

        if self.search.mount(self._config.search_container, self._config.restrictions) is None:
            self.search_error = str(self.search.mount_error)

        await self.refresh()

    async def refresh(self) -> None:
        try:
            await self.store.list(self.user.uid)
        except MerkelVisionError as e:
            logger.error("Failed to load locations for %s: %s", self.user.uid, e)
            if self._alive:
                self.error = f"Failed to load locations: {e}"

    def close(self) -> None:
        """Tear down on sign-out. In-flight results are dropped afterwards."""
        self._alive = False
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.surface.detach()
        self.form.close()

    # ─── Reconciliation ──────────────────────────────────────────────

    def reconcile(self, locations: list[Location]) -> None:
        """Bring the marker registry in line with the store's list.

        One fit per batch, never one per marker.
        """
        if not self._alive or not self.surface.is_attached:
            return

        incoming = {loc.id for loc in locations}
        for loc in locations:
            self.surface.upsert_marker(loc.id, loc.latitude, loc.longitude, loc.name)
        for stale_id in self.surface.marker_ids() - incoming:
            self.surface.remove_marker(stale_id)

        if self.focused_id not in incoming:
            self.focused_id = None
        self.surface.fit_all_markers()

    # ─── Listing ─────────────────────────────────────────────────────

    def visible_locations(self, term: str = "", sort_by: SortField = SortField.NAME) -> list[Location]:
        return filter_and_sort(self.store.locations, term, sort_by)

    @property
    def focused(self) -> Location | None:
        return self.store.get(self.focused_id) if self.focused_id else None

    # ─── Form ────────────────────────────────────────────────────────

    def open_add(self) -> None:
        self.form.open_new()

    def open_edit(self, location_id: str) -> None:
        location = self._require_location(location_id)
        self.focused_id = location_id
        self.form.open_existing(location)

    def close_form(self) -> None:
        self.form.close()
        self.surface.clear_temporary_marker()

    async def submit_form(self) -> Location | None:
        """Create or update from the form. Returns None and keeps the dialog open on failure."""
        if not self.form.is_open:
            return None
        self.form.clear_errors()
        mode, location_id = self.form.mode, self.form.location_id

        try:
            draft = validate_draft(self.form.to_draft())
        except ValidationError as e:
            self.form.set_error(str(e), e.errors)
            return None

        try:
            if mode == FormMode.EDITING_EXISTING:
                location = await self.store.update(location_id, self.form.to_update_fields())
            else:
                location = await self.store.create(self.user.uid, draft)
        except MerkelVisionError as e:
            logger.error("Error saving location: %s", e)
            if self._alive:
                self.form.set_error(str(e) or "Failed to save location", getattr(e, "errors", None))
            return None

        if not self._alive:
            return location
        self.form.close()
        self.surface.clear_temporary_marker()
        self._toast = f"Updated: {location.name}" if mode == FormMode.EDITING_EXISTING else f"Saved: {location.name}"
        return location

    async def geocode_form_address(self) -> GeocodeResult | None:
        """Resolve the typed address into the form's coordinates."""
        self.form.clear_errors()
        try:
            result = await self.geocoding.forward_lookup(self.form.address)
        except MerkelVisionError as e:
            if self._alive:
                self.form.set_error(str(e), getattr(e, "errors", None))
            return None

        if not self._alive or not self.form.is_open:
            return result
        self.form.apply_geocode(result)
        self._show_result(result)
        return result

    async def lookup_form_address(self) -> str | None:
        """Fill the form's address from its coordinates."""
        self.form.clear_errors()
        try:
            latitude, longitude = self.form.parsed_coordinates()
            if latitude is None or longitude is None:
                raise ValidationError({"coordinates": "Please enter coordinates first"})
            result = await self.geocoding.reverse_lookup(latitude, longitude)
        except MerkelVisionError as e:
            if self._alive:
                self.form.set_error(str(e), getattr(e, "errors", None))
            return None

        if self._alive and self.form.is_open:
            self.form.address = result.formatted_address
        return result.formatted_address

    # ─── Map actions ─────────────────────────────────────────────────

    async def search_address(self, address_text: str) -> GeocodeResult:
        """Free-text search: center on the result and preview it with a temporary marker."""
        try:
            result = await self.geocoding.forward_lookup(address_text)
        except MerkelVisionError as e:
            if self._alive:
                self.error = str(e)
            raise

        if self._alive:
            self._show_result(result)
            self._toast = f"Found: {result.formatted_address}"
        return result

    async def view_location(self, location_id: str) -> bool:
        """Center the map on a location, retrying while the surface is not ready."""
        location = self._require_location(location_id)
        self.focused_id = location_id

        for attempt, delay in enumerate(self._config.view_retry_delays, start=1):
            await asyncio.sleep(delay)
            if not self._alive:
                return False
            if self.surface.set_center(location.latitude, location.longitude, self._config.view_zoom):
                return True
            logger.info("Centering attempt #%d on %s failed", attempt, location_id)

        logger.error("All map centering attempts failed for %s", location_id)
        self.error = "Unable to center the map on this location. Please try again."
        return False

    def request_delete(self, location_id: str) -> Location:
        location = self._require_location(location_id)
        self.pending_delete_id = location_id
        return location

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    async def confirm_delete(self) -> bool:
        """Delete the pending location; reconciliation removes its marker and refits."""
        location_id = self.pending_delete_id
        if location_id is None:
            return False
        self.pending_delete_id = None

        try:
            await self.store.delete(location_id)
        except MerkelVisionError as e:
            logger.error("Error deleting location %s: %s", location_id, e)
            if self._alive:
                self.error = f"Failed to delete location: {e}"
            raise

        if self._alive:
            self._toast = "Location deleted"
        return True

    def fit_all(self) -> bool:
        return self.surface.fit_all_markers()

    # ─── Event handlers ──────────────────────────────────────────────

    def on_place_selected(self, place: PlaceSelection) -> None:
        if not self._alive:
            return
        self.form.open_new(place)
        self._show_result(place)
        self._toast = f"Found: {place.formatted_address}"

    def on_marker_click(self, location_id: str) -> None:
        if self._alive and self.store.get(location_id) is not None:
            self.focused_id = location_id

    def on_map_click(self, point: GeoPoint) -> None:
        if not self._alive:
            return
        self.surface.set_temporary_marker(point.latitude, point.longitude)
        if self.form.mode == FormMode.CREATING_NEW:
            self.form.set_coordinates(point.latitude, point.longitude, provisional=True)

    # ─── Messages ────────────────────────────────────────────────────

    def dismiss_error(self) -> None:
        self.error = None

    def take_toast(self) -> str | None:
        """Return and clear the transient success message."""
        toast, self._toast = self._toast, None
        return toast

    # ─── Internals ───────────────────────────────────────────────────

    def _show_result(self, result: GeocodeResult) -> None:
        if result.viewport is not None:
            self.surface.fit_bounds(result.viewport)
        else:
            self.surface.set_center(result.latitude, result.longitude, self._config.search_zoom)
        self.surface.set_temporary_marker(result.latitude, result.longitude)

    def _require_location(self, location_id: str) -> Location:
        location = self.store.get(location_id)
        if location is None:
            raise NotFoundError(f"Location {location_id} not found")
        return location
