"""LocationStore — client-side cache of one owner's locations.

The snapshot is replaced wholesale by ``list`` and patched by
``create``/``update``/``delete`` strictly after the remote call returns.
A failed remote call leaves the snapshot untouched and re-raises.

Overlapping mutations are not serialized. When two responses for the same
record arrive out of order, the one applied last wins; this race is
accepted, not guarded.
"""

from __future__ import annotations

import logging
from typing import Any

from merkel_vision.application.ports.location_repo import LocationRepository
from merkel_vision.domain.entities.location import Location, LocationDraft
from merkel_vision.domain.errors import AuthRequiredError, NotFoundError
from merkel_vision.domain.events import EventChannel
from merkel_vision.domain.policies.location_validation import validate_draft, validate_update

logger = logging.getLogger(__name__)


class LocationStore:
    def __init__(self, repository: LocationRepository, owner_id: str | None = None):
        self._repo = repository
        self._owner_id = owner_id
        self._snapshot: dict[str, Location] = {}
        self.changed: EventChannel[list[Location]] = EventChannel("locations_changed")

    @property
    def owner_id(self) -> str | None:
        return self._owner_id

    @property
    def locations(self) -> list[Location]:
        return list(self._snapshot.values())

    def get(self, location_id: str) -> Location | None:
        return self._snapshot.get(location_id)

    async def list(self, owner_id: str | None) -> list[Location]:
        owner_id = self._require_owner(owner_id)
        locations = await self._repo.list_by_owner(owner_id)

        self._owner_id = owner_id
        self._snapshot = {loc.id: loc for loc in locations}
        logger.info("Loaded %d locations for owner %s", len(locations), owner_id)
        self._publish()
        return self.locations

    async def create(self, owner_id: str | None, draft: LocationDraft) -> Location:
        owner_id = self._require_owner(owner_id)
        clean = validate_draft(draft)
        location = await self._repo.insert(owner_id, clean)

        self._owner_id = owner_id
        self._snapshot[location.id] = location
        logger.info("Created location %s ('%s')", location.id, location.name)
        self._publish()
        return location

    async def update(self, location_id: str, fields: dict[str, Any]) -> Location:
        owner_id = self._require_owner(self._owner_id)
        clean = validate_update(fields)
        location = await self._repo.merge_update(owner_id, location_id, clean)
        if location is None:
            raise NotFoundError(f"Location {location_id} not found")

        self._snapshot[location.id] = location
        logger.info("Updated location %s (%s)", location_id, ", ".join(sorted(clean)))
        self._publish()
        return location

    async def delete(self, location_id: str) -> bool:
        """Delete a location. Deleting an absent record is not an error."""
        owner_id = self._require_owner(self._owner_id)
        deleted = await self._repo.delete(owner_id, location_id)
        if not deleted:
            logger.debug("Location %s already absent", location_id)

        if self._snapshot.pop(location_id, None) is not None:
            self._publish()
        return True

    def clear(self) -> None:
        """Forget the owner and snapshot (sign-out)."""
        self._owner_id = None
        self._snapshot = {}
        self._publish()

    def _require_owner(self, owner_id: str | None) -> str:
        if not owner_id:
            raise AuthRequiredError("User not authenticated")
        if self._owner_id is not None and owner_id != self._owner_id:
            raise AuthRequiredError("Store belongs to another user")
        return owner_id

    def _publish(self) -> None:
        self.changed.emit(self.locations)
