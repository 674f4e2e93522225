"""Port interface for the per-owner location document store."""

from abc import ABC, abstractmethod
from typing import Any

from merkel_vision.domain.entities.location import Location, LocationDraft


class LocationRepository(ABC):
    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> list[Location]:
        ...

    @abstractmethod
    async def insert(self, owner_id: str, draft: LocationDraft) -> Location:
        """Persist a validated draft; assigns id, created_at and updated_at."""
        ...

    @abstractmethod
    async def merge_update(
        self, owner_id: str, location_id: str, fields: dict[str, Any]
    ) -> Location | None:
        """Merge fields into the record and refresh updated_at.

        Returns None if no such record exists for the owner.
        """
        ...

    @abstractmethod
    async def delete(self, owner_id: str, location_id: str) -> bool:
        """Delete by id. Returns False if nothing was deleted."""
        ...
