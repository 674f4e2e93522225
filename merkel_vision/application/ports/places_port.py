"""Port interface for the provider's place autocomplete capability."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from merkel_vision.domain.entities.place import PlaceSuggestion, SearchRestrictions


@dataclass
class AutocompleteHandle:
    """An autocomplete element bound to one container."""

    container_id: str
    restrictions: SearchRestrictions


class PlacesPort(ABC):
    @abstractmethod
    def is_available(self) -> bool:
        ...

    @abstractmethod
    def create_autocomplete(
        self, container_id: str, restrictions: SearchRestrictions
    ) -> AutocompleteHandle:
        """Raises MountError when autocomplete is unavailable."""
        ...

    @abstractmethod
    async def suggest(self, handle: AutocompleteHandle, text: str) -> list[PlaceSuggestion]:
        ...

    @abstractmethod
    async def fetch_details(self, place_id: str, fields: list[str]) -> dict[str, Any]:
        """Raw provider place record for the requested fields.

        Raises NotFoundError for an unknown place and
        ServiceUnavailableError on transport failure.
        """
        ...
