"""Port interface for forward and reverse geocoding."""

from abc import ABC, abstractmethod

from merkel_vision.domain.entities.place import GeocodeResult, ReverseGeocodeResult


class GeocoderPort(ABC):
    @abstractmethod
    async def forward(self, address: str) -> GeocodeResult | None:
        """Convert an address string to coordinates.

        Returns None if the provider found zero results. Raises
        ServiceUnavailableError when the provider cannot be reached or
        refuses the request. Coordinates are already normalized.
        """
        ...

    @abstractmethod
    async def reverse(self, latitude: float, longitude: float) -> ReverseGeocodeResult | None:
        """Convert coordinates to a human-readable address.

        Same contract as forward().
        """
        ...
