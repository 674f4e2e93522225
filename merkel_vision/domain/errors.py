"""Error taxonomy shared by every layer.

Adapters translate transport/provider failures into these types so the
application layer never sees httpx or SQLAlchemy exceptions.
"""

from __future__ import annotations


class MerkelVisionError(Exception):
    """Base class for all expected application errors."""


class ValidationError(MerkelVisionError):
    """Bad user input: name or coordinates missing or out of range."""

    def __init__(self, errors: dict[str, str] | str):
        if isinstance(errors, str):
            errors = {"__all__": errors}
        self.errors = errors
        super().__init__("; ".join(errors.values()))


class NotFoundError(MerkelVisionError):
    """A geocode or store lookup returned nothing."""


class AuthRequiredError(MerkelVisionError):
    """No active session / owner context."""


class AuthenticationError(MerkelVisionError):
    """The identity provider rejected the supplied credentials."""


class StoreUnavailableError(MerkelVisionError):
    """The document store could not be reached."""


class ServiceUnavailableError(MerkelVisionError):
    """A provider service (geocoder, places, identity) is not ready."""


class MountError(MerkelVisionError):
    """A UI widget could not attach to the mapping provider."""


class MarkerUnavailableError(MerkelVisionError):
    """The requested marker implementation cannot be constructed."""


class CoordinateError(ValueError):
    """A value could not be normalized into a valid coordinate."""
