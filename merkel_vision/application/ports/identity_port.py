"""Port interface for the external identity provider."""

from abc import ABC, abstractmethod

from merkel_vision.domain.entities.user import AuthSession


class IdentityPort(ABC):
    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Raises AuthenticationError on bad credentials."""
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    async def sign_out(self, session: AuthSession) -> None:
        ...
