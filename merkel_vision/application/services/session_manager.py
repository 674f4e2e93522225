"""SessionManager — tracks signed-in sessions by bearer token.

A session ends on sign-out or when its ID token expires; either way
``session_changed`` is emitted with ``user=None`` so per-session state can be
released.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from merkel_vision.application.ports.identity_port import IdentityPort
from merkel_vision.domain.entities.user import AuthSession, AuthUser
from merkel_vision.domain.errors import AuthenticationError, AuthRequiredError
from merkel_vision.domain.events import EventChannel

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class SessionChange:
    """``user`` is None when the session identified by ``token`` ended."""

    token: str
    user: AuthUser | None


class SessionManager:
    def __init__(self, identity: IdentityPort, clock: Callable[[], datetime] = _utcnow):
        self._identity = identity
        self._clock = clock
        self._sessions: dict[str, AuthSession] = {}
        self.session_changed: EventChannel[SessionChange] = EventChannel("session_changed")

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        if not email or not password:
            raise AuthenticationError("Email and password are required")
        session = await self._identity.sign_in(email, password)
        self._register(session)
        return session

    async def sign_up(self, email: str, password: str) -> AuthSession:
        if not email or not password:
            raise AuthenticationError("Email and password are required")
        session = await self._identity.sign_up(email, password)
        self._register(session)
        return session

    async def sign_out(self, token: str | None) -> None:
        session = self._active(token)
        if session is None:
            raise AuthRequiredError("User not authenticated")
        del self._sessions[session.token]
        await self._identity.sign_out(session)
        logger.info("Session ended for %s", session.user.email)
        self.session_changed.emit(SessionChange(token=session.token, user=None))

    def current_user(self, token: str | None) -> AuthUser | None:
        session = self._active(token)
        return session.user if session else None

    def purge_expired(self) -> int:
        """Drop every expired session. Returns how many were dropped."""
        now = self._clock()
        expired = [s for s in self._sessions.values() if s.is_expired(now)]
        for session in expired:
            self._expire(session)
        return len(expired)

    def _active(self, token: str | None) -> AuthSession | None:
        session = self._sessions.get(token) if token else None
        if session is not None and session.is_expired(self._clock()):
            self._expire(session)
            return None
        return session

    def _expire(self, session: AuthSession) -> None:
        del self._sessions[session.token]
        logger.info("Session expired for %s", session.user.email)
        self.session_changed.emit(SessionChange(token=session.token, user=None))

    def _register(self, session: AuthSession) -> None:
        self.purge_expired()
        self._sessions[session.token] = session
        logger.info("Session started for %s", session.user.email)
        self.session_changed.emit(SessionChange(token=session.token, user=session.user))
