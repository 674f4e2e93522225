"""Authenticated user as reported by the identity provider."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str


@dataclass(frozen=True)
class AuthSession:
    user: AuthUser
    token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at
