"""Firebase Authentication REST adapter — implements IdentityPort."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import httpx

from merkel_vision.application.ports.identity_port import IdentityPort
from merkel_vision.config import settings
from merkel_vision.domain.entities.user import AuthSession, AuthUser
from merkel_vision.domain.errors import AuthenticationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Provider error codes that mean "the caller got something wrong".
_CREDENTIAL_ERRORS = {
    "EMAIL_NOT_FOUND": "Invalid email or password",
    "INVALID_PASSWORD": "Invalid email or password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "USER_DISABLED": "This account has been disabled",
    "EMAIL_EXISTS": "An account with this email already exists",
    "INVALID_EMAIL": "Invalid email address",
    "MISSING_PASSWORD": "Password is required",
    "WEAK_PASSWORD": "Password should be at least 6 characters",
}


class FirebaseIdentityAdapter(IdentityPort):
    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key or settings.firebase_api_key
        self._timeout = timeout
        self._transport = transport

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return await self._password_call("accounts:signInWithPassword", email, password)

    async def sign_up(self, email: str, password: str) -> AuthSession:
        return await self._password_call("accounts:signUp", email, password)

    async def sign_out(self, session: AuthSession) -> None:
        # ID tokens are stateless; dropping them client-side is the whole sign-out.
        logger.info("Signed out %s", session.user.email)

    async def _password_call(self, endpoint: str, email: str, password: str) -> AuthSession:
        if not self._api_key:
            raise ServiceUnavailableError("Identity provider is not configured")

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{IDENTITY_TOOLKIT_URL}/{endpoint}",
                    params={"key": self._api_key},
                    json={"email": email, "password": password, "returnSecureToken": True},
                    timeout=self._timeout,
                )
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Identity provider error on %s: %s", endpoint, e)
            raise ServiceUnavailableError(f"Authentication service unavailable: {e}") from e

        if response.status_code >= 400:
            code = ((data.get("error") or {}).get("message") or "").split(" : ")[0]
            if code in _CREDENTIAL_ERRORS:
                raise AuthenticationError(_CREDENTIAL_ERRORS[code])
            logger.error("Identity provider rejected %s: %s", endpoint, code or response.status_code)
            raise ServiceUnavailableError(f"Authentication failed: {code or response.status_code}")

        return AuthSession(
            user=AuthUser(uid=data["localId"], email=data.get("email", email)),
            token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            expires_at=_expires_at(data.get("expiresIn")),
        )


def _expires_at(expires_in: str | int | None) -> datetime | None:
    """``expiresIn`` is the ID token lifetime in seconds, sent as a string."""
    try:
        seconds = int(expires_in)
    except (TypeError, ValueError):
        return None
    return datetime.now(UTC) + timedelta(seconds=seconds)
