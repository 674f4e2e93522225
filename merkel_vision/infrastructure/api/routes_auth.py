"""Authentication endpoints — sign up, sign in, sign out, current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from merkel_vision.domain.entities.user import AuthUser
from merkel_vision.infrastructure.api.dependencies import (
    AppContainer,
    get_container,
    get_current_user,
    get_token,
)
from merkel_vision.infrastructure.api.serializers import serialize_session, serialize_user

router = APIRouter(prefix="/auth", tags=["auth"])


class Credentials(BaseModel):
    email: str
    password: str


@router.post("/sign-up", status_code=201)
async def sign_up(body: Credentials, container: AppContainer = Depends(get_container)):
    session = await container.sessions.sign_up(body.email.strip(), body.password)
    return serialize_session(session)


@router.post("/sign-in")
async def sign_in(body: Credentials, container: AppContainer = Depends(get_container)):
    session = await container.sessions.sign_in(body.email.strip(), body.password)
    return serialize_session(session)


@router.post("/sign-out")
async def sign_out(
    token: str | None = Depends(get_token),
    container: AppContainer = Depends(get_container),
):
    await container.sessions.sign_out(token)
    return {"status": "signed_out"}


@router.get("/me")
async def me(user: AuthUser = Depends(get_current_user)):
    return serialize_user(user)
