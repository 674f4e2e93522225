"""Map the domain error taxonomy onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from merkel_vision.domain.errors import (
    AuthenticationError,
    AuthRequiredError,
    MerkelVisionError,
    MountError,
    NotFoundError,
    ServiceUnavailableError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: list[tuple[type[MerkelVisionError], int]] = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (AuthRequiredError, 401),
    (AuthenticationError, 401),
    (StoreUnavailableError, 503),
    (ServiceUnavailableError, 503),
    (MountError, 503),
]


def status_for(error: MerkelVisionError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 400


async def handle_domain_error(request: Request, exc: MerkelVisionError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)

    body: dict = {"detail": str(exc)}
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MerkelVisionError, handle_domain_error)
