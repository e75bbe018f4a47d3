"""
Error taxonomy for the auth API and the FastAPI handlers that render it.

Every JSON error body has the shape ``{"error": <tag>, "message": <text>}``.
The tag is stable; the message is for humans.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base for every error the auth API reports to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    tag: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.tag, "message": self.message}


class InvalidInput(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    tag = "invalid_input"
    default_message = "Invalid request data"


class Conflict(AuthError):
    status_code = status.HTTP_409_CONFLICT
    tag = "conflict"
    default_message = "An account already exists with this email"


class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    tag = "invalid_credentials"
    default_message = "Invalid email or password"


class Unauthenticated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    tag = "unauthenticated"
    default_message = "You must be signed in to access this resource"


class SessionExpired(Unauthenticated):
    tag = "session_expired"
    default_message = "Your session has expired, please sign in again"


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    tag = "forbidden"
    default_message = "The provided token is invalid"


class NotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    tag = "not_found"
    default_message = "Resource not found"


class InternalError(AuthError):
    pass


# ── FastAPI wiring ─────────────────────────────────────────────────────


def register_error_handlers(app: FastAPI) -> None:
    """Render taxonomy errors as JSON and map everything else onto it."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        err = InvalidInput("Request body must be a JSON object")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        err = InternalError()
        return JSONResponse(status_code=err.status_code, content=err.to_dict())
