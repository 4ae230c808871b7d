# farm_directory/errors.py
"""
Domain errors and their HTTP mapping.

Services raise these; ``register_exception_handlers`` turns them into JSON
responses. Messages are deliberately generic: nothing here says whether an
email exists or why a database statement failed.
"""
from __future__ import annotations

import enum
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class DirectoryError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DirectoryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class NotFoundError(DirectoryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class StateError(DirectoryError):
    """Illegal status transition."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid status transition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change status from {current} to {requested}")


class AuthReason(str, enum.Enum):
    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"
    FORBIDDEN = "forbidden"
    PENDING_APPROVAL = "pending_approval"


_AUTH_MESSAGES = {
    AuthReason.MISSING: "Not authenticated",
    AuthReason.INVALID: "Invalid or expired token",
    AuthReason.EXPIRED: "Invalid or expired token",
    AuthReason.FORBIDDEN: "Forbidden",
    AuthReason.PENDING_APPROVAL: "Account pending approval.",
}


class AuthError(DirectoryError):
    def __init__(self, reason: AuthReason, message: str | None = None):
        self.reason = reason
        super().__init__(message or _AUTH_MESSAGES[reason])

    @property
    def status_code(self) -> int:
        if self.reason in (AuthReason.FORBIDDEN, AuthReason.PENDING_APPROVAL):
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_401_UNAUTHORIZED


class InvalidCredentials(DirectoryError):
    """Login failure; same message for unknown email and wrong password."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class RateLimitExceeded(DirectoryError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later."


def _directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "Invalid request."})


def _store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error while handling %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DirectoryError, _directory_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, _store_error_handler)
