"""Domain exceptions and the central translation to HTTP error responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class BoardError(Exception):
    """Base class for errors that map onto a client-visible error response."""

    kind = "INTERNAL"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BoardError):
    """Bad or duplicate input."""

    kind = "VALIDATION"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(BoardError):
    """Missing, invalid or expired credentials."""

    kind = "AUTHENTICATION"
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(BoardError):
    """Valid identity without the role a route requires."""

    kind = "AUTHORIZATION"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BoardError):
    """Referenced entity does not exist."""

    kind = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class PasswordHashError(BoardError):
    """A stored password hash could not be parsed."""


def error_body(kind: str, message: str) -> dict:
    return {"error": kind, "message": message}


async def handle_board_error(request: Request, exc: BoardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("internal error on %s %s: %s", request.method, request.url.path, exc.message)
        message = "Internal server error"
    else:
        logger.info(
            "%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message
        )
        message = exc.message
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.kind, message),
        headers=headers,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(ValidationError.kind, message),
    )


async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate limit exceeded on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body("RATE_LIMITED", f"Rate limit exceeded: {exc.detail}"),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the single error translator used by every endpoint."""
    app.add_exception_handler(BoardError, handle_board_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit)
    app.add_exception_handler(Exception, handle_unexpected)
