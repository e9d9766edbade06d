"""API error taxonomy and the handlers that render it.

Every failure leaves the service as ``{"success": false, "message": ...}``
with the status carried by the exception class. Services raise these;
route handlers never build error responses themselves.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from devit.core.logging import get_logger
from devit.repositories.base import RepositoryError

logger = get_logger(__name__)


class ErrorMessage:
    """Standardized user-facing error messages."""

    UNAUTHENTICATED = "Unauthorized"
    ADMIN_REQUIRED = "Administrator privileges required"
    INVALID_LOGIN = "Invalid email or password"
    INVALID_ADMIN_LOGIN = "Invalid credentials"
    USER_EXISTS = "User with this email or username already exists"
    USER_NOT_FOUND = "User not found"
    REPOSITORY_EXISTS = "Repository with this name already exists"
    REPOSITORY_NOT_FOUND = "Repository not found"
    ISSUE_NOT_FOUND = "Issue not found"
    ISSUE_FORBIDDEN = "Only the repository owner or the issue author can modify this issue"
    ALREADY_STARRED = "Repository already starred"
    NOT_STARRED = "Repository not starred"
    ALREADY_FOLLOWING = "Already following this user"
    NOT_FOLLOWING = "Not following this user"
    SELF_FOLLOW = "You cannot follow yourself"
    INTERNAL = "Internal server error"


class APIError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    default_message = ErrorMessage.INTERNAL

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(APIError):
    """Missing, malformed, expired or badly signed bearer token."""

    status_code = 401
    default_message = ErrorMessage.UNAUTHENTICATED


class UnauthorizedError(APIError):
    """Valid identity lacking the privilege the operation requires."""

    status_code = 403
    default_message = ErrorMessage.ADMIN_REQUIRED


class ResourceNotFoundError(APIError):
    status_code = 404
    default_message = "Not found"


class ResourceConflictError(APIError):
    status_code = 409
    default_message = "Conflict"


class InvalidInputError(APIError):
    status_code = 400
    default_message = "Invalid request"


class AlreadyStarredError(ResourceConflictError):
    """A conflict that the star endpoint reports as 400."""

    status_code = 400
    default_message = ErrorMessage.ALREADY_STARRED


class NotStarredError(InvalidInputError):
    default_message = ErrorMessage.NOT_STARRED


def error_body(message: str, **extra: Any) -> dict[str, Any]:
    return {"success": False, "message": message, **extra}


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Request rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        reason=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render pydantic validation failures as a 400 naming the offending fields."""
    fields: list[str] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
    message = f"Missing or invalid fields: {', '.join(fields)}"
    logger.info("Request validation failed", path=request.url.path, fields=fields)
    return JSONResponse(status_code=400, content=error_body(message))


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the failure and answer with a generic 500."""
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=error_body(ErrorMessage.INTERNAL))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RepositoryError, internal_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)
