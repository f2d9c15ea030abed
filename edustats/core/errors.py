"""Error taxonomy and the handlers that render it.

Services and dependencies raise these exceptions; the handlers installed
by register_exception_handlers() turn every failure into the same body
shape, ``{"message": "..."}``.

    ValidationError    400  payload does not match its event type, etc.
    Unauthenticated    401  missing or invalid bearer credential
    Forbidden          403  role or ownership check failed
    InvalidIdentifier  404  path id is not a well-formed reference
    NotFound           404  well-formed id, no such entity
    Conflict           409  uniqueness violation (material title)

Malformed and absent ids are both reported as 404 on purpose, so callers
cannot tell them apart.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class EdustatsError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EdustatsError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthenticated(EdustatsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(EdustatsError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(EdustatsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidIdentifier(NotFound):
    """A path parameter is not a structurally valid entity reference."""


class Conflict(EdustatsError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


def _message_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"message": message}, headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(EdustatsError)
    async def edustats_error_handler(
        _request: Request, exc: EdustatsError
    ) -> JSONResponse:
        headers = None
        if isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        return _message_response(exc.status_code, exc.message, headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _message_response(exc.status_code, message, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(
                str(part) for part in first.get("loc", ()) if part != "body"
            )
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        logger.warning(
            "Request validation failed  %s %s: %s",
            request.method,
            request.url.path,
            message,
        )
        return _message_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return _message_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, EdustatsError.default_message
        )
