"""Mapping of relay failures to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from therapist_relay.api.schemas import ErrorResponse
from therapist_relay.config.settings import load_settings
from therapist_relay.core.errors import ErrorKind, RelayError


logger = logging.getLogger(__name__)


def status_for(error: RelayError) -> int:
    """Return the HTTP status code for a relay error."""

    if error.kind is ErrorKind.VALIDATION:
        return status.HTTP_400_BAD_REQUEST
    if error.kind is ErrorKind.PROVIDER and error.provider_status is not None:
        if 400 <= error.provider_status < 600:
            return error.provider_status
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int, message: str, details: str | None = None
) -> JSONResponse:
    """Build the structured error body; details only appear in development."""

    body = ErrorResponse(
        error=message,
        details=details if load_settings().is_development else None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render a RelayError raised from a route."""

    status_code = status_for(exc)
    if status_code >= 500:
        logger.warning("%s on %s: %s", exc.kind.value, request.url.path, exc.message)
    cause = exc.__cause__
    return error_response(status_code, exc.message, str(cause) if cause else exc.kind.value)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 with the structured body for malformed request payloads."""

    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body", str(exc.errors()))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so every failure yields a JSON body."""

    logger.exception("Server error on %s", request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", str(exc))
