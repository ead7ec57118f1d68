"""Error handling utilities and custom exceptions.

Every failure the caller should see is a :class:`ChatError` carrying the
HTTP status it maps to.  Content problems (unparseable model text,
safety blocks) never become errors; the pipeline resolves them into a
normal reply.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

NO_CACHE_HEADERS = {"Cache-Control": "no-store"}

GENERIC_UPSTREAM_MESSAGE = "Upstream error"


class ChatError(Exception):
    """Exception raised when a chat operation fails."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def public_message(self, production: bool) -> str:
        """Message safe to send to the caller."""
        return self.message


class ValidationError(ChatError):
    """The caller's input was rejected."""

    status_code = 400


class EmptyInputError(ValidationError):
    status_code = 400


class InputTooLargeError(ValidationError):
    status_code = 413


class ConfigurationError(ChatError):
    """Required server configuration (e.g. the API key) is missing."""

    status_code = 500


class UpstreamTransportError(ChatError):
    """The completion service timed out or could not be reached."""

    status_code = 504


class UpstreamRejection(ChatError):
    """The completion service answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message, status_code=status_code)

    def public_message(self, production: bool) -> str:
        return GENERIC_UPSTREAM_MESSAGE if production else self.message


class UpstreamShapeError(ChatError):
    """The completion service returned a body with no usable candidate."""

    status_code = 502


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=NO_CACHE_HEADERS,
    )


async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    """Convert a ChatError into its JSON error envelope."""
    production = request.app.state.app_config.is_production
    if exc.status_code >= 500:
        logger.error("{} on {}: {}", type(exc).__name__, request.url.path, exc)
    else:
        logger.info("{} on {}: {}", type(exc).__name__, request.url.path, exc)
    return error_response(exc.status_code, exc.public_message(production))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for faults the pipeline did not anticipate."""
    logger.opt(exception=exc).error("Unhandled error on {}", request.url.path)
    return error_response(500, "Server error")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework errors (404, 405, ...) in the same envelope."""
    headers = dict(NO_CACHE_HEADERS)
    headers.update(exc.headers or {})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=headers,
    )
