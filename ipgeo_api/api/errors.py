"""Centralized exception handlers for the FastAPI application.

Every failure leaves the API in the same envelope:

    {
        "success": false,
        "message": "Human-readable error message",
        "errors": [{"field": "...", "message": "..."}]   # validation only
    }

Outside production the envelope also carries ``error`` (the internal
exception message) and, for server errors, ``stack``.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ipgeo_api.exceptions import (
    ApiError,
    RouteNotFoundError,
    StoreUnavailableError,
    UnhandledError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _error_response(request: Request, error: ApiError, cause: BaseException) -> JSONResponse:
    """Log an error and render it as the uniform error envelope."""
    is_server_error = error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
    # Internal detail of server errors never reaches the client message
    message = error.default_message if is_server_error else error.message

    log_message = (
        f"{type(cause).__name__}: {cause} "
        f"[status={error.status_code} method={request.method} "
        f"url={request.url.path} client={_client(request)}]"
    )
    if is_server_error:
        logger.error(log_message, exc_info=(type(cause), cause, cause.__traceback__))
    else:
        logger.warning(log_message)

    content: dict = {"success": False, "message": message}
    if isinstance(error, ValidationError):
        content["errors"] = error.errors

    settings = request.app.state.settings
    if not settings.is_production:
        content["error"] = str(cause)
        if is_server_error:
            content["stack"] = "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

    headers = {**getattr(request.state, "rate_limit_headers", {}), **(error.headers or {})}
    return JSONResponse(status_code=error.status_code, content=content, headers=headers)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _error_response(request, exc, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's own parameter validation failures as validation errors."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            or "body",
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return _error_response(request, ValidationError(errors), exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing errors (404, 405, ...) in the error envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error: ApiError = RouteNotFoundError()
    else:
        error = ApiError(str(exc.detail))
        error.status_code = exc.status_code
        error.headers = getattr(exc, "headers", None)
    return _error_response(request, error, exc)


async def store_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    return _error_response(request, StoreUnavailableError(), exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(request, UnhandledError(), exc)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the application."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
