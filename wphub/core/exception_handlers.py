"""Global exception handlers for consistent error responses.

Every error leaves the API as ``{"type": ..., "message": ...}`` JSON.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wphub.core.exceptions import AppException, RateLimitError

logger = logging.getLogger("wphub.exception")


def _format_validation_error(error: dict) -> str:
    field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
    return f"{field}: {error['msg']}" if field else error["msg"]


def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses."""
    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": exc.status_code,
        "error_type": exc.error_type,
    }
    if exc.status_code >= 500:
        logger.error("AppException: %s - %s", exc.error_type, exc.message, extra=extra)
    else:
        logger.info("AppException: %s - %s", exc.error_type, exc.message, extra=extra)

    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(
        status_code=exc.status_code,
        content={"type": exc.error_type, "message": exc.message},
        headers=headers,
    )


def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTPException raised by Starlette (404 routes, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"type": "http_error", "message": str(exc.detail)},
    )


def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Flatten Pydantic validation errors into one message."""
    message = "; ".join(_format_validation_error(error) for error in exc.errors())
    return JSONResponse(
        status_code=422,
        content={"type": "validation_error", "message": message},
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors."""
    logger.error(
        "Unhandled exception: %s %s - %s",
        request.method,
        request.url.path,
        exc,
        extra={"method": request.method, "path": request.url.path, "status_code": 500},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"type": "internal_error", "message": "An unexpected error occurred"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
