"""FastAPI exception handlers.

Every error leaves the API as ``{"success": false, "error": ..., "details": ...}``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from hr_assistant.core.exceptions import SchedulingError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, details: Any | None = None) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content)


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
        },
    )
    return _error_response(exc.status_code, exc.message, exc.details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    logger.warning(
        "http_exception",
        extra={"path": request.url.path, "status_code": exc.status_code},
    )
    return _error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(
        "request_validation_failed",
        extra={"path": request.url.path, "errors": exc.errors()},
    )
    return _error_response(400, "Invalid request body", exc.errors())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        extra={"path": request.url.path, "error_message": str(exc)},
        exc_info=exc,
    )
    return _error_response(500, "Internal server error", str(exc))


def register_exception_handlers(application: FastAPI) -> None:
    """Install the error-envelope handlers on *application*."""
    application.add_exception_handler(SchedulingError, scheduling_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    application.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    application.add_exception_handler(Exception, unhandled_exception_handler)
