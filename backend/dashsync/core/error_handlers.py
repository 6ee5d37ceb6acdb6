"""Global exception handlers for FastAPI.

Every error body has the shape ``{"error": "<message>"}``; safety blocks add
``"blocked": true`` and validation failures add ``"details"``. Internal
details (stack traces, DB errors) are suppressed unless DEBUG is set.
"""

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dashsync.config import settings
from dashsync.core.exceptions import (
    PartialWriteError,
    SafetyBlockedError,
    SnapshotValidationError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

SAVE_FAILED = "Failed to save data"


def _error_response(
    status_code: int,
    message: str,
    *,
    blocked: bool = False,
    details: list | None = None,
) -> JSONResponse:
    body: dict = {"error": message}
    if blocked:
        body["blocked"] = True
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


async def snapshot_validation_handler(
    request: Request, exc: SnapshotValidationError
) -> JSONResponse:
    """Malformed snapshot: not an object, or a record failed validation."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return _error_response(
        status.HTTP_400_BAD_REQUEST, exc.message, details=exc.details
    )


async def safety_blocked_handler(
    request: Request, exc: SafetyBlockedError
) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, blocked=True)


async def store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)


async def partial_write_handler(
    request: Request, exc: PartialWriteError
) -> JSONResponse:
    """A row write failed mid-reconciliation. Rows already written stay."""
    logger.error(
        "Partial write on %s %s: %s", request.method, request.url.path, exc.message
    )
    message = SAVE_FAILED
    if settings.DEBUG:
        message = f"{SAVE_FAILED}: {exc.message}"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle FastAPI/Starlette HTTPException."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = _error_response(exc.status_code, detail)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic / request validation errors."""
    details = []
    for err in exc.errors():
        loc = " -> ".join(str(part) for part in err.get("loc", []))
        details.append({
            "field": loc,
            "message": err.get("msg", "Invalid value"),
        })
    return _error_response(
        status.HTTP_400_BAD_REQUEST, "Invalid data format", details=details
    )


async def sqlalchemy_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle SQLAlchemy errors without leaking internal details."""
    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    message = SAVE_FAILED
    if settings.DEBUG:
        message = f"Database error: {exc}"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Catch-all for unhandled exceptions. Logs full traceback."""
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    message = SAVE_FAILED
    if settings.DEBUG:
        message = f"Internal error: {exc}"
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global exception handlers on the FastAPI app."""
    app.add_exception_handler(SnapshotValidationError, snapshot_validation_handler)
    app.add_exception_handler(SafetyBlockedError, safety_blocked_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(PartialWriteError, partial_write_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
