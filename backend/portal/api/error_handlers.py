"""Error Handlers — global exception handlers producing the response envelope.

Invariants:
    - PortalError → its own status with the envelope and an error block
    - RequestValidationError → 400 with field-level details
    - HTTPException (unknown route, wrong method) → envelope with its status
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Registered by main.py through register_error_handlers(app)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.core.envelope import error
from portal.core.errors import ErrorCategory, ErrorSeverity, PortalError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_portal_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _error_body(message: str, code: str, category: ErrorCategory, severity: ErrorSeverity,
                details: list[dict] | None = None) -> dict:
    body = error(message)
    body["error"] = {"code": code, "category": category.value, "severity": severity.value}
    if details:
        body["error"]["details"] = details
    return body


def _register_portal_error_handler(app: FastAPI) -> None:

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"PortalError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path, **exc.log_context()},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = f"Route {request.url.path} not found"
            category = ErrorCategory.RESOURCE_NOT_FOUND
        else:
            message = str(exc.detail)
            category = ErrorCategory.VALIDATION
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(message, "HTTP_ERROR", category, ErrorSeverity.WARNING),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                "Internal server error", "INTERNAL_ERROR",
                ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
            ),
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return _error_body(
        "Validation failed", "VALIDATION_ERROR",
        ErrorCategory.VALIDATION, ErrorSeverity.ERROR,
        details=[
            {
                "field": ".".join(str(loc) for loc in e["loc"] if loc != "body"),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    )
