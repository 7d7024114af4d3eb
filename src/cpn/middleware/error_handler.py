"""Global error handler — every error body is ``{"error": "<message>"}``."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()

# Locations that name the container rather than a field.
_ROOT_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


def _field_name(loc: tuple[Any, ...]) -> str:
    """Last named location segment; body fields are reported by their camelCase alias."""
    parts = [str(p) for p in loc if p not in _ROOT_LOCATIONS and not isinstance(p, int)]
    return parts[-1] if parts else "body"


def validation_message(exc: RequestValidationError) -> str:
    """Render the first validation error as a short, field-specific message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = _field_name(tuple(first.get("loc", ())))
    if first.get("type") == "missing":
        return f"{field} is required"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Validation failures are client errors: 400 with the offending field."""
        message = validation_message(exc)
        logger.info("request_validation_failed", path=request.url.path, error=message)
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )
