"""Middleware stack for the CPN API."""

from fastapi import FastAPI

from cpn.config import Settings
from cpn.middleware.cors import setup_cors
from cpn.middleware.error_handler import setup_error_handlers
from cpn.middleware.logging import setup_logging
from cpn.middleware.rate_limit import RateLimitMiddleware
from cpn.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, the exception handlers and the middleware stack.

    Starlette runs the last-added middleware first, so the stack below reads
    innermost to outermost: rate limiting, request id, CORS. CORS wraps the
    rest so 429s and error bodies still carry its headers.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
