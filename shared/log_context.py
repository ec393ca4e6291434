"""
HTTP middleware for request logging and context management.

Provides:
- A request ID per request, echoed back in the X-Request-ID header
- Request context (request_id, method, path) bound through structlog
  contextvars, so every log line emitted while handling the request
  carries it
- A single request_completed event with status and timing
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from shared.generators import generate_request_id
from shared.logging import get_logger

log = get_logger("community.request")


def log_request_end(status_code: int, duration_ms: int) -> None:
    """Log the end of a request with timing and status."""
    if status_code >= 500:
        log_fn = log.error
    elif status_code >= 400:
        log_fn = log.warning
    else:
        log_fn = log.info

    log_fn("request_completed", status_code=status_code, duration_ms=duration_ms)


def setup_request_logging(app: FastAPI) -> None:
    """Register the request logging middleware on *app*."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        structlog.contextvars.clear_contextvars()
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)

        log_request_end(response.status_code, duration_ms)
        response.headers["X-Request-ID"] = request_id
        return response
