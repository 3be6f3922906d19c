"""Request logging middleware using structlog."""

import logging
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from interview_studio.config.settings import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Probed every few seconds by the load balancer
QUIET_PATHS = ("/health", "/api/v1/health")


def configure_logging() -> None:
    """Configure structlog: JSON lines in production, console output when DEBUG is set."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its id, the signed-in recruiter and timing."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Keep the frontend's id when it sends one so both sides correlate
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        quiet = request.url.path.startswith(QUIET_PATHS)
        start_time = time.perf_counter()
        if not quiet:
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
                query=str(request.query_params),
                client=request.client.host if request.client else None,
            )

        response = await call_next(request)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        identity = getattr(request.state, "identity", None)

        if response.status_code >= 400:
            log_method = logger.warning
        elif quiet:
            log_method = logger.debug
        else:
            log_method = logger.info
        log_method(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            email=identity.email if identity else None,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
