"""
Logging middleware for request/response logging.

Logs all HTTP requests with timing and context.
"""
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests with timing and context.

    Binds request_id, route and method into the structlog context so
    every log line emitted while handling the request carries them.
    The query string is never logged: it holds OAuth codes and state.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            route=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "request_failed",
                status_code=500,
                duration_ms=round(duration_ms, 2),
                error=type(e).__name__,
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2)
        )
        structlog.contextvars.clear_contextvars()

        return response
