"""
Middleware for injecting contextual fields into structured logs.

This middleware adds request-specific information to the log context
that will be included in all log messages during request processing.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from screen_relay.logging import clear_log_context, set_log_context


class LoggingContextMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
    """
    Middleware to inject contextual fields into structured logs.

    Adds endpoint and method to the log context before the request is
    handled, and clears the context once the response is produced.
    """

    async def dispatch(self, request: Request, call_next: ASGIApp) -> Response:
        """
        Process request and inject logging context.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            Response from the endpoint.
        """
        set_log_context(
            endpoint=request.url.path,
            method=request.method,
        )

        try:
            return await call_next(request)
        finally:
            clear_log_context()
