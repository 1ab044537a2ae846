"""
Middleware for request correlation ID tracking.

HTTP requests take their correlation ID from the X-Correlation-ID header
(or a fresh 8-char UUID). WebSocket connections set it themselves from
their connection ID, see screen_relay.api.ws.websocket.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


class CorrelationIDMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
    """
    Middleware to add correlation IDs to requests for distributed tracing.

    This middleware:
    - Extracts correlation ID from X-Correlation-ID header or generates new 8-char UUID
    - Stores correlation ID in request.state.request_id
    - Stores correlation ID in context variable for logging
    - Adds correlation ID to response headers for client tracking
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get("X-Correlation-ID", str(uuid.uuid4())[:8])
        cid = cid[:8]

        request.state.request_id = cid
        correlation_id.set(cid)

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid

        return response


def get_correlation_id() -> str:
    """
    Get the correlation ID for the current request or connection context.

    Returns:
        The correlation ID string, or empty string if not set.
    """
    return correlation_id.get()
