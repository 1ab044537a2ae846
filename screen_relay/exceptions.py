"""
Custom exception classes for the application.

This module defines unified exceptions that work across both HTTP and WebSocket
protocols. Each exception has an http_status and a machine-readable error code
and knows how to convert itself into the response shape of either protocol.
"""

from screen_relay.schemas.errors import (
    ErrorCode,
    ErrorEvent,
    HTTPErrorResponse,
)


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        http_status: HTTP status code for REST API responses.
        code: ErrorCode sent to WebSocket clients and in HTTP error bodies.
    """

    http_status: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_http_response(self) -> HTTPErrorResponse:
        """Convert the exception into an HTTP error body."""
        return HTTPErrorResponse(code=self.code, msg=self.message)

    def to_ws_event(self) -> ErrorEvent:
        """Convert the exception into a WebSocket `error` event."""
        return ErrorEvent(code=self.code, msg=self.message)


class SessionNotFoundError(AppException):
    """
    Session does not exist.

    Raised when attaching to (or closing) a session id that was never
    created or has already expired. Clients are expected to create a new
    session and re-attach; nothing is retried on the server.

    HTTP Status: 404 Not Found
    """

    http_status = 404
    code = ErrorCode.SESSION_NOT_FOUND

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")


class InvalidMessageError(AppException):
    """
    Inbound WebSocket message could not be understood.

    HTTP Status: 400 Bad Request
    """

    http_status = 400
    code = ErrorCode.INVALID_MESSAGE
