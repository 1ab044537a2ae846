"""
Error envelope models for HTTP and WebSocket protocols.

Both protocols share the same shape:
- code: Machine-readable error code (string)
- msg: Human-readable error description

Example WebSocket error event:
    {
        "type": "error",
        "code": "session_not_found",
        "msg": "Session ab12cd34 not found"
    }
"""

from enum import Enum
from typing import Literal

from pydantic import Field

from screen_relay.constants import EVENT_ERROR
from screen_relay.schemas.base import CamelModel


class ErrorCode(str, Enum):
    """
    Machine-readable error codes shared by HTTP and WebSocket responses.

    Attributes:
        SESSION_NOT_FOUND: Unknown or expired session id
        INVALID_MESSAGE: Malformed or unsupported inbound message
        INTERNAL_ERROR: Unexpected server-side failure
    """

    SESSION_NOT_FOUND = "session_not_found"
    INVALID_MESSAGE = "invalid_message"
    INTERNAL_ERROR = "internal_error"


class HTTPErrorResponse(CamelModel):
    code: ErrorCode
    msg: str = Field(..., description="Human-readable error message")


class ErrorEvent(CamelModel):
    type: Literal["error"] = EVENT_ERROR
    code: ErrorCode
    msg: str
