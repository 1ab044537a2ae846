"""
WebSocket message schemas.

Inbound text frames are JSON objects discriminated by their ``type`` field
and parsed with ``inbound_message_adapter``. Outbound events are plain
models serialized with camelCase keys.
"""

from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter

from screen_relay.constants import (
    EVENT_ATTACHED,
    EVENT_CONNECTION_STATUS,
    EVENT_PARTNER_CONNECTED,
    EVENT_PARTNER_DISCONNECTED,
    EVENT_PAYLOAD,
)
from screen_relay.schemas.base import CamelModel
from screen_relay.schemas.session import Role, Session

# ============================================================================
# Inbound
# ============================================================================


class AttachMessage(CamelModel):
    type: Literal["attach"]
    session_id: str = Field(..., min_length=1)
    role: Role


class PayloadMessage(CamelModel):
    type: Literal["payload"]
    data: Any = None


class DetachMessage(CamelModel):
    type: Literal["detach"]


InboundMessage = Annotated[
    AttachMessage | PayloadMessage | DetachMessage,
    Field(discriminator="type"),
]

inbound_message_adapter: TypeAdapter[InboundMessage] = TypeAdapter(
    InboundMessage
)


# ============================================================================
# Outbound
# ============================================================================


class AttachedEvent(CamelModel):
    type: Literal["attached"] = EVENT_ATTACHED
    session_id: str
    role: Role


class PartnerConnectedEvent(CamelModel):
    type: Literal["partner-connected"] = EVENT_PARTNER_CONNECTED
    role: Role


class PartnerDisconnectedEvent(CamelModel):
    type: Literal["partner-disconnected"] = EVENT_PARTNER_DISCONNECTED
    role: Role


class ConnectionStatusEvent(CamelModel):
    type: Literal["connection-status"] = EVENT_CONNECTION_STATUS
    producer_bound: bool
    consumer_bound: bool

    @classmethod
    def from_session(cls, session: Session) -> "ConnectionStatusEvent":
        return cls(
            producer_bound=session.producer is not None,
            consumer_bound=session.consumer is not None,
        )


class PayloadEvent(CamelModel):
    type: Literal["payload"] = EVENT_PAYLOAD
    data: Any = None
