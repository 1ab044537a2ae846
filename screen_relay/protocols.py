"""
Protocol classes for structural subtyping (duck typing with type safety).

The relay router only needs a connection to carry an id and to be able to
deliver events and payloads; the WebSocket adapter and the test doubles
both satisfy this protocol without inheriting from it.
"""

from typing import Any, Protocol, runtime_checkable

from screen_relay.schemas.base import CamelModel


@runtime_checkable
class RelayConnection(Protocol):
    """
    Protocol for a live, bidirectional, message-oriented client channel.

    Attributes:
        connection_id: Identifier unique for the connection's lifetime.
    """

    connection_id: str

    async def send_event(self, event: CamelModel) -> None:
        """
        Deliver a lifecycle notification (partner-connected, status, ...).

        Args:
            event: Outbound event model.
        """
        ...

    async def send_payload(self, payload: Any) -> None:
        """
        Deliver a payload relayed from the partner, unmodified.

        Args:
            payload: Opaque payload, either bytes or a decoded JSON value.
        """
        ...
