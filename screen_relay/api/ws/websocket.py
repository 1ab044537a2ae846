import asyncio
import uuid
from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from screen_relay.dependencies import get_relay_router
from screen_relay.logging import clear_log_context, logger, set_log_context
from screen_relay.middlewares.correlation_id import correlation_id
from screen_relay.schemas.base import CamelModel
from screen_relay.schemas.messages import PayloadEvent
from screen_relay.utils.metrics import MetricsCollector


class WebSocketConnection:
    """
    Adapter exposing a WebSocket as a RelayConnection.

    Events and JSON payloads go out as text frames, binary payloads as
    binary frames, exactly as they were received from the partner.
    """

    def __init__(self, connection_id: str, websocket: WebSocket) -> None:
        self.connection_id = connection_id
        self.websocket = websocket

    async def send_event(self, event: CamelModel) -> None:
        await self.websocket.send_json(event.to_wire())

    async def send_payload(self, payload: Any) -> None:
        if isinstance(payload, (bytes, bytearray)):
            await self.websocket.send_bytes(bytes(payload))
        else:
            await self.websocket.send_json(PayloadEvent(data=payload).to_wire())


class RelayWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint registering each connection with the relay router.

    Manages the connection lifecycle: a connection id is assigned on
    connect, and the router's implicit detach runs on every close, clean
    or abrupt, including when message handling raised.
    Accepts both text (JSON messages) and binary (opaque payload) frames.
    """

    encoding = None  # Handle both text and binary frames

    async def dispatch(self) -> None:
        """
        Run the receive loop for one connection.

        Messages are handled one at a time, in the order the transport
        delivers them. `on_disconnect` is called from a finally block so
        the router always releases the connection's role.
        """
        websocket = self.websocket_class(
            self.scope, receive=self.receive, send=self.send
        )
        await self.on_connect(websocket)

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except Exception:
            close_code = status.WS_1011_INTERNAL_ERROR
            raise
        finally:
            await self.on_disconnect(websocket, close_code)

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Return the raw frame content.

        Text frames are parsed by the consumer; binary frames are relayed
        untouched.
        """
        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes") or b""

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accept the connection and register it with the relay router.

        The first 8 characters of the connection id (or the
        X-Correlation-ID upgrade header, when sent) become the correlation
        id of every log line emitted while serving this connection.
        """
        await super().on_connect(websocket)

        self.relay = get_relay_router()
        self.connection_id = str(uuid.uuid4())

        correlation_id_from_header = websocket.headers.get(
            "x-correlation-id", ""
        )
        self.correlation_id = (
            correlation_id_from_header[:8]
            if correlation_id_from_header
            else self.connection_id[:8]
        )
        correlation_id.set(self.correlation_id)
        set_log_context(connection_id=self.connection_id)

        self.connection = WebSocketConnection(self.connection_id, websocket)
        self.relay.register(self.connection)

        MetricsCollector.record_ws_connection_accepted()
        logger.debug(f"Client connected to websocket (connection_id: {self.connection_id})")

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """
        Release the connection's role and forget the connection.

        The release is shielded: when the handler task is being cancelled
        (server shutdown, abrupt close) it still runs to completion and the
        partner still receives `partner-disconnected`.
        """
        await super().on_disconnect(websocket, close_code)

        if hasattr(self, "connection_id"):
            try:
                await asyncio.shield(self.relay.disconnect(self.connection_id))
            finally:
                MetricsCollector.record_ws_disconnection()

        logger.debug(f"Client disconnected with code {close_code}")
        clear_log_context()
