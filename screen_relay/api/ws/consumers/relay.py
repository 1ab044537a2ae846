from fastapi import APIRouter
from pydantic import ValidationError
from starlette.websockets import WebSocket

from screen_relay.api.ws.websocket import RelayWebSocketEndpoint
from screen_relay.exceptions import AppException, InvalidMessageError
from screen_relay.logging import logger, set_log_context
from screen_relay.schemas.messages import (
    AttachMessage,
    DetachMessage,
    PayloadMessage,
    inbound_message_adapter,
)

router = APIRouter()


@router.websocket_route("/ws")
class Relay(RelayWebSocketEndpoint):
    """
    WebSocket endpoint shared by producers and consumers.

    Text frames carry JSON messages:
    - `attach`: bind this connection to a session role
    - `payload`: relay `data` to the partner
    - `detach`: leave the session without closing the socket

    Binary frames are relayed to the partner as-is.

    Errors the client can recover from (unknown session, malformed
    message) are answered with an `error` event and the socket stays open.
    """

    async def on_receive(self, websocket: WebSocket, data: str | bytes) -> None:
        if isinstance(data, bytes):
            await self.relay.relay(self.connection_id, data)
            return

        try:
            message = inbound_message_adapter.validate_json(data)
        except ValidationError as ex:
            logger.debug(f"Received invalid message: {ex.errors()[0]['msg']}")
            await self.send_error(
                InvalidMessageError(
                    "Message must be JSON with type attach, payload or detach"
                )
            )
            return

        try:
            if isinstance(message, PayloadMessage):
                await self.relay.relay(self.connection_id, message.data)

            elif isinstance(message, AttachMessage):
                await self.relay.attach(
                    self.connection_id, message.session_id, message.role
                )
                set_log_context(
                    session_id=message.session_id, role=message.role.value
                )

            elif isinstance(message, DetachMessage):
                await self.relay.detach(self.connection_id)
                set_log_context(session_id=None, role=None)

        except AppException as ex:
            logger.info(f"Rejected {message.type} message: {ex.message}")
            await self.send_error(ex)

    async def send_error(self, ex: AppException) -> None:
        await self.connection.send_event(ex.to_ws_event())
