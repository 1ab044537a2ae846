import asyncio
from typing import Any, Awaitable, NamedTuple

from starlette.websockets import WebSocketDisconnect

from screen_relay.exceptions import SessionNotFoundError
from screen_relay.logging import logger
from screen_relay.managers.session_registry import (
    SessionRegistry,
    session_registry,
)
from screen_relay.protocols import RelayConnection
from screen_relay.schemas.messages import (
    AttachedEvent,
    ConnectionStatusEvent,
    PartnerConnectedEvent,
    PartnerDisconnectedEvent,
)
from screen_relay.schemas.session import Role, Session
from screen_relay.utils.metrics import MetricsCollector


class Binding(NamedTuple):
    session_id: str
    role: Role


class RelayRouter:
    """
    Router pairing live connections through the session registry.

    Keeps two maps:
    - `connections`: connection id -> live connection, for delivery
    - `bindings`: connection id -> (session id, role), the reverse index
      that makes detach a direct lookup

    Each connection's events reach the router sequentially from its own
    handler task; the only state shared across connections lives in the
    registry, which serializes mutations per session.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry
        self.connections: dict[str, RelayConnection] = {}
        self.bindings: dict[str, Binding] = {}

    def register(self, connection: RelayConnection) -> None:
        """
        Start tracking a live connection.

        Args:
            connection: Newly opened connection.
        """
        self.connections[connection.connection_id] = connection
        logger.debug(f"Registered connection {connection.connection_id}")

    async def disconnect(self, connection_id: str) -> None:
        """
        Implicit detach on close, then forget the connection.

        Args:
            connection_id: Id of the closed connection.
        """
        try:
            await self.detach(connection_id)
        finally:
            self.connections.pop(connection_id, None)
            logger.debug(f"Unregistered connection {connection_id}")

    def connection_count(self) -> int:
        return len(self.connections)

    async def _deliver(self, connection_id: str, send: Awaitable[None]) -> None:
        """
        Await a send to a peer, logging instead of raising on failure.

        A peer that fails to receive is left to its own handler, which
        detaches it when its transport reports the close.
        """
        try:
            await send
        except (WebSocketDisconnect, ConnectionError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # ConnectionError: Network errors
            # RuntimeError: WebSocket in invalid state
            logger.warning(f"Failed to send to connection {connection_id}: {e}")
        except Exception as e:
            logger.warning(
                f"Unexpected error sending to connection {connection_id}: {e}"
            )

    async def _send_event(self, connection_id: str, event: Any) -> None:
        connection = self.connections.get(connection_id)
        if connection is None:
            return
        await self._deliver(connection_id, connection.send_event(event))

    async def _broadcast_status(self, session: Session) -> None:
        event = ConnectionStatusEvent.from_session(session)
        await asyncio.gather(
            *[self._send_event(cid, event) for cid in session.occupants()]
        )

    async def attach(
        self, connection_id: str, session_id: str, role: Role
    ) -> Session:
        """
        Bind a connection to a (session, role) and notify the session.

        The last bind for a role wins: a connection already holding the
        slot loses its binding immediately, without notification, and its
        later payloads are dropped as unbound. A connection attaching
        somewhere new first gives up the slot it held before.

        Notifications, in order: `attached` to the attaching connection;
        `partner-connected` to both sides when the partner role is bound
        (skipped when the connection already held this slot);
        `connection-status` to every occupant.

        Args:
            connection_id: Attaching connection.
            session_id: Session to join.
            role: Role to take.

        Returns:
            Copy of the session after the bind.

        Raises:
            SessionNotFoundError: If the session does not exist; the
                connection keeps whatever binding it had before.
        """
        session, superseded = await self.registry.bind_role(
            session_id, role, connection_id
        )
        binding = Binding(session_id, role)
        rebound = superseded == connection_id

        if superseded is not None and not rebound:
            if self.bindings.get(superseded) == binding:
                del self.bindings[superseded]
            MetricsCollector.record_role_superseded(role.value)
            logger.warning(
                f"Connection {connection_id} replaced {superseded} as "
                f"{role} of session {session_id}"
            )

        # Recorded before any await so a later bind can supersede it
        previous = self.bindings.get(connection_id)
        self.bindings[connection_id] = binding
        logger.info(f"Connection {connection_id} attached as {role} to {session_id}")

        if previous is not None and previous != binding:
            await self._release(connection_id, previous)
            if self.bindings.get(connection_id) != binding:
                logger.info(
                    f"Connection {connection_id} was replaced as {role} of "
                    f"{session_id} while leaving {previous.session_id}"
                )
                return session

        # Re-read after a possible release into the same session
        session = self.registry.get(session_id) or session

        await self._send_event(
            connection_id, AttachedEvent(session_id=session_id, role=role)
        )

        partner_id = session.occupant(role.partner)
        if partner_id is not None and not rebound:
            await self._send_event(partner_id, PartnerConnectedEvent(role=role))
            await self._send_event(
                connection_id, PartnerConnectedEvent(role=role.partner)
            )

        await self._broadcast_status(session)
        return session

    async def relay(self, connection_id: str, payload: Any) -> bool:
        """
        Forward a payload to the partner of the sending connection.

        The payload is never inspected or transformed. Payloads from
        unbound connections, from sessions that no longer exist, from
        connections whose slot was taken over, or without a bound partner
        are dropped silently.

        Args:
            connection_id: Sending connection.
            payload: Opaque payload (bytes or decoded JSON value).

        Returns:
            True if the payload was handed to the partner connection.
        """
        binding = self.bindings.get(connection_id)
        if binding is None:
            MetricsCollector.record_payload_dropped("not_bound")
            logger.debug(f"Dropped payload from unbound connection {connection_id}")
            return False

        session = await self.registry.touch(binding.session_id)
        if session is None:
            # Session expired underneath the connection
            if self.bindings.get(connection_id) == binding:
                del self.bindings[connection_id]
            MetricsCollector.record_payload_dropped("session_gone")
            logger.debug(
                f"Dropped payload from {connection_id}, "
                f"session {binding.session_id} is gone"
            )
            return False

        if session.occupant(binding.role) != connection_id:
            # Slot taken over by a later bind
            if self.bindings.get(connection_id) == binding:
                del self.bindings[connection_id]
            MetricsCollector.record_payload_dropped("superseded")
            logger.debug(
                f"Dropped payload from {connection_id}, no longer "
                f"{binding.role} of {binding.session_id}"
            )
            return False

        partner_id = session.occupant(binding.role.partner)
        partner = self.connections.get(partner_id) if partner_id else None
        if partner is None:
            MetricsCollector.record_payload_dropped("no_partner")
            return False

        await self._deliver(partner_id, partner.send_payload(payload))
        MetricsCollector.record_payload_relayed(binding.role.value)
        return True

    async def detach(self, connection_id: str) -> None:
        """
        Unbind a connection and notify the remaining occupant.

        The session is deleted once neither role is bound. No-op for
        connections that are not bound.

        Args:
            connection_id: Connection to unbind.
        """
        binding = self.bindings.pop(connection_id, None)
        if binding is None:
            return
        await self._release(connection_id, binding)

    async def _release(self, connection_id: str, binding: Binding) -> None:
        if self.bindings.get(connection_id) == binding:
            del self.bindings[connection_id]

        session, deleted = await self.registry.release_role(
            binding.session_id, binding.role, connection_id
        )
        logger.info(
            f"Connection {connection_id} detached from {binding.session_id} "
            f"as {binding.role}"
        )
        if session is None or deleted:
            return

        partner_id = session.occupant(binding.role.partner)
        # Switching roles in one session leaves the connection as its own partner
        if partner_id is not None and partner_id != connection_id:
            await self._send_event(
                partner_id, PartnerDisconnectedEvent(role=binding.role)
            )

    async def close_session(self, session_id: str) -> None:
        """
        Delete a session explicitly and drop its occupants' bindings.

        Like idle expiry, this is not reported to the occupants; their
        later payloads are dropped and re-attaching fails with
        SessionNotFoundError.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        if not await self.registry.delete(session_id, reason="closed"):
            raise SessionNotFoundError(session_id)

        stale = [
            cid
            for cid, binding in self.bindings.items()
            if binding.session_id == session_id
        ]
        for connection_id in stale:
            del self.bindings[connection_id]


relay_router = RelayRouter(session_registry)
