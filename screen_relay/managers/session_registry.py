import asyncio
import secrets
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from screen_relay.exceptions import SessionNotFoundError
from screen_relay.logging import logger
from screen_relay.schemas.session import Role, Session, SessionStatus
from screen_relay.settings import app_settings
from screen_relay.utils.metrics import MetricsCollector


class SessionRegistry:
    """
    In-memory registry of pairing sessions.

    Owns the mapping from session id to session state. Every mutation of a
    session runs under that session's own asyncio.Lock, so binds, clears,
    touches and sweep deletions of one session never interleave, while
    unrelated sessions proceed independently.

    Reads (`get`, `is_empty`, `status`) return detached copies or plain
    values and never refresh `last_activity`.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        token_factory: Callable[[], str] | None = None,
        idle_threshold: float | None = None,
    ) -> None:
        """
        Initializes an empty registry.

        Args:
            clock: Returns the current time in seconds.
            token_factory: Generates candidate session ids. Defaults to
                secrets.token_hex(SESSION_ID_BYTES).
            idle_threshold: Default idle threshold for `sweep_expired`.
                Defaults to SESSION_IDLE_TIMEOUT_SECONDS.
        """
        self._clock = clock
        self._token_factory = token_factory or (
            lambda: secrets.token_hex(app_settings.SESSION_ID_BYTES)
        )
        self.idle_threshold = (
            idle_threshold
            if idle_threshold is not None
            else app_settings.SESSION_IDLE_TIMEOUT_SECONDS
        )
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def _locked(self, session_id: str) -> AsyncIterator[Session | None]:
        """
        Hold the session's lock and yield the live session object.

        Yields None when the session does not exist, or was deleted while
        waiting for the lock.
        """
        lock = self._locks.get(session_id)
        if lock is None:
            yield None
            return

        async with lock:
            yield self._sessions.get(session_id)

    def _remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._locks.pop(session_id, None)

    async def create(self) -> str:
        """
        Create a session with both roles empty.

        Candidate ids colliding with a live session are discarded and
        regenerated.

        Returns:
            The new session id.
        """
        session_id = self._token_factory()
        while session_id in self._sessions:
            logger.warning(f"Session id collision on {session_id}, retrying")
            session_id = self._token_factory()

        now = self._clock()
        self._sessions[session_id] = Session(
            session_id=session_id, created_at=now, last_activity=now
        )
        self._locks[session_id] = asyncio.Lock()

        MetricsCollector.record_session_created()
        logger.info(f"Created session {session_id}")
        return session_id

    def get(self, session_id: str) -> Session | None:
        """
        Look up a session without touching it.

        Returns:
            A copy of the session, or None if it does not exist.
        """
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    async def touch(self, session_id: str) -> Session | None:
        """
        Refresh the session's last activity timestamp.

        Returns:
            A copy of the touched session, or None if it does not exist.
        """
        async with self._locked(session_id) as session:
            if session is None:
                return None
            session.last_activity = self._clock()
            return session.model_copy()

    async def bind_role(
        self, session_id: str, role: Role, connection_id: str
    ) -> tuple[Session, str | None]:
        """
        Bind a connection to a role slot, replacing any previous occupant.

        Args:
            session_id: Session to bind into.
            role: Slot to occupy.
            connection_id: Connection taking the slot.

        Returns:
            Tuple of (copy of the updated session, id of the connection that
            previously held the slot or None).

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        async with self._locked(session_id) as session:
            if session is None:
                raise SessionNotFoundError(session_id)

            previous = session.occupant(role)
            session.set_occupant(role, connection_id)
            session.last_activity = self._clock()
            return session.model_copy(), previous

    async def clear_role(
        self, session_id: str, role: Role, connection_id: str | None = None
    ) -> bool:
        """
        Empty a role slot. Idempotent.

        Args:
            session_id: Session owning the slot.
            role: Slot to clear.
            connection_id: When given, the slot is cleared only if this
                connection still holds it.

        Returns:
            True if the slot was cleared by this call.
        """
        async with self._locked(session_id) as session:
            return self._clear(session, role, connection_id)

    @staticmethod
    def _clear(
        session: Session | None, role: Role, connection_id: str | None
    ) -> bool:
        if session is None:
            return False
        occupant = session.occupant(role)
        if occupant is None:
            return False
        if connection_id is not None and occupant != connection_id:
            return False
        session.set_occupant(role, None)
        return True

    def is_empty(self, session_id: str) -> bool:
        """
        Check whether both role slots are empty.

        Returns False for unknown sessions.
        """
        session = self._sessions.get(session_id)
        return session is not None and session.is_empty()

    async def delete(self, session_id: str, reason: str = "closed") -> bool:
        """
        Remove a session entirely.

        Args:
            session_id: Session to remove.
            reason: Removal reason recorded in metrics.

        Returns:
            True if the session existed.
        """
        async with self._locked(session_id) as session:
            if session is None:
                return False
            self._remove(session_id)

        MetricsCollector.record_session_removed(reason)
        logger.info(f"Deleted session {session_id} ({reason})")
        return True

    async def release_role(
        self, session_id: str, role: Role, connection_id: str
    ) -> tuple[Session | None, bool]:
        """
        Clear a connection's slot and delete the session once it is empty.

        Clearing, the emptiness check and the deletion happen under a single
        hold of the session lock, so a concurrent bind either lands before
        (and keeps the session alive) or fails with SessionNotFoundError.

        Returns:
            Tuple of (copy of the session after the clear or None if it did
            not exist, whether the session was deleted).
        """
        async with self._locked(session_id) as session:
            if session is None:
                return None, False

            self._clear(session, role, connection_id)
            if not session.is_empty():
                return session.model_copy(), False

            self._remove(session_id)

        MetricsCollector.record_session_removed("empty")
        logger.info(f"Session {session_id} removed, no connections left")
        return session.model_copy(), True

    async def sweep_expired(
        self, now: float | None = None, idle_threshold: float | None = None
    ) -> list[str]:
        """
        Delete sessions idle for longer than the threshold.

        A session is removed when `now - last_activity > idle_threshold`.
        Each session is checked under its own lock, so a bind in progress
        either completes first (and refreshes the session) or sees the
        session gone.

        Args:
            now: Reference time; defaults to the registry clock.
            idle_threshold: Seconds; defaults to the registry's threshold.

        Returns:
            Ids of the removed sessions.
        """
        if now is None:
            now = self._clock()
        if idle_threshold is None:
            idle_threshold = self.idle_threshold

        removed: list[str] = []
        for session_id in list(self._sessions):
            async with self._locked(session_id) as session:
                if session is None:
                    continue
                if now - session.last_activity > idle_threshold:
                    self._remove(session_id)
                    removed.append(session_id)

        if removed:
            MetricsCollector.record_session_removed("expired", len(removed))
            logger.info(f"Expired {len(removed)} idle session(s): {removed}")
        return removed

    def status(self, session_id: str) -> SessionStatus:
        """
        Report whether a session exists and which roles are bound.

        Returns:
            SessionStatus; `exists=False` for unknown sessions.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return SessionStatus(exists=False)

        return SessionStatus(
            exists=True,
            producer_bound=session.producer is not None,
            consumer_bound=session.consumer is not None,
        )

    def count(self) -> int:
        return len(self._sessions)


session_registry = SessionRegistry()
