from enum import Enum

from pydantic import BaseModel

from screen_relay.schemas.base import CamelModel


class Role(str, Enum):
    """
    Role a connection takes within a session.

    Attributes:
        PRODUCER: Sends screen-frame payloads, receives control events
        CONSUMER: Sends control/pointer events, receives screen frames
    """

    PRODUCER = "producer"
    CONSUMER = "consumer"

    @property
    def partner(self) -> "Role":
        """The role on the other end of the pairing."""
        return Role.CONSUMER if self is Role.PRODUCER else Role.PRODUCER

    def __str__(self) -> str:
        return self.value


class Session(BaseModel):  # type: ignore[misc]
    """
    In-memory pairing state for one session id.

    Each role slot holds the id of the connection currently bound to it,
    or None when empty.
    """

    session_id: str
    producer: str | None = None
    consumer: str | None = None
    created_at: float
    last_activity: float

    def occupant(self, role: Role) -> str | None:
        return self.producer if role is Role.PRODUCER else self.consumer

    def set_occupant(self, role: Role, connection_id: str | None) -> None:
        if role is Role.PRODUCER:
            self.producer = connection_id
        else:
            self.consumer = connection_id

    def occupants(self) -> list[str]:
        """Connection ids bound to any role, producer first."""
        return [cid for cid in (self.producer, self.consumer) if cid]

    def is_empty(self) -> bool:
        return self.producer is None and self.consumer is None


class SessionStatus(CamelModel):
    exists: bool
    producer_bound: bool = False
    consumer_bound: bool = False


class CreateSessionResponse(CamelModel):
    session_id: str
    producer_url: str
    consumer_url: str
    idle_timeout_seconds: int
