"""
Mock factory functions for relay testing.

Provides a controllable clock, mock relay connections and helpers to
inspect what a mock connection was sent.
"""

from unittest.mock import AsyncMock, MagicMock


class FakeClock:
    """Clock returning a fixed time until advanced."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def create_mock_connection(connection_id: str):
    """
    Creates a mock connection satisfying the RelayConnection protocol.

    Args:
        connection_id: Id of the connection

    Returns:
        MagicMock: Connection with AsyncMock send_event/send_payload
    """
    connection = MagicMock()
    connection.connection_id = connection_id
    connection.send_event = AsyncMock()
    connection.send_payload = AsyncMock()
    return connection


def sent_events(connection, event_type: str | None = None) -> list:
    """
    Events delivered to a mock connection, optionally filtered by type.

    Args:
        connection: Mock connection from create_mock_connection
        event_type: Wire type name, e.g. "partner-connected"

    Returns:
        list: Event models in delivery order
    """
    events = [call.args[0] for call in connection.send_event.await_args_list]
    if event_type is None:
        return events
    return [event for event in events if event.type == event_type]


def sent_payloads(connection) -> list:
    """
    Payloads delivered to a mock connection, in delivery order.
    """
    return [call.args[0] for call in connection.send_payload.await_args_list]
