"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the session registry, the relay
router, mock connections and a FastAPI test client wired to them.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from screen_relay.managers.relay_router import RelayRouter
from screen_relay.managers.session_registry import SessionRegistry
from tests.mocks.relay_mocks import FakeClock, create_mock_connection


@pytest.fixture
def clock():
    """
    Provides a manually advanced clock starting at t=1000s.

    Returns:
        FakeClock: Callable clock with an `advance(seconds)` method
    """
    return FakeClock(1_000.0)


@pytest.fixture
def registry(clock):
    """
    Provides an empty SessionRegistry driven by the fake clock.

    Args:
        clock: Fixture providing the fake clock

    Returns:
        SessionRegistry: Registry with a 60 second idle threshold
    """
    return SessionRegistry(clock=clock, idle_threshold=60)


@pytest.fixture
def router(registry):
    """
    Provides a RelayRouter bound to the test registry.

    Args:
        registry: Fixture providing the session registry

    Returns:
        RelayRouter: Router with no connections
    """
    return RelayRouter(registry)


@pytest.fixture
def connect(router):
    """
    Provides a factory registering mock connections with the router.

    Args:
        router: Fixture providing the relay router

    Returns:
        Callable[[str], MagicMock]: Creates and registers a connection
    """

    def _connect(connection_id: str):
        connection = create_mock_connection(connection_id)
        router.register(connection)
        return connection

    return _connect


@pytest.fixture
def app(registry, router):
    """
    Provides the full application wired to the test registry and router.

    HTTP endpoints receive them through dependency overrides, WebSocket
    endpoints through the patched router lookup.

    Args:
        registry: Fixture providing the session registry
        router: Fixture providing the relay router

    Yields:
        FastAPI: Application instance
    """
    from screen_relay import application
    from screen_relay.dependencies import (
        get_relay_router,
        get_session_registry,
    )

    test_app = application()
    test_app.dependency_overrides[get_session_registry] = lambda: registry
    test_app.dependency_overrides[get_relay_router] = lambda: router

    with patch(
        "screen_relay.api.ws.websocket.get_relay_router", return_value=router
    ):
        yield test_app


@pytest.fixture
def client(app):
    """
    Create a test client for the application.

    Entering the client runs startup/shutdown handlers and makes every
    WebSocket opened through it share one event loop.

    Args:
        app: Application fixture

    Yields:
        TestClient: FastAPI test client instance
    """
    with TestClient(app) as test_client:
        yield test_client
