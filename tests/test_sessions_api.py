"""
Tests for the HTTP endpoints: session management, health and metrics.
"""

import re

from screen_relay.schemas.session import Role


class TestCreateSession:
    """Tests for POST /sessions."""

    def test_create_session(self, client, registry):
        """Creating a session returns its id and both share links."""
        response = client.post("/sessions")

        assert response.status_code == 201
        data = response.json()
        session_id = data["sessionId"]
        assert re.fullmatch(r"[0-9a-f]{8}", session_id)
        assert data["producerUrl"] == f"http://testserver/laptop?id={session_id}"
        assert data["consumerUrl"] == f"http://testserver/mobile?id={session_id}"
        assert data["idleTimeoutSeconds"] == 60
        assert registry.status(session_id).exists is True

    def test_create_session_behind_proxy(self, client):
        """The link scheme follows X-Forwarded-Proto."""
        response = client.post(
            "/sessions",
            headers={"X-Forwarded-Proto": "https", "Host": "relay.example.com"},
        )

        data = response.json()
        assert data["producerUrl"].startswith("https://relay.example.com/laptop?id=")
        assert data["consumerUrl"].startswith("https://relay.example.com/mobile?id=")

    def test_create_sessions_are_distinct(self, client):
        """Each call creates a new session."""
        first = client.post("/sessions").json()["sessionId"]
        second = client.post("/sessions").json()["sessionId"]

        assert first != second

    def test_response_carries_correlation_id(self, client):
        """HTTP responses echo a correlation id header."""
        response = client.post("/sessions", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestSessionStatus:
    """Tests for GET /sessions/{id}."""

    async def test_status_reflects_bound_roles(self, client, registry):
        """Status reports which roles are currently bound."""
        session_id = await registry.create()
        await registry.bind_role(session_id, Role.PRODUCER, "c1")

        response = client.get(f"/sessions/{session_id}")

        assert response.status_code == 200
        assert response.json() == {
            "exists": True,
            "producerBound": True,
            "consumerBound": False,
        }

    def test_status_unknown_session(self, client):
        """Unknown sessions are reported as not existing, not 404."""
        response = client.get("/sessions/deadbeef")

        assert response.status_code == 200
        assert response.json() == {
            "exists": False,
            "producerBound": False,
            "consumerBound": False,
        }


class TestCloseSession:
    """Tests for DELETE /sessions/{id}."""

    def test_close_session(self, client, registry):
        """Closing a session removes it."""
        session_id = client.post("/sessions").json()["sessionId"]

        response = client.delete(f"/sessions/{session_id}")

        assert response.status_code == 204
        assert registry.status(session_id).exists is False
        assert client.get(f"/sessions/{session_id}").json()["exists"] is False

    def test_close_unknown_session(self, client):
        """Closing an unknown session is a 404 with an error body."""
        response = client.delete("/sessions/deadbeef")

        assert response.status_code == 404
        assert response.json()["detail"] == {
            "code": "session_not_found",
            "msg": "Session deadbeef not found",
        }


class TestHealth:
    """Tests for the health check endpoint."""

    def test_health(self, client):
        """Health reports live session and connection counts."""
        client.post("/sessions")
        client.post("/sessions")

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "sessions": 2,
            "connections": 0,
        }


class TestMetrics:
    """Tests for the Prometheus metrics endpoint."""

    def test_metrics_exposed(self, client):
        """Relay metrics are present in the Prometheus output."""
        client.post("/sessions")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "relay_sessions_created_total" in response.text
        assert "relay_sessions_active" in response.text
