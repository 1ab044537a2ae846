"""
Facade for centralized metrics emission.

Provides high-level methods for recording metrics without exposing
Prometheus implementation details to the rest of the codebase.
"""

from screen_relay.utils.metrics.relay import (
    relay_payloads_dropped_total,
    relay_payloads_relayed_total,
    relay_role_superseded_total,
    relay_sessions_active,
    relay_sessions_created_total,
    relay_sessions_removed_total,
    ws_connections_active,
    ws_connections_total,
)


class MetricsCollector:
    """
    Centralized facade for all Prometheus metrics.

    All methods are static for easy use without instantiation.
    """

    # ========== WebSocket Metrics ==========

    @staticmethod
    def record_ws_connection_accepted() -> None:
        ws_connections_total.inc()
        ws_connections_active.inc()

    @staticmethod
    def record_ws_disconnection() -> None:
        ws_connections_active.dec()

    # ========== Session Metrics ==========

    @staticmethod
    def record_session_created() -> None:
        relay_sessions_created_total.inc()
        relay_sessions_active.inc()

    @staticmethod
    def record_session_removed(reason: str, count: int = 1) -> None:
        """
        Record removed sessions.

        Args:
            reason: One of 'expired', 'empty', 'closed'
            count: Number of sessions removed
        """
        if count <= 0:
            return
        relay_sessions_removed_total.labels(reason=reason).inc(count)
        relay_sessions_active.dec(count)

    @staticmethod
    def record_role_superseded(role: str) -> None:
        relay_role_superseded_total.labels(role=role).inc()

    # ========== Relay Metrics ==========

    @staticmethod
    def record_payload_relayed(sender_role: str) -> None:
        relay_payloads_relayed_total.labels(sender_role=sender_role).inc()

    @staticmethod
    def record_payload_dropped(reason: str) -> None:
        """
        Record a payload that was not delivered.

        Args:
            reason: One of 'not_bound', 'session_gone', 'superseded',
                'no_partner'
        """
        relay_payloads_dropped_total.labels(reason=reason).inc()
