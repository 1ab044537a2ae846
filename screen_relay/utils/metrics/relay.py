"""
Prometheus metrics for WebSocket connections, sessions and relayed traffic.
"""

from screen_relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

# WebSocket Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total", "Total WebSocket connections"
)

# Session Metrics
relay_sessions_active = _get_or_create_gauge(
    "relay_sessions_active", "Number of live pairing sessions"
)

relay_sessions_created_total = _get_or_create_counter(
    "relay_sessions_created_total", "Total pairing sessions created"
)

relay_sessions_removed_total = _get_or_create_counter(
    "relay_sessions_removed_total",
    "Total pairing sessions removed",
    ["reason"],  # expired, empty, closed
)

relay_role_superseded_total = _get_or_create_counter(
    "relay_role_superseded_total",
    "Total role binds that replaced a previous occupant",
    ["role"],
)

# Relay Metrics
relay_payloads_relayed_total = _get_or_create_counter(
    "relay_payloads_relayed_total",
    "Total payloads forwarded to a partner connection",
    ["sender_role"],
)

relay_payloads_dropped_total = _get_or_create_counter(
    "relay_payloads_dropped_total",
    "Total payloads dropped without delivery",
    ["reason"],  # not_bound, session_gone, superseded, no_partner
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "relay_sessions_active",
    "relay_sessions_created_total",
    "relay_sessions_removed_total",
    "relay_role_superseded_total",
    "relay_payloads_relayed_total",
    "relay_payloads_dropped_total",
]
