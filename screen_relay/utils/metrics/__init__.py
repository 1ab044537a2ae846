"""
Prometheus metrics definitions and utilities.

Application code should go through the MetricsCollector facade:

    from screen_relay.utils.metrics import MetricsCollector
    MetricsCollector.record_payload_relayed("producer")
"""

from screen_relay.utils.metrics.collector import MetricsCollector
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

__all__ = [
    "MetricsCollector",
    "relay_payloads_dropped_total",
    "relay_payloads_relayed_total",
    "relay_role_superseded_total",
    "relay_sessions_active",
    "relay_sessions_created_total",
    "relay_sessions_removed_total",
    "ws_connections_active",
    "ws_connections_total",
]
