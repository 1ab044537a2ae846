"""
Application-level constants for hardcoded relay behavior.

These values represent core protocol behavior and are not meant to be
changed via environment variables. For configurable values (idle timeout,
sweep interval, session id length, etc.), see screen_relay/settings.py.
"""

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Outbound message type names shared with the browser clients
EVENT_ATTACHED = "attached"
EVENT_PARTNER_CONNECTED = "partner-connected"
EVENT_PARTNER_DISCONNECTED = "partner-disconnected"
EVENT_CONNECTION_STATUS = "connection-status"
EVENT_PAYLOAD = "payload"
EVENT_ERROR = "error"


# ============================================================================
# Background Task Behavior
# ============================================================================

# Backoff delay (seconds) when the sweep task encounters an error
TASK_ERROR_BACKOFF_SECONDS = 1


# ============================================================================
# Logging
# ============================================================================

# Loki rejects log lines above this size
LOKI_MAX_LOG_SIZE_BYTES = 256 * 1024
