"""
Application-level constants for hardcoded protocol behavior.

These values define the agent wire protocol and internal timing. They
should NEVER be changed via environment variables or configuration.

For configurable values (ports, timeouts, buffer limits, etc.),
see relay/settings.py where values can be overridden via environment variables.
"""

# ============================================================================
# Agent Wire Protocol
# ============================================================================

# Every message on an agent socket is one JSON document followed by this byte
MESSAGE_DELIMITER = b"\n"

# Encoding used for every message in both directions
MESSAGE_ENCODING = "utf-8"


# ============================================================================
# Connection Lifecycle
# ============================================================================

# Timeout (seconds) when waiting for an agent socket to finish closing
# Ensures shutdown never hangs on a peer that stopped reading
AGENT_CLOSE_TIMEOUT_SECONDS = 5


# ============================================================================
# Snapshot Fields
# ============================================================================

# Keys the server owns in a client listing; agent-reported Info never
# overrides them
RESERVED_INFO_KEYS = frozenset(
    {"id", "last_active", "connected_at", "remote_addr", "streaming"}
)
