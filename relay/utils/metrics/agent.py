"""
Prometheus metrics for agent connections.

Tracks connected agents, commands written to them and the messages they
send back.
"""

from relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)

agent_connections_active = _get_or_create_gauge(
    "agent_connections_active", "Number of connected agents"
)

agent_connections_total = _get_or_create_counter(
    "agent_connections_total",
    "Total agent connections",
    ["event"],  # accepted, closed
)

agent_commands_total = _get_or_create_counter(
    "agent_commands_total",
    "Commands written to agent sockets",
    ["type", "result"],  # result: sent, not_found, io_error
)

agent_command_write_duration_seconds = _get_or_create_histogram(
    "agent_command_write_duration_seconds",
    "Time spent writing and flushing one command",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0),
)

agent_responses_total = _get_or_create_counter(
    "agent_responses_total",
    "Messages received from agents",
    ["status"],  # system_info, command_result, stream_data, unknown
)

agent_decode_errors_total = _get_or_create_counter(
    "agent_decode_errors_total", "Agent messages dropped as malformed"
)


__all__ = [
    "agent_connections_active",
    "agent_connections_total",
    "agent_commands_total",
    "agent_command_write_duration_seconds",
    "agent_responses_total",
    "agent_decode_errors_total",
]
