"""
Prometheus metrics definitions and utilities.

Metrics are organized by subsystem (agent sockets, HTTP) and re-exported
here:

    from relay.utils.metrics import agent_connections_active

Core code records through the MetricsCollector facade:

    from relay.utils.metrics import MetricsCollector
    MetricsCollector.record_agent_connected()
"""

from relay.utils.metrics._helpers import _get_or_create_gauge
from relay.utils.metrics.agent import (
    agent_command_write_duration_seconds,
    agent_commands_total,
    agent_connections_active,
    agent_connections_total,
    agent_decode_errors_total,
    agent_responses_total,
)
from relay.utils.metrics.collector import MetricsCollector
from relay.utils.metrics.http import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

app_info = _get_or_create_gauge(
    "app_info",
    "Application information",
    ["version", "python_version", "environment"],
)

__all__ = [
    "MetricsCollector",
    # Agent metrics
    "agent_connections_active",
    "agent_connections_total",
    "agent_commands_total",
    "agent_command_write_duration_seconds",
    "agent_responses_total",
    "agent_decode_errors_total",
    # HTTP metrics
    "http_requests_total",
    "http_request_duration_seconds",
    "http_requests_in_progress",
    # Application metrics
    "app_info",
]
