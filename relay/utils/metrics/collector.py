"""
Facade for centralized metrics emission.

Provides high-level methods for recording metrics without exposing
Prometheus implementation details to the relay core.
"""

from relay.api.agent.constants import CommandType, ResponseStatus


class MetricsCollector:
    """
    Centralized facade for agent metrics.

    All methods are static for easy use without instantiation.
    """

    _KNOWN_STATUSES = frozenset(status.value for status in ResponseStatus)
    _KNOWN_COMMANDS = frozenset(command.value for command in CommandType)

    @staticmethod
    def record_agent_connected() -> None:
        """Record an accepted agent socket."""
        from relay.utils.metrics import (
            agent_connections_active,
            agent_connections_total,
        )

        agent_connections_total.labels(event="accepted").inc()
        agent_connections_active.inc()

    @staticmethod
    def record_agent_disconnected() -> None:
        """Record an agent socket torn down by its read loop."""
        from relay.utils.metrics import (
            agent_connections_active,
            agent_connections_total,
        )

        agent_connections_total.labels(event="closed").inc()
        agent_connections_active.dec()

    @classmethod
    def record_command(cls, command_type: str, result: str) -> None:
        """
        Record one dispatch attempt.

        Operator-chosen command types share the "other" label value.

        Args:
            command_type: Command type tag.
            result: One of 'sent', 'not_found', 'io_error'.
        """
        from relay.utils.metrics import agent_commands_total

        label = command_type if command_type in cls._KNOWN_COMMANDS else "other"
        agent_commands_total.labels(type=label, result=result).inc()

    @staticmethod
    def record_command_write(duration: float) -> None:
        from relay.utils.metrics import agent_command_write_duration_seconds

        agent_command_write_duration_seconds.observe(duration)

    @classmethod
    def record_response(cls, status: str) -> None:
        """
        Record a decoded agent message.

        Unknown tags share one label value to keep cardinality bounded.
        """
        from relay.utils.metrics import agent_responses_total

        label = status if status in cls._KNOWN_STATUSES else "unknown"
        agent_responses_total.labels(status=label).inc()

    @staticmethod
    def record_decode_error() -> None:
        from relay.utils.metrics import agent_decode_errors_total

        agent_decode_errors_total.inc()
