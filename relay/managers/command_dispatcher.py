import asyncio
import time
from typing import NoReturn

from relay.api.agent.formats import NDJSONFormat, WireFormat
from relay.exceptions import AgentIOError, NotFoundError
from relay.logging import logger
from relay.managers.connection_registry import (
    ClientConnection,
    ConnectionRegistry,
)
from relay.schemas.command import Command
from relay.settings import app_settings
from relay.utils.metrics import MetricsCollector


class CommandDispatcher:
    """
    Writes commands onto agent sockets.

    Each command is encoded before the connection lock is taken, then
    written with one ``write`` call and flushed while holding the lock, so
    concurrent dispatches to the same agent never interleave. The flush is
    bounded by ``AGENT_WRITE_TIMEOUT``.

    The dispatcher never deregisters a connection. When
    ``AGENT_TEARDOWN_ON_WRITE_ERROR`` is set, a failed write aborts the
    socket and the connection's read loop does the deregistration.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        wire_format: WireFormat | None = None,
        write_timeout: float | None = None,
        teardown_on_error: bool | None = None,
    ) -> None:
        self.registry = registry
        self.wire_format = wire_format or NDJSONFormat()
        self.write_timeout = (
            app_settings.AGENT_WRITE_TIMEOUT
            if write_timeout is None
            else write_timeout
        )
        self.teardown_on_error = (
            app_settings.AGENT_TEARDOWN_ON_WRITE_ERROR
            if teardown_on_error is None
            else teardown_on_error
        )

    async def dispatch(self, client_id: str, command: Command) -> None:
        """
        Send a command to a connected agent.

        Args:
            client_id: Target agent.
            command: Command to send.

        Raises:
            NotFoundError: If the agent is not connected.
            AgentIOError: If the write fails or times out.
        """
        try:
            connection = self.registry.lookup(client_id)
        except NotFoundError:
            MetricsCollector.record_command(command.type, "not_found")
            raise

        await self.send(connection, command)

    async def send(self, connection: ClientConnection, command: Command) -> None:
        """Acquire the connection lock and write the command."""
        data = self.wire_format.encode_command(command)
        async with connection.lock:
            await self.write_locked(connection, command, data)

    async def write_locked(
        self,
        connection: ClientConnection,
        command: Command,
        data: bytes | None = None,
    ) -> None:
        """
        Write a command to a connection whose lock the caller already holds.

        Args:
            connection: Target connection; ``connection.lock`` must be held.
            command: Command being sent (for logs and metrics).
            data: Pre-encoded frame; encoded here when omitted.

        Raises:
            AgentIOError: If the write fails or times out.
        """
        if data is None:
            data = self.wire_format.encode_command(command)

        start_time = time.perf_counter()
        try:
            connection.writer.write(data)
            await asyncio.wait_for(
                connection.writer.drain(), timeout=self.write_timeout
            )
        except asyncio.TimeoutError:
            self._on_write_failure(
                connection,
                command,
                f"write timed out after {self.write_timeout}s",
            )
        except (ConnectionError, OSError) as ex:
            self._on_write_failure(connection, command, str(ex) or repr(ex))

        MetricsCollector.record_command_write(time.perf_counter() - start_time)
        MetricsCollector.record_command(command.type, "sent")
        logger.debug(
            f"Sent {command.type} to {connection.id} ({len(data)} bytes)",
            extra={"client_id": connection.id},
        )

    def _on_write_failure(
        self, connection: ClientConnection, command: Command, reason: str
    ) -> NoReturn:
        MetricsCollector.record_command(command.type, "io_error")
        logger.warning(
            f"Failed to send {command.type} to {connection.id}: {reason}",
            extra={"client_id": connection.id},
        )
        if self.teardown_on_error:
            connection.abort()
        raise AgentIOError(connection.id, reason)
