import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from relay.api.agent.constants import CommandType
from relay.api.agent.formats import NDJSONFormat, WireFormat
from relay.api.agent.identity import ClientIdGenerator
from relay.api.agent.sinks import LoggingStreamSink, StreamSink
from relay.constants import MESSAGE_DELIMITER
from relay.exceptions import AgentIOError, DecodeError
from relay.logging import logger
from relay.managers.command_dispatcher import CommandDispatcher
from relay.managers.connection_registry import (
    ClientConnection,
    ConnectionRegistry,
)
from relay.schemas.command import Command
from relay.schemas.response import (
    AgentResponse,
    CommandResultRecord,
    CommandResultResponse,
    StreamDataResponse,
    SystemInfoResponse,
    UnknownResponse,
)
from relay.utils.metrics import MetricsCollector
from relay.utils.timestamps import utc_now

ResponseHandler = Callable[[ClientConnection, Any], Awaitable[None]]


def format_peer(peername: Any) -> tuple[str, str]:
    """
    Split ``get_extra_info("peername")`` into (host, "host:port").

    Returns empty strings when the transport has no peer address.
    """
    if not peername:
        return "", ""
    if isinstance(peername, (tuple, list)) and len(peername) >= 2:
        host, port = peername[0], peername[1]
        if ":" in str(host):
            return str(host), f"[{host}]:{port}"
        return str(host), f"{host}:{port}"
    return str(peername), str(peername)


class ConnectionHandler:
    """
    Owns the lifecycle of one agent socket at a time per call.

    ``handle`` is the asyncio ``client_connected_cb``: it registers the
    connection, sends the ``get_system_info`` bootstrap command, then reads
    one framed message at a time until the socket fails or closes. Cleanup
    (registry removal and socket close) happens in exactly one place, the
    ``finally`` of ``handle``.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        dispatcher: CommandDispatcher,
        stream_sink: StreamSink | None = None,
        wire_format: WireFormat | None = None,
        id_generator: ClientIdGenerator | None = None,
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher
        self.stream_sink = stream_sink or LoggingStreamSink()
        self.wire_format = wire_format or NDJSONFormat()
        self.id_generator = id_generator or ClientIdGenerator()

        self._response_handlers: dict[type[AgentResponse], ResponseHandler] = {
            SystemInfoResponse: self.on_system_info,
            CommandResultResponse: self.on_command_result,
            StreamDataResponse: self.on_stream_data,
            UnknownResponse: self.on_unknown,
        }

    async def handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """
        Serve one agent socket until it closes.

        Args:
            reader: Stream reader of the accepted socket.
            writer: Stream writer of the accepted socket.
        """
        connection = self.on_connect(reader, writer)
        try:
            await self.bootstrap(connection)
            await self.read_loop(connection)
        finally:
            await self.on_disconnect(connection)

    def on_connect(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> ClientConnection:
        """Assign an ID and register the new connection."""
        peer_host, remote_addr = format_peer(writer.get_extra_info("peername"))
        client_id = self.id_generator.next_id(peer_host)

        connection = ClientConnection(
            client_id, reader, writer, remote_addr=remote_addr
        )
        self.registry.register(client_id, connection)

        MetricsCollector.record_agent_connected()
        logger.info(
            f"Agent connected: {client_id} from {remote_addr or 'unknown'}",
            extra={"client_id": client_id},
        )
        return connection

    async def bootstrap(self, connection: ClientConnection) -> None:
        """
        Ask a new agent for its system metadata.

        A write failure here is logged only; the read loop notices the dead
        socket and cleans up.
        """
        try:
            await self.dispatcher.send(
                connection, Command(type=CommandType.GET_SYSTEM_INFO.value)
            )
        except AgentIOError as ex:
            logger.warning(
                f"Bootstrap command to {connection.id} failed: {ex.reason}",
                extra={"client_id": connection.id},
            )

    async def read_frame(self, connection: ClientConnection) -> bytes | None:
        """
        Read one delimited frame.

        Returns:
            The frame including its delimiter, ``b""`` at end-of-stream, or
            None when an over-long frame was dropped. An unterminated
            fragment before end-of-stream is dropped too.
        """
        reader = connection.reader
        try:
            return await reader.readuntil(MESSAGE_DELIMITER)
        except asyncio.IncompleteReadError as ex:
            if ex.partial:
                logger.debug(
                    f"Dropped {len(ex.partial)} unterminated bytes from "
                    f"{connection.id} at end of stream",
                    extra={"client_id": connection.id},
                )
            return b""
        except asyncio.LimitOverrunError as ex:
            try:
                dropped = await self._discard_frame(reader, ex.consumed)
            except asyncio.IncompleteReadError:
                return b""

        MetricsCollector.record_decode_error()
        logger.warning(
            f"Dropped over-long message from {connection.id} ({dropped} bytes)",
            extra={"client_id": connection.id},
        )
        return None

    @staticmethod
    async def _discard_frame(reader: asyncio.StreamReader, consumed: int) -> int:
        """
        Drop buffered and incoming bytes up to and including the next delimiter.

        ``readuntil`` leaves the buffer untouched on overrun, so the rest of
        the over-long frame is skipped here rather than read as a new one.
        """
        dropped = len(await reader.readexactly(consumed))
        while True:
            try:
                return dropped + len(await reader.readuntil(MESSAGE_DELIMITER))
            except asyncio.LimitOverrunError as ex:
                dropped += len(await reader.readexactly(ex.consumed))

    async def read_loop(self, connection: ClientConnection) -> None:
        """
        Read and process framed messages until end-of-stream or a read error.

        Malformed and over-long frames are dropped whole; the loop only ends
        on a terminal socket condition.
        """
        while True:
            try:
                frame = await self.read_frame(connection)
            except (ConnectionError, OSError) as ex:
                logger.info(
                    f"Read error from {connection.id}: {ex!r}",
                    extra={"client_id": connection.id},
                )
                return

            if frame is None:
                connection.touch()
                continue

            if not frame:
                return

            connection.touch()

            if not frame.strip():
                continue

            await self.on_receive(connection, frame)

    async def on_receive(self, connection: ClientConnection, line: bytes) -> None:
        """Decode one message and route it by its status tag."""
        try:
            response = self.wire_format.decode_response(line)
        except DecodeError as ex:
            MetricsCollector.record_decode_error()
            logger.warning(
                f"Malformed message from {connection.id}: {ex.message}",
                extra={"client_id": connection.id},
            )
            return

        MetricsCollector.record_response(response.status)
        handler = self._response_handlers[type(response)]
        await handler(connection, response)

    async def on_system_info(
        self, connection: ClientConnection, response: SystemInfoResponse
    ) -> None:
        await connection.merge_info(response.data)
        logger.info(
            f"System info from {connection.id}: {response.data}",
            extra={"client_id": connection.id},
        )

    async def on_command_result(
        self, connection: ClientConnection, response: CommandResultResponse
    ) -> None:
        # No correlation ID exists, so results are kept in arrival order only
        await connection.record_result(
            CommandResultRecord(
                message=response.message,
                data=dict(response.data),
                received_at=utc_now(),
            )
        )
        logger.info(
            f"Command result from {connection.id}: {response.message}",
            extra={"client_id": connection.id},
        )

    async def on_stream_data(
        self, connection: ClientConnection, response: StreamDataResponse
    ) -> None:
        try:
            await self.stream_sink.publish(connection.id, response)
        except Exception as ex:
            logger.error(
                f"Stream sink failed for {connection.id}: {ex!r}",
                extra={"client_id": connection.id},
                exc_info=True,
            )

    async def on_unknown(
        self, connection: ClientConnection, response: UnknownResponse
    ) -> None:
        logger.warning(
            f"Unknown response status from {connection.id}: {response.status!r}",
            extra={"client_id": connection.id},
        )

    async def on_disconnect(self, connection: ClientConnection) -> None:
        """Deregister and close. The only place entries leave the registry."""
        self.registry.remove(connection.id)
        await connection.close()

        MetricsCollector.record_agent_disconnected()
        logger.info(
            f"Agent disconnected: {connection.id}",
            extra={"client_id": connection.id},
        )
