import asyncio

from relay.api.agent.handler import ConnectionHandler
from relay.constants import AGENT_CLOSE_TIMEOUT_SECONDS
from relay.exceptions import NotFoundError
from relay.logging import logger
from relay.managers.connection_registry import ConnectionRegistry
from relay.settings import app_settings


class AgentServer:
    """
    TCP listener for agent connections.

    Each accepted socket runs ``ConnectionHandler.handle`` in its own task.
    Stopping the server closes the listener, aborts every registered agent
    socket so each read loop exits through its normal cleanup, and waits for
    the handler tasks to finish.
    """

    def __init__(
        self,
        handler: ConnectionHandler,
        registry: ConnectionRegistry,
        host: str | None = None,
        port: int | None = None,
        max_message_bytes: int | None = None,
    ) -> None:
        self.handler = handler
        self.registry = registry
        self.host = host or app_settings.AGENT_HOST
        self.port = app_settings.AGENT_PORT if port is None else port
        self.max_message_bytes = (
            app_settings.AGENT_MAX_MESSAGE_BYTES
            if max_message_bytes is None
            else max_message_bytes
        )
        self._server: asyncio.Server | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def bound_port(self) -> int | None:
        """Actual listening port (useful when started with port 0)."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        """Bind the listener and start accepting agents."""
        if self._server is not None:
            return

        self._server = await asyncio.start_server(
            self._on_client,
            self.host,
            self.port,
            limit=self.max_message_bytes,
        )
        logger.info(
            f"Agent listener started on {self.host}:{self.bound_port} "
            f"({self.handler.wire_format.format_name})"
        )

    async def _on_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._tasks.add(task)
        try:
            await self.handler.handle(reader, writer)
        except Exception as ex:
            logger.error(f"Agent handler crashed: {ex!r}", exc_info=True)
        finally:
            if task is not None:
                self._tasks.discard(task)

    async def stop(self) -> None:
        """Stop accepting agents and tear down every open connection."""
        if self._server is None:
            return

        server, self._server = self._server, None
        server.close()

        for client_id in self.registry.ids():
            try:
                self.registry.lookup(client_id).abort()
            except NotFoundError:
                continue

        tasks = list(self._tasks)
        if tasks:
            logger.info(f"Waiting for {len(tasks)} agent handler(s) to finish")
            _, pending = await asyncio.wait(
                tasks, timeout=AGENT_CLOSE_TIMEOUT_SECONDS
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        await server.wait_closed()
        logger.info("Agent listener stopped")
