from relay.api.agent.constants import CommandType
from relay.logging import logger
from relay.managers.command_dispatcher import CommandDispatcher
from relay.managers.connection_registry import ConnectionRegistry
from relay.schemas.command import Command


class StreamToggle:
    """
    Per-client streaming flag plus the command that flips it.

    States are ``Idle`` (flag False) and ``Streaming`` (flag True). Every
    toggle sets the flag and re-sends the command, so starting an already
    streaming client re-sends ``start_stream``. No acknowledgment from the
    agent is awaited.
    """

    def __init__(
        self, registry: ConnectionRegistry, dispatcher: CommandDispatcher
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher

    async def toggle(
        self, client_id: str, start: bool, stream_type: str = ""
    ) -> bool:
        """
        Set the streaming flag and send the matching command.

        The flag update and the write happen in one critical section of the
        connection lock, so the last flag value always matches the last
        command on the wire.

        Args:
            client_id: Target agent.
            start: True for ``start_stream``, False for ``stop_stream``.
            stream_type: Media kind forwarded as ``payload["type"]``
                (e.g. "screen", "webcam").

        Returns:
            The streaming flag after the toggle.

        Raises:
            NotFoundError: If the agent is not connected.
            AgentIOError: If the command could not be written. The flag
                keeps its new value.
        """
        connection = self.registry.lookup(client_id)
        command = Command(
            type=(
                CommandType.START_STREAM if start else CommandType.STOP_STREAM
            ).value,
            payload={"type": stream_type} if stream_type else {},
        )

        async with connection.lock:
            previous = connection.streaming
            connection.streaming = start
            await self.dispatcher.write_locked(connection, command)

        logger.info(
            f"Streaming for {client_id}: {previous} -> {start}"
            + (f" ({stream_type})" if stream_type else ""),
            extra={"client_id": client_id},
        )
        return start

    async def start(self, client_id: str, stream_type: str = "") -> bool:
        return await self.toggle(client_id, True, stream_type)

    async def stop(self, client_id: str, stream_type: str = "") -> bool:
        return await self.toggle(client_id, False, stream_type)
