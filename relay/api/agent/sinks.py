"""Destinations for ``stream_data`` messages received from agents."""

from typing import Protocol

from relay.logging import logger
from relay.schemas.response import StreamDataResponse


class StreamSink(Protocol):
    """
    Receives streamed media chunks from connection handlers.

    Implementations must not block the read loop for long; a slow sink
    delays every later message from the same agent.
    """

    async def publish(self, client_id: str, chunk: StreamDataResponse) -> None:
        ...


class LoggingStreamSink:
    """Default sink: logs the chunk and drops it."""

    async def publish(self, client_id: str, chunk: StreamDataResponse) -> None:
        logger.debug(
            f"Received stream data from {client_id} "
            f"({len(chunk.data)} field(s), message {len(chunk.message)} chars)",
            extra={"client_id": client_id},
        )
