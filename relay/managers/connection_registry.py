"""
Registry of connected agents.

Lock discipline:
- ``ConnectionRegistry._lock`` (a ``threading.Lock``) guards map membership
  and snapshot copies only. It is never held across an ``await`` or any
  socket operation.
- ``ClientConnection.lock`` (an ``asyncio.Lock``) guards one connection's
  socket writes and its Info / streaming / result-history mutations.
- The registry lock is never held while a connection lock is acquired.
"""

import asyncio
import threading
from collections import deque
from datetime import datetime
from typing import Any

from relay.constants import AGENT_CLOSE_TIMEOUT_SECONDS, RESERVED_INFO_KEYS
from relay.exceptions import NotFoundError
from relay.logging import logger
from relay.schemas.response import CommandResultRecord
from relay.settings import app_settings
from relay.utils.timestamps import rfc3339, utc_now


class ClientConnection:
    """
    State of one connected agent.

    The socket (reader/writer pair) is owned exclusively by this object and
    closed exactly once, by the read loop that created it.
    """

    def __init__(
        self,
        client_id: str,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        remote_addr: str = "",
        result_history: int | None = None,
    ) -> None:
        self.id = client_id
        self.reader = reader
        self.writer = writer
        self.remote_addr = remote_addr
        self.connected_at: datetime = utc_now()
        self.last_activity: datetime = self.connected_at
        self.info: dict[str, str] = {}
        self.streaming = False
        self.results: deque[CommandResultRecord] = deque(
            maxlen=result_history or app_settings.COMMAND_RESULT_HISTORY
        )
        self.lock = asyncio.Lock()
        self._closed = False

    def touch(self, now: datetime | None = None) -> None:
        """
        Record activity on the connection.

        Only the read loop calls this. The stored value never moves
        backwards, even if the wall clock does.
        """
        now = now or utc_now()
        if now > self.last_activity:
            self.last_activity = now

    async def merge_info(self, data: dict[str, str]) -> None:
        """Merge agent-reported metadata into Info under the connection lock."""
        async with self.lock:
            self.info.update(data)

    async def record_result(self, record: CommandResultRecord) -> None:
        """Append to the bounded result history under the connection lock."""
        async with self.lock:
            self.results.append(record)

    def describe(self) -> dict[str, Any]:
        """
        Build the listing shape for this connection.

        Agent-reported Info comes first; server-owned keys are applied last
        so an agent can't spoof its id or timestamps.
        """
        entry: dict[str, Any] = {
            key: value
            for key, value in self.info.items()
            if key not in RESERVED_INFO_KEYS
        }
        entry.update(
            id=self.id,
            last_active=rfc3339(self.last_activity),
            connected_at=rfc3339(self.connected_at),
            remote_addr=self.remote_addr,
            streaming=self.streaming,
        )
        return entry

    @property
    def closed(self) -> bool:
        return self._closed

    def abort(self) -> None:
        """
        Drop the socket without flushing.

        Used when a write fails or the server shuts down. The read loop then
        sees end-of-stream and performs the normal cleanup.
        """
        transport = self.writer.transport
        if transport is not None:
            transport.abort()

    async def close(self) -> None:
        """Close the socket. Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True

        self.writer.close()
        try:
            await asyncio.wait_for(
                self.writer.wait_closed(), timeout=AGENT_CLOSE_TIMEOUT_SECONDS
            )
        except (ConnectionError, OSError, asyncio.TimeoutError) as ex:
            logger.debug(
                f"Socket of {self.id} did not close cleanly: {ex!r}",
                extra={"client_id": self.id},
            )


class ConnectionRegistry:
    """
    Thread-safe mapping of client ID to ClientConnection.

    One instance is owned by each application and injected into the
    connection handler, dispatcher, stream toggle and HTTP routes.
    """

    def __init__(self) -> None:
        self._connections: dict[str, ClientConnection] = {}
        self._lock = threading.Lock()

    def register(self, client_id: str, connection: ClientConnection) -> None:
        """
        Insert a connection, replacing any entry with the same ID.

        Args:
            client_id: Server-assigned identifier.
            connection: The connection state to store.
        """
        with self._lock:
            self._connections[client_id] = connection
        logger.debug(
            f"Connection ({id(connection)}) registered as {client_id}",
            extra={"client_id": client_id},
        )

    def remove(self, client_id: str) -> ClientConnection | None:
        """
        Delete a connection if present.

        Args:
            client_id: Identifier to remove.

        Returns:
            The removed connection, or None if it was not registered.
        """
        with self._lock:
            connection = self._connections.pop(client_id, None)
        if connection is not None:
            logger.debug(
                f"Connection ({id(connection)}) removed for {client_id}",
                extra={"client_id": client_id},
            )
        return connection

    def lookup(self, client_id: str) -> ClientConnection:
        """
        Get a live connection.

        Callers must not keep the result across awaits expecting it to stay
        registered; re-lookup for fresh state.

        Raises:
            NotFoundError: If no agent with this ID is connected.
        """
        with self._lock:
            connection = self._connections.get(client_id)
        if connection is None:
            raise NotFoundError(client_id)
        return connection

    def snapshot(self) -> list[dict[str, Any]]:
        """
        Copy the listing shape of every connection.

        The copy is made while holding the registry lock; Info is only
        mutated on the event loop without intermediate awaits, so no
        half-updated entry can be observed.
        """
        with self._lock:
            return [
                connection.describe()
                for connection in self._connections.values()
            ]

    def describe(self, client_id: str) -> dict[str, Any]:
        """
        Copy the listing shape of one connection.

        Raises:
            NotFoundError: If no agent with this ID is connected.
        """
        with self._lock:
            connection = self._connections.get(client_id)
            if connection is None:
                raise NotFoundError(client_id)
            return connection.describe()

    def results(self, client_id: str) -> list[CommandResultRecord]:
        """
        Copy the command-result history of one connection, oldest first.

        Raises:
            NotFoundError: If no agent with this ID is connected.
        """
        with self._lock:
            connection = self._connections.get(client_id)
            if connection is None:
                raise NotFoundError(client_id)
            return list(connection.results)

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, client_id: object) -> bool:
        with self._lock:
            return client_id in self._connections
