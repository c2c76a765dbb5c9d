"""
Tests for the connection registry and per-connection state.

This module tests membership, lookup failures, listing shape and the
thread safety of register/remove.
"""

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from relay.exceptions import NotFoundError
from relay.managers.connection_registry import ClientConnection
from relay.schemas.response import CommandResultRecord
from tests.mocks.connection_mocks import (
    create_mock_stream_reader,
    create_mock_stream_writer,
    create_registered_connection,
)

RFC3339 = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


def _record(message: str) -> CommandResultRecord:
    return CommandResultRecord(
        message=message, data={}, received_at=datetime.now(timezone.utc)
    )


class TestConnectionRegistry:
    """Tests for ConnectionRegistry membership."""

    def test_lookup_unknown_raises_not_found(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.lookup("missing")

        assert exc_info.value.client_id == "missing"
        assert exc_info.value.message == "Client missing not found"

    def test_register_then_lookup(self, registry):
        connection = create_registered_connection(registry, "a")

        assert registry.lookup("a") is connection
        assert "a" in registry
        assert len(registry) == 1

    def test_register_same_id_replaces(self, registry):
        create_registered_connection(registry, "a")
        replacement = create_registered_connection(registry, "a")

        assert registry.lookup("a") is replacement
        assert len(registry) == 1

    def test_remove(self, registry):
        connection = create_registered_connection(registry, "a")

        assert registry.remove("a") is connection
        assert "a" not in registry
        with pytest.raises(NotFoundError):
            registry.lookup("a")

    def test_remove_unknown_returns_none(self, registry):
        assert registry.remove("missing") is None

    def test_snapshot_has_one_entry_per_connection(self, registry):
        create_registered_connection(registry, "a")
        create_registered_connection(registry, "b")

        snapshot = registry.snapshot()

        assert len(snapshot) == 2
        assert {entry["id"] for entry in snapshot} == {"a", "b"}

    def test_snapshot_of_empty_registry(self, registry):
        assert registry.snapshot() == []

    def test_snapshot_is_a_copy(self, registry):
        connection = create_registered_connection(registry, "a")

        snapshot = registry.snapshot()
        snapshot[0]["hostname"] = "tampered"

        assert "hostname" not in connection.info
        assert "hostname" not in registry.describe("a")

    def test_describe_and_results_unknown(self, registry):
        with pytest.raises(NotFoundError):
            registry.describe("missing")
        with pytest.raises(NotFoundError):
            registry.results("missing")

    def test_concurrent_register_and_remove(self, registry):
        """Final count equals net inserts when threads race."""
        connections = [
            ClientConnection(
                f"c{i}", create_mock_stream_reader(), create_mock_stream_writer()
            )
            for i in range(200)
        ]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda c: registry.register(c.id, c), connections))
            list(
                pool.map(
                    registry.remove,
                    [c.id for i, c in enumerate(connections) if i % 2 == 0],
                )
            )

        assert len(registry) == 100
        assert sorted(registry.ids()) == sorted(
            c.id for i, c in enumerate(connections) if i % 2 == 1
        )


class TestClientConnection:
    """Tests for ClientConnection state."""

    def test_describe_shape(self, registry):
        connection = create_registered_connection(registry, "a")
        connection.info.update(hostname="box", os="linux")

        entry = connection.describe()

        assert entry["id"] == "a"
        assert entry["hostname"] == "box"
        assert entry["os"] == "linux"
        assert entry["remote_addr"] == "10.0.0.7:50123"
        assert entry["streaming"] is False
        assert RFC3339.match(entry["last_active"])
        assert RFC3339.match(entry["connected_at"])

    def test_describe_reserved_keys_win_over_info(self, registry):
        connection = create_registered_connection(registry, "a")
        connection.info.update(id="spoofed", last_active="never", user="bob")

        entry = connection.describe()

        assert entry["id"] == "a"
        assert entry["last_active"] != "never"
        assert entry["user"] == "bob"

    def test_touch_never_moves_backwards(self, registry):
        connection = create_registered_connection(registry, "a")
        later = connection.last_activity + timedelta(seconds=30)

        connection.touch(later)
        connection.touch(later - timedelta(seconds=60))

        assert connection.last_activity == later

    @pytest.mark.asyncio
    async def test_merge_info_overwrites_keys(self, registry):
        connection = create_registered_connection(registry, "a")

        await connection.merge_info({"hostname": "old", "os": "linux"})
        await connection.merge_info({"hostname": "new"})

        assert connection.info == {"hostname": "new", "os": "linux"}

    @pytest.mark.asyncio
    async def test_result_history_is_bounded(self, registry):
        connection = create_registered_connection(
            registry, "a", result_history=2
        )

        for message in ("one", "two", "three"):
            await connection.record_result(_record(message))

        assert [r.message for r in registry.results("a")] == ["two", "three"]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, registry, agent_writer):
        connection = create_registered_connection(
            registry, "a", writer=agent_writer
        )

        await connection.close()
        await connection.close()

        assert connection.closed
        agent_writer.close.assert_called_once()
        agent_writer.wait_closed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_tolerates_reset_socket(self, registry, agent_writer):
        agent_writer.wait_closed.side_effect = ConnectionResetError()
        connection = create_registered_connection(
            registry, "a", writer=agent_writer
        )

        await connection.close()

        assert connection.closed

    def test_abort_drops_transport(self, registry, agent_writer):
        connection = create_registered_connection(
            registry, "a", writer=agent_writer
        )

        connection.abort()

        agent_writer.transport.abort.assert_called_once()
