"""Tests for the per-client streaming flag."""

import json

import pytest

from relay.exceptions import AgentIOError, NotFoundError
from relay.managers.stream_manager import StreamToggle


@pytest.fixture
def stream_toggle(registry, dispatcher):
    return StreamToggle(registry, dispatcher)


def _written(agent_writer):
    return [json.loads(call.args[0]) for call in agent_writer.write.call_args_list]


class TestStreamToggle:
    """Tests for StreamToggle."""

    @pytest.mark.asyncio
    async def test_start_sets_flag_and_sends_command(
        self, stream_toggle, connection, agent_writer
    ):
        result = await stream_toggle.start("client-1", "screen")

        assert result is True
        assert connection.streaming is True
        assert _written(agent_writer) == [
            {"type": "start_stream", "payload": {"type": "screen"}}
        ]

    @pytest.mark.asyncio
    async def test_stop_clears_flag(self, stream_toggle, connection, agent_writer):
        await stream_toggle.start("client-1")
        result = await stream_toggle.stop("client-1")

        assert result is False
        assert connection.streaming is False
        assert _written(agent_writer) == [
            {"type": "start_stream", "payload": {}},
            {"type": "stop_stream", "payload": {}},
        ]

    @pytest.mark.asyncio
    async def test_start_twice_resends(self, stream_toggle, connection, agent_writer):
        await stream_toggle.start("client-1")
        await stream_toggle.start("client-1")

        assert connection.streaming is True
        assert [c["type"] for c in _written(agent_writer)] == [
            "start_stream",
            "start_stream",
        ]

    @pytest.mark.asyncio
    async def test_unknown_client(self, stream_toggle):
        with pytest.raises(NotFoundError):
            await stream_toggle.start("missing")

    @pytest.mark.asyncio
    async def test_flag_is_set_before_the_write(
        self, stream_toggle, connection, agent_writer
    ):
        observed = []
        agent_writer.write.side_effect = lambda data: observed.append(
            connection.streaming
        )

        await stream_toggle.start("client-1")

        assert observed == [True]

    @pytest.mark.asyncio
    async def test_write_failure_keeps_new_flag(
        self, stream_toggle, connection, agent_writer
    ):
        agent_writer.drain.side_effect = ConnectionResetError()

        with pytest.raises(AgentIOError):
            await stream_toggle.start("client-1")

        assert connection.streaming is True
