"""Tests for the application exception hierarchy."""

import pytest

from relay.exceptions import (
    AgentIOError,
    AppException,
    DecodeError,
    NotFoundError,
)
from relay.schemas.errors import ErrorCode


class TestExceptions:
    """Each error kind carries its code and HTTP status."""

    @pytest.mark.parametrize(
        "exc,code,status",
        [
            (NotFoundError("c1"), ErrorCode.NOT_FOUND, 404),
            (DecodeError("bad json"), ErrorCode.DECODE_ERROR, 400),
            (AgentIOError("c1", "broken pipe"), ErrorCode.AGENT_IO_ERROR, 500),
            (AppException("boom"), ErrorCode.INTERNAL_ERROR, 500),
        ],
    )
    def test_code_and_status(self, exc, code, status):
        assert isinstance(exc, AppException)
        assert exc.code == code
        assert exc.http_status == status

    def test_messages(self):
        assert NotFoundError("c1").message == "Client c1 not found"
        assert (
            AgentIOError("c1", "broken pipe").message
            == "Failed to send command to c1: broken pipe"
        )
        assert str(DecodeError("bad json")) == "bad json"
