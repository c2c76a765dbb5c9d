"""Tests for structured logging functionality."""

import json
import logging

from relay.logging import (
    HumanReadableFormatter,
    StructuredJSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)


def _record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    """Test log context management."""

    def test_set_log_context_updates_existing_fields(self):
        clear_log_context()
        set_log_context(endpoint="/api/clients")
        set_log_context(method="GET")

        assert get_log_context() == {"endpoint": "/api/clients", "method": "GET"}

        clear_log_context()

    def test_clear_log_context_removes_fields(self):
        set_log_context(endpoint="/api/clients")
        clear_log_context()

        assert get_log_context() == {}


class TestStructuredJSONFormatter:
    """Test JSON log output."""

    def test_includes_extra_and_context(self):
        clear_log_context()
        set_log_context(endpoint="/api/command")

        output = json.loads(
            StructuredJSONFormatter().format(_record(client_id="c1"))
        )

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["client_id"] == "c1"
        assert output["endpoint"] == "/api/command"
        assert "environment" in output

        clear_log_context()

    def test_truncates_oversized_messages(self):
        output = StructuredJSONFormatter().format(_record("x" * 100_000))

        assert len(output) < 100_000
        assert json.loads(output)["message"].endswith("... [TRUNCATED]")


class TestHumanReadableFormatter:
    """Test console log output."""

    def test_tags_agent_logs_with_client_id(self):
        output = HumanReadableFormatter().format(_record(client_id="c1"))

        assert "[c1]" in output
        assert "hello" in output

    def test_untagged_logs_use_dash(self):
        output = HumanReadableFormatter().format(_record())

        assert "[-]" in output
