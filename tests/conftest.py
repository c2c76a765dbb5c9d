"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the connection registry, mocked
agent connections and the HTTP control surface.
"""

import os

import pytest

# Keep test runs from binding the real agent port or writing log files
os.environ.setdefault("AGENT_LISTENER_ENABLED", "false")
os.environ.setdefault("LOG_FILE_PATH", os.devnull)

from tests.mocks.connection_mocks import (  # noqa: E402
    create_mock_stream_writer,
    create_registered_connection,
)


@pytest.fixture
def registry():
    """
    Provides an empty connection registry.

    Returns:
        ConnectionRegistry: Fresh registry instance
    """
    from relay.managers.connection_registry import ConnectionRegistry

    return ConnectionRegistry()


@pytest.fixture
def dispatcher(registry):
    """
    Provides a dispatcher bound to the ``registry`` fixture.

    Returns:
        CommandDispatcher: Dispatcher with a short write timeout
    """
    from relay.managers.command_dispatcher import CommandDispatcher

    return CommandDispatcher(registry, write_timeout=1.0, teardown_on_error=True)


@pytest.fixture
def agent_writer():
    """Provides a mocked agent socket writer."""
    return create_mock_stream_writer()


@pytest.fixture
def connection(registry, agent_writer):
    """
    Provides a connection registered as ``client-1``.

    Returns:
        ClientConnection: Registered connection using ``agent_writer``
    """
    return create_registered_connection(registry, "client-1", writer=agent_writer)


@pytest.fixture
def app(registry):
    """
    Create the application around the ``registry`` fixture.

    The lifespan is not run, so the agent listener is never bound.

    Returns:
        FastAPI: FastAPI application instance.
    """
    from relay import application

    return application(registry=registry)


@pytest.fixture
def client(app):
    """
    Create a test client for the FastAPI application.

    Returns:
        TestClient: FastAPI test client instance.
    """
    from fastapi.testclient import TestClient

    return TestClient(app)
