# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from relay.api.agent.handler import ConnectionHandler
from relay.api.agent.identity import ClientIdGenerator
from relay.api.agent.server import AgentServer
from relay.api.agent.sinks import LoggingStreamSink
from relay.logging import logger
from relay.managers.command_dispatcher import CommandDispatcher
from relay.managers.connection_registry import ConnectionRegistry
from relay.managers.stream_manager import StreamToggle
from relay.middlewares.correlation_id import CorrelationIDMiddleware
from relay.middlewares.logging_context import LoggingContextMiddleware
from relay.middlewares.prometheus import PrometheusMiddleware
from relay.routing import collect_subrouters
from relay.settings import app_settings

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Start the agent listener with the HTTP server and stop it on shutdown.

    Shutdown closes the listener and aborts every agent socket; each read
    loop then deregisters its own connection.
    """
    from relay.utils.metrics import app_info

    logger.info("Application startup initiated")
    app_info.labels(
        version=VERSION,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=app_settings.ENVIRONMENT,
    ).set(1)

    agent_server: AgentServer = app.state.agent_server
    if app_settings.AGENT_LISTENER_ENABLED:
        await agent_server.start()
    else:
        logger.info("Agent listener disabled")

    try:
        yield
    finally:
        logger.info("Application shutdown initiated")
        await agent_server.stop()
        logger.info("Application shutdown complete")


def application(registry: ConnectionRegistry | None = None) -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    The application owns one registry shared by the agent listener (writer
    side) and the HTTP control surface (reader side):
    - ``ConnectionHandler`` registers agents and processes their messages
    - ``CommandDispatcher`` writes commands onto agent sockets
    - ``StreamToggle`` flips the per-agent streaming flag
    - ``AgentServer`` is the TCP listener, started by the lifespan

    Args:
        registry: Registry to use instead of a fresh one (tests).
    """
    app = FastAPI(
        title="Agent relay",
        description="TCP agent relay with an HTTP control surface",
        version=VERSION,
        lifespan=lifespan,
    )

    registry = registry if registry is not None else ConnectionRegistry()
    dispatcher = CommandDispatcher(registry)
    handler = ConnectionHandler(
        registry,
        dispatcher,
        stream_sink=LoggingStreamSink(),
        id_generator=ClientIdGenerator(app_settings.CLIENT_ID_SCHEME),
    )

    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.stream_toggle = StreamToggle(registry, dispatcher)
    app.state.agent_server = AgentServer(handler, registry)

    # Collect routers
    app.include_router(collect_subrouters())

    # Middlewares (execute in REVERSE order of registration)
    # Execution flow: CorrelationIDMiddleware → LoggingContextMiddleware → PrometheusMiddleware
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    return app


app = application()  # Need for fastapi cli
