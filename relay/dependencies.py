"""
Dependency injection configuration for FastAPI.

The registry, dispatcher, stream toggle and agent server are owned by the
application instance (``app.state``) rather than by module globals, so each
application, and each test, gets an isolated set.

Example:
    ```python
    from fastapi import APIRouter
    from relay.dependencies import RegistryDep

    router = APIRouter()

    @router.get("/clients")
    async def list_clients(registry: RegistryDep) -> list[dict]:
        return registry.snapshot()
    ```
"""

from typing import Annotated

from fastapi import Depends, Request

from relay.api.agent.server import AgentServer
from relay.managers.command_dispatcher import CommandDispatcher
from relay.managers.connection_registry import ConnectionRegistry
from relay.managers.stream_manager import StreamToggle


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> CommandDispatcher:
    return request.app.state.dispatcher


def get_stream_toggle(request: Request) -> StreamToggle:
    return request.app.state.stream_toggle


def get_agent_server(request: Request) -> AgentServer:
    return request.app.state.agent_server


RegistryDep = Annotated[ConnectionRegistry, Depends(get_registry)]
DispatcherDep = Annotated[CommandDispatcher, Depends(get_dispatcher)]
StreamToggleDep = Annotated[StreamToggle, Depends(get_stream_toggle)]
AgentServerDep = Annotated[AgentServer, Depends(get_agent_server)]
