"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Response, status

from relay.dependencies import AgentServerDep, RegistryDep
from relay.schemas.client import HealthResponse
from relay.settings import app_settings

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(
    response: Response,
    registry: RegistryDep,
    agent_server: AgentServerDep,
) -> HealthResponse:
    """
    Report whether the agent listener is accepting connections.

    Returns 503 Service Unavailable when the listener is enabled but not
    serving.
    """
    if not app_settings.AGENT_LISTENER_ENABLED:
        listener_status = "disabled"
    elif agent_server.is_serving:
        listener_status = "running"
    else:
        listener_status = "stopped"

    overall_status = "unhealthy" if listener_status == "stopped" else "healthy"
    if overall_status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=overall_status,
        agent_listener=listener_status,
        connected_agents=len(registry),
    )
