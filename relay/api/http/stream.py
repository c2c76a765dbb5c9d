from fastapi import APIRouter, HTTPException, Query, status

from relay.dependencies import RegistryDep, StreamToggleDep
from relay.schemas.client import StatusResponse
from relay.utils.error_handler import handle_http_errors

router = APIRouter(prefix="/api", tags=["stream"])


@router.post(
    "/stream",
    response_model=StatusResponse,
    summary="Ask an agent to start streaming",
    responses={
        404: {"description": "Client not connected"},
        500: {"description": "Write to the agent socket failed"},
    },
)
@handle_http_errors
async def start_stream(
    stream_toggle: StreamToggleDep,
    client_id: str = Query(...),
    stream_type: str = Query("", alias="type"),
) -> StatusResponse:
    """
    Set the client's streaming flag and send ``start_stream``.

    Example:
        POST /api/stream?client_id=1718031234567891234&type=screen
    """
    await stream_toggle.start(client_id, stream_type)
    return StatusResponse(status="stream_started")


@router.post(
    "/stream/stop",
    response_model=StatusResponse,
    summary="Ask an agent to stop streaming",
    responses={
        404: {"description": "Client not connected"},
        500: {"description": "Write to the agent socket failed"},
    },
)
@handle_http_errors
async def stop_stream(
    stream_toggle: StreamToggleDep,
    client_id: str = Query(...),
    stream_type: str = Query("", alias="type"),
) -> StatusResponse:
    """Clear the client's streaming flag and send ``stop_stream``."""
    await stream_toggle.stop(client_id, stream_type)
    return StatusResponse(status="stream_stopped")


@router.get(
    "/stream",
    summary="Live stream retrieval (not implemented)",
    responses={
        404: {"description": "Client not connected"},
        501: {"description": "Live retrieval is not implemented"},
    },
)
@handle_http_errors
async def get_stream(registry: RegistryDep, client_id: str = Query(...)) -> None:
    registry.lookup(client_id)
    raise HTTPException(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        detail="not implemented",
    )
