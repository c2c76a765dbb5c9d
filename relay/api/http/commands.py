from fastapi import APIRouter

from relay.dependencies import DispatcherDep
from relay.logging import logger
from relay.schemas.client import StatusResponse
from relay.schemas.command import CommandRequest
from relay.utils.error_handler import handle_http_errors

router = APIRouter(prefix="/api", tags=["commands"])


@router.post(
    "/command",
    response_model=StatusResponse,
    summary="Send a command to an agent",
    responses={
        404: {"description": "Client not connected"},
        500: {"description": "Write to the agent socket failed"},
    },
)
@handle_http_errors
async def send_command(
    body: CommandRequest, dispatcher: DispatcherDep
) -> StatusResponse:
    """
    Relay one command to a connected agent.

    The response only confirms the command was written to the socket; the
    agent's answer arrives later as a ``command_result`` (see
    ``GET /api/client/{id}/results``).

    Example:
        POST /api/command
        {"client_id": "1718031234567891234", "type": "exec", "payload": {"cmd": "uptime"}}
    """
    await dispatcher.dispatch(body.client_id, body.to_command())
    logger.info(f"Command {body.type} relayed to {body.client_id}")
    return StatusResponse(status="success")
