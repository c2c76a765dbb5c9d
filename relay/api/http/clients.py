"""Read-only views of connected agents."""

from typing import Any

from fastapi import APIRouter

from relay.dependencies import RegistryDep
from relay.schemas.response import CommandResultRecord
from relay.utils.error_handler import handle_http_errors

router = APIRouter(prefix="/api", tags=["clients"])


@router.get(
    "/clients",
    summary="List connected agents",
)
async def list_clients(registry: RegistryDep) -> list[dict[str, Any]]:
    """
    List every connected agent.

    Each entry has ``id``, ``last_active`` and ``connected_at`` (RFC 3339),
    ``remote_addr``, ``streaming`` and all agent-reported Info keys.

    Example:
        GET /api/clients
        [{"id": "1718031234567891234", "os": "linux", ...}]
    """
    return registry.snapshot()


@router.get(
    "/client/{client_id}",
    summary="Get one connected agent",
    responses={404: {"description": "Client not connected"}},
)
@handle_http_errors
async def get_client(client_id: str, registry: RegistryDep) -> dict[str, Any]:
    """Same shape as one entry of ``GET /api/clients``."""
    return registry.describe(client_id)


@router.get(
    "/client/{client_id}/results",
    response_model=list[CommandResultRecord],
    summary="Recent command results of one agent",
    responses={404: {"description": "Client not connected"}},
)
@handle_http_errors
async def get_client_results(
    client_id: str, registry: RegistryDep
) -> list[CommandResultRecord]:
    """
    Return the agent's most recent ``command_result`` messages, oldest first.

    Results are kept in arrival order only; they carry no reference to the
    command that produced them.
    """
    return registry.results(client_id)
