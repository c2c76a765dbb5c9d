from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Acknowledgement returned by command and stream endpoints."""

    status: str


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    agent_listener: str
    connected_agents: int
