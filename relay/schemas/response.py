"""
Messages agents send to the server.

Every agent message has the same envelope (``status``, ``message``,
``data``); the ``status`` tag selects which model the envelope is
validated into. Tags the server does not know become ``UnknownResponse``
so a newer agent never breaks an older server.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relay.api.agent.constants import ResponseStatus


class AgentResponse(BaseModel):
    """
    Common envelope of every agent message.

    Attributes:
        status: Discriminator tag.
        message: Free-text message, empty when the agent omits it.
        data: String-to-string mapping, empty when omitted or null.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: str = ""
    message: str = ""
    data: dict[str, str] = Field(default_factory=dict)

    @field_validator("message", mode="before")
    @classmethod
    def null_message_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("data", mode="before")
    @classmethod
    def null_data_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class SystemInfoResponse(AgentResponse):
    """Host metadata (hostname, os, ...) merged into the client's Info."""

    status: Literal["system_info"] = ResponseStatus.SYSTEM_INFO.value


class CommandResultResponse(AgentResponse):
    """Outcome of a command; ``message`` carries the agent's text."""

    status: Literal["command_result"] = ResponseStatus.COMMAND_RESULT.value


class StreamDataResponse(AgentResponse):
    """One chunk of streamed media, handed to the stream sink untouched."""

    status: Literal["stream_data"] = ResponseStatus.STREAM_DATA.value


class UnknownResponse(AgentResponse):
    """Any status tag without a dedicated model."""


RESPONSE_MODELS: dict[str, type[AgentResponse]] = {
    ResponseStatus.SYSTEM_INFO.value: SystemInfoResponse,
    ResponseStatus.COMMAND_RESULT.value: CommandResultResponse,
    ResponseStatus.STREAM_DATA.value: StreamDataResponse,
}


def response_model_for(status: str) -> type[AgentResponse]:
    """
    Select the response model for a status tag.

    Args:
        status: The ``status`` field of an inbound message.

    Returns:
        The dedicated model class, or ``UnknownResponse``.
    """
    return RESPONSE_MODELS.get(status, UnknownResponse)


class CommandResultRecord(BaseModel):
    """A ``command_result`` message as kept in a client's history."""

    message: str
    data: dict[str, str]
    received_at: datetime
