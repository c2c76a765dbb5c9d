from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Command(BaseModel):
    """
    Instruction sent from the server to one agent.

    Wire form: ``{"type": "<tag>", "payload": {"<key>": "<value>"}}``.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1)
    payload: dict[str, str] = Field(default_factory=dict)

    @field_validator("payload", mode="before")
    @classmethod
    def null_payload_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class CommandRequest(BaseModel):
    """Body of ``POST /api/command``."""

    client_id: str
    type: str = Field(..., min_length=1)
    payload: dict[str, str] = Field(default_factory=dict)

    @field_validator("payload", mode="before")
    @classmethod
    def null_payload_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def to_command(self) -> Command:
        return Command(type=self.type, payload=self.payload)
