"""Newline-delimited JSON wire format for agent sockets."""

import json

from pydantic import ValidationError

from relay.constants import MESSAGE_DELIMITER, MESSAGE_ENCODING
from relay.exceptions import DecodeError
from relay.schemas.command import Command
from relay.schemas.response import AgentResponse, response_model_for


class NDJSONFormat:
    """
    Newline-delimited JSON (one compact JSON document per line).

    Compact JSON never contains a raw newline (newlines inside strings are
    escaped), so the delimiter can't appear inside a message. Partial and
    coalesced TCP reads are resolved by the reader splitting on the
    delimiter, never by treating one ``recv`` as one message.
    """

    @property
    def format_name(self) -> str:
        """Format identifier for logging."""
        return "ndjson"

    def encode_command(self, command: Command) -> bytes:
        """
        Serialize a command as one framed line.

        Args:
            command: Command to send.

        Returns:
            UTF-8 JSON followed by the message delimiter.
        """
        return command.model_dump_json().encode(MESSAGE_ENCODING) + MESSAGE_DELIMITER

    def decode_response(self, frame: bytes) -> AgentResponse:
        """
        Parse one line from an agent into a typed response.

        Args:
            frame: A single line, with or without its trailing delimiter.

        Returns:
            The response model selected by the ``status`` tag.

        Raises:
            DecodeError: If the line is not UTF-8 JSON, is not an object, or
                does not match the response envelope.
        """
        try:
            raw = json.loads(frame.decode(MESSAGE_ENCODING))
        except (UnicodeDecodeError, json.JSONDecodeError) as ex:
            raise DecodeError(f"Invalid JSON: {ex}") from ex

        if not isinstance(raw, dict):
            raise DecodeError(
                f"Expected a JSON object, got {type(raw).__name__}"
            )

        status = raw.get("status")
        model = response_model_for(status if isinstance(status, str) else "")

        try:
            return model.model_validate(raw)
        except ValidationError as ex:
            raise DecodeError(
                f"Invalid {model.__name__}: {ex.error_count()} validation error(s)"
            ) from ex
