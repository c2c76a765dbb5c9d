"""
Protocol for agent wire formats.

Defines the interface between the connection handler / dispatcher and the
bytes on an agent socket, using structural subtyping (Protocol).
"""

from typing import Protocol

from relay.schemas.command import Command
from relay.schemas.response import AgentResponse


class WireFormat(Protocol):
    """
    Protocol for agent message framing and encoding.

    Example:
        ```python
        from relay.api.agent.formats import NDJSONFormat


        wire = NDJSONFormat()
        writer.write(wire.encode_command(command))
        response = wire.decode_response(await reader.readuntil(b"\n"))
        ```
    """

    def encode_command(self, command: Command) -> bytes:
        """
        Convert a Command into one complete framed message.

        The result must be written with a single write call so that
        concurrent dispatches never interleave.
        """
        ...

    def decode_response(self, frame: bytes) -> AgentResponse:
        """
        Convert one framed message into a typed response.

        Raises:
            DecodeError: If the frame is not a valid agent response.
        """
        ...

    @property
    def format_name(self) -> str:
        """Human-readable format name for logging (e.g., 'ndjson')."""
        ...
