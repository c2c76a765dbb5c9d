from relay.api.agent.formats.json import NDJSONFormat
from relay.api.agent.formats.protocol import WireFormat

__all__ = ["NDJSONFormat", "WireFormat"]
