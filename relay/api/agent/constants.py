from enum import Enum


class ResponseStatus(str, Enum):
    """
    Status tags an agent puts on the messages it sends to the server.

    Any other tag is accepted on the wire and handled as an unknown response.

    Attributes:
        SYSTEM_INFO: Host metadata to merge into the client's Info map
        COMMAND_RESULT: Free-text outcome of a previously sent command
        STREAM_DATA: A chunk of media for the streaming sink

    Example:
        >>> str(ResponseStatus.SYSTEM_INFO)
        'ResponseStatus.SYSTEM_INFO<system_info>'
    """

    SYSTEM_INFO = "system_info"
    COMMAND_RESULT = "command_result"
    STREAM_DATA = "stream_data"

    def __str__(self):
        """
        Returns a string representation of the enum member in the format example "ResponseStatus.SYSTEM_INFO<system_info>".
        """
        return f"{__class__.__name__}.{self.name}<{self.value}>"


class CommandType(str, Enum):
    """
    Command types the server itself issues to agents.

    Operators may send any other type through the control surface; these
    are the ones with server-side meaning.

    Attributes:
        GET_SYSTEM_INFO: Bootstrap request sent right after accept
        START_STREAM: Ask the agent to begin streaming
        STOP_STREAM: Ask the agent to stop streaming
    """

    GET_SYSTEM_INFO = "get_system_info"
    START_STREAM = "start_stream"
    STOP_STREAM = "stop_stream"

    def __str__(self):
        """
        Returns a string representation of the enum member in the format example "CommandType.START_STREAM<start_stream>".
        """
        return f"{__class__.__name__}.{self.name}<{self.value}>"
