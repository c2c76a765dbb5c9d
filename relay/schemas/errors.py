"""Error kinds shared by exceptions, logs and metrics."""


class ErrorCode:
    """
    Closed set of error kinds produced by the relay.

    Categories:
    - Lookup errors: NOT_FOUND
    - Protocol errors: DECODE_ERROR
    - Transport errors: AGENT_IO_ERROR
    - Anything else: INTERNAL_ERROR
    """

    NOT_FOUND = "not_found"
    DECODE_ERROR = "decode_error"
    AGENT_IO_ERROR = "agent_io_error"
    INTERNAL_ERROR = "internal_error"
