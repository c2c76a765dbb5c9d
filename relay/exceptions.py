"""
Custom exception classes for the application.

Every error the relay core can surface belongs to one closed set of kinds
(see ``relay.schemas.errors.ErrorCode``). Each exception carries the HTTP
status the control surface answers with, so route handlers never map
error text to status codes themselves.
"""

from relay.schemas.errors import ErrorCode


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        message: Human-readable error message.
        code: Machine-readable error kind (an ``ErrorCode`` value).
        http_status: HTTP status code for control-surface responses.
    """

    code: str = ErrorCode.INTERNAL_ERROR
    http_status: int = 500

    def __init__(self, message: str):
        """
        Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class NotFoundError(AppException):
    """
    Client not found.

    Raised when an operation references a client ID that is not in the
    registry. Never retried.

    HTTP Status: 404 Not Found
    """

    code = ErrorCode.NOT_FOUND
    http_status = 404

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client {client_id} not found")


class DecodeError(AppException):
    """
    Malformed inbound agent message.

    Raised by the wire format when a line is not a valid response. The read
    loop logs and drops the message; the connection stays open.

    HTTP Status: 400 Bad Request
    """

    code = ErrorCode.DECODE_ERROR
    http_status = 400


class AgentIOError(AppException):
    """
    Socket write to an agent failed or timed out.

    Surfaced to the dispatch caller. Read-side failures never raise this;
    they end the read loop instead.

    HTTP Status: 500 Internal Server Error
    """

    code = ErrorCode.AGENT_IO_ERROR
    http_status = 500

    def __init__(self, client_id: str, reason: str):
        self.client_id = client_id
        self.reason = reason
        super().__init__(f"Failed to send command to {client_id}: {reason}")
