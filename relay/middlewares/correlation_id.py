"""
Middleware for request correlation ID tracking.

Every control-surface request gets a short correlation ID so that an
operator's HTTP call and the log lines it causes (including the dispatch
to an agent) can be matched up.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_LENGTH = 8

# Context variable for storing correlation ID per request
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation IDs to requests.

    This middleware:
    - Takes the ID from the X-Correlation-ID header or generates one
    - Truncates it to 8 characters
    - Stores it in request.state.request_id and in a context variable
    - Echoes it back in the response headers
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get(
            CORRELATION_ID_HEADER, str(uuid.uuid4())
        )[:CORRELATION_ID_LENGTH]

        request.state.request_id = cid
        token = correlation_id.set(cid)

        try:
            response = await call_next(request)
        finally:
            correlation_id.reset(token)

        response.headers[CORRELATION_ID_HEADER] = cid

        return response


def get_correlation_id() -> str:
    """
    Get the correlation ID for the current request context.

    Returns:
        The correlation ID string, or empty string outside a request
        (for example inside an agent read loop).
    """
    return correlation_id.get()
