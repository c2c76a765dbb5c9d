"""
Middleware for injecting contextual fields into structured logs.

Adds the endpoint and method of the current control-surface request to
the log context so dispatch and lookup logs can be traced to a route.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from relay.logging import clear_log_context, set_log_context


class LoggingContextMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
    """
    Middleware to inject contextual fields into structured logs.

    This middleware:
    - Adds endpoint and method to log context
    - Adds client_id when the route targets a single agent
    - Clears log context after request completes
    """

    async def dispatch(self, request: Request, call_next: ASGIApp) -> Response:
        set_log_context(
            endpoint=request.url.path,
            method=request.method,
        )

        client_id = request.query_params.get("client_id")
        if client_id:
            set_log_context(target_client_id=client_id)

        try:
            response = await call_next(request)
            set_log_context(status_code=response.status_code)
        finally:
            clear_log_context()

        return response
