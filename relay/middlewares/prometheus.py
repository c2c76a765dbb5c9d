"""
Prometheus metrics middleware for HTTP requests.

This middleware tracks control-surface request counts, durations and
in-progress requests.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from relay.utils.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)


def _endpoint_label(request: Request) -> str:
    """
    Route template of the request (e.g. ``/api/client/{client_id}``).

    Client IDs are unbounded, so raw paths would explode label cardinality.
    """
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track Prometheus metrics for HTTP requests.

    Tracks the following metrics:
    - http_requests_total: Counter of total requests by method, endpoint, and status
    - http_request_duration_seconds: Histogram of request durations
    - http_requests_in_progress: Gauge of in-progress requests
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: ASGIApp) -> Response:
        """
        Process the request and track metrics.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            HTTP response from the endpoint.
        """
        method = request.method
        endpoint = _endpoint_label(request)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            http_request_duration_seconds.labels(
                method=method, endpoint=endpoint
            ).observe(time.perf_counter() - start_time)
            http_requests_total.labels(
                method=method, endpoint=endpoint, status_code=status_code
            ).inc()
            http_requests_in_progress.labels(
                method=method, endpoint=endpoint
            ).dec()
