"""Custom filters for uvicorn access logging."""

import logging

from relay.settings import app_settings


class ExcludeMetricsFilter(logging.Filter):
    """
    Drop access-log lines for monitoring endpoints.

    Health checks and Prometheus scrapes would otherwise drown out the
    control-surface requests. Paths come from ``LOG_EXCLUDED_PATHS``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(
            path in message for path in app_settings.LOG_EXCLUDED_PATHS
        )
