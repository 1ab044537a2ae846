"""Custom filters for uvicorn access logging."""

import logging

from screen_relay.settings import app_settings


class ExcludeMetricsFilter(logging.Filter):
    """
    Logging filter to exclude monitoring endpoint requests from access logs.

    Requests to paths like /metrics and /health (LOG_EXCLUDED_PATHS) are
    dropped from uvicorn's access log to keep scraping noise out.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        return not any(
            path in message for path in app_settings.LOG_EXCLUDED_PATHS
        )
