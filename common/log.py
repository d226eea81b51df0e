"""Shared logging utilities for FastAPI applications."""

import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class HealthCheckFilter(logging.Filter):
    """Filter out health check requests from uvicorn access logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False to suppress health check log entries."""
        return '/health' not in record.getMessage()


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging and suppress health checks in uvicorn access logs.

    Safe to call more than once: basicConfig is a no-op once the root logger has
    handlers, and the access filter is only installed once. The root level is
    only changed when ``level`` is given.
    """
    logging.basicConfig(level=level or logging.INFO, format=LOG_FORMAT)
    if level is not None:
        logging.getLogger().setLevel(level)
    access_logger = logging.getLogger('uvicorn.access')
    if not any(isinstance(f, HealthCheckFilter) for f in access_logger.filters):
        access_logger.addFilter(HealthCheckFilter())
