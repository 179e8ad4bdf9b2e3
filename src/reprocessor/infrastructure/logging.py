"""Structured logging setup with correlation ID support."""

import logging
import sys
import uuid
from contextvars import ContextVar

# Context variable for correlation ID (the batch id while a batch is running)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Client libraries that are chatty at INFO
NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
    "botocore",
    "boto3",
    "urllib3",
]


def get_correlation_id() -> str:
    """
    Get current correlation ID or generate a new one.

    Returns:
        Correlation ID string
    """
    corr_id = correlation_id_var.get()
    if corr_id is None:
        corr_id = str(uuid.uuid4())
        correlation_id_var.set(corr_id)
    return corr_id


def set_correlation_id(corr_id: str) -> None:
    """
    Set correlation ID for current context.

    Args:
        corr_id: Correlation ID string
    """
    correlation_id_var.set(corr_id)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add correlation_id to log record."""
        record.correlation_id = get_correlation_id()  # type: ignore[attr-defined]
        return True


def configure_logging(level: int = logging.INFO, verbose: bool = False) -> None:
    """
    Configure structured logging with correlation ID support.

    Args:
        level: Logging level (default: INFO)
        verbose: If True, show HTTP and AWS client logs at INFO level.
            If False, raise them to WARNING.
    """
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s correlation_id=%(correlation_id)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIDFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    client_level = logging.INFO if verbose else logging.WARNING
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(client_level)
