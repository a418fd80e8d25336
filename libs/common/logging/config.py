"""Logging configuration for the rotation service.

The rotation handler calls configure_logging() at the start of every
invocation. Records are written to stdout as JSON, which the function
runtime forwards to its log stream.

Example:
    >>> from libs.common.logging.config import configure_logging
    >>> logger = configure_logging(service_name="secret_rotation", log_level="INFO")
    >>> logger.info("rotation_started", extra={"context": {"step": "createSecret"}})
"""

import logging
import sys

from libs.common.logging.context import get_rotation_context, get_trace_id
from libs.common.logging.formatter import JSONFormatter


class RotationContextFilter(logging.Filter):
    """Logging filter that stamps trace ID and rotation fields on each record.

    Example:
        >>> from libs.common.logging.context import RotationLogContext
        >>> handler.addFilter(RotationContextFilter())
        >>> with RotationLogContext("v2", secret_id="artifact-key", step="setSecret"):
        ...     logger.info("distributing")  # carries trace_id="v2" and rotation fields
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        record.rotation = get_rotation_context()
        return True


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
) -> logging.Logger:
    """Configure structured JSON logging on the root logger.

    Existing root handlers are replaced, so calling this on every warm
    invocation doesn't duplicate output.

    Args:
        service_name: Name of the service (e.g., "secret_rotation")
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_context: Whether to include context dict in output

    Returns:
        Configured root logger instance

    Raises:
        ValueError: If log_level is invalid
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter(service_name=service_name, include_context=include_context))
    handler.addFilter(RotationContextFilter())
    root_logger.addHandler(handler)

    # botocore logs request parameters at DEBUG, which include SecretString on writes
    logging.getLogger("botocore").setLevel(max(numeric_level, logging.INFO))
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    return root_logger
