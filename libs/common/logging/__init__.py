"""Structured JSON logging for the rotation service.

Usage:
    # At the start of an invocation
    from libs.common.logging import configure_logging, RotationLogContext
    configure_logging(service_name="secret_rotation", log_level="INFO")

    with RotationLogContext(request_token, secret_id=secret_id, step=step):
        logger.info("secret_uploaded", extra={"repository": "acme/app"})
"""

from libs.common.logging.config import RotationContextFilter, configure_logging
from libs.common.logging.context import (
    RotationLogContext,
    generate_trace_id,
    get_rotation_context,
    get_trace_id,
)
from libs.common.logging.formatter import JSONFormatter, redact_context

__all__ = [
    # Configuration
    "configure_logging",
    "RotationContextFilter",
    # Invocation context
    "RotationLogContext",
    "generate_trace_id",
    "get_trace_id",
    "get_rotation_context",
    # Formatter (for advanced usage)
    "JSONFormatter",
    "redact_context",
]
