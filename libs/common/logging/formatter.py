"""JSON log formatter for structured logging.

Outputs one JSON object per record with a fixed schema so that rotation
invocations can be searched by secret id, version and step in the log
aggregator.

Example log output:
    {
        "timestamp": "2025-10-21T10:30:00.000Z",
        "level": "INFO",
        "service": "secret_rotation",
        "trace_id": "c0ffee00-...",
        "rotation": {"secret_id": "artifact-key", "version": "c0ffee00-...", "step": "setSecret"},
        "message": "secret_distributed",
        "context": {"repository": "acme/app", "key_id": "kid-1"}
    }

Context keys that look sensitive are replaced with "***" before output.
Secret values should never reach a log call in the first place; the
redaction catches mistakes, it is not a substitute.
"""

import json
import logging
import traceback
from datetime import UTC, datetime
from types import TracebackType
from typing import Any

REDACTED = "***"

# Substrings of context keys whose values are always redacted
SENSITIVE_KEY_MARKERS = ("password", "secret_value", "secret_part", "token", "plaintext", "value")

# Attributes present on every LogRecord, never treated as context
_RESERVED_FIELDS = {
    "name",
    "msg",
    "message",
    "asctime",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "trace_id",
    "rotation",
    "context",
    "exc_info",
    "exc_text",
    "stack_info",
}


def is_sensitive_key(key: str) -> bool:
    """Return True when a context key names data that must not be logged."""
    normalized = key.lower().replace("-", "_")
    return any(marker in normalized for marker in SENSITIVE_KEY_MARKERS)


def redact_context(context: dict[str, Any]) -> dict[str, Any]:
    """Recursively replace values under sensitive keys with a placeholder."""
    redacted: dict[str, Any] = {}
    for key, value in context.items():
        if is_sensitive_key(str(key)):
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = redact_context(value)
        else:
            redacted[key] = value
    return redacted


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs logs as JSON.

    Attributes:
        service_name: Name of the service emitting logs
        include_context: Whether to include extra context fields

    Example:
        >>> formatter = JSONFormatter(service_name="secret_rotation")
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
        >>> logger.info("pending_version_created", extra={"context": {"length": 32}})
    """

    def __init__(
        self, service_name: str, include_context: bool = True, *args: Any, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "service": self.service_name,
            "trace_id": getattr(record, "trace_id", None),
        }

        rotation = getattr(record, "rotation", None)
        if rotation:
            log_entry["rotation"] = rotation

        log_entry["message"] = record.getMessage()

        if self.include_context:
            context = self._extract_context(record)
            if context:
                log_entry["context"] = redact_context(context)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self._format_exception(record.exc_info),
            }

        log_entry["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_entry, default=str)

    def _format_timestamp(self, created: float) -> str:
        """Format timestamp as ISO 8601 in UTC with millisecond precision.

        Example:
            >>> JSONFormatter(service_name="test")._format_timestamp(1697884200.0)
            '2023-10-21T10:30:00.000Z'
        """
        dt = datetime.fromtimestamp(created, tz=UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    def _extract_context(self, record: logging.LogRecord) -> dict[str, Any] | None:
        """Extract context from the record.

        An explicit ``context`` dict wins; otherwise every non-standard
        attribute passed through ``extra`` is collected.
        """
        context = getattr(record, "context", None)
        if context and isinstance(context, dict):
            return dict(context)

        extra = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_FIELDS
        }
        return extra if extra else None

    def _format_exception(
        self,
        exc_info: tuple[type[BaseException] | None, BaseException | None, TracebackType | None],
    ) -> str:
        return "".join(traceback.format_exception(*exc_info))
