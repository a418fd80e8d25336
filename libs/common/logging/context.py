"""Per-invocation log context for rotation requests.

Every rotation invocation is correlated by its request token (the version id
being rotated), which doubles as the trace ID. The secret id and step name
are bound alongside it so that each log record emitted while handling the
request can be attributed without passing them through every call.

Example:
    >>> from libs.common.logging.context import RotationLogContext, get_rotation_context
    >>> with RotationLogContext("v2", secret_id="artifact-key", step="createSecret"):
    ...     get_rotation_context()
    {'secret_id': 'artifact-key', 'version': 'v2', 'step': 'createSecret'}
"""

import contextvars
import uuid
from types import TracebackType

_trace_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)
_rotation_var: contextvars.ContextVar[dict[str, str] | None] = contextvars.ContextVar(
    "rotation_context", default=None
)


def generate_trace_id() -> str:
    """Generate a new unique trace ID (UUID v4).

    Used when an invocation arrives without a request token, so that its
    records can still be grouped.
    """
    return str(uuid.uuid4())


def get_trace_id() -> str | None:
    """Get the current trace ID from context, or None if unset."""
    return _trace_id_var.get()


def get_rotation_context() -> dict[str, str] | None:
    """Return a copy of the bound rotation fields, or None outside an invocation."""
    context = _rotation_var.get()
    return dict(context) if context else None


class RotationLogContext:
    """Context manager binding one rotation request to all log records.

    Sets the trace ID to the request token and records secret id, version
    and step. Previous values are restored on exit so nested or sequential
    invocations in the same process (tests, warm containers) don't leak
    context into each other.

    Args:
        request_token: Version id of the rotation; generated if empty
        secret_id: Secret being rotated
        step: Rotation step name
    """

    def __init__(
        self,
        request_token: str | None,
        secret_id: str | None = None,
        step: str | None = None,
    ) -> None:
        self.trace_id = request_token or generate_trace_id()
        self.fields: dict[str, str] = {"version": self.trace_id}
        if secret_id:
            self.fields["secret_id"] = secret_id
        if step:
            self.fields["step"] = step
        self._trace_token: contextvars.Token[str | None] | None = None
        self._rotation_token: contextvars.Token[dict[str, str] | None] | None = None

    def __enter__(self) -> str:
        self._trace_token = _trace_id_var.set(self.trace_id)
        self._rotation_token = _rotation_var.set(
            {
                key: self.fields[key]
                for key in ("secret_id", "version", "step")
                if key in self.fields
            }
        )
        return self.trace_id

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._rotation_token is not None:
            _rotation_var.reset(self._rotation_token)
        if self._trace_token is not None:
            _trace_id_var.reset(self._trace_token)
