"""
Request correlation IDs.

Every request gets a short hex ID that is echoed in the ``X-Correlation-ID``
response header, attached to log records and included in error bodies so a
client-side report can be matched to server logs.
"""

import contextvars
import uuid
from collections.abc import Callable
from typing import Any

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


def generate_correlation_id() -> str:
    """Return a new 8-character hexadecimal correlation ID."""
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Correlation ID of the current context, or "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def in_current_context(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Wrap ``fn`` so it runs inside a copy of the caller's context.

    Worker threads started by ``ThreadPoolExecutor`` do not inherit context
    variables, so work submitted from a request would otherwise log without
    the request's correlation ID.

    Args:
        fn: Callable to submit to another thread.

    Returns:
        Callable that runs ``fn`` with the captured context.
    """
    ctx = contextvars.copy_context()

    def runner(*args: Any, **kwargs: Any) -> Any:
        return ctx.run(fn, *args, **kwargs)

    return runner
