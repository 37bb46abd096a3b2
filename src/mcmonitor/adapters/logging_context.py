"""Request-scoped logging context backed by contextvars."""

from contextvars import ContextVar

_log_context: ContextVar[dict[str, str] | None] = ContextVar(
    "mcmonitor_log_context", default=None
)


def get_log_context() -> dict[str, str]:
    """Return a copy of the fields bound to the current context."""
    return dict(_log_context.get() or {})


def set_log_context(**fields: str) -> None:
    """Replace the current context with ``fields``."""
    _log_context.set(dict(fields))


def clear_log_context() -> None:
    """Drop all fields bound to the current context."""
    _log_context.set(None)
