"""ASGI middleware that logs every request with a request id.

The middleware is framework-agnostic and wraps any ASGI application
(FastAPI, Starlette, or a bare callable).
"""

import fnmatch
import logging
import time
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

from mcmonitor.adapters.logging_context import clear_log_context, set_log_context
from mcmonitor.core.logs import get_logger

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _extract_request_id(scope: Scope, header_name: str = "X-Request-ID") -> str:
    """Extract or generate a request ID from ASGI scope headers.

    Searches for the specified header (case-insensitive). If not found,
    generates a new UUID.

    Args:
        scope: ASGI scope dictionary containing request metadata.
        header_name: Name of the header to search for (default: "X-Request-ID").

    Returns:
        Request ID string (either from header or newly generated UUID).
    """
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return str(value.decode("utf-8", errors="replace"))

    return str(uuid.uuid4())


def _get_log_level_for_status(status_code: int) -> int:
    """Determine log level based on HTTP status code.

    Maps status codes to log levels:
    - 400-499 (4xx) → WARNING
    - 500-599 (5xx) → ERROR
    - Other → INFO

    Args:
        status_code: HTTP status code from response.
    """
    if 400 <= status_code < 500:
        return logging.WARNING
    if 500 <= status_code < 600:
        return logging.ERROR
    return logging.INFO


class RequestLoggingMiddleware:
    """ASGI middleware that logs one line per HTTP request.

    The request id is bound to the logging context for the duration of the
    request, so log records emitted by handlers carry it too, and is echoed
    back in the response headers.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: logging.Logger | None = None,
        exclude_paths: list[str] | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            logger: Logger for access lines (default: ``mcmonitor.access``).
            exclude_paths: Paths not logged. Supports exact matches and
                          wildcard patterns (e.g., "/assets/*").
            request_id_header: Name of the header to extract request ID from
                             (default: "X-Request-ID").
        """
        self.app = app
        self.logger = logger or get_logger("mcmonitor.access")
        self.exclude_paths = exclude_paths or []
        self.request_id_header = request_id_header

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_id = _extract_request_id(scope, self.request_id_header)
        header = (self.request_id_header.lower().encode(), request_id.encode())
        captured: dict[str, Any] = {"status": None, "body_size": 0}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
                message = {
                    **message,
                    "headers": [*message.get("headers", []), header],
                }
            elif message["type"] == "http.response.body":
                captured["body_size"] += len(message.get("body", b""))
            await send(message)

        set_log_context(request_id=request_id)
        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as exc:
            self._log(scope, 500, time.perf_counter() - start_time, captured, exc)
            raise
        else:
            status = captured["status"] or 0
            self._log(scope, status, time.perf_counter() - start_time, captured)
        finally:
            clear_log_context()

    def _log(
        self,
        scope: Scope,
        status: int,
        duration: float,
        captured: dict[str, Any],
        exc: Exception | None = None,
    ) -> None:
        if self._path_excluded(scope["path"]):
            return
        extra: dict[str, Any] = {
            "method": scope["method"],
            "path": scope["path"],
            "status_code": status,
            "response_body_size": captured["body_size"],
            "duration_ms": duration * 1000,
        }
        if exc is not None:
            extra["exception"] = f"{type(exc).__name__}: {exc!s}"
        self.logger.log(
            _get_log_level_for_status(status),
            "%s %s -> %s (%.1f ms)",
            scope["method"],
            scope["path"],
            status,
            duration * 1000,
            extra=extra,
        )
