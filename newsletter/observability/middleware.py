from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from newsletter.observability.metrics import get_metrics

# Probe and scrape traffic: not counted, logged at debug.
_QUIET_PATHS = frozenset({"/api/health", "/api/metrics"})


def access_log_level(status_code: int, quiet: bool) -> str:
    # 501 is the expected answer of the unimplemented update/delete routes.
    if status_code >= 500 and status_code != 501:
        return "error"
    return "debug" if quiet else "info"


class RequestContextMiddleware:
    """Tags each request with an id, logs it once, and counts it."""

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app
        self._logger = structlog.get_logger("access")

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path")
        client = scope.get("client")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=scope.get("method"),
            client=client[0] if client else None,
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                MutableHeaders(scope=message)["X-Request-ID"] = request_id

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (perf_counter() - start) * 1000.0
            quiet = path in _QUIET_PATHS

            if not quiet:
                get_metrics().observe_http_request(elapsed_ms=elapsed_ms)

            log = getattr(self._logger, access_log_level(status_code, quiet))
            log("http_request", status_code=status_code, elapsed_ms=round(elapsed_ms, 2))

            structlog.contextvars.clear_contextvars()
