from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..metrics import REQUEST_COUNT, REQUEST_ERRORS, REQUEST_LATENCY

QUIET_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request as structured JSON and record Prometheus metrics."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self._logger = logging.getLogger("reflect.request")
        if self._logger.level == logging.NOTSET:
            self._logger.setLevel(logging.INFO)

    async def dispatch(  # type: ignore[override]
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:
            fields = _request_fields(request, request_id, 500, start)
            _observe_metrics(request.method, fields["path"], 500, fields["duration_ms"])
            self._logger.error("request error", extra=fields, exc_info=True)
            raise

        status = response.status_code
        fields = _request_fields(request, request_id, status, start)
        _observe_metrics(request.method, fields["path"], status, fields["duration_ms"])
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        self._logger.log(level, "request complete", extra=fields)
        response.headers["X-Request-ID"] = request_id
        return response


def _request_fields(
    request: Request,
    request_id: str,
    status: int,
    start: float,
) -> dict[str, Any]:
    # Route is only resolved once the router has run, so read it after call_next.
    route = request.scope.get("route")
    path = str(route.path) if route is not None and hasattr(route, "path") else request.url.path
    return {
        "request_id": request_id,
        "path": path,
        "method": request.method,
        "status": status,
        "duration_ms": round((time.perf_counter() - start) * 1000, 3),
        "user": getattr(request.state, "telemetry_user", None),
    }


def _observe_metrics(method: str, path: str, status: int, duration_ms: float) -> None:
    status_str = str(status)
    REQUEST_COUNT.labels(method=method, path=path, status=status_str).inc()
    REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
    if status >= 500:
        REQUEST_ERRORS.labels(method=method, path=path, status=status_str).inc()
