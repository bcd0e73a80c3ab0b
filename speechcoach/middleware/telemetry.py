"""Request timing and Prometheus instrumentation."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.routing import Route

from speechcoach.telemetry import observe_request

UNMATCHED_ROUTE = "<unmatched>"
TIMING_HEADER = "X-Process-Time-Ms"


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Observe every request under its route template and expose its duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            elapsed = time.perf_counter() - started
            observe_request(request.method, route_label(request), status_code, elapsed)

        response.headers[TIMING_HEADER] = f"{elapsed * 1000:.2f}"
        return response


def route_label(request: Request) -> str:
    # `/speeches/{speech_id}/feedback` rather than one series per speech id.
    route = request.scope.get("route")
    if isinstance(route, Route):
        return route.path
    return UNMATCHED_ROUTE


__all__ = ["TelemetryMiddleware", "route_label"]
