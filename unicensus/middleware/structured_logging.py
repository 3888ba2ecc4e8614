# unicensus/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .request_id import pending_write_count

log = logging.getLogger("unicensus.request")

OPERATOR_HEADER = "X-User-Name"


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    One "http_request" line per request: method, route template, status,
    latency, operator (X-User-Name, informational only) and the number of
    unsynced store writes after the request. 5xx answers log at WARNING.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        t0 = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.log(
                logging.WARNING if status_code >= 500 else logging.INFO,
                "http_request",
                extra={
                    "method": request.method,
                    "route": _route_template(request),
                    "path": request.url.path,
                    "status_code": status_code,
                    "latency_ms": round((time.perf_counter() - t0) * 1000, 1),
                    "operator": request.headers.get(OPERATOR_HEADER),
                    "pending": pending_write_count(request),
                },
            )
