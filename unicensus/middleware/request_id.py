# unicensus/middleware/request_id.py
from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
PENDING_WRITES_HEADER = "X-Pending-Writes"

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def pending_write_count(request: Request) -> int:
    ws = getattr(request.app.state, "workspace", None)
    return len(ws.pending) if ws is not None else 0


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id (client supplied or uuid4) held in a
    ContextVar, so workspace and store log lines share it. Responses echo
    the id and report how many store writes are still unsynced; clients
    use that count to show a "changes not saved" badge and call
    POST /api/sync/retry.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = rid
        token = request_id_ctx.set(rid)
        try:
            resp = await call_next(request)
        finally:
            request_id_ctx.reset(token)

        resp.headers[REQUEST_ID_HEADER] = rid
        resp.headers[PENDING_WRITES_HEADER] = str(pending_write_count(request))
        return resp
