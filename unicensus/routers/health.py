# unicensus/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Request

from .. import __version__
from ..config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health(request: Request):
    ws = getattr(request.app.state, "workspace", None)
    return {
        "ok": True,
        "version": __version__,
        "env": settings.app_env,
        "store_backend": settings.store_backend,
        "loaded": bool(ws and ws.loaded),
        "pending_writes": len(ws.pending) if ws else 0,
    }
