# unicensus/deps.py
from __future__ import annotations

from fastapi import HTTPException, Request

from .services.workspace import FacilityWorkspace


def get_workspace(request: Request) -> FacilityWorkspace:
    ws = getattr(request.app.state, "workspace", None)
    if ws is None or not ws.loaded:
        raise HTTPException(status_code=503, detail="workspace not loaded")
    return ws
