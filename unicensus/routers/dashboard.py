# unicensus/routers/dashboard.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_workspace
from ..schemas import DashboardOut
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOut)
def dashboard(
    campus_id: Optional[str] = Query(default=None),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    return DashboardOut.model_validate(ws.dashboard(campus_id))
