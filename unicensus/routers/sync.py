# unicensus/routers/sync.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_workspace
from ..schemas import PendingWriteOut, RetryOut
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/pending", response_model=list[PendingWriteOut])
def pending_writes(ws: FacilityWorkspace = Depends(get_workspace)):
    """Store writes that failed after their change was applied in memory."""
    return [PendingWriteOut.model_validate(p) for p in ws.pending]


@router.post("/retry", response_model=RetryOut)
async def retry_pending(ws: FacilityWorkspace = Depends(get_workspace)):
    report = await ws.retry_pending()
    return RetryOut(synced=report.synced, pending=[PendingWriteOut.model_validate(p) for p in report.pending])
