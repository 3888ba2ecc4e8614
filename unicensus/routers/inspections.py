# unicensus/routers/inspections.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_workspace
from ..domain.checklist import checklist_for
from ..schemas import ChecklistItemOut, InspectionCreate, InspectionOut, InspectionOutcomeOut, PendingWriteOut
from ..services.workspace import FacilityWorkspace
from .tickets import ticket_out

router = APIRouter(prefix="/inspections", tags=["inspections"])


@router.get("/checklist", response_model=list[ChecklistItemOut])
def checklist(
    bathroom_id: Optional[str] = Query(default=None),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    """Checklist for a bathroom; without bathroom_id the non-accessibility items only."""
    b = ws.get_bathroom(bathroom_id) if bathroom_id else None
    return [ChecklistItemOut.model_validate(i) for i in checklist_for(b)]


@router.get("", response_model=list[InspectionOut])
def list_inspections(
    bathroom_id: str = Query(...),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    return [InspectionOut.model_validate(i) for i in ws.inspections_for(bathroom_id)]


@router.post("", response_model=InspectionOutcomeOut)
async def submit_inspection(payload: InspectionCreate, ws: FacilityWorkspace = Depends(get_workspace)):
    out = await ws.submit_inspection(
        payload.bathroom_id,
        [r.model_dump() for r in payload.records],
        date=payload.date,
    )
    return InspectionOutcomeOut(
        inspection=InspectionOut.model_validate(out.inspection),
        ticket=ticket_out(ws, out.ticket) if out.ticket else None,
        draft_source=out.draft_source,
        unsynced=[PendingWriteOut.model_validate(p) for p in out.unsynced],
    )


@router.delete("/{inspection_id}")
async def delete_inspection(inspection_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    await ws.delete_inspection(inspection_id)
    return {"ok": True, "inspection_id": inspection_id}
