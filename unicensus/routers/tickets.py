# unicensus/routers/tickets.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_workspace
from ..domain.entities import Ticket
from ..schemas import NoteCreate, StatusUpdate, TicketNoteOut, TicketOut, TicketUpdate, WorkRequestCreate
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/tickets", tags=["tickets"])


def ticket_out(ws: FacilityWorkspace, t: Ticket) -> TicketOut:
    loc = ws.ticket_location(t)
    return TicketOut(
        id=t.id,
        type=t.type,
        inspection_id=t.inspection_id,
        campus_id=t.campus_id,
        bathroom_id=t.bathroom_id,
        campus_name=loc.campus_name,
        bathroom_code=loc.bathroom_code,
        asset_removed=loc.asset_removed,
        title=t.title,
        description=t.description,
        priority=t.priority,
        status=t.status,
        estimated_cost=t.estimated_cost,
        created_at=t.created_at,
        notes=[TicketNoteOut.model_validate(n) for n in t.notes],
    )


@router.get("/active", response_model=list[TicketOut])
def active_work(ws: FacilityWorkspace = Depends(get_workspace)):
    """Everything not Closed, newest first."""
    return [ticket_out(ws, t) for t in ws.active_work()]


@router.get("/archive", response_model=list[TicketOut])
def archive(ws: FacilityWorkspace = Depends(get_workspace)):
    return [ticket_out(ws, t) for t in ws.archive()]


@router.get("/maintenance", response_model=list[TicketOut])
def maintenance_queue(
    campus_name: Optional[str] = Query(default=None),
    priority: Optional[str] = Query(default=None, description="Low|Medium|High"),
    gender: Optional[str] = Query(default=None, description="Male|Female|Disabled|AllGender"),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    tickets = ws.maintenance(campus_name=campus_name, priority=priority, gender=gender)
    return [ticket_out(ws, t) for t in tickets]


@router.get("/work-requests", response_model=list[TicketOut])
def work_requests(ws: FacilityWorkspace = Depends(get_workspace)):
    return [ticket_out(ws, t) for t in ws.work_requests()]


@router.post("/work-requests", response_model=TicketOut)
async def create_work_request(payload: WorkRequestCreate, ws: FacilityWorkspace = Depends(get_workspace)):
    t = await ws.create_work_request(**payload.model_dump())
    return ticket_out(ws, t)


@router.get("/{ticket_id}", response_model=TicketOut)
def get_ticket(ticket_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return ticket_out(ws, ws.get_ticket(ticket_id))


@router.patch("/{ticket_id}", response_model=TicketOut)
async def update_ticket(ticket_id: str, payload: TicketUpdate, ws: FacilityWorkspace = Depends(get_workspace)):
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="no fields to update")
    return ticket_out(ws, await ws.update_ticket(ticket_id, fields))


@router.post("/{ticket_id}/notes", response_model=TicketOut)
async def append_note(ticket_id: str, payload: NoteCreate, ws: FacilityWorkspace = Depends(get_workspace)):
    return ticket_out(ws, await ws.append_note(ticket_id, payload.text, payload.author))


@router.post("/{ticket_id}/status", response_model=TicketOut)
async def set_status(ticket_id: str, payload: StatusUpdate, ws: FacilityWorkspace = Depends(get_workspace)):
    return ticket_out(ws, await ws.set_ticket_status(ticket_id, payload.status))


@router.post("/{ticket_id}/close", response_model=TicketOut)
async def close_ticket(ticket_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return ticket_out(ws, await ws.close_ticket(ticket_id))


@router.delete("/{ticket_id}")
async def delete_ticket(ticket_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    await ws.delete_ticket(ticket_id)
    return {"ok": True, "ticket_id": ticket_id}
