# unicensus/routers/calendar.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_workspace
from ..domain.entities import utcnow
from ..schemas import CalendarDayOut, InspectionOut
from ..services.workspace import FacilityWorkspace
from .tickets import ticket_out

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("", response_model=list[CalendarDayOut])
def calendar_month(
    year: Optional[int] = Query(default=None),
    month: Optional[int] = Query(default=None),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    """
    Ticket openings and inspections of one month, grouped by day (current
    month by default). Entries are removed through DELETE /tickets/{id} and
    DELETE /inspections/{id}.
    """
    today = utcnow().date()
    days = ws.calendar(today.year if year is None else year, today.month if month is None else month)
    return [
        CalendarDayOut(
            day=d.day,
            tickets=[ticket_out(ws, t) for t in d.tickets],
            inspections=[InspectionOut.model_validate(i) for i in d.inspections],
        )
        for d in days
    ]
