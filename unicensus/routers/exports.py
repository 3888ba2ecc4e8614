# unicensus/routers/exports.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..deps import get_workspace
from ..domain.reports import CsvReport
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/export", tags=["export"])


def _csv_response(report: CsvReport) -> Response:
    return Response(
        content=report.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


@router.get("/active-work.csv")
def export_active_work(ws: FacilityWorkspace = Depends(get_workspace)):
    return _csv_response(ws.active_work_report())


@router.get("/census.csv")
def export_census(
    campus_id: Optional[str] = Query(default=None, description="limit to a campus and its sub-campuses"),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    return _csv_response(ws.census_report(campus_id))
