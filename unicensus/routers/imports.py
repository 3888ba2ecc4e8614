# unicensus/routers/imports.py
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..deps import get_workspace
from ..schemas import BathroomOut, CampusOut, ImportResultOut, PendingWriteOut
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/import", tags=["import"])


@router.post("/census", response_model=ImportResultOut)
async def import_census(
    file: UploadFile = File(...),
    apply: bool = Query(default=False, description="false = preview only"),
    ws: FacilityWorkspace = Depends(get_workspace),
):
    """
    Census CSV columns: site, floor, code, gender, notes (comma or semicolon).
    Sites are matched to existing campuses by case-insensitive name; unknown
    sites become new root campuses.
    """
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="empty upload")

    if not apply:
        plan = ws.preview_import(data)
        return ImportResultOut(
            applied=False,
            new_campuses=[CampusOut.model_validate(c) for c in plan.new_campuses],
            new_bathrooms=[BathroomOut.model_validate(b) for b in plan.new_bathrooms],
            skipped_rows=plan.skipped_rows,
        )

    res = await ws.bulk_import(data)
    return ImportResultOut(
        applied=True,
        new_campuses=[CampusOut.model_validate(c) for c in res.new_campuses],
        new_bathrooms=[BathroomOut.model_validate(b) for b in res.new_bathrooms],
        skipped_rows=res.skipped_rows,
        unsynced=[PendingWriteOut.model_validate(p) for p in res.unsynced],
    )
