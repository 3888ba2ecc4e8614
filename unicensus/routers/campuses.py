# unicensus/routers/campuses.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_workspace
from ..domain import hierarchy
from ..schemas import (
    BathroomOut,
    CampusCreate,
    CampusMove,
    CampusNodeOut,
    CampusOut,
    CampusRename,
    CampusReorder,
    DeleteImpactOut,
    DeleteResultOut,
)
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/campuses", tags=["campuses"])


@router.get("", response_model=list[CampusOut])
def list_campuses(ws: FacilityWorkspace = Depends(get_workspace)):
    return [CampusOut.model_validate(c) for c in ws.campuses]


@router.get("/tree", response_model=list[CampusNodeOut])
def campus_tree(ws: FacilityWorkspace = Depends(get_workspace)):
    """Depth-first outline of the whole forest; depth 0 are roots."""
    return [
        CampusNodeOut(id=c.id, name=c.name, parent_id=c.parent_id, order_index=c.order_index, depth=depth)
        for c, depth in ws.campus_forest()
    ]


@router.post("", response_model=CampusOut)
async def add_campus(payload: CampusCreate, ws: FacilityWorkspace = Depends(get_workspace)):
    return CampusOut.model_validate(await ws.add_campus(payload.name))


@router.get("/{campus_id}", response_model=CampusOut)
def get_campus(campus_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return CampusOut.model_validate(ws.get_campus(campus_id))


@router.get("/{campus_id}/path", response_model=list[CampusOut])
def campus_path(campus_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    ws.get_campus(campus_id)
    return [CampusOut.model_validate(c) for c in hierarchy.path(ws.campuses, campus_id)]


@router.get("/{campus_id}/children", response_model=list[CampusOut])
def campus_children(campus_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    ws.get_campus(campus_id)
    return [CampusOut.model_validate(c) for c in hierarchy.children(ws.campuses, campus_id)]


@router.get("/{campus_id}/bathrooms", response_model=list[BathroomOut])
def campus_bathrooms(campus_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return [BathroomOut.model_validate(b) for b in ws.bathrooms_for_campus(campus_id)]


@router.patch("/{campus_id}", response_model=CampusOut)
async def rename_campus(campus_id: str, payload: CampusRename, ws: FacilityWorkspace = Depends(get_workspace)):
    return CampusOut.model_validate(await ws.rename_campus(campus_id, payload.name))


@router.post("/{campus_id}/move", response_model=CampusOut)
async def move_campus(campus_id: str, payload: CampusMove, ws: FacilityWorkspace = Depends(get_workspace)):
    return CampusOut.model_validate(await ws.move_campus(campus_id, payload.parent_id))


@router.post("/{campus_id}/reorder", response_model=list[CampusOut])
async def reorder_campus(campus_id: str, payload: CampusReorder, ws: FacilityWorkspace = Depends(get_workspace)):
    return [CampusOut.model_validate(c) for c in await ws.reorder_campus(campus_id, payload.direction)]


@router.get("/{campus_id}/delete-impact", response_model=DeleteImpactOut)
def delete_impact(campus_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return DeleteImpactOut.model_validate(ws.campus_delete_impact(campus_id))


@router.delete("/{campus_id}", response_model=DeleteResultOut)
async def delete_campus(campus_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    plan = await ws.delete_campus(campus_id)
    return DeleteResultOut(
        removed_campus_ids=sorted(plan.removed_campus_ids),
        removed_bathroom_ids=sorted(plan.removed_bathroom_ids),
        removed_inspection_ids=sorted(plan.removed_inspection_ids),
    )
