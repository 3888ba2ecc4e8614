# unicensus/routers/bathrooms.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_workspace
from ..schemas import AssetStatusOut, BathroomCreate, BathroomOut, BathroomUpdate
from ..services.workspace import FacilityWorkspace

router = APIRouter(prefix="/bathrooms", tags=["bathrooms"])


@router.get("", response_model=list[BathroomOut])
def list_bathrooms(ws: FacilityWorkspace = Depends(get_workspace)):
    return [BathroomOut.model_validate(b) for b in ws.bathrooms]


@router.post("", response_model=BathroomOut)
async def add_bathroom(payload: BathroomCreate, ws: FacilityWorkspace = Depends(get_workspace)):
    b = await ws.add_bathroom(**payload.model_dump())
    return BathroomOut.model_validate(b)


@router.get("/{bathroom_id}", response_model=BathroomOut)
def get_bathroom(bathroom_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return BathroomOut.model_validate(ws.get_bathroom(bathroom_id))


@router.patch("/{bathroom_id}", response_model=BathroomOut)
async def update_bathroom(bathroom_id: str, payload: BathroomUpdate, ws: FacilityWorkspace = Depends(get_workspace)):
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="no fields to update")
    return BathroomOut.model_validate(await ws.update_bathroom(bathroom_id, fields))


@router.delete("/{bathroom_id}")
async def delete_bathroom(bathroom_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    removed = await ws.delete_bathroom(bathroom_id)
    return {"ok": True, "bathroom_id": bathroom_id, "removed_inspection_ids": removed}


@router.get("/{bathroom_id}/status", response_model=AssetStatusOut)
def asset_status(bathroom_id: str, ws: FacilityWorkspace = Depends(get_workspace)):
    return AssetStatusOut.model_validate(ws.asset_status(bathroom_id))
