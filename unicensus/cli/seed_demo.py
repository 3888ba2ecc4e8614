# unicensus/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..domain.entities import Bathroom, Campus
from ..services.workspace import FacilityWorkspace


@dataclass(frozen=True)
class SeedResult:
    campuses: int
    bathrooms: int
    tickets: int
    skipped: bool


DEMO_CAMPUSES = [
    # name, parent name
    ("Science Hub", None),
    ("Historic Villa", None),
    ("Economics Campus", None),
    ("Villa Annex", "Historic Villa"),
]

DEMO_BATHROOMS = [
    # campus, floor, code, gender, notes
    ("Science Hub", "1", "WC-S101", "Male", "Key at the front desk"),
    ("Science Hub", "1", "WC-S102", "Female", None),
    ("Historic Villa", "G", "WC-V01", "Disabled", "Access via the side ramp"),
    ("Villa Annex", "G", "WC-DEP-01", "AllGender", None),
]


def _find_campus(ws: FacilityWorkspace, name: str) -> Optional[Campus]:
    key = name.strip().lower()
    return next((c for c in ws.campuses if c.name.strip().lower() == key), None)


async def _get_or_create_campus(ws: FacilityWorkspace, name: str, parent: Optional[str]) -> Campus:
    c = _find_campus(ws, name)
    if c is None:
        c = await ws.add_campus(name)
    if parent is not None:
        p = _find_campus(ws, parent)
        if p is not None and c.parent_id != p.id:
            c = await ws.move_campus(c.id, p.id)
    return c


async def seed_demo(ws: FacilityWorkspace) -> SeedResult:
    """
    Load the demo site: four campuses (one nested), four bathrooms, one
    inspection with a failing sink that opens a Maintenance ticket, and one
    in-progress work request with a note. Skips everything if the demo
    campuses already exist.
    """
    if not ws.loaded:
        await ws.load()

    if _find_campus(ws, "Science Hub") is not None:
        return SeedResult(campuses=0, bathrooms=0, tickets=0, skipped=True)

    campuses: dict[str, Campus] = {}
    for name, parent in DEMO_CAMPUSES:
        campuses[name] = await _get_or_create_campus(ws, name, parent)

    baths: dict[str, Bathroom] = {}
    for campus_name, floor, code, gender, notes in DEMO_BATHROOMS:
        baths[code] = await ws.add_bathroom(
            campus_id=campuses[campus_name].id,
            floor=floor,
            code=code,
            gender=gender,
            notes=notes,
        )

    await ws.submit_inspection(
        baths["WC-S101"].id,
        [
            {"item_id": "sink", "status": "Warning", "note": "Left tap drips constantly even when closed"},
            {"item_id": "toilet", "status": "OK"},
            {"item_id": "floor_clean", "status": "OK"},
        ],
    )

    wr = await ws.create_work_request(
        title="Install electric hand dryers",
        description="Replace paper dispensers with air dryers in every ground-floor restroom.",
        campus_id=campuses["Historic Villa"].id,
        priority="Low",
        estimated_cost=1200,
    )
    await ws.set_ticket_status(wr.id, "InProgress")
    await ws.append_note(wr.id, "Requested quotes from suppliers.", "Admin")

    return SeedResult(campuses=len(campuses), bathrooms=len(baths), tickets=2, skipped=False)
