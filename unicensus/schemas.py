# unicensus/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# -------------------- Campuses --------------------

class CampusCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class CampusRename(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class CampusMove(BaseModel):
    parent_id: Optional[str] = None


class CampusReorder(BaseModel):
    direction: Literal["up", "down"]


class CampusOut(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    order_index: int = 0
    model_config = ConfigDict(from_attributes=True)


class CampusNodeOut(CampusOut):
    depth: int = 0


class DeleteImpactOut(BaseModel):
    campus_id: str
    sub_campuses: int
    bathrooms: int
    inspections: int
    model_config = ConfigDict(from_attributes=True)


class DeleteResultOut(BaseModel):
    removed_campus_ids: list[str]
    removed_bathroom_ids: list[str]
    removed_inspection_ids: list[str]


# -------------------- Bathrooms --------------------

class BathroomCreate(BaseModel):
    campus_id: str
    floor: str
    code: str
    gender: str = "AllGender"
    notes: Optional[str] = None


class BathroomUpdate(BaseModel):
    campus_id: Optional[str] = None
    floor: Optional[str] = None
    code: Optional[str] = None
    gender: Optional[str] = None
    notes: Optional[str] = None


class BathroomOut(BaseModel):
    id: str
    campus_id: str
    floor: str
    code: str
    gender: str
    notes: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class AssetStatusOut(BaseModel):
    bathroom_id: str
    last_inspection_id: Optional[str] = None
    last_inspection_date: Optional[datetime] = None
    has_open_ticket: bool
    model_config = ConfigDict(from_attributes=True)


# -------------------- Inspections --------------------

class ChecklistItemOut(BaseModel):
    id: str
    category: str
    label: str
    is_cleaning: bool = False
    model_config = ConfigDict(from_attributes=True)


class InspectionRecordIn(BaseModel):
    item_id: str
    status: Literal["OK", "Warning", "Critical", "NotApplicable"]
    note: str = ""


class InspectionCreate(BaseModel):
    bathroom_id: str
    records: list[InspectionRecordIn]
    date: Optional[datetime] = None


class InspectionRecordOut(BaseModel):
    item_id: str
    status: str
    note: str = ""
    model_config = ConfigDict(from_attributes=True)


class InspectionOut(BaseModel):
    id: str
    bathroom_id: str
    date: datetime
    records: list[InspectionRecordOut]
    ticket_created: bool
    ticket_id: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class PendingWriteOut(BaseModel):
    id: str
    kind: str
    action: str
    entity_id: Optional[str] = None
    error: str
    at: datetime
    attempts: int = 1
    model_config = ConfigDict(from_attributes=True)


# -------------------- Tickets --------------------

class TicketNoteOut(BaseModel):
    id: str
    date: datetime
    text: str
    author: str
    model_config = ConfigDict(from_attributes=True)


class TicketOut(BaseModel):
    id: str
    type: str
    inspection_id: Optional[str] = None
    campus_id: Optional[str] = None
    bathroom_id: Optional[str] = None

    # display strings resolved through the ids at read time
    campus_name: str
    bathroom_code: Optional[str] = None
    asset_removed: bool = False

    title: str
    description: str
    priority: str
    status: str
    estimated_cost: Optional[float] = None
    created_at: datetime
    notes: list[TicketNoteOut] = Field(default_factory=list)
    model_config = ConfigDict(from_attributes=True)


class InspectionOutcomeOut(BaseModel):
    inspection: InspectionOut
    ticket: Optional[TicketOut] = None
    draft_source: Optional[str] = None
    unsynced: list[PendingWriteOut] = Field(default_factory=list)


class WorkRequestCreate(BaseModel):
    title: str
    description: str
    campus_name: Optional[str] = None
    campus_id: Optional[str] = None
    bathroom_id: Optional[str] = None
    bathroom_code: Optional[str] = None
    priority: Literal["Low", "Medium", "High"] = "Medium"
    estimated_cost: Optional[float] = Field(default=None, ge=0)


class NoteCreate(BaseModel):
    text: str
    author: Optional[str] = None


class StatusUpdate(BaseModel):
    status: Literal["Open", "InProgress", "Closed"]


class TicketUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Literal["Low", "Medium", "High"]] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)


# -------------------- Imports / Reports / Calendar / Sync --------------------

class ImportResultOut(BaseModel):
    applied: bool
    new_campuses: list[CampusOut]
    new_bathrooms: list[BathroomOut]
    skipped_rows: int
    unsynced: list[PendingWriteOut] = Field(default_factory=list)


class CampusLoadOut(BaseModel):
    campus_id: str
    name: str
    bathrooms: int
    open_issues: int
    model_config = ConfigDict(from_attributes=True)


class DashboardOut(BaseModel):
    campuses: int
    bathrooms: int
    gender_counts: dict[str, int]
    active_tickets: int
    maintenance_active: int
    work_requests_active: int
    critical_active: int
    closed_tickets: int
    status_counts: dict[str, int]
    performance_score: int
    performance_good: bool
    top_campuses: list[CampusLoadOut]
    model_config = ConfigDict(from_attributes=True)


class RetryOut(BaseModel):
    synced: int
    pending: list[PendingWriteOut]


class CalendarDayOut(BaseModel):
    day: date
    tickets: list[TicketOut] = Field(default_factory=list)
    inspections: list[InspectionOut] = Field(default_factory=list)
