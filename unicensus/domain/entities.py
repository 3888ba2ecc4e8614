# unicensus/domain/entities.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional

# -----------------------------------------------------------------------------
# Plain domain records.
#
# Everything here is immutable; the hierarchy and lifecycle modules return new
# records (dataclasses.replace) instead of mutating in place. Timestamps are
# naive UTC so they compare cleanly with values read back from SQLite.
# -----------------------------------------------------------------------------

GenderType = Literal["Male", "Female", "Disabled", "AllGender"]
InspectionStatus = Literal["OK", "Warning", "Critical", "NotApplicable"]
Priority = Literal["Low", "Medium", "High"]
TicketStatus = Literal["Open", "InProgress", "Closed"]
TicketType = Literal["Maintenance", "WorkRequest"]

GENDERS: tuple[str, ...] = ("Male", "Female", "Disabled", "AllGender")
INSPECTION_STATUSES: tuple[str, ...] = ("OK", "Warning", "Critical", "NotApplicable")
FAILING_STATUSES = frozenset({"Warning", "Critical"})
PRIORITIES: tuple[str, ...] = ("Low", "Medium", "High")
TICKET_STATUSES: tuple[str, ...] = ("Open", "InProgress", "Closed")
TICKET_TYPES: tuple[str, ...] = ("Maintenance", "WorkRequest")


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Campus:
    id: str
    name: str
    parent_id: Optional[str] = None
    order_index: int = 0


@dataclass(frozen=True)
class Bathroom:
    id: str
    campus_id: str
    floor: str
    code: str
    gender: str = "AllGender"
    notes: Optional[str] = None


@dataclass(frozen=True)
class InspectionRecord:
    item_id: str
    status: str
    note: str = ""

    @property
    def failing(self) -> bool:
        return self.status in FAILING_STATUSES


@dataclass(frozen=True)
class Inspection:
    id: str
    bathroom_id: str
    date: datetime
    records: tuple[InspectionRecord, ...] = ()
    ticket_created: bool = False
    ticket_id: Optional[str] = None


@dataclass(frozen=True)
class TicketNote:
    id: str
    date: datetime
    text: str
    author: str


@dataclass(frozen=True)
class Ticket:
    id: str
    type: str
    campus_name: str
    title: str
    description: str
    created_at: datetime
    priority: str = "Medium"
    status: str = "Open"
    inspection_id: Optional[str] = None
    bathroom_code: Optional[str] = None
    campus_id: Optional[str] = None
    bathroom_id: Optional[str] = None
    estimated_cost: Optional[float] = None
    notes: tuple[TicketNote, ...] = field(default_factory=tuple)

    @property
    def is_closed(self) -> bool:
        return self.status == "Closed"
