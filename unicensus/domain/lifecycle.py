# unicensus/domain/lifecycle.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, TypeVar

from .entities import (
    INSPECTION_STATUSES,
    PRIORITIES,
    TICKET_STATUSES,
    Bathroom,
    Campus,
    Inspection,
    InspectionRecord,
    Ticket,
    TicketNote,
    new_id,
    utcnow,
)
from .errors import NotFoundError, ValidationError
from .checklist import ITEM_IDS

T = TypeVar("T")

TICKET_EDITABLE_FIELDS = ("title", "description", "priority", "estimated_cost")


# -----------------------------------------------------------------------------
# Inspections
# -----------------------------------------------------------------------------


def build_records(raw: Iterable[Any]) -> tuple[InspectionRecord, ...]:
    """
    Accepts InspectionRecord instances or mappings with item_id/status/note.
    Unknown items, unknown statuses and duplicate item ids are rejected.
    """
    out: list[InspectionRecord] = []
    seen: set[str] = set()
    for r in raw:
        if isinstance(r, InspectionRecord):
            item_id, status, note = r.item_id, r.status, r.note
        else:
            item_id = str(r.get("item_id") or "").strip()
            status = str(r.get("status") or "").strip()
            note = str(r.get("note") or "")

        if item_id not in ITEM_IDS:
            raise ValidationError(f"unknown checklist item: {item_id!r}")
        if status not in INSPECTION_STATUSES:
            raise ValidationError(f"status must be one of {', '.join(INSPECTION_STATUSES)}; got {status!r}")
        if item_id in seen:
            raise ValidationError(f"duplicate checklist item: {item_id}")
        seen.add(item_id)
        out.append(InspectionRecord(item_id=item_id, status=status, note=note.strip()))
    return tuple(out)


def build_inspection(
    bathroom_id: str,
    records: Iterable[Any],
    *,
    date: Optional[datetime] = None,
) -> Inspection:
    if date is not None and date.tzinfo is not None:
        # stored dates are naive UTC
        date = date.astimezone(timezone.utc).replace(tzinfo=None)
    return Inspection(
        id=new_id(),
        bathroom_id=bathroom_id,
        date=date or utcnow(),
        records=build_records(records),
        ticket_created=False,
        ticket_id=None,
    )


def failing_records(inspection: Inspection) -> list[InspectionRecord]:
    return [r for r in inspection.records if r.failing]


def needs_ticket(inspection: Inspection) -> bool:
    return any(r.failing for r in inspection.records)


def link_ticket(inspection: Inspection, ticket_id: str) -> Inspection:
    """The ticket linkage is written once; a second link is a caller bug."""
    if inspection.ticket_created or inspection.ticket_id:
        raise ValidationError(f"inspection {inspection.id} is already linked to ticket {inspection.ticket_id}")
    return replace(inspection, ticket_created=True, ticket_id=ticket_id)


# -----------------------------------------------------------------------------
# Draft tickets
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class TicketDraft:
    title: str
    description: str
    priority: str = "Medium"


def fallback_draft(bathroom_code: str, failing_count: int) -> TicketDraft:
    """Deterministic draft used whenever the generator is missing or fails."""
    return TicketDraft(
        title=f"Maintenance needed: {bathroom_code}",
        description=(
            f"{failing_count} issue(s) found during inspection. "
            "Check the full inspection report for details."
        ),
        priority="Medium",
    )


def normalize_draft(
    title: Any,
    description: Any,
    priority: Any,
    *,
    bathroom_code: str,
    failing_count: int,
) -> TicketDraft:
    """Fill blank generator fields from the fallback and coerce the priority into Low/Medium/High."""
    fb = fallback_draft(bathroom_code, failing_count)
    t = str(title or "").strip() or fb.title
    d = str(description or "").strip() or fb.description
    p = str(priority or "").strip().capitalize()
    if p not in PRIORITIES:
        p = fb.priority
    return TicketDraft(title=t, description=d, priority=p)


# -----------------------------------------------------------------------------
# Tickets
# -----------------------------------------------------------------------------


def _required(value: Optional[str], field_name: str) -> str:
    s = (value or "").strip()
    if not s:
        raise ValidationError(f"ticket {field_name} must not be blank")
    return s


def _priority(value: Optional[str]) -> str:
    p = (value or "Medium").strip()
    if p not in PRIORITIES:
        raise ValidationError(f"priority must be one of {', '.join(PRIORITIES)}; got {value!r}")
    return p


def _cost(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        cost = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"estimated_cost must be a number; got {value!r}")
    if cost < 0:
        raise ValidationError("estimated_cost must not be negative")
    return cost


def get_ticket(tickets: Iterable[Ticket], ticket_id: Optional[str]) -> Optional[Ticket]:
    for t in tickets:
        if t.id == ticket_id:
            return t
    return None


def must_get_ticket(tickets: Iterable[Ticket], ticket_id: Optional[str]) -> Ticket:
    t = get_ticket(tickets, ticket_id)
    if t is None:
        raise NotFoundError("ticket", ticket_id)
    return t


def build_maintenance_ticket(
    inspection: Inspection,
    draft: TicketDraft,
    *,
    bathroom: Bathroom,
    campus: Optional[Campus],
) -> Ticket:
    return Ticket(
        id=new_id(),
        type="Maintenance",
        inspection_id=inspection.id,
        bathroom_code=bathroom.code,
        campus_name=campus.name if campus else "",
        campus_id=bathroom.campus_id,
        bathroom_id=bathroom.id,
        title=draft.title,
        description=draft.description,
        priority=_priority(draft.priority),
        created_at=utcnow(),
        status="Open",
    )


def create_work_request(
    *,
    title: str,
    description: str,
    campus_name: str,
    priority: str = "Medium",
    estimated_cost: Any = None,
    bathroom_code: Optional[str] = None,
    campus_id: Optional[str] = None,
    bathroom_id: Optional[str] = None,
) -> Ticket:
    return Ticket(
        id=new_id(),
        type="WorkRequest",
        title=_required(title, "title"),
        description=_required(description, "description"),
        campus_name=_required(campus_name, "campus_name"),
        priority=_priority(priority),
        estimated_cost=_cost(estimated_cost),
        bathroom_code=(bathroom_code or "").strip() or None,
        campus_id=campus_id,
        bathroom_id=bathroom_id,
        created_at=utcnow(),
        status="Open",
    )


def append_note(ticket: Ticket, text: str, author: str) -> Ticket:
    body = (text or "").strip()
    if not body:
        raise ValidationError("note text must not be blank")
    note = TicketNote(id=new_id(), date=utcnow(), text=body, author=(author or "").strip() or "Staff")
    return replace(ticket, notes=(*ticket.notes, note))


def set_status(ticket: Ticket, status: str) -> Ticket:
    # Any transition is allowed, including out of Closed.
    if status not in TICKET_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(TICKET_STATUSES)}; got {status!r}")
    return replace(ticket, status=status)


def close_ticket(ticket: Ticket) -> Ticket:
    return set_status(ticket, "Closed")


def update_details(ticket: Ticket, fields: dict[str, Any]) -> Ticket:
    unknown = set(fields) - set(TICKET_EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"unknown ticket fields: {', '.join(sorted(unknown))}")

    changes: dict[str, Any] = {}
    if "title" in fields:
        changes["title"] = _required(fields["title"], "title")
    if "description" in fields:
        changes["description"] = _required(fields["description"], "description")
    if "priority" in fields:
        changes["priority"] = _priority(fields["priority"])
    if "estimated_cost" in fields:
        changes["estimated_cost"] = _cost(fields["estimated_cost"])
    return replace(ticket, **changes)


# -----------------------------------------------------------------------------
# Derived views
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class AssetStatus:
    bathroom_id: str
    last_inspection_id: Optional[str]
    last_inspection_date: Optional[datetime]
    has_open_ticket: bool


def derive_asset_status(bathroom_id: str, inspections: Iterable[Inspection]) -> AssetStatus:
    """
    Status comes from the most recent inspection only; older findings do not
    count. Inspections sharing the latest timestamp resolve in no particular order.
    """
    latest: Optional[Inspection] = None
    for i in inspections:
        if i.bathroom_id != bathroom_id:
            continue
        if latest is None or i.date > latest.date:
            latest = i

    if latest is None:
        return AssetStatus(bathroom_id, None, None, False)
    return AssetStatus(
        bathroom_id=bathroom_id,
        last_inspection_id=latest.id,
        last_inspection_date=latest.date,
        has_open_ticket=bool(latest.ticket_created and latest.ticket_id),
    )


def active_work_view(tickets: Iterable[Ticket]) -> list[Ticket]:
    return sorted((t for t in tickets if not t.is_closed), key=lambda t: t.created_at, reverse=True)


def archive_view(tickets: Iterable[Ticket]) -> list[Ticket]:
    return sorted((t for t in tickets if t.is_closed), key=lambda t: t.created_at, reverse=True)


def work_request_queue(tickets: Iterable[Ticket]) -> list[Ticket]:
    return [t for t in active_work_view(tickets) if t.type == "WorkRequest"]


def _bathroom_for_ticket(
    ticket: Ticket,
    campuses: list[Campus],
    bathrooms: list[Bathroom],
) -> Optional[Bathroom]:
    if ticket.bathroom_id:
        for b in bathrooms:
            if b.id == ticket.bathroom_id:
                return b
        return None
    # Older tickets only carry display strings; match on code plus campus name.
    if not ticket.bathroom_code:
        return None
    names = {c.id: c.name for c in campuses}
    for b in bathrooms:
        if b.code == ticket.bathroom_code and names.get(b.campus_id) == ticket.campus_name:
            return b
    return None


def maintenance_queue(
    tickets: Iterable[Ticket],
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    *,
    campus_name: Optional[str] = None,
    priority: Optional[str] = None,
    gender: Optional[str] = None,
) -> list[Ticket]:
    """Active Maintenance tickets, newest first, optionally filtered by campus, priority and bathroom gender."""
    out: list[Ticket] = []
    for t in active_work_view(tickets):
        if t.type != "Maintenance":
            continue
        if campus_name and resolve_location(t, campuses, bathrooms).campus_name != campus_name:
            continue
        if priority and t.priority != priority:
            continue
        if gender:
            b = _bathroom_for_ticket(t, campuses, bathrooms)
            if b is None or b.gender != gender:
                continue
        out.append(t)
    return out


@dataclass(frozen=True)
class TicketLocation:
    campus_name: str
    bathroom_code: Optional[str]
    asset_removed: bool


def resolve_location(ticket: Ticket, campuses: list[Campus], bathrooms: list[Bathroom]) -> TicketLocation:
    """
    Current display names for a ticket, resolved through its ids. When the
    referenced bathroom or campus is gone the stored strings are returned and
    asset_removed is set.
    """
    campus_by_id = {c.id: c for c in campuses}
    removed = False
    campus_name = ticket.campus_name
    code = ticket.bathroom_code

    if ticket.bathroom_id:
        b = next((b for b in bathrooms if b.id == ticket.bathroom_id), None)
        if b is None:
            removed = True
        else:
            code = b.code

    if ticket.campus_id:
        c = campus_by_id.get(ticket.campus_id)
        if c is None:
            removed = True
        else:
            campus_name = c.name

    return TicketLocation(campus_name=campus_name, bathroom_code=code, asset_removed=removed)


def replace_by_id(items: list[T], updated: T) -> list[T]:
    uid = getattr(updated, "id")
    return [updated if getattr(x, "id") == uid else x for x in items]
