# unicensus/domain/reports.py
from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import date, timedelta
from io import StringIO
from typing import Any, Optional

from .entities import GENDERS, Bathroom, Campus, Inspection, Ticket, utcnow
from .errors import ValidationError
from .hierarchy import descendants, forest, must_get_campus
from .lifecycle import active_work_view, resolve_location

ACTIVE_WORK_HEADERS = ["Type", "Priority", "Opened", "Site", "Room", "Title", "Status", "ID"]
CENSUS_HEADERS = ["Site", "Parent site", "Floor", "Room code", "Gender", "Notes"]

TYPE_LABELS = {"Maintenance": "Maintenance", "WorkRequest": "Extra (WR)"}


@dataclass(frozen=True)
class CsvReport:
    filename: str
    content: str


def _today() -> date:
    return utcnow().date()


def _render(headers: list[str], rows: list[list[Any]]) -> str:
    buf = StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    w.writerow(headers)
    for r in rows:
        w.writerow(["" if v is None else v for v in r])
    return buf.getvalue()


def _slug(name: str) -> str:
    return "_".join(name.split())


def active_work_csv(
    tickets: list[Ticket],
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    *,
    today: Optional[date] = None,
) -> CsvReport:
    rows: list[list[Any]] = []
    for t in active_work_view(tickets):
        loc = resolve_location(t, campuses, bathrooms)
        rows.append(
            [
                TYPE_LABELS.get(t.type, t.type),
                t.priority,
                t.created_at.date().isoformat(),
                loc.campus_name,
                loc.bathroom_code or "-",
                t.title,
                t.status,
                t.id,
            ]
        )
    stamp = (today or _today()).isoformat()
    return CsvReport(filename=f"active_work_{stamp}.csv", content=_render(ACTIVE_WORK_HEADERS, rows))


def census_csv(
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    *,
    campus_id: Optional[str] = None,
    today: Optional[date] = None,
) -> CsvReport:
    """
    Census of bathrooms in outline order. With campus_id the export covers that
    campus and all of its sub-campuses.
    """
    by_id = {c.id: c for c in campuses}
    if campus_id is not None:
        root = must_get_campus(campuses, campus_id)
        scope = {root.id} | {d.id for d in descendants(campuses, root.id)}
        label = _slug(root.name)
    else:
        scope = set(by_id)
        label = "all"

    rows: list[list[Any]] = []
    for campus, _depth in forest(campuses):
        if campus.id not in scope:
            continue
        parent = by_id.get(campus.parent_id) if campus.parent_id else None
        owned = sorted((b for b in bathrooms if b.campus_id == campus.id), key=lambda b: (b.floor, b.code))
        for b in owned:
            rows.append([campus.name, parent.name if parent else "-", b.floor, b.code, b.gender, b.notes or ""])

    stamp = (today or _today()).isoformat()
    return CsvReport(filename=f"census_{label}_{stamp}.csv", content=_render(CENSUS_HEADERS, rows))


@dataclass(frozen=True)
class CampusLoad:
    campus_id: str
    name: str
    bathrooms: int
    open_issues: int


@dataclass(frozen=True)
class DashboardRollup:
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
    top_campuses: list[CampusLoad]


def _ticket_campus_ids(
    tickets: list[Ticket],
    campuses: list[Campus],
    bathrooms: list[Bathroom],
) -> dict[str, Optional[str]]:
    """
    Owning campus id per ticket: the stored campus_id, else the bathroom's
    campus, else the first campus carrying the stored display name.
    """
    bath_campus = {b.id: b.campus_id for b in bathrooms}
    by_name: dict[str, str] = {}
    for c in campuses:
        by_name.setdefault(c.name, c.id)

    out: dict[str, Optional[str]] = {}
    for t in tickets:
        if t.campus_id:
            out[t.id] = t.campus_id
        elif t.bathroom_id and t.bathroom_id in bath_campus:
            out[t.id] = bath_campus[t.bathroom_id]
        else:
            out[t.id] = by_name.get(t.campus_name)
    return out


def dashboard_rollup(
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    tickets: list[Ticket],
    *,
    campus_id: Optional[str] = None,
    top_n: int = 10,
) -> DashboardRollup:
    """
    Headline numbers for the dashboard. With campus_id everything is scoped to
    that campus and its sub-campuses; tickets are matched through their
    campus id, and by display name only when they carry no id.
    """
    if campus_id is not None:
        root = must_get_campus(campuses, campus_id)
        scope_ids = {root.id} | {d.id for d in descendants(campuses, root.id)}
    else:
        scope_ids = {c.id for c in campuses}

    scoped_campuses = [c for c in campuses if c.id in scope_ids]
    scoped_baths = [b for b in bathrooms if b.campus_id in scope_ids]

    owner = _ticket_campus_ids(tickets, campuses, bathrooms)
    if campus_id is not None:
        scoped_tickets = [t for t in tickets if owner[t.id] in scope_ids]
    else:
        scoped_tickets = list(tickets)

    active = [t for t in scoped_tickets if not t.is_closed]
    maintenance_active = sum(1 for t in active if t.type == "Maintenance")
    critical_active = sum(1 for t in active if t.priority == "High")
    score = max(0, 100 - critical_active * 20 - maintenance_active * 5)

    loads: list[CampusLoad] = []
    for c in scoped_campuses:
        loads.append(
            CampusLoad(
                campus_id=c.id,
                name=c.name,
                bathrooms=sum(1 for b in scoped_baths if b.campus_id == c.id),
                open_issues=sum(1 for t in active if owner[t.id] == c.id),
            )
        )
    loads.sort(key=lambda x: (-x.open_issues, -x.bathrooms))

    return DashboardRollup(
        campuses=len(scoped_campuses),
        bathrooms=len(scoped_baths),
        gender_counts={g: sum(1 for b in scoped_baths if b.gender == g) for g in GENDERS},
        active_tickets=len(active),
        maintenance_active=maintenance_active,
        work_requests_active=sum(1 for t in active if t.type == "WorkRequest"),
        critical_active=critical_active,
        closed_tickets=len(scoped_tickets) - len(active),
        status_counts={s: sum(1 for t in scoped_tickets if t.status == s) for s in ("Open", "InProgress", "Closed")},
        performance_score=score,
        performance_good=critical_active == 0 and maintenance_active < 5,
        top_campuses=loads[:top_n],
    )


# -----------------------------------------------------------------------------
# Calendar
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CalendarDay:
    day: date
    tickets: list[Ticket] = field(default_factory=list)
    inspections: list[Inspection] = field(default_factory=list)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the next one."""
    if not 1 <= month <= 12:
        raise ValidationError(f"month must be 1-12; got {month}")
    if not 1 <= year <= 9998:
        raise ValidationError(f"year out of range: {year}")
    first = date(year, month, 1)
    nxt = (first + timedelta(days=32)).replace(day=1)
    return first, nxt


def events_by_day(
    tickets: list[Ticket],
    inspections: list[Inspection],
    year: int,
    month: int,
) -> list[CalendarDay]:
    """
    Ticket openings (created_at) and inspections (date) of one month grouped
    by calendar day. Only days with at least one event are returned, oldest
    first; within a day events keep chronological order.
    """
    first, nxt = month_bounds(year, month)
    by_day: dict[date, CalendarDay] = {}

    def _slot(d: date) -> CalendarDay:
        if d not in by_day:
            by_day[d] = CalendarDay(day=d)
        return by_day[d]

    for t in sorted(tickets, key=lambda t: t.created_at):
        d = t.created_at.date()
        if first <= d < nxt:
            _slot(d).tickets.append(t)
    for i in sorted(inspections, key=lambda i: i.date):
        d = i.date.date()
        if first <= d < nxt:
            _slot(d).inspections.append(i)

    return [by_day[d] for d in sorted(by_day)]
