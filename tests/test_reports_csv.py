# tests/test_reports_csv.py
from __future__ import annotations

import csv
from datetime import date, datetime
from io import StringIO

from unicensus.domain.entities import Bathroom, Campus, Ticket
from unicensus.domain.reports import active_work_csv, census_csv, dashboard_rollup


def _parse(content: str) -> list[list[str]]:
    return list(csv.reader(StringIO(content)))


def _data():
    campuses = [
        Campus(id="v", name="Historic Villa", order_index=0),
        Campus(id="a", name="Villa Annex", parent_id="v", order_index=1),
        Campus(id="s", name="Science Hub", order_index=2),
    ]
    bathrooms = [
        Bathroom(id="b1", campus_id="s", floor="1", code="WC-S101", gender="Male", notes="Key at the front desk"),
        Bathroom(id="b2", campus_id="v", floor="G", code="WC-V01", gender="Disabled"),
        Bathroom(id="b3", campus_id="a", floor="G", code="WC-DEP-01"),
    ]
    tickets = [
        Ticket(
            id="t1",
            type="Maintenance",
            campus_name="Science Hub",
            campus_id="s",
            bathroom_id="b1",
            bathroom_code="WC-S101",
            title='Tap "left" drips',
            description="d",
            priority="High",
            created_at=datetime(2026, 5, 2, 9, 30),
        ),
        Ticket(
            id="t2",
            type="WorkRequest",
            campus_name="Historic Villa",
            campus_id="v",
            title="Dryers",
            description="d",
            priority="Low",
            status="InProgress",
            created_at=datetime(2026, 5, 1),
        ),
        Ticket(
            id="t3",
            type="Maintenance",
            campus_name="Science Hub",
            title="old",
            description="d",
            status="Closed",
            created_at=datetime(2026, 4, 1),
        ),
    ]
    return campuses, bathrooms, tickets


def test_active_work_csv_columns_and_order():
    campuses, bathrooms, tickets = _data()
    r = active_work_csv(tickets, campuses, bathrooms, today=date(2026, 5, 3))

    assert r.filename == "active_work_2026-05-03.csv"
    assert r.content.splitlines()[0] == '"Type","Priority","Opened","Site","Room","Title","Status","ID"'
    rows = _parse(r.content)
    assert rows[1] == ["Maintenance", "High", "2026-05-02", "Science Hub", "WC-S101", 'Tap "left" drips', "Open", "t1"]
    assert rows[2] == ["Extra (WR)", "Low", "2026-05-01", "Historic Villa", "-", "Dryers", "InProgress", "t2"]
    assert len(rows) == 3


def test_census_csv_scoped_to_subtree():
    campuses, bathrooms, _ = _data()
    r = census_csv(campuses, bathrooms, campus_id="v", today=date(2026, 5, 3))

    assert r.filename == "census_Historic_Villa_2026-05-03.csv"
    rows = _parse(r.content)
    assert rows[0] == ["Site", "Parent site", "Floor", "Room code", "Gender", "Notes"]
    assert rows[1:] == [
        ["Historic Villa", "-", "G", "WC-V01", "Disabled", ""],
        ["Villa Annex", "Historic Villa", "G", "WC-DEP-01", "AllGender", ""],
    ]


def test_census_csv_all():
    campuses, bathrooms, _ = _data()
    r = census_csv(campuses, bathrooms, today=date(2026, 5, 3))
    assert r.filename == "census_all_2026-05-03.csv"
    assert len(_parse(r.content)) == 4


def test_dashboard_rollup():
    campuses, bathrooms, tickets = _data()
    d = dashboard_rollup(campuses, bathrooms, tickets)

    assert d.bathrooms == 3
    assert d.gender_counts == {"Male": 1, "Female": 0, "Disabled": 1, "AllGender": 1}
    assert d.active_tickets == 2
    assert d.maintenance_active == 1
    assert d.work_requests_active == 1
    assert d.critical_active == 1
    assert d.closed_tickets == 1
    assert d.performance_score == 100 - 20 - 5
    assert d.performance_good is False
    # equal load keeps list order
    assert [c.name for c in d.top_campuses] == ["Historic Villa", "Science Hub", "Villa Annex"]

    scoped = dashboard_rollup(campuses, bathrooms, tickets, campus_id="v")
    assert scoped.campuses == 2
    assert scoped.bathrooms == 2
    assert scoped.active_tickets == 1
    assert scoped.performance_score == 100


def test_dashboard_scopes_tickets_by_campus_id_not_name():
    campuses = [
        Campus(id="l1", name="Library", order_index=0),
        Campus(id="l2", name="Library", order_index=1),
    ]
    tickets = [
        Ticket(
            id="wr",
            type="WorkRequest",
            campus_name="Library",
            campus_id="l2",
            title="Shelving",
            description="d",
            created_at=datetime(2026, 5, 1),
        ),
    ]

    first = dashboard_rollup(campuses, [], tickets, campus_id="l1")
    second = dashboard_rollup(campuses, [], tickets, campus_id="l2")
    assert first.active_tickets == 0
    assert second.active_tickets == 1

    everything = dashboard_rollup(campuses, [], tickets)
    assert {c.campus_id: c.open_issues for c in everything.top_campuses} == {"l1": 0, "l2": 1}


def test_legacy_ticket_without_id_is_scoped_by_name():
    campuses, bathrooms, tickets = _data()
    legacy = Ticket(
        id="t4",
        type="WorkRequest",
        campus_name="Villa Annex",
        title="Paint",
        description="d",
        created_at=datetime(2026, 5, 2),
    )
    scoped = dashboard_rollup(campuses, bathrooms, [*tickets, legacy], campus_id="a")
    assert scoped.active_tickets == 1
