# tests/test_asset_status_uses_latest_inspection.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from unicensus.domain.entities import Inspection
from unicensus.domain.lifecycle import build_inspection, derive_asset_status


def test_latest_inspection_wins_over_older_ticket():
    inspections = [
        Inspection(id="old", bathroom_id="b1", date=datetime(2026, 1, 10), ticket_created=True, ticket_id="t1"),
        Inspection(id="new", bathroom_id="b1", date=datetime(2026, 2, 10), ticket_created=False),
        Inspection(id="other", bathroom_id="b2", date=datetime(2026, 3, 1), ticket_created=True, ticket_id="t2"),
    ]
    s = derive_asset_status("b1", inspections)
    assert s.last_inspection_id == "new"
    assert s.last_inspection_date == datetime(2026, 2, 10)
    assert s.has_open_ticket is False


def test_latest_with_ticket():
    inspections = [
        Inspection(id="a", bathroom_id="b1", date=datetime(2026, 2, 10)),
        Inspection(id="b", bathroom_id="b1", date=datetime(2026, 1, 10)),
        Inspection(id="c", bathroom_id="b1", date=datetime(2026, 3, 10), ticket_created=True, ticket_id="t9"),
    ]
    s = derive_asset_status("b1", inspections)
    assert s.last_inspection_id == "c"
    assert s.has_open_ticket is True


def test_never_inspected():
    s = derive_asset_status("b1", [])
    assert s.last_inspection_date is None
    assert s.has_open_ticket is False


def test_ticket_flag_without_ticket_id_is_not_open():
    inspections = [Inspection(id="a", bathroom_id="b1", date=datetime(2026, 2, 10), ticket_created=True)]
    assert derive_asset_status("b1", inspections).has_open_ticket is False


def test_aware_and_naive_dates_compare():
    aware = build_inspection("b1", [], date=datetime(2024, 3, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))))
    assert aware.date == datetime(2024, 3, 1, 10, 0)
    assert aware.date.tzinfo is None

    naive = build_inspection("b1", [])
    s = derive_asset_status("b1", [aware, naive])
    assert s.last_inspection_id == naive.id
