# tests/test_inspection_creates_single_ticket.py
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from unicensus.domain.errors import GenerationError, NotFoundError, ValidationError
from unicensus.domain.lifecycle import TicketDraft, fallback_draft
from unicensus.integrations.draft_generator import DraftGenerator
from unicensus.services.workspace import FacilityWorkspace
from unicensus.store.memory import memory_store


class _FixedGenerator(DraftGenerator):
    source = "llm"

    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, inspection, bathroom_code, campus_name):
        self.calls += 1
        return TicketDraft(title=f"Fix {bathroom_code} at {campus_name}", description="drip", priority="High")


class _BrokenGenerator(DraftGenerator):
    async def generate(self, inspection, bathroom_code, campus_name):
        raise GenerationError("model offline")


def _setup(generator=None):
    ws = FacilityWorkspace(memory_store(), generator)

    async def go():
        await ws.load()
        c = await ws.add_campus("Science Hub")
        b = await ws.add_bathroom(campus_id=c.id, floor="1", code="WC-S101", gender="Male")
        return b

    return ws, asyncio.run(go())


def test_all_ok_inspection_creates_no_ticket():
    gen = _FixedGenerator()
    ws, b = _setup(gen)

    out = asyncio.run(
        ws.submit_inspection(b.id, [{"item_id": "sink", "status": "OK"}, {"item_id": "door", "status": "NotApplicable"}])
    )

    assert out.ticket is None
    assert out.inspection.ticket_created is False
    assert out.inspection.ticket_id is None
    assert ws.tickets == []
    assert gen.calls == 0


def test_failing_inspection_creates_exactly_one_linked_ticket():
    gen = _FixedGenerator()
    ws, b = _setup(gen)

    out = asyncio.run(
        ws.submit_inspection(
            b.id,
            [
                {"item_id": "sink", "status": "Warning", "note": "drips"},
                {"item_id": "toilet", "status": "Critical"},
                {"item_id": "floor", "status": "OK"},
            ],
        )
    )

    assert gen.calls == 1
    assert len(ws.tickets) == 1
    t = ws.tickets[0]
    assert out.ticket == t
    assert t.type == "Maintenance"
    assert t.inspection_id == out.inspection.id
    assert t.bathroom_code == "WC-S101"
    assert t.campus_name == "Science Hub"
    assert t.bathroom_id == b.id
    assert t.priority == "High"
    assert t.status == "Open"
    assert out.draft_source == "llm"

    stored = next(i for i in ws.inspections if i.id == out.inspection.id)
    assert stored.ticket_created is True
    assert stored.ticket_id == t.id
    assert out.unsynced == []


def test_generator_failure_falls_back_and_still_persists():
    ws, b = _setup(_BrokenGenerator())

    out = asyncio.run(ws.submit_inspection(b.id, [{"item_id": "sink", "status": "Warning"}]))

    assert out.draft_source == "fallback"
    assert out.ticket.title == "Maintenance needed: WC-S101"
    assert out.ticket.priority == "Medium"
    stored = asyncio.run(ws.store.inspections.list())
    assert [i.id for i in stored] == [out.inspection.id]
    assert stored[0].ticket_id == out.ticket.id


def test_no_generator_uses_fallback():
    ws, b = _setup(None)
    out = asyncio.run(ws.submit_inspection(b.id, [{"item_id": "boiler", "status": "Critical"}]))
    assert out.draft_source == "fallback"
    assert out.ticket.title == fallback_draft("WC-S101", 1).title


def test_fallback_draft_is_pure():
    a = fallback_draft("WC-9", 3)
    b = fallback_draft("WC-9", 3)
    assert a == b
    assert a.title == "Maintenance needed: WC-9"
    assert a.priority == "Medium"
    assert "3" in a.description


def test_bad_records_are_rejected_before_any_change():
    ws, b = _setup(None)
    with pytest.raises(ValidationError):
        asyncio.run(ws.submit_inspection(b.id, [{"item_id": "sink", "status": "Broken"}]))
    with pytest.raises(ValidationError):
        asyncio.run(ws.submit_inspection(b.id, [{"item_id": "jacuzzi", "status": "OK"}]))
    with pytest.raises(ValidationError):
        asyncio.run(
            ws.submit_inspection(b.id, [{"item_id": "sink", "status": "OK"}, {"item_id": "sink", "status": "OK"}])
        )
    with pytest.raises(NotFoundError):
        asyncio.run(ws.submit_inspection("nope", []))
    assert ws.inspections == []


class _SloppyGenerator(DraftGenerator):
    source = "llm"

    async def generate(self, inspection, bathroom_code, campus_name):
        return TicketDraft(title="  ", description="Replace the trap", priority="high")


def test_malformed_generator_draft_still_opens_one_ticket():
    ws, b = _setup(_SloppyGenerator())

    out = asyncio.run(ws.submit_inspection(b.id, [{"item_id": "sink", "status": "Critical"}]))

    assert len(ws.tickets) == 1
    assert out.ticket.priority == "High"
    assert out.ticket.title == "Maintenance needed: WC-S101"
    assert out.ticket.description == "Replace the trap"
    assert out.inspection.ticket_created is True
    assert out.inspection.ticket_id == out.ticket.id


def test_aware_inspection_date_keeps_bathroom_readable():
    ws, b = _setup(None)
    aware = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    first = asyncio.run(ws.submit_inspection(b.id, [{"item_id": "sink", "status": "OK"}], date=aware))
    second = asyncio.run(ws.submit_inspection(b.id, [{"item_id": "sink", "status": "OK"}]))

    assert first.inspection.date == datetime(2024, 3, 1, 10, 0)
    assert [i.id for i in ws.inspections_for(b.id)] == [second.inspection.id, first.inspection.id]
    assert ws.asset_status(b.id).last_inspection_id == second.inspection.id
