# tests/test_sql_store.py
from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime

import pytest

from unicensus.db import init_db, make_engine, make_session_factory
from unicensus.domain.entities import Bathroom, Campus, Inspection, InspectionRecord, Ticket, TicketNote
from unicensus.domain.errors import PersistenceError
from unicensus.services.workspace import FacilityWorkspace
from unicensus.store.sql import sql_store


def _store(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'census.db'}")
    init_db(engine)
    return sql_store(make_session_factory(engine))


def test_round_trip_all_kinds(tmp_path):
    store = _store(tmp_path)
    when = datetime(2026, 3, 4, 10, 0, 0)

    async def go():
        await store.campuses.create(Campus(id="c1", name="Science Hub", order_index=0))
        await store.bathrooms.create(Bathroom(id="b1", campus_id="c1", floor="1", code="WC-1", gender="Male"))
        await store.inspections.create(
            Inspection(
                id="i1",
                bathroom_id="b1",
                date=when,
                records=(InspectionRecord("sink", "Warning", "drips"), InspectionRecord("door", "OK")),
            )
        )
        note = TicketNote(id="n1", date=when, text="on it", author="Admin")
        await store.tickets.create(
            Ticket(
                id="t1",
                type="Maintenance",
                campus_name="Science Hub",
                title="Sink",
                description="d",
                created_at=when,
                inspection_id="i1",
                notes=(note,),
            )
        )

        insp = (await store.inspections.list())[0]
        assert insp.records[0] == InspectionRecord("sink", "Warning", "drips")
        assert insp.date == when

        t = (await store.tickets.list())[0]
        assert t.notes == (note,)

        await store.inspections.update("i1", {"ticket_created": True, "ticket_id": "t1"})
        insp = (await store.inspections.list())[0]
        assert insp.ticket_created is True and insp.ticket_id == "t1"

        more = replace(note, id="n2", text="done")
        await store.tickets.update("t1", {"notes": (note, more), "status": "Closed"})
        t = (await store.tickets.list())[0]
        assert [n.text for n in t.notes] == ["on it", "done"]
        assert t.status == "Closed"

        await store.tickets.delete("t1")
        await store.tickets.delete("t1")
        assert await store.tickets.list() == []

    asyncio.run(go())


def test_unknown_fields_and_missing_rows_raise(tmp_path):
    store = _store(tmp_path)

    async def go():
        await store.campuses.create(Campus(id="c1", name="A"))
        with pytest.raises(PersistenceError) as ei:
            await store.campuses.update("c1", {"colour": "red"})
        assert ei.value.kind == "campus"
        with pytest.raises(PersistenceError):
            await store.campuses.update("ghost", {"name": "B"})
        with pytest.raises(PersistenceError):
            await store.campuses.create(Campus(id="c1", name="dup"))

    asyncio.run(go())


def test_reorder_all_and_workspace_reload(tmp_path):
    store = _store(tmp_path)

    async def go():
        ws = FacilityWorkspace(store, None)
        await ws.load()
        a = await ws.add_campus("A")
        b = await ws.add_campus("B")
        c = await ws.add_campus("C")
        await ws.reorder_campus(c.id, "up")
        await ws.move_campus(b.id, a.id)

        fresh = FacilityWorkspace(store, None)
        await fresh.load()
        assert [x.id for x in fresh.campuses] == [a.id, c.id, b.id]
        assert fresh.get_campus(b.id).parent_id == a.id

    asyncio.run(go())
