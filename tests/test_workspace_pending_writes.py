# tests/test_workspace_pending_writes.py
from __future__ import annotations

import asyncio

import pytest

from unicensus.domain.errors import CycleError, PersistenceError
from unicensus.services.workspace import FacilityWorkspace
from unicensus.store.memory import MemoryCollection, memory_store


class _FlakyCollection(MemoryCollection):
    """Fails every write while `down` is set."""

    def __init__(self, kind: str) -> None:
        super().__init__(kind)
        self.down = False

    def _check(self, action, entity_id):
        if self.down:
            raise PersistenceError("store unreachable", kind=self.kind, action=action, entity_id=entity_id)

    async def create(self, entity):
        self._check("create", entity.id)
        await super().create(entity)

    async def update(self, entity_id, fields):
        self._check("update", entity_id)
        await super().update(entity_id, fields)

    async def delete(self, entity_id):
        self._check("delete", entity_id)
        await super().delete(entity_id)


def _workspace():
    store = memory_store()
    store.tickets = _FlakyCollection("ticket")
    store.bathrooms = _FlakyCollection("bathroom")
    ws = FacilityWorkspace(store, None)
    asyncio.run(ws.load())
    return ws, store


def test_failed_write_keeps_change_and_is_retried():
    ws, store = _workspace()

    async def go():
        c = await ws.add_campus("Science Hub")
        store.bathrooms.down = True
        with pytest.raises(PersistenceError) as ei:
            await ws.add_bathroom(campus_id=c.id, floor="1", code="WC-1")

        # optimistic change is visible, store is not
        assert [b.code for b in ws.bathrooms] == ["WC-1"]
        assert await store.bathrooms.list() == []
        assert ei.value.kind == "bathroom"
        assert len(ws.pending) == 1

        still_down = await ws.retry_pending()
        assert still_down.synced == 0
        assert still_down.pending[0].attempts == 2

        store.bathrooms.down = False
        report = await ws.retry_pending()
        assert report.synced == 1
        assert ws.pending == []
        assert [b.code for b in await store.bathrooms.list()] == ["WC-1"]

    asyncio.run(go())


def test_ticket_phase_failure_never_blocks_inspection():
    ws, store = _workspace()

    async def go():
        c = await ws.add_campus("Science Hub")
        b = await ws.add_bathroom(campus_id=c.id, floor="1", code="WC-1")
        store.tickets.down = True

        out = await ws.submit_inspection(b.id, [{"item_id": "sink", "status": "Critical"}])

        assert out.ticket is not None
        assert [p.kind for p in out.unsynced] == ["ticket"]
        stored = await store.inspections.list()
        assert stored[0].id == out.inspection.id
        assert stored[0].ticket_id == out.ticket.id
        assert await store.tickets.list() == []

        store.tickets.down = False
        await ws.retry_pending()
        assert [t.id for t in await store.tickets.list()] == [out.ticket.id]

    asyncio.run(go())


def test_created_then_deleted_entity_is_dropped_on_retry():
    ws, store = _workspace()

    async def go():
        c = await ws.add_campus("Science Hub")
        store.bathrooms.down = True
        with pytest.raises(PersistenceError):
            await ws.add_bathroom(campus_id=c.id, floor="1", code="WC-1")
        with pytest.raises(PersistenceError):
            await ws.delete_bathroom(ws.bathrooms[0].id)
        assert ws.bathrooms == []

        store.bathrooms.down = False
        report = await ws.retry_pending()
        assert report.synced == 2
        assert await store.bathrooms.list() == []

    asyncio.run(go())


def test_validation_failures_do_not_touch_store_or_pending():
    ws, store = _workspace()

    async def go():
        a = await ws.add_campus("A")
        b = await ws.add_campus("B")
        await ws.move_campus(b.id, a.id)
        with pytest.raises(CycleError):
            await ws.move_campus(a.id, b.id)
        stored = {c.id: c for c in await store.campuses.list()}
        assert stored[a.id].parent_id is None
        assert stored[b.id].parent_id == a.id
        assert ws.pending == []

    asyncio.run(go())


def test_delete_campus_cascades_in_store():
    ws, store = _workspace()

    async def go():
        villa = await ws.add_campus("Villa")
        annex = await ws.add_campus("Annex")
        await ws.move_campus(annex.id, villa.id)
        b = await ws.add_bathroom(campus_id=annex.id, floor="G", code="WC-A")
        await ws.submit_inspection(b.id, [{"item_id": "door", "status": "OK"}])

        impact = ws.campus_delete_impact(villa.id)
        assert (impact.sub_campuses, impact.bathrooms, impact.inspections) == (1, 1, 1)

        await ws.delete_campus(villa.id)
        assert await store.campuses.list() == []
        assert await store.bathrooms.list() == []
        assert await store.inspections.list() == []

    asyncio.run(go())


def test_reorder_persists_full_list():
    ws, store = _workspace()

    async def go():
        a = await ws.add_campus("A")
        b = await ws.add_campus("B")
        await ws.reorder_campus(b.id, "up")
        stored = sorted(await store.campuses.list(), key=lambda c: c.order_index)
        assert [c.id for c in stored] == [b.id, a.id]
        # boundary: nothing changes
        again = await ws.reorder_campus(b.id, "up")
        assert [c.id for c in again] == [b.id, a.id]

    asyncio.run(go())
