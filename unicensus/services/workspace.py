# unicensus/services/workspace.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from ..domain import assets, hierarchy, lifecycle, reports
from ..domain.entities import Bathroom, Campus, Inspection, Ticket, new_id, utcnow
from ..domain.errors import GenerationError, NotFoundError, PersistenceError, ValidationError
from ..domain.importers.census import ImportPlan, read_census_rows, reconcile
from ..integrations.draft_generator import DraftGenerator, generator_from_settings
from ..store.base import EntityStore, build_store

log = logging.getLogger(__name__)


@dataclass
class PendingWrite:
    """A store call that failed after its change was applied in memory."""

    id: str
    kind: str
    action: str  # create|update|delete|reorder
    entity_id: Optional[str]
    payload: Any
    error: str
    at: datetime
    attempts: int = 1


@dataclass(frozen=True)
class InspectionOutcome:
    inspection: Inspection
    ticket: Optional[Ticket]
    draft_source: Optional[str]  # llm|fallback|None
    unsynced: list[PendingWrite] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    new_campuses: list[Campus]
    new_bathrooms: list[Bathroom]
    skipped_rows: int
    unsynced: list[PendingWrite] = field(default_factory=list)


@dataclass(frozen=True)
class RetryReport:
    synced: int
    pending: list[PendingWrite]


class FacilityWorkspace:
    """
    In-memory working set of the four collections plus the store they sync to.

    Every mutation validates first (nothing changes on ValidationError,
    CycleError or NotFoundError), applies the change in memory, then awaits
    the store. A failed store call does not roll the change back: it is kept
    as a PendingWrite and the operation raises PersistenceError, except for
    inspection submission and bulk import which report unsynced writes in
    their result instead.
    """

    def __init__(
        self,
        store: EntityStore,
        generator: Optional[DraftGenerator] = None,
        *,
        default_author: str = "Staff",
    ) -> None:
        self.store = store
        self.generator = generator
        self.default_author = default_author

        self.campuses: list[Campus] = []
        self.bathrooms: list[Bathroom] = []
        self.inspections: list[Inspection] = []
        self.tickets: list[Ticket] = []

        self._pending: list[PendingWrite] = []
        self.loaded = False

    # -------------------------
    # Loading + sync bookkeeping
    # -------------------------

    async def load(self) -> None:
        self.campuses = hierarchy.sort_by_order(await self.store.campuses.list())
        self.bathrooms = await self.store.bathrooms.list()
        self.inspections = await self.store.inspections.list()
        self.tickets = await self.store.tickets.list()
        self.loaded = True
        log.info(
            "workspace_loaded campuses=%s bathrooms=%s inspections=%s tickets=%s",
            len(self.campuses),
            len(self.bathrooms),
            len(self.inspections),
            len(self.tickets),
        )

    @property
    def pending(self) -> list[PendingWrite]:
        return list(self._pending)

    async def _call_store(self, kind: str, action: str, entity_id: Optional[str], payload: Any) -> None:
        if action == "reorder":
            await self.store.campuses.reorder_all(payload)
            return
        coll = self.store.collection(kind)
        if action == "create":
            await coll.create(payload)
        elif action == "update":
            await coll.update(entity_id, payload)
        elif action == "delete":
            await coll.delete(entity_id)
        else:
            raise ValueError(f"unknown store action: {action}")

    async def _persist(
        self,
        kind: str,
        action: str,
        entity_id: Optional[str],
        payload: Any = None,
    ) -> Optional[PendingWrite]:
        try:
            await self._call_store(kind, action, entity_id, payload)
            return None
        except PersistenceError as e:
            pw = PendingWrite(
                id=new_id(),
                kind=kind,
                action=action,
                entity_id=entity_id,
                payload=payload,
                error=e.message,
                at=utcnow(),
            )
            self._pending.append(pw)
            log.warning(
                "store_write_pending: %s",
                e.message,
                extra={"kind": kind, "action": action, f"{kind}_id": entity_id},
            )
            return pw

    @staticmethod
    def _raise_unsynced(unsynced: Iterable[Optional[PendingWrite]]) -> None:
        failed = [p for p in unsynced if p is not None]
        if not failed:
            return
        first = failed[0]
        msg = first.error if len(failed) == 1 else f"{len(failed)} writes failed; first: {first.error}"
        raise PersistenceError(
            msg,
            kind=first.kind,
            action=first.action,
            entity_id=first.entity_id,
            pending=failed,
        )

    async def retry_pending(self) -> RetryReport:
        """
        Replay pending writes in their original order. Creates use the current
        in-memory entity (dropped if it has been deleted since); updates and
        deletes replay their recorded payload.
        """
        synced = 0
        still: list[PendingWrite] = []
        for pw in list(self._pending):
            payload = pw.payload
            if pw.action == "create":
                payload = self._current(pw.kind, pw.entity_id)
                if payload is None:
                    synced += 1
                    continue
            elif pw.action == "reorder":
                payload = list(self.campuses)

            try:
                await self._call_store(pw.kind, pw.action, pw.entity_id, payload)
                synced += 1
            except PersistenceError as e:
                pw.error = e.message
                pw.attempts += 1
                still.append(pw)

        self._pending = still
        log.info("pending_retry synced=%s remaining=%s", synced, len(still))
        return RetryReport(synced=synced, pending=list(still))

    def _current(self, kind: str, entity_id: Optional[str]) -> Any:
        pool: Iterable[Any] = {
            "campus": self.campuses,
            "bathroom": self.bathrooms,
            "inspection": self.inspections,
            "ticket": self.tickets,
        }.get(kind, [])
        return next((x for x in pool if x.id == entity_id), None)

    # -------------------------
    # Campuses
    # -------------------------

    def campus_forest(self) -> list[tuple[Campus, int]]:
        return hierarchy.forest(self.campuses)

    def get_campus(self, campus_id: str) -> Campus:
        return hierarchy.must_get_campus(self.campuses, campus_id)

    async def add_campus(self, name: str) -> Campus:
        self.campuses, campus = hierarchy.add_root(self.campuses, name)
        log.info("campus_added", extra={"campus_id": campus.id})
        self._raise_unsynced([await self._persist("campus", "create", campus.id, campus)])
        return campus

    async def rename_campus(self, campus_id: str, name: str) -> Campus:
        self.campuses, campus = hierarchy.rename(self.campuses, campus_id, name)
        self._raise_unsynced([await self._persist("campus", "update", campus.id, {"name": campus.name})])
        return campus

    async def move_campus(self, campus_id: str, new_parent_id: Optional[str]) -> Campus:
        before = hierarchy.must_get_campus(self.campuses, campus_id)
        self.campuses, campus = hierarchy.reparent(self.campuses, campus_id, new_parent_id)
        if campus.parent_id == before.parent_id:
            return campus
        log.info("campus_moved", extra={"campus_id": campus.id})
        self._raise_unsynced([await self._persist("campus", "update", campus.id, {"parent_id": campus.parent_id})])
        return campus

    async def reorder_campus(self, campus_id: str, direction: str) -> list[Campus]:
        reordered = hierarchy.reorder(self.campuses, campus_id, direction)
        if [c.id for c in reordered] == [c.id for c in self.campuses]:
            return list(self.campuses)
        self.campuses = reordered
        self._raise_unsynced([await self._persist("campus", "reorder", None, list(reordered))])
        return list(self.campuses)

    def campus_delete_impact(self, campus_id: str) -> hierarchy.DeleteImpact:
        return hierarchy.delete_impact(self.campuses, self.bathrooms, self.inspections, campus_id)

    async def delete_campus(self, campus_id: str) -> hierarchy.DeletePlan:
        """Cascade to sub-campuses, their bathrooms and inspections. Tickets are kept."""
        subtree_order = [campus_id] + [c.id for c in hierarchy.descendants(self.campuses, campus_id)]
        plan = hierarchy.delete(self.campuses, self.bathrooms, self.inspections, campus_id)

        self.campuses = plan.campuses
        self.bathrooms = plan.bathrooms
        self.inspections = plan.inspections
        log.info(
            "campus_deleted sub_campuses=%s bathrooms=%s inspections=%s",
            len(plan.removed_campus_ids) - 1,
            len(plan.removed_bathroom_ids),
            len(plan.removed_inspection_ids),
            extra={"campus_id": campus_id},
        )

        # children before parents so references never dangle in the store
        unsynced = []
        for iid in sorted(plan.removed_inspection_ids):
            unsynced.append(await self._persist("inspection", "delete", iid))
        for bid in sorted(plan.removed_bathroom_ids):
            unsynced.append(await self._persist("bathroom", "delete", bid))
        for cid in reversed(subtree_order):
            unsynced.append(await self._persist("campus", "delete", cid))
        self._raise_unsynced(unsynced)
        return plan

    # -------------------------
    # Bathrooms
    # -------------------------

    def get_bathroom(self, bathroom_id: str) -> Bathroom:
        return assets.must_get_bathroom(self.bathrooms, bathroom_id)

    def bathrooms_for_campus(self, campus_id: str) -> list[Bathroom]:
        hierarchy.must_get_campus(self.campuses, campus_id)
        return assets.bathrooms_for(self.bathrooms, campus_id)

    async def add_bathroom(
        self,
        *,
        campus_id: str,
        floor: str,
        code: str,
        gender: str = "AllGender",
        notes: Optional[str] = None,
    ) -> Bathroom:
        self.bathrooms, b = assets.add_bathroom(
            self.campuses,
            self.bathrooms,
            campus_id=campus_id,
            floor=floor,
            code=code,
            gender=gender,
            notes=notes,
        )
        log.info("bathroom_added", extra={"bathroom_id": b.id, "campus_id": b.campus_id})
        self._raise_unsynced([await self._persist("bathroom", "create", b.id, b)])
        return b

    async def update_bathroom(self, bathroom_id: str, fields: dict[str, Any]) -> Bathroom:
        self.bathrooms, b = assets.update_bathroom(self.campuses, self.bathrooms, bathroom_id, fields)
        changed = {k: getattr(b, k) for k in fields}
        self._raise_unsynced([await self._persist("bathroom", "update", b.id, changed)])
        return b

    async def delete_bathroom(self, bathroom_id: str) -> list[str]:
        self.bathrooms, self.inspections, removed = assets.delete_bathroom(
            self.bathrooms, self.inspections, bathroom_id
        )
        log.info("bathroom_deleted inspections=%s", len(removed), extra={"bathroom_id": bathroom_id})
        unsynced = [await self._persist("inspection", "delete", iid) for iid in removed]
        unsynced.append(await self._persist("bathroom", "delete", bathroom_id))
        self._raise_unsynced(unsynced)
        return removed

    def asset_status(self, bathroom_id: str) -> lifecycle.AssetStatus:
        assets.must_get_bathroom(self.bathrooms, bathroom_id)
        return lifecycle.derive_asset_status(bathroom_id, self.inspections)

    # -------------------------
    # Bulk import
    # -------------------------

    def preview_import(self, data: bytes) -> ImportPlan:
        return reconcile(self.campuses, read_census_rows(data))

    async def bulk_import(self, data: bytes) -> ImportResult:
        plan = self.preview_import(data)
        return await self.apply_import(plan)

    async def apply_import(self, plan: ImportPlan) -> ImportResult:
        self.campuses = [*self.campuses, *plan.new_campuses]
        self.bathrooms = [*self.bathrooms, *plan.new_bathrooms]
        log.info(
            "census_imported campuses=%s bathrooms=%s skipped=%s",
            len(plan.new_campuses),
            len(plan.new_bathrooms),
            plan.skipped_rows,
        )

        unsynced: list[PendingWrite] = []
        for c in plan.new_campuses:
            pw = await self._persist("campus", "create", c.id, c)
            if pw:
                unsynced.append(pw)
        for b in plan.new_bathrooms:
            pw = await self._persist("bathroom", "create", b.id, b)
            if pw:
                unsynced.append(pw)

        return ImportResult(
            new_campuses=list(plan.new_campuses),
            new_bathrooms=list(plan.new_bathrooms),
            skipped_rows=plan.skipped_rows,
            unsynced=unsynced,
        )

    # -------------------------
    # Inspections
    # -------------------------

    def inspections_for(self, bathroom_id: str) -> list[Inspection]:
        assets.must_get_bathroom(self.bathrooms, bathroom_id)
        return sorted((i for i in self.inspections if i.bathroom_id == bathroom_id), key=lambda i: i.date, reverse=True)

    async def _draft(self, inspection: Inspection, bathroom: Bathroom, campus_name: str) -> tuple[lifecycle.TicketDraft, str]:
        failing = len(lifecycle.failing_records(inspection))
        if self.generator is None:
            return lifecycle.fallback_draft(bathroom.code, failing), "fallback"
        try:
            raw = await self.generator.generate(inspection, bathroom.code, campus_name)
            draft = lifecycle.normalize_draft(
                raw.title,
                raw.description,
                raw.priority,
                bathroom_code=bathroom.code,
                failing_count=failing,
            )
            return draft, self.generator.source
        except GenerationError as e:
            log.warning("draft_generation_failed: %s", e.message, extra={"inspection_id": inspection.id})
        except Exception:
            log.exception("draft_generation_crashed", extra={"inspection_id": inspection.id})
        return lifecycle.fallback_draft(bathroom.code, failing), "fallback"

    async def submit_inspection(
        self,
        bathroom_id: str,
        records: Iterable[Any],
        *,
        date: Optional[datetime] = None,
    ) -> InspectionOutcome:
        """
        Record an inspection and, when any finding is Warning or Critical,
        open exactly one linked Maintenance ticket. Store failures never undo
        the inspection; they come back in InspectionOutcome.unsynced.
        """
        bathroom = assets.must_get_bathroom(self.bathrooms, bathroom_id)
        campus = hierarchy.get_campus(self.campuses, bathroom.campus_id)
        inspection = lifecycle.build_inspection(bathroom_id, records, date=date)

        self.inspections = [*self.inspections, inspection]
        unsynced = [await self._persist("inspection", "create", inspection.id, inspection)]
        log.info("inspection_recorded", extra={"inspection_id": inspection.id, "bathroom_id": bathroom_id})

        if not lifecycle.needs_ticket(inspection):
            return InspectionOutcome(inspection, None, None, [p for p in unsynced if p])

        campus_name = campus.name if campus else ""
        draft, source = await self._draft(inspection, bathroom, campus_name)

        ticket = lifecycle.build_maintenance_ticket(inspection, draft, bathroom=bathroom, campus=campus)
        self.tickets = [*self.tickets, ticket]
        unsynced.append(await self._persist("ticket", "create", ticket.id, ticket))

        linked = lifecycle.link_ticket(inspection, ticket.id)
        self.inspections = lifecycle.replace_by_id(self.inspections, linked)
        unsynced.append(
            await self._persist("inspection", "update", linked.id, {"ticket_created": True, "ticket_id": ticket.id})
        )
        log.info(
            "maintenance_ticket_opened",
            extra={"ticket_id": ticket.id, "inspection_id": linked.id, "draft_source": source},
        )
        return InspectionOutcome(linked, ticket, source, [p for p in unsynced if p])

    async def delete_inspection(self, inspection_id: str) -> None:
        if not any(i.id == inspection_id for i in self.inspections):
            raise NotFoundError("inspection", inspection_id)
        self.inspections = [i for i in self.inspections if i.id != inspection_id]
        self._raise_unsynced([await self._persist("inspection", "delete", inspection_id)])

    # -------------------------
    # Tickets
    # -------------------------

    def get_ticket(self, ticket_id: str) -> Ticket:
        return lifecycle.must_get_ticket(self.tickets, ticket_id)

    def ticket_location(self, ticket: Ticket) -> lifecycle.TicketLocation:
        return lifecycle.resolve_location(ticket, self.campuses, self.bathrooms)

    def active_work(self) -> list[Ticket]:
        return lifecycle.active_work_view(self.tickets)

    def archive(self) -> list[Ticket]:
        return lifecycle.archive_view(self.tickets)

    def work_requests(self) -> list[Ticket]:
        return lifecycle.work_request_queue(self.tickets)

    def maintenance(
        self,
        *,
        campus_name: Optional[str] = None,
        priority: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> list[Ticket]:
        return lifecycle.maintenance_queue(
            self.tickets,
            self.campuses,
            self.bathrooms,
            campus_name=campus_name,
            priority=priority,
            gender=gender,
        )

    async def create_work_request(
        self,
        *,
        title: str,
        description: str,
        campus_name: Optional[str] = None,
        campus_id: Optional[str] = None,
        bathroom_id: Optional[str] = None,
        bathroom_code: Optional[str] = None,
        priority: str = "Medium",
        estimated_cost: Any = None,
    ) -> Ticket:
        # ids win over free-text names when both are given
        if bathroom_id is not None:
            b = assets.must_get_bathroom(self.bathrooms, bathroom_id)
            bathroom_code = b.code
            campus_id = b.campus_id
        if campus_id is not None:
            campus_name = hierarchy.must_get_campus(self.campuses, campus_id).name

        ticket = lifecycle.create_work_request(
            title=title,
            description=description,
            campus_name=campus_name or "",
            priority=priority,
            estimated_cost=estimated_cost,
            bathroom_code=bathroom_code,
            campus_id=campus_id,
            bathroom_id=bathroom_id,
        )
        self.tickets = [*self.tickets, ticket]
        log.info("work_request_opened", extra={"ticket_id": ticket.id})
        self._raise_unsynced([await self._persist("ticket", "create", ticket.id, ticket)])
        return ticket

    async def _save_ticket(self, updated: Ticket, fields: dict[str, Any]) -> Ticket:
        self.tickets = lifecycle.replace_by_id(self.tickets, updated)
        self._raise_unsynced([await self._persist("ticket", "update", updated.id, fields)])
        return updated

    async def append_note(self, ticket_id: str, text: str, author: Optional[str] = None) -> Ticket:
        t = lifecycle.append_note(self.get_ticket(ticket_id), text, author or self.default_author)
        return await self._save_ticket(t, {"notes": t.notes})

    async def set_ticket_status(self, ticket_id: str, status: str) -> Ticket:
        t = lifecycle.set_status(self.get_ticket(ticket_id), status)
        log.info("ticket_status status=%s", status, extra={"ticket_id": ticket_id})
        return await self._save_ticket(t, {"status": t.status})

    async def close_ticket(self, ticket_id: str) -> Ticket:
        return await self.set_ticket_status(ticket_id, "Closed")

    async def update_ticket(self, ticket_id: str, fields: dict[str, Any]) -> Ticket:
        if not fields:
            raise ValidationError("no ticket fields to update")
        t = lifecycle.update_details(self.get_ticket(ticket_id), fields)
        return await self._save_ticket(t, {k: getattr(t, k) for k in fields})

    async def delete_ticket(self, ticket_id: str) -> None:
        self.get_ticket(ticket_id)
        self.tickets = [t for t in self.tickets if t.id != ticket_id]
        log.info("ticket_deleted", extra={"ticket_id": ticket_id})
        self._raise_unsynced([await self._persist("ticket", "delete", ticket_id)])

    # -------------------------
    # Reports
    # -------------------------

    def active_work_report(self) -> reports.CsvReport:
        return reports.active_work_csv(self.tickets, self.campuses, self.bathrooms)

    def census_report(self, campus_id: Optional[str] = None) -> reports.CsvReport:
        return reports.census_csv(self.campuses, self.bathrooms, campus_id=campus_id)

    def dashboard(self, campus_id: Optional[str] = None) -> reports.DashboardRollup:
        return reports.dashboard_rollup(self.campuses, self.bathrooms, self.tickets, campus_id=campus_id)

    def calendar(self, year: int, month: int) -> list[reports.CalendarDay]:
        return reports.events_by_day(self.tickets, self.inspections, year, month)


def build_workspace(cfg=None) -> FacilityWorkspace:
    from ..config import settings as default_settings

    cfg = cfg or default_settings
    return FacilityWorkspace(
        build_store(cfg),
        generator_from_settings(),
        default_author=cfg.default_note_author,
    )
