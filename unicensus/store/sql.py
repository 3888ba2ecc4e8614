# unicensus/store/sql.py
from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Type

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from ..domain.entities import Bathroom, Campus, Inspection, InspectionRecord, Ticket, TicketNote
from ..domain.errors import PersistenceError
from ..models import BathroomRow, CampusRow, InspectionRow, TicketRow
from .base import CampusCollection, EntityCollection, EntityStore

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Row <-> entity conversion
# -----------------------------------------------------------------------------


def _records_json(records) -> list[dict[str, Any]]:
    return [{"item_id": r.item_id, "status": r.status, "note": r.note} for r in records]


def _notes_json(notes) -> list[dict[str, Any]]:
    return [{"id": n.id, "date": n.date.isoformat(), "text": n.text, "author": n.author} for n in notes]


def _parse_dt(v: Any) -> datetime:
    if isinstance(v, datetime):
        return v
    return datetime.fromisoformat(str(v))


def _campus(row: CampusRow) -> Campus:
    return Campus(id=row.id, name=row.name, parent_id=row.parent_id, order_index=row.order_index or 0)


def _bathroom(row: BathroomRow) -> Bathroom:
    return Bathroom(
        id=row.id, campus_id=row.campus_id, floor=row.floor, code=row.code, gender=row.gender, notes=row.notes
    )


def _inspection(row: InspectionRow) -> Inspection:
    return Inspection(
        id=row.id,
        bathroom_id=row.bathroom_id,
        date=row.date,
        records=tuple(
            InspectionRecord(item_id=r.get("item_id", ""), status=r.get("status", ""), note=r.get("note") or "")
            for r in (row.records or [])
        ),
        ticket_created=bool(row.ticket_created),
        ticket_id=row.ticket_id,
    )


def _ticket(row: TicketRow) -> Ticket:
    return Ticket(
        id=row.id,
        type=row.type,
        campus_name=row.campus_name or "",
        title=row.title,
        description=row.description or "",
        created_at=row.created_at,
        priority=row.priority,
        status=row.status,
        inspection_id=row.inspection_id,
        bathroom_code=row.bathroom_code,
        campus_id=row.campus_id,
        bathroom_id=row.bathroom_id,
        estimated_cost=row.estimated_cost,
        notes=tuple(
            TicketNote(id=n["id"], date=_parse_dt(n["date"]), text=n.get("text", ""), author=n.get("author", ""))
            for n in (row.notes or [])
        ),
    )


def _column_value(key: str, value: Any) -> Any:
    if key == "records":
        return _records_json(value)
    if key == "notes" and isinstance(value, (list, tuple)) and value and isinstance(value[0], TicketNote):
        return _notes_json(value)
    if key == "notes" and isinstance(value, (list, tuple)):
        return list(value)
    return value


def _columns(entity: Any) -> dict[str, Any]:
    return {f.name: _column_value(f.name, getattr(entity, f.name)) for f in dataclasses.fields(entity)}


# -----------------------------------------------------------------------------
# Collections
# -----------------------------------------------------------------------------


class SqlCollection(EntityCollection):
    """
    SQLAlchemy-backed collection. Each call opens its own session, commits on
    success and rolls back on failure; blocking work runs in the threadpool.
    """

    order_by: tuple = ()

    def __init__(
        self,
        kind: str,
        model: Type,
        to_entity: Callable[[Any], Any],
        session_factory: sessionmaker,
    ) -> None:
        self.kind = kind
        self.model = model
        self.to_entity = to_entity
        self.session_factory = session_factory
        self._column_names = {c.key for c in model.__table__.columns}

    def _run(self, action: str, entity_id: Optional[str], fn: Callable[[Session], Any]) -> Any:
        db = self.session_factory()
        try:
            out = fn(db)
            db.commit()
            return out
        except PersistenceError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            log.warning(
                "store_write_failed",
                extra={"kind": self.kind, "action": action},
                exc_info=True,
            )
            raise PersistenceError(
                f"{action} {self.kind} failed: {e.__class__.__name__}",
                kind=self.kind,
                action=action,
                entity_id=entity_id,
            ) from e
        finally:
            db.close()

    def _ordering(self):
        return [getattr(self.model, name) for name in self.order_by] or [self.model.id]

    async def list(self) -> list:
        def fn(db: Session):
            rows = db.scalars(select(self.model).order_by(*self._ordering())).all()
            return [self.to_entity(r) for r in rows]

        return await run_in_threadpool(self._run, "list", None, fn)

    async def create(self, entity: Any) -> None:
        def fn(db: Session):
            db.add(self.model(**_columns(entity)))

        await run_in_threadpool(self._run, "create", entity.id, fn)

    async def update(self, entity_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - self._column_names
        if unknown:
            raise PersistenceError(
                f"unknown {self.kind} fields: {', '.join(sorted(unknown))}",
                kind=self.kind,
                action="update",
                entity_id=entity_id,
            )

        def fn(db: Session):
            row = db.get(self.model, entity_id)
            if row is None:
                raise PersistenceError(
                    f"{self.kind} {entity_id} does not exist", kind=self.kind, action="update", entity_id=entity_id
                )
            for k, v in fields.items():
                setattr(row, k, _column_value(k, v))

        await run_in_threadpool(self._run, "update", entity_id, fn)

    async def delete(self, entity_id: str) -> None:
        def fn(db: Session):
            row = db.get(self.model, entity_id)
            if row is not None:
                db.delete(row)

        await run_in_threadpool(self._run, "delete", entity_id, fn)


class SqlCampusCollection(SqlCollection, CampusCollection):
    order_by = ("order_index",)

    def __init__(self, session_factory: sessionmaker) -> None:
        super().__init__("campus", CampusRow, _campus, session_factory)

    async def reorder_all(self, campuses: list[Campus]) -> None:
        def fn(db: Session):
            for c in campuses:
                row = db.get(CampusRow, c.id)
                if row is None:
                    db.add(CampusRow(**_columns(c)))
                else:
                    row.name = c.name
                    row.parent_id = c.parent_id
                    row.order_index = c.order_index

        await run_in_threadpool(self._run, "reorder", None, fn)


def sql_store(session_factory: sessionmaker) -> EntityStore:
    bathrooms = SqlCollection("bathroom", BathroomRow, _bathroom, session_factory)
    bathrooms.order_by = ("floor", "code")
    inspections = SqlCollection("inspection", InspectionRow, _inspection, session_factory)
    inspections.order_by = ("date",)
    tickets = SqlCollection("ticket", TicketRow, _ticket, session_factory)
    tickets.order_by = ("created_at",)
    return EntityStore(
        campuses=SqlCampusCollection(session_factory),
        bathrooms=bathrooms,
        inspections=inspections,
        tickets=tickets,
    )
