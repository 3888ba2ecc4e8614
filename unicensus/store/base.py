# unicensus/store/base.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..domain.entities import Bathroom, Campus, Inspection, Ticket

E = TypeVar("E")

KINDS = ("campus", "bathroom", "inspection", "ticket")


class EntityCollection(Generic[E]):
    """
    Asynchronous record store for one entity kind.

    Implementations raise PersistenceError for every failure, including field
    names the schema does not know. There is no reduced-field retry.
    """

    kind: str = "entity"

    async def list(self) -> list[E]:
        raise NotImplementedError

    async def create(self, entity: E) -> None:
        raise NotImplementedError

    async def update(self, entity_id: str, fields: dict[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, entity_id: str) -> None:
        raise NotImplementedError


class CampusCollection(EntityCollection[Campus]):
    kind = "campus"

    async def reorder_all(self, campuses: list[Campus]) -> None:
        """Persist the full campus list, order_index included, in one call."""
        raise NotImplementedError


@dataclass
class EntityStore:
    campuses: CampusCollection
    bathrooms: EntityCollection[Bathroom]
    inspections: EntityCollection[Inspection]
    tickets: EntityCollection[Ticket]

    def collection(self, kind: str) -> EntityCollection:
        if kind not in KINDS:
            raise ValueError(f"unknown entity kind: {kind}")
        return {
            "campus": self.campuses,
            "bathroom": self.bathrooms,
            "inspection": self.inspections,
            "ticket": self.tickets,
        }[kind]


def build_store(cfg=None) -> EntityStore:
    """Pick the adapter named by settings.store_backend."""
    from ..config import settings as default_settings

    cfg = cfg or default_settings
    if cfg.store_backend == "memory":
        from .memory import memory_store

        return memory_store()

    from ..db import SessionLocal, init_db
    from .sql import sql_store

    init_db()
    return sql_store(SessionLocal)
