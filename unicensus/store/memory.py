# unicensus/store/memory.py
from __future__ import annotations

import dataclasses
from typing import Any, TypeVar

from ..domain.entities import Campus
from ..domain.errors import PersistenceError
from .base import CampusCollection, EntityCollection, EntityStore

E = TypeVar("E")


class MemoryCollection(EntityCollection[E]):
    """Process-local store used for demo mode and tests. Insertion order is list order."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._rows: dict[str, E] = {}

    async def list(self) -> list[E]:
        return list(self._rows.values())

    async def create(self, entity: E) -> None:
        eid = getattr(entity, "id")
        if eid in self._rows:
            raise PersistenceError(f"{self.kind} {eid} already exists", kind=self.kind, action="create", entity_id=eid)
        self._rows[eid] = entity

    async def update(self, entity_id: str, fields: dict[str, Any]) -> None:
        current = self._rows.get(entity_id)
        if current is None:
            raise PersistenceError(
                f"{self.kind} {entity_id} does not exist", kind=self.kind, action="update", entity_id=entity_id
            )
        known = {f.name for f in dataclasses.fields(current)}
        unknown = set(fields) - known
        if unknown:
            raise PersistenceError(
                f"unknown {self.kind} fields: {', '.join(sorted(unknown))}",
                kind=self.kind,
                action="update",
                entity_id=entity_id,
            )
        self._rows[entity_id] = dataclasses.replace(current, **fields)

    async def delete(self, entity_id: str) -> None:
        self._rows.pop(entity_id, None)


class MemoryCampusCollection(MemoryCollection[Campus], CampusCollection):
    def __init__(self) -> None:
        super().__init__("campus")

    async def reorder_all(self, campuses: list[Campus]) -> None:
        self._rows = {c.id: c for c in campuses}


def memory_store() -> EntityStore:
    return EntityStore(
        campuses=MemoryCampusCollection(),
        bathrooms=MemoryCollection("bathroom"),
        inspections=MemoryCollection("inspection"),
        tickets=MemoryCollection("ticket"),
    )
