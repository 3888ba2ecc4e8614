from __future__ import annotations

from typing import Any, Optional


class CensusError(Exception):
    """Base class for every failure raised by the domain and store layers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CensusError):
    """Blank or malformed input. Raised before any mutation."""


class CycleError(CensusError):
    """A reparent would make a campus its own ancestor. Raised before any mutation."""

    def __init__(self, campus_id: str, new_parent_id: str) -> None:
        super().__init__(f"campus {campus_id} cannot move under {new_parent_id}: would create a cycle")
        self.campus_id = campus_id
        self.new_parent_id = new_parent_id


class NotFoundError(CensusError):
    def __init__(self, kind: str, entity_id: Optional[str]) -> None:
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class PersistenceError(CensusError):
    """
    A store call failed. When raised by the workspace, the in-memory change is
    already applied and the failed write sits in the pending list.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[str] = None,
        action: Optional[str] = None,
        entity_id: Optional[str] = None,
        pending: Any = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.action = action
        self.entity_id = entity_id
        self.pending = pending


class GenerationError(CensusError):
    """The draft-ticket generator failed. Always recovered with the fallback draft."""
