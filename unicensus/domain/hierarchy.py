# unicensus/domain/hierarchy.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Literal, Optional

from .entities import Bathroom, Campus, Inspection, new_id
from .errors import CycleError, NotFoundError, ValidationError

Direction = Literal["up", "down"]

# -----------------------------------------------------------------------------
# Campus forest operations.
#
# Every function takes the current campus list and returns a new one; inputs
# are never mutated. List position is the source of truth for sibling order,
# and order_index is rewritten from it whenever the order changes.
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class DeleteImpact:
    campus_id: str
    sub_campuses: int
    bathrooms: int
    inspections: int


@dataclass(frozen=True)
class DeletePlan:
    campuses: list[Campus]
    bathrooms: list[Bathroom]
    inspections: list[Inspection]
    removed_campus_ids: frozenset[str]
    removed_bathroom_ids: frozenset[str]
    removed_inspection_ids: frozenset[str]


def _clean_name(name: Optional[str]) -> str:
    s = (name or "").strip()
    if not s:
        raise ValidationError("campus name must not be blank")
    return s


def get_campus(campuses: Iterable[Campus], campus_id: Optional[str]) -> Optional[Campus]:
    if campus_id is None:
        return None
    for c in campuses:
        if c.id == campus_id:
            return c
    return None


def must_get_campus(campuses: Iterable[Campus], campus_id: Optional[str]) -> Campus:
    c = get_campus(campuses, campus_id)
    if c is None:
        raise NotFoundError("campus", campus_id)
    return c


def children(campuses: list[Campus], parent_id: Optional[str]) -> list[Campus]:
    """Direct children of parent_id in list order. parent_id=None returns true roots only."""
    return [c for c in campuses if c.parent_id == parent_id]


def roots(campuses: list[Campus]) -> list[Campus]:
    """Top-level campuses, including any whose parent id points at a missing campus."""
    ids = {c.id for c in campuses}
    return [c for c in campuses if c.parent_id is None or c.parent_id not in ids]


def descendants(campuses: list[Campus], campus_id: str) -> list[Campus]:
    """
    Transitive children, breadth-first. The visited set keeps a malformed
    parent cycle from looping forever; campus_id itself is never returned.
    """
    out: list[Campus] = []
    seen: set[str] = {campus_id}
    frontier = [campus_id]
    while frontier:
        nxt: list[str] = []
        for pid in frontier:
            for c in campuses:
                if c.parent_id == pid and c.id not in seen:
                    seen.add(c.id)
                    out.append(c)
                    nxt.append(c.id)
        frontier = nxt
    return out


def path(campuses: list[Campus], campus_id: str) -> list[Campus]:
    """Root-first ancestor chain ending at campus_id. Empty for an unknown id."""
    by_id = {c.id: c for c in campuses}
    chain: list[Campus] = []
    seen: set[str] = set()
    cur = by_id.get(campus_id)
    while cur is not None and cur.id not in seen:
        seen.add(cur.id)
        chain.append(cur)
        cur = by_id.get(cur.parent_id) if cur.parent_id else None
    chain.reverse()
    return chain


def forest(campuses: list[Campus]) -> list[tuple[Campus, int]]:
    """
    Depth-first outline of the whole forest as (campus, depth) pairs, siblings
    in list order. Campuses stranded on a parent cycle are appended at depth 0
    so nothing disappears from the outline.
    """
    out: list[tuple[Campus, int]] = []
    seen: set[str] = set()

    def walk(c: Campus, depth: int) -> None:
        if c.id in seen:
            return
        seen.add(c.id)
        out.append((c, depth))
        for child in children(campuses, c.id):
            walk(child, depth + 1)

    for r in roots(campuses):
        walk(r, 0)
    for c in campuses:
        if c.id not in seen:
            walk(c, 0)
    return out


def sort_by_order(campuses: Iterable[Campus]) -> list[Campus]:
    # stable: equal indexes keep their stored order
    return sorted(campuses, key=lambda c: c.order_index)


def renumber(campuses: list[Campus]) -> list[Campus]:
    return [c if c.order_index == i else replace(c, order_index=i) for i, c in enumerate(campuses)]


def add_root(campuses: list[Campus], name: str) -> tuple[list[Campus], Campus]:
    clean = _clean_name(name)
    next_index = max((c.order_index for c in campuses), default=-1) + 1
    campus = Campus(id=new_id(), name=clean, parent_id=None, order_index=next_index)
    return [*campuses, campus], campus


def rename(campuses: list[Campus], campus_id: str, name: str) -> tuple[list[Campus], Campus]:
    clean = _clean_name(name)
    target = must_get_campus(campuses, campus_id)
    updated = replace(target, name=clean)
    return [updated if c.id == campus_id else c for c in campuses], updated


def reparent(
    campuses: list[Campus],
    campus_id: str,
    new_parent_id: Optional[str],
) -> tuple[list[Campus], Campus]:
    target = must_get_campus(campuses, campus_id)

    if new_parent_id is not None:
        must_get_campus(campuses, new_parent_id)
        if new_parent_id == campus_id or any(d.id == new_parent_id for d in descendants(campuses, campus_id)):
            raise CycleError(campus_id, new_parent_id)

    if target.parent_id == new_parent_id:
        return list(campuses), target

    updated = replace(target, parent_id=new_parent_id)
    return [updated if c.id == campus_id else c for c in campuses], updated


def reorder(campuses: list[Campus], campus_id: str, direction: Direction) -> list[Campus]:
    """
    Swap campus_id with its previous ("up") or next ("down") sibling in list
    order, then rewrite order_index from list position. At a boundary the
    list comes back unchanged.
    """
    if direction not in ("up", "down"):
        raise ValidationError(f"direction must be up or down, got {direction!r}")

    target = must_get_campus(campuses, campus_id)
    sibling_positions = [i for i, c in enumerate(campuses) if c.parent_id == target.parent_id]
    here = next(i for i in sibling_positions if campuses[i].id == campus_id)
    k = sibling_positions.index(here)

    other_k = k - 1 if direction == "up" else k + 1
    if other_k < 0 or other_k >= len(sibling_positions):
        return list(campuses)

    there = sibling_positions[other_k]
    out = list(campuses)
    out[here], out[there] = out[there], out[here]
    return renumber(out)


def delete_impact(
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    inspections: list[Inspection],
    campus_id: str,
) -> DeleteImpact:
    must_get_campus(campuses, campus_id)
    subtree = {campus_id} | {d.id for d in descendants(campuses, campus_id)}
    bath_ids = {b.id for b in bathrooms if b.campus_id in subtree}
    insp_count = sum(1 for i in inspections if i.bathroom_id in bath_ids)
    return DeleteImpact(
        campus_id=campus_id,
        sub_campuses=len(subtree) - 1,
        bathrooms=len(bath_ids),
        inspections=insp_count,
    )


def delete(
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    inspections: list[Inspection],
    campus_id: str,
) -> DeletePlan:
    """Remove campus_id, its whole subtree, their bathrooms and those bathrooms' inspections."""
    must_get_campus(campuses, campus_id)
    subtree = frozenset({campus_id} | {d.id for d in descendants(campuses, campus_id)})
    bath_ids = frozenset(b.id for b in bathrooms if b.campus_id in subtree)
    insp_ids = frozenset(i.id for i in inspections if i.bathroom_id in bath_ids)

    return DeletePlan(
        campuses=[c for c in campuses if c.id not in subtree],
        bathrooms=[b for b in bathrooms if b.id not in bath_ids],
        inspections=[i for i in inspections if i.id not in insp_ids],
        removed_campus_ids=subtree,
        removed_bathroom_ids=bath_ids,
        removed_inspection_ids=insp_ids,
    )
