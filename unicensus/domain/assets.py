# unicensus/domain/assets.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Optional

from .entities import GENDERS, Bathroom, Campus, Inspection, new_id
from .errors import NotFoundError, ValidationError

EDITABLE_FIELDS = ("campus_id", "floor", "code", "gender", "notes")


def _required(value: Optional[str], field_name: str) -> str:
    s = (value or "").strip()
    if not s:
        raise ValidationError(f"bathroom {field_name} must not be blank")
    return s


def _gender(value: Optional[str]) -> str:
    g = (value or "AllGender").strip()
    if g not in GENDERS:
        raise ValidationError(f"gender must be one of {', '.join(GENDERS)}; got {value!r}")
    return g


def _notes(value: Optional[str]) -> Optional[str]:
    s = (value or "").strip()
    return s or None


def get_bathroom(bathrooms: Iterable[Bathroom], bathroom_id: Optional[str]) -> Optional[Bathroom]:
    if bathroom_id is None:
        return None
    for b in bathrooms:
        if b.id == bathroom_id:
            return b
    return None


def must_get_bathroom(bathrooms: Iterable[Bathroom], bathroom_id: Optional[str]) -> Bathroom:
    b = get_bathroom(bathrooms, bathroom_id)
    if b is None:
        raise NotFoundError("bathroom", bathroom_id)
    return b


def _require_campus(campuses: Iterable[Campus], campus_id: Optional[str]) -> None:
    if not any(c.id == campus_id for c in campuses):
        raise NotFoundError("campus", campus_id)


def add_bathroom(
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    *,
    campus_id: str,
    floor: str,
    code: str,
    gender: str = "AllGender",
    notes: Optional[str] = None,
) -> tuple[list[Bathroom], Bathroom]:
    _require_campus(campuses, campus_id)
    b = Bathroom(
        id=new_id(),
        campus_id=campus_id,
        floor=_required(floor, "floor"),
        code=_required(code, "code"),
        gender=_gender(gender),
        notes=_notes(notes),
    )
    return [*bathrooms, b], b


def update_bathroom(
    campuses: list[Campus],
    bathrooms: list[Bathroom],
    bathroom_id: str,
    fields: dict[str, Any],
) -> tuple[list[Bathroom], Bathroom]:
    current = must_get_bathroom(bathrooms, bathroom_id)

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"unknown bathroom fields: {', '.join(sorted(unknown))}")

    changes: dict[str, Any] = {}
    if "campus_id" in fields:
        _require_campus(campuses, fields["campus_id"])
        changes["campus_id"] = fields["campus_id"]
    if "floor" in fields:
        changes["floor"] = _required(fields["floor"], "floor")
    if "code" in fields:
        changes["code"] = _required(fields["code"], "code")
    if "gender" in fields:
        changes["gender"] = _gender(fields["gender"])
    if "notes" in fields:
        changes["notes"] = _notes(fields["notes"])

    updated = replace(current, **changes)
    return [updated if b.id == bathroom_id else b for b in bathrooms], updated


def delete_bathroom(
    bathrooms: list[Bathroom],
    inspections: list[Inspection],
    bathroom_id: str,
) -> tuple[list[Bathroom], list[Inspection], list[str]]:
    """Drop the bathroom and its inspections. Returns survivors plus the removed inspection ids."""
    must_get_bathroom(bathrooms, bathroom_id)
    removed = [i.id for i in inspections if i.bathroom_id == bathroom_id]
    return (
        [b for b in bathrooms if b.id != bathroom_id],
        [i for i in inspections if i.bathroom_id != bathroom_id],
        removed,
    )


def bathrooms_for(bathrooms: Iterable[Bathroom], campus_id: str) -> list[Bathroom]:
    return sorted((b for b in bathrooms if b.campus_id == campus_id), key=lambda b: (b.floor, b.code))
