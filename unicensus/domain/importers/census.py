# unicensus/domain/importers/census.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..entities import Bathroom, Campus, new_id
from .base import cell, parse_csv_rows

# Words that mark the site column of a header row.
HEADER_MARKERS = ("site", "sede", "campus", "building", "edificio")

# Labels of the other census columns; a first row that names the site
# column and one of these is a header, not data.
COLUMN_LABELS = ("floor", "piano", "level", "livello", "code", "codice", "gender", "genere", "tipo", "note")

# Ordered keyword table, first match wins. Female is checked before Male so
# "female"/"femmina" are not caught by the "male" substring.
GENDER_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("Disabled", ("disab", "hand", "acces", "pmr")),
    ("Female", ("donn", "fem", "women", "woman", "lady", "ladies")),
    ("Male", ("uom", "male", "men", "man")),
    ("AllGender", ("all", "unisex", "neutr", "misto", "mixed")),
]

_EXACT_CODES = {"m": "Male", "u": "Male", "f": "Female", "h": "Disabled"}


@dataclass(frozen=True)
class CensusRow:
    site: str
    floor: str
    code: str
    gender: str
    notes: Optional[str] = None

    @classmethod
    def from_values(cls, values: list[str]) -> Optional["CensusRow"]:
        """Positional columns: site, floor, code, gender, notes. None when site/floor/code are missing."""
        site = cell(values, 0)
        floor = cell(values, 1)
        code = cell(values, 2)
        if not (site and floor and code):
            return None
        return cls(
            site=site,
            floor=floor,
            code=code,
            gender=classify_gender(cell(values, 3)),
            notes=cell(values, 4),
        )


@dataclass(frozen=True)
class ImportPlan:
    new_campuses: list[Campus] = field(default_factory=list)
    new_bathrooms: list[Bathroom] = field(default_factory=list)
    skipped_rows: int = 0


def classify_gender(raw: Optional[str]) -> str:
    g = (raw or "").strip().lower()
    if not g:
        return "AllGender"
    if g in _EXACT_CODES:
        return _EXACT_CODES[g]
    for gender, keys in GENDER_KEYWORDS:
        if any(k in g for k in keys):
            return gender
    return "AllGender"


def _is_header(values: list[str]) -> bool:
    first = (cell(values, 0) or "").lower()
    if first in HEADER_MARKERS:
        return True
    if not any(m in first for m in HEADER_MARKERS):
        return False
    rest = [v.lower() for v in values[1:]]
    return any(label in v for v in rest for label in COLUMN_LABELS)


def read_census_rows(data: bytes) -> list[list[str]]:
    """Positional rows from census CSV bytes, header row removed when present."""
    rows = parse_csv_rows(data)
    if rows and _is_header(rows[0]):
        rows = rows[1:]
    return rows


def reconcile(campuses: Iterable[Campus], rows: Iterable[list[str]]) -> ImportPlan:
    """
    Merge census rows into the existing hierarchy without touching it.

    Sites match existing campuses by trimmed, case-insensitive name; when two
    existing campuses share a name the first one in list order wins. Unknown
    sites become new root campuses, created once per distinct name. Nesting is
    never inferred from the input.
    """
    existing = list(campuses)
    by_name: dict[str, str] = {}
    for c in existing:
        by_name.setdefault(c.name.strip().lower(), c.id)

    next_index = max((c.order_index for c in existing), default=-1) + 1
    new_campuses: list[Campus] = []
    new_bathrooms: list[Bathroom] = []
    skipped = 0

    for values in rows:
        row = CensusRow.from_values(values)
        if row is None:
            skipped += 1
            continue

        key = row.site.lower()
        campus_id = by_name.get(key)
        if campus_id is None:
            campus = Campus(id=new_id(), name=row.site, parent_id=None, order_index=next_index)
            next_index += 1
            new_campuses.append(campus)
            by_name[key] = campus.id
            campus_id = campus.id

        new_bathrooms.append(
            Bathroom(
                id=new_id(),
                campus_id=campus_id,
                floor=row.floor,
                code=row.code,
                gender=row.gender,
                notes=row.notes,
            )
        )

    return ImportPlan(new_campuses=new_campuses, new_bathrooms=new_bathrooms, skipped_rows=skipped)
