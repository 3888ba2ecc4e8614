# tests/test_hierarchy_queries.py
from __future__ import annotations

import pytest

from unicensus.domain.entities import Campus
from unicensus.domain.errors import NotFoundError, ValidationError
from unicensus.domain.hierarchy import descendants, forest, path, rename, roots


def test_path_is_root_first():
    cs = [
        Campus(id="r", name="Root"),
        Campus(id="m", name="Mid", parent_id="r"),
        Campus(id="l", name="Leaf", parent_id="m"),
    ]
    assert [c.id for c in path(cs, "l")] == ["r", "m", "l"]
    assert path(cs, "missing") == []


def test_malformed_cycle_terminates():
    # x <-> y cycle that bypasses reparent validation
    cs = [
        Campus(id="x", name="X", parent_id="y"),
        Campus(id="y", name="Y", parent_id="x"),
        Campus(id="z", name="Z"),
    ]
    assert {c.id for c in descendants(cs, "x")} == {"y"}
    assert [c.id for c in path(cs, "x")] == ["y", "x"]

    outline = forest(cs)
    assert sorted(c.id for c, _ in outline) == ["x", "y", "z"]


def test_forest_depths_and_dangling_parent_is_root():
    cs = [
        Campus(id="a", name="A"),
        Campus(id="a1", name="A1", parent_id="a"),
        Campus(id="orphan", name="Orphan", parent_id="deleted"),
    ]
    assert [c.id for c in roots(cs)] == ["a", "orphan"]
    assert [(c.id, d) for c, d in forest(cs)] == [("a", 0), ("a1", 1), ("orphan", 0)]


def test_rename():
    cs = [Campus(id="a", name="A")]
    out, c = rename(cs, "a", " Library ")
    assert c.name == "Library"
    assert cs[0].name == "A"
    with pytest.raises(ValidationError):
        rename(cs, "a", "")
    with pytest.raises(NotFoundError):
        rename(cs, "b", "B")
