# tests/test_hierarchy_delete_cascade.py
from __future__ import annotations

from datetime import datetime

import pytest

from unicensus.domain.entities import Bathroom, Campus, Inspection
from unicensus.domain.errors import NotFoundError
from unicensus.domain.hierarchy import delete, delete_impact


def _fixture():
    campuses = [
        Campus(id="villa", name="Villa", order_index=0),
        Campus(id="annex", name="Annex", parent_id="villa", order_index=1),
        Campus(id="shed", name="Shed", parent_id="annex", order_index=2),
        Campus(id="science", name="Science", order_index=3),
    ]
    bathrooms = [
        Bathroom(id="b-villa", campus_id="villa", floor="G", code="V1"),
        Bathroom(id="b-shed", campus_id="shed", floor="G", code="S1"),
        Bathroom(id="b-sci", campus_id="science", floor="1", code="X1"),
    ]
    d = datetime(2026, 3, 1)
    inspections = [
        Inspection(id="i1", bathroom_id="b-villa", date=d),
        Inspection(id="i2", bathroom_id="b-shed", date=d),
        Inspection(id="i3", bathroom_id="b-shed", date=d),
        Inspection(id="i4", bathroom_id="b-sci", date=d),
    ]
    return campuses, bathrooms, inspections


def test_delete_impact_counts_subtree():
    campuses, bathrooms, inspections = _fixture()
    impact = delete_impact(campuses, bathrooms, inspections, "villa")
    assert impact.sub_campuses == 2
    assert impact.bathrooms == 2
    assert impact.inspections == 3


def test_delete_removes_exactly_the_subtree():
    campuses, bathrooms, inspections = _fixture()
    plan = delete(campuses, bathrooms, inspections, "villa")

    assert plan.removed_campus_ids == {"villa", "annex", "shed"}
    assert plan.removed_bathroom_ids == {"b-villa", "b-shed"}
    assert plan.removed_inspection_ids == {"i1", "i2", "i3"}

    assert [c.id for c in plan.campuses] == ["science"]
    assert [b.id for b in plan.bathrooms] == ["b-sci"]
    assert [i.id for i in plan.inspections] == ["i4"]

    # inputs are untouched
    assert len(campuses) == 4 and len(bathrooms) == 3 and len(inspections) == 4


def test_delete_leaf_keeps_parent():
    campuses, bathrooms, inspections = _fixture()
    plan = delete(campuses, bathrooms, inspections, "shed")
    assert plan.removed_campus_ids == {"shed"}
    assert {c.id for c in plan.campuses} == {"villa", "annex", "science"}


def test_delete_unknown_campus():
    campuses, bathrooms, inspections = _fixture()
    with pytest.raises(NotFoundError):
        delete(campuses, bathrooms, inspections, "ghost")
