# tests/test_seed_demo.py
from __future__ import annotations

import asyncio

from unicensus.cli.__main__ import main
from unicensus.cli.seed_demo import seed_demo
from unicensus.config import settings
from unicensus.services.workspace import FacilityWorkspace
from unicensus.store.memory import memory_store


def test_seed_demo_builds_site_once():
    ws = FacilityWorkspace(memory_store(), None)

    first = asyncio.run(seed_demo(ws))
    assert first.skipped is False
    assert sorted(c.name for c in ws.campuses) == ["Economics Campus", "Historic Villa", "Science Hub", "Villa Annex"]

    villa = next(c for c in ws.campuses if c.name == "Historic Villa")
    annex = next(c for c in ws.campuses if c.name == "Villa Annex")
    assert annex.parent_id == villa.id
    assert len(ws.bathrooms) == 4

    types = sorted(t.type for t in ws.tickets)
    assert types == ["Maintenance", "WorkRequest"]
    wr = next(t for t in ws.tickets if t.type == "WorkRequest")
    assert wr.status == "InProgress"
    assert wr.estimated_cost == 1200.0
    assert wr.notes[0].author == "Admin"

    again = asyncio.run(seed_demo(ws))
    assert again.skipped is True
    assert len(ws.campuses) == 4


def test_cli_export_census_writes_file(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "store_backend", "memory")
    monkeypatch.setattr(settings, "draft_api_key", None)
    monkeypatch.setattr(settings, "draft_base_url", None)

    assert main(["export-census", "--out-dir", str(tmp_path)]) == 0
    files = list(tmp_path.glob("census_all_*.csv"))
    assert len(files) == 1
    assert files[0].read_text(encoding="utf-8").startswith('"Site","Parent site"')
