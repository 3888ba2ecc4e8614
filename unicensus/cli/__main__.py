# unicensus/cli/__main__.py
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from unicensus.cli.seed_demo import seed_demo
from unicensus.domain.errors import CensusError
from unicensus.logging_config import configure_logging
from unicensus.services.workspace import FacilityWorkspace, build_workspace
from unicensus.store.base import build_store


def _write_report(report, out_dir: Optional[str]) -> Path:
    target = Path(out_dir or ".") / report.filename
    target.write_text(report.content, encoding="utf-8")
    return target


async def _loaded(ws: FacilityWorkspace) -> FacilityWorkspace:
    await ws.load()
    return ws


async def _seed() -> dict:
    # demo data must not depend on a live generator
    ws = await _loaded(FacilityWorkspace(build_store(), None))
    out = await seed_demo(ws)
    return {"ok": True, "skipped": out.skipped, "campuses": out.campuses, "bathrooms": out.bathrooms, "tickets": out.tickets}


async def _import(path: str, dry_run: bool) -> dict:
    ws = await _loaded(build_workspace())
    data = Path(path).read_bytes()
    if dry_run:
        plan = ws.preview_import(data)
        return {
            "ok": True,
            "applied": False,
            "new_campuses": [c.name for c in plan.new_campuses],
            "new_bathrooms": len(plan.new_bathrooms),
            "skipped_rows": plan.skipped_rows,
        }
    res = await ws.bulk_import(data)
    return {
        "ok": not res.unsynced,
        "applied": True,
        "new_campuses": [c.name for c in res.new_campuses],
        "new_bathrooms": len(res.new_bathrooms),
        "skipped_rows": res.skipped_rows,
        "unsynced": len(res.unsynced),
    }


async def _export(kind: str, out_dir: Optional[str], campus_id: Optional[str]) -> dict:
    ws = await _loaded(build_workspace())
    report = ws.active_work_report() if kind == "active-work" else ws.census_report(campus_id)
    return {"ok": True, "file": str(_write_report(report, out_dir))}


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="unicensus")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("seed-demo", help="load the demo campuses, bathrooms and tickets")

    imp = sub.add_parser("import-census", help="merge a census CSV into the hierarchy")
    imp.add_argument("file")
    imp.add_argument("--dry-run", action="store_true", help="show what would be created")

    aw = sub.add_parser("export-active-work", help="write the active work CSV")
    aw.add_argument("--out-dir", default=None)

    ce = sub.add_parser("export-census", help="write the census CSV")
    ce.add_argument("--out-dir", default=None)
    ce.add_argument("--campus-id", default=None, help="limit to a campus and its sub-campuses")

    args = p.parse_args(argv)
    configure_logging()

    try:
        if args.command == "seed-demo":
            out = asyncio.run(_seed())
        elif args.command == "import-census":
            out = asyncio.run(_import(args.file, args.dry_run))
        elif args.command == "export-active-work":
            out = asyncio.run(_export("active-work", args.out_dir, None))
        else:
            out = asyncio.run(_export("census", args.out_dir, args.campus_id))
    except CensusError as e:
        print({"ok": False, "error": e.message}, file=sys.stderr)
        return 1

    print(out)
    return 0 if out.get("ok") else 1


if __name__ == "__main__":
    sys.exit(main())
