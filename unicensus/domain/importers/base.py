# unicensus/domain/importers/base.py
from __future__ import annotations

import csv
from io import StringIO
from typing import Any, Optional


def _clean_str(x: Any) -> str:
    return (str(x).strip() if x is not None else "").strip()


def _sniff_delimiter(text: str) -> str:
    # First non-blank line decides; semicolon wins ties (spreadsheet exports in EU locales).
    for line in text.splitlines():
        if line.strip():
            return ";" if line.count(";") >= line.count(",") and ";" in line else ","
    return ","


def parse_csv_rows(data: bytes) -> list[list[str]]:
    """
    Decode CSV bytes into trimmed positional rows. Accepts comma or semicolon
    delimiters and a UTF-8 BOM; fully blank lines are dropped.
    """
    text = data.decode("utf-8-sig", errors="replace")
    reader = csv.reader(StringIO(text), delimiter=_sniff_delimiter(text))
    out: list[list[str]] = []
    for row in reader:
        cells = [_clean_str(c) for c in row]
        if any(cells):
            out.append(cells)
    return out


def cell(row: list[str], index: int) -> Optional[str]:
    if index >= len(row):
        return None
    v = _clean_str(row[index])
    return v or None
