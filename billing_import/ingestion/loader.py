"""Read vendor files from disk into headered rows for the CLI."""
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

logger = logging.getLogger(__name__)

CSV_ENCODINGS = ("utf-8-sig", "cp932")
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


@dataclass
class SourceFile:
    """One decoded vendor file: display name, header row and data rows."""

    filename: str
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)


def unique_headers(raw: Sequence[Any]) -> List[str]:
    """Make header names unique by suffixing repeats (``金額``, ``金額_1``)."""

    seen: Dict[str, int] = {}
    headers: List[str] = []
    for value in raw:
        name = "" if value is None else str(value).strip()
        count = seen.get(name, 0)
        seen[name] = count + 1
        headers.append(name if count == 0 else f"{name}_{count}")
    return headers


def _cell(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y/%m/%d")
    return "" if value is None else value


def rows_from_table(table: Sequence[Sequence[Any]]) -> SourceFile:
    """Use the first row as headers and key every later row by them."""

    if not table:
        return SourceFile(filename="")
    headers = unique_headers(table[0])
    rows: List[Dict[str, Any]] = []
    for raw in table[1:]:
        cells = [_cell(v) for v in raw]
        if not any(str(c).strip() for c in cells):
            continue
        cells += [""] * (len(headers) - len(cells))
        rows.append(dict(zip(headers, cells)))
    return SourceFile(filename="", headers=headers, rows=rows)


def decode_csv(payload: bytes) -> str:
    for encoding in CSV_ENCODINGS:
        try:
            return payload.decode(encoding)
        except UnicodeDecodeError:
            logger.debug("CSV is not %s", encoding)
    raise ValueError("CSV file is neither UTF-8 nor CP932 encoded")


def read_csv(path: Path) -> SourceFile:
    text = decode_csv(path.read_bytes())
    table = list(csv.reader(io.StringIO(text)))
    source = rows_from_table(table)
    source.filename = path.name
    return source


def read_excel(path: Path) -> SourceFile:
    """Read the first worksheet of an ``.xlsx`` workbook with openpyxl."""

    try:
        from openpyxl import load_workbook
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("openpyxl is required to read Excel files") from exc

    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        table = [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()
    source = rows_from_table(table)
    source.filename = path.name
    return source


def load_source(path: Path) -> SourceFile:
    """Load a CSV or Excel vendor file into a ``SourceFile``."""

    path = Path(path)
    if path.suffix.lower() in EXCEL_SUFFIXES:
        source = read_excel(path)
    else:
        source = read_csv(path)
    logger.info("Loaded %s: %s rows, %s columns", path.name, len(source.rows), len(source.headers))
    return source
