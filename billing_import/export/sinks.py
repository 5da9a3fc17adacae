"""Render billing import records as workbook or CSV bytes and write them out."""
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from billing_import.core.models import LineItem
from billing_import.export.templates import MASTER_COLUMNS, records_to_template_rows

logger = logging.getLogger(__name__)

SHEET_TITLE = "ANDPAD Import"

# Columns whose consecutive repeated values are merged vertically in workbooks.
MERGE_COLUMNS = ("取引先", "取引設定", "担当者(発注側)", "現場監督")

OUTPUT_FORMATS = ("xlsx", "csv")


def ensure_output_dir(output_path: Path) -> None:
    """Create parent folders for sink outputs when missing."""

    output_path.parent.mkdir(parents=True, exist_ok=True)


def column_width(column: str) -> int:
    """Character width for a template column, chosen from its name."""

    if "案件管理ID" in column:
        return 18
    if "管理ID" in column:
        return 15
    if "取引先" in column:
        return 12
    if "請求名" in column or "明細名" in column:
        return 35
    if "担当者" in column or "監督" in column:
        return 12
    if "日" in column:
        return 12
    if "金額" in column or "単価" in column:
        return 12
    if "備考" in column:
        return 30
    return 10


def merge_runs(values: Sequence[str]) -> List[Tuple[int, int]]:
    """Return ``(start, end)`` index pairs of consecutive equal non-empty values."""

    runs: List[Tuple[int, int]] = []
    start = 0
    for index in range(1, len(values) + 1):
        if index < len(values) and values[index] == values[start]:
            continue
        if index - 1 > start and values[start]:
            runs.append((start, index - 1))
        start = index
    return runs


def render_excel(records: Iterable[LineItem]) -> bytes:
    """Render records into a single-sheet ``.xlsx`` workbook using openpyxl."""

    try:
        from openpyxl import Workbook
        from openpyxl.styles import Alignment
        from openpyxl.utils import get_column_letter
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ImportError("openpyxl is required for Excel output") from exc

    rows = records_to_template_rows(records)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(MASTER_COLUMNS)
    for row in rows:
        sheet.append([row[column] for column in MASTER_COLUMNS])

    for position, column in enumerate(MASTER_COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(position)].width = column_width(column)

    for column in MERGE_COLUMNS:
        position = MASTER_COLUMNS.index(column) + 1
        for start, end in merge_runs([row[column] for row in rows]):
            # Data starts on worksheet row 2.
            sheet.merge_cells(start_row=start + 2, start_column=position, end_row=end + 2, end_column=position)
            sheet.cell(row=start + 2, column=position).alignment = Alignment(vertical="center")

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.debug("Rendered %s rows to workbook", len(rows))
    return buffer.getvalue()


def render_csv(records: Iterable[LineItem]) -> bytes:
    """Render records as UTF-8 CSV with a byte-order mark and CRLF rows."""

    rows = records_to_template_rows(records)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=MASTER_COLUMNS, lineterminator="\r\n")
    writer.writeheader()
    writer.writerows(rows)
    logger.debug("Rendered %s rows to CSV", len(rows))
    return buffer.getvalue().encode("utf-8-sig")


RENDERERS = {
    "xlsx": render_excel,
    "csv": render_csv,
}


def render(records: Iterable[LineItem], output_format: str = "xlsx") -> bytes:
    renderer = RENDERERS.get(output_format)
    if renderer is None:
        raise ValueError(f"Unsupported output format: {output_format}")
    return renderer(records)


def write_output(content: bytes, output_path: Path) -> Path:
    """Write rendered bytes to ``output_path``, creating folders as needed."""

    ensure_output_dir(output_path)
    output_path.write_bytes(content)
    logger.info("Wrote %s bytes to %s", len(content), output_path)
    return output_path
