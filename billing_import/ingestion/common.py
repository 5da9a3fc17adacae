"""Shared helpers for reading raw invoice rows.

Rows come either as header -> value dictionaries or as plain sequences of
cells; every helper accepts both so extractors can stay position-based where
the vendor layout has no stable headers.
"""
from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from billing_import.core.models import RawRow
from billing_import.core.money import clean_number, is_nonzero_amount

logger = logging.getLogger(__name__)

PROJECT_ID_KEYWORDS = ("案件管理ID", "工事番号", "現場No", "物件No")

# First-cell patterns that mark letterhead, bank details and totals.
COMMON_SKIP_PATTERNS = (
    "請求書",
    "株式会社",
    "御中",
    "〒",
    "TEL",
    "FAX",
    "登録番号",
    "振込先",
    "銀行",
    "合計",
    "小計",
    "消費税",
)

FULL_DATE = re.compile(r"^\d{4}/\d{1,2}/\d{1,2}$")
EMBEDDED_DATE = re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})")
MONTH_DAY = re.compile(r"^(\d{1,2})月(\d{1,2})日?")
PERIOD = re.compile(r"(\d{4})年(\d{1,2})月")

EXCEL_EPOCH = date(1899, 12, 30)


class RowKind:
    """Labels returned by the per-vendor ``classify_row`` functions."""

    BLANK = "blank"
    HEADER = "header"
    SUMMARY = "summary"
    SECTION = "section"
    DATA = "data"


def cell_text(value: Any) -> str:
    """Render one cell as trimmed text (integral floats lose their ``.0``)."""

    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y/%m/%d")
    if isinstance(value, date):
        return value.strftime("%Y/%m/%d")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def row_values(row: RawRow) -> List[str]:
    if isinstance(row, Mapping):
        return [cell_text(v) for v in row.values()]
    return [cell_text(v) for v in row]


def row_keys(row: RawRow) -> List[str]:
    if isinstance(row, Mapping):
        return [str(k) for k in row.keys()]
    return []


def row_text(row: RawRow, include_keys: bool = False) -> str:
    parts = row_keys(row) if include_keys else []
    return "|".join(parts + row_values(row))


def row_get(row: RawRow, *keys: str) -> str:
    """Return the first non-empty value among ``keys`` (headered rows only)."""

    if not isinstance(row, Mapping):
        return ""
    for key in keys:
        value = cell_text(row.get(key))
        if value:
            return value
    return ""


def is_blank(values: Sequence[str]) -> bool:
    return not any(values)


def should_skip_row(values: Sequence[str], extra_patterns: Iterable[str] = ()) -> bool:
    first = values[0] if values else ""
    patterns = COMMON_SKIP_PATTERNS + tuple(extra_patterns)
    return any(pattern in first for pattern in patterns)


def format_date(raw: Any, today: Optional[date] = None) -> str:
    """Normalize a source date to ``YYYY/M/D``.

    Accepts ``YYYY/M/D`` (returned unchanged), ``YYYY-MM-DD``, ``YYYYMMDD``,
    Excel serial numbers and ``M/D`` (year taken from ``today``). Anything
    else is returned as-is.
    """

    text = cell_text(raw)
    if not text:
        return ""
    if FULL_DATE.match(text):
        return text

    iso = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})$", text)
    if iso:
        return f"{iso.group(1)}/{int(iso.group(2))}/{int(iso.group(3))}"

    if re.match(r"^\d{8}$", text):
        return f"{text[:4]}/{int(text[4:6])}/{int(text[6:8])}"

    if len(text) > 4 and re.match(r"^\d+(\.\d+)?$", text):
        try:
            converted = EXCEL_EPOCH + timedelta(days=int(float(text)))
        except OverflowError:
            return text
        return f"{converted.year}/{converted.month}/{converted.day}"

    if re.match(r"^\d{1,2}/\d{1,2}$", text):
        year = (today or date.today()).year
        return f"{year}/{text}"

    return text


def split_date(formatted: str) -> Optional[Tuple[int, int, int]]:
    match = re.match(r"^(\d{4})/(\d{1,2})/(\d{1,2})$", formatted or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2)), int(match.group(3))


def payment_due_date(invoice_date: str, today: Optional[date] = None) -> str:
    """Return the last calendar day of the month after ``invoice_date``."""

    parts = split_date(format_date(invoice_date, today))
    if parts is None:
        return ""
    year, month, _ = parts
    if not 1 <= month <= 12:
        logger.warning("Cannot compute due date from %r", invoice_date)
        return ""
    year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    last_day = calendar.monthrange(year, month)[1]
    return f"{year}/{month}/{last_day}"


def zero_padded_date(match: re.Match) -> str:
    return f"{match.group(1)}/{int(match.group(2)):02d}/{int(match.group(3)):02d}"


def parse_month_day(text: str, year: int) -> str:
    """Turn ``8月12日`` into ``YYYY/8/12``; return ``""`` if the text is not such a date."""

    match = MONTH_DAY.match(text.strip())
    if not match:
        return ""
    return f"{year}/{int(match.group(1))}/{int(match.group(2))}"


def parse_period(text: str) -> Optional[Tuple[int, int]]:
    """Find a billing period like ``2025年8月`` and return ``(year, month)``."""

    match = PERIOD.search(text)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def trailing_numbers(values: Sequence[str]) -> Tuple[str, str, str]:
    """Infer ``(quantity, unit_price, amount)`` from a row without stable columns.

    The last three non-zero numeric cells are taken in that order, amount last.
    Missing positions come back as ``""``.
    """

    numbers = [clean_number(v) for v in values if is_nonzero_amount(v)]
    tail = numbers[-3:]
    padded = [""] * (3 - len(tail)) + tail
    return padded[0], padded[1], padded[2]


def _is_candidate_id(value: str, keywords: Sequence[str], excluded: Sequence[str]) -> bool:
    if not value or value in keywords:
        return False
    if FULL_DATE.match(value):
        return False
    return not any(token in value for token in excluded)


def find_header_project_id(
    rows: Sequence[RawRow],
    keywords: Sequence[str] = PROJECT_ID_KEYWORDS,
    max_rows: int = 15,
    excluded: Sequence[str] = ("請求", "株式会社", "TEL"),
    next_row_excluded: Sequence[str] = (),
    check_next_row: bool = True,
    column_keys: Sequence[str] = (),
) -> str:
    """Recover a project id from the letterhead region of an invoice.

    A row whose text contains one of ``keywords`` flags the region. The first
    value in that row that is not a keyword, not a full date and contains none
    of the ``excluded`` tokens wins; otherwise the first non-date value of the
    following row is used. When ``column_keys`` is given, a dedicated column
    holding a real value also counts.
    """

    for index, row in enumerate(rows[:max_rows]):
        values = row_values(row)
        text = "|".join(values)
        if any(keyword in text for keyword in keywords):
            for value in values:
                if _is_candidate_id(value, keywords, excluded):
                    logger.debug("Project id %s found in header row %s", value, index)
                    return value
            if check_next_row and index + 1 < len(rows):
                for value in row_values(rows[index + 1]):
                    if _is_candidate_id(value, (), next_row_excluded):
                        logger.debug("Project id %s found below header row %s", value, index)
                        return value

        for key in column_keys:
            value = row_get(row, key)
            if value and value != key:
                logger.debug("Project id %s found in column %s", value, key)
                return value
    return ""


def row_project_id(row: RawRow, keys: Sequence[str] = PROJECT_ID_KEYWORDS) -> str:
    return row_get(row, *keys)


def missing_project_id(label: str, index: int) -> str:
    """Build the sentinel used when no project id can be recovered for a row."""

    sentinel = re.sub(r"\s+", "_", f"MISSING_ID_{label}_ROW{index}")
    logger.warning("No project id for row %s; using %s", index, sentinel)
    return sentinel
