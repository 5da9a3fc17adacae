"""Extractor for トキワシステム free-form invoices.

Columns move between files, so each row is read heuristically: the last
three non-zero numbers are quantity, unit price and amount, and the item
name is the longest non-numeric text.
"""
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number
from billing_import.ingestion.common import (
    RowKind,
    find_header_project_id,
    is_blank,
    missing_project_id,
    row_project_id,
    row_values,
    should_skip_row,
    trailing_numbers,
)
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)

HEADER_TOKENS = ("品名", "商品", "金額", "数量")
FALLBACK_DATA_START = 10

# Checked on the first cell, on top of the common letterhead/total patterns.
HEADER_PATTERNS = ("品名", "商品", "金額", "数量", "トキワ")


def classify_row(values: Sequence[str]) -> str:
    if is_blank(values):
        return RowKind.BLANK
    if should_skip_row(values, HEADER_PATTERNS):
        return RowKind.HEADER
    return RowKind.DATA


def read_row(values: Sequence[str]) -> Tuple[str, str, str, str, str]:
    """Return ``(item, qty, unit, price, amount)`` guessed from one row."""

    qty, price, amount = trailing_numbers(values)
    if not amount:
        return "", "1", "", "", ""

    item = ""
    for value in values:
        if len(value) > 2 and not clean_number(value) and len(value) > len(item):
            item = value

    unit = next((v for v in values if v and len(v) < 5 and not clean_number(v) and v != item), "")
    return item, qty or "1", unit, price, amount


class TokiwaSystemExtractor(BaseExtractor):
    vendor = "トキワシステム"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        data_start = self.locate_data_start(rows, headers, HEADER_TOKENS, FALLBACK_DATA_START)
        metadata = self.extract_metadata(rows, max_rows=min(data_start, 15))
        site = metadata.site_name or metadata.project_name
        header_project_id = find_header_project_id(
            rows, excluded=("請求", "株式会社"), check_next_row=False
        )
        if not header_project_id:
            logger.warning("No project id in the %s header; checking each row", self.vendor)


        items: List[ItemDescriptor] = []
        for index in range(data_start, len(rows)):
            row = rows[index]
            values = row_values(row)
            kind = classify_row(values)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            item, qty, unit, price, amount = read_row(values)
            if not amount:
                self.skip(index, "no amount")
                continue
            if not item:
                self.skip(index, "no item name")
                continue

            project_id = row_project_id(row) or header_project_id or missing_project_id(site or "UNKNOWN", index)
            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=site,
                    date=metadata.invoice_date,
                    item=item,
                    qty=qty,
                    unit=unit or "個",
                    price=price or amount,
                    amount=amount,
                    project_id=project_id,
                ),
            )
        return items
