"""Extractor for 高菱管理 (髙菱管理) invoice files.

The export interleaves invoice header rows (``INV`` in the unnamed first
column, or ``H`` in the ``H`` column) with detail rows (``M``). Each header
row becomes one line item carrying the invoice amount.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, format_amount, is_nonzero_amount, to_decimal
from billing_import.ingestion.common import RowKind, row_get
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)


@dataclass
class InvoiceGroup:
    header: RawRow
    row_index: int


def _row_type(row: RawRow) -> str:
    return row_get(row, "")


def classify_row(row_type: str, h_column: str) -> str:
    """``INV``/``H`` open an invoice group, ``M`` is a detail line."""

    if not row_type and not h_column:
        return RowKind.BLANK
    if row_type == "INV" or h_column == "H":
        return RowKind.HEADER
    if h_column == "M":
        return RowKind.DATA
    return RowKind.SUMMARY


def parse_compact_date(raw: str) -> str:
    """``20250801`` -> ``2025/08/01``; other text is returned unchanged."""

    text = raw.strip()
    if re.match(r"^\d{8}$", text):
        return f"{text[:4]}/{text[4:6]}/{text[6:8]}"
    return text


def display_month(formatted: str) -> str:
    match = re.match(r"^(\d{4})/(\d{2})", formatted)
    if match:
        return f"{match.group(1)}年{match.group(2)}月"
    return formatted


class TakabishiExtractor(BaseExtractor):
    vendor = "高菱管理"

    def __init__(self, today: Optional[date] = None, vendor: str = "高菱管理") -> None:
        super().__init__(today)
        self.vendor = vendor

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        default_project_id = ""
        for row in rows[:10]:
            candidate = row_get(row, "案件管理ID")
            if candidate and candidate != "案件管理ID":
                default_project_id = candidate
                break
        if not default_project_id:
            logger.warning("No project id in the %s header rows", self.vendor)

        groups = self._group_invoices(rows)
        logger.info("%s: %s invoice groups", self.vendor, len(groups))

        items: List[ItemDescriptor] = []
        for group in groups:
            header = group.header
            invoice_date = parse_compact_date(row_get(header, "請求日付", "請求日"))
            customer_no = row_get(header, "得意先番号")
            placement_no = row_get(header, "配置先番号")

            amount = clean_number(row_get(header, "請求金額"))
            if not is_nonzero_amount(amount):
                total = to_decimal(row_get(header, "請求合計"))
                tax = to_decimal(row_get(header, "消費税", "外税"))
                if total and tax:
                    amount = format_amount(total - tax)
            if not is_nonzero_amount(amount):
                self.skip(group.row_index, "invoice group without amount")
                continue

            project_id = row_get(header, "案件管理ID", "工事番号") or default_project_id
            if not project_id:
                project_id = f"CUST{customer_no}_PLACE{placement_no}"
                logger.warning("Invoice at row %s has no project id; using %s", group.row_index, project_id)

            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=f"得意先{customer_no}_配置先{placement_no}",
                    date=invoice_date,
                    item=f"{self.vendor} {display_month(invoice_date)} 請求分",
                    qty="1",
                    unit="式",
                    price=amount,
                    amount=amount,
                    work_no=customer_no,
                    remarks=f"配置先:{placement_no}",
                    project_id=project_id,
                ),
            )
        return items

    def _group_invoices(self, rows: List[RawRow]) -> List[InvoiceGroup]:
        groups: List[InvoiceGroup] = []
        current = None
        for index, row in enumerate(rows):
            kind = classify_row(_row_type(row), row_get(row, "H"))
            if kind == RowKind.HEADER:
                current = InvoiceGroup(header=row, row_index=index)
                groups.append(current)
            elif kind == RowKind.DATA and current is not None:
                # detail lines; the header carries the invoice amount
                continue
            else:
                self.skip(index, kind)
        return groups
