"""Extractor for クリーン産業 waste-collection invoices.

The sheet has a letterhead block, then a header row naming 業者名, 現場名
and 品名, followed by positional data columns:
業者名, 現場名, 月日, 売上No, 品名, 数量, 単位, 単価, 小計, 消費税, 合計.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence

from billing_import.core.errors import AlreadyConvertedError
from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount, unit_price_from
from billing_import.ingestion.common import (
    EMBEDDED_DATE,
    FULL_DATE,
    PROJECT_ID_KEYWORDS,
    RowKind,
    find_header_project_id,
    row_keys,
    row_project_id,
    row_text,
    row_values,
    zero_padded_date,
)
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)

VENDOR = "クリーン産業"
CLIENT_NAME = "ALLAGI株式会社"

IMPORT_LAYOUT_COLUMNS = ("請求管理ID", "取引先", "取引設定", "担当者(発注側)", "請求名", "案件管理ID")
HEADER_TOKENS = ("業者名", "現場名", "品名")
INVOICE_DATE_KEYWORDS = ("請求年月日", "請求日", "発行日")
FALLBACK_DATA_START = 8

SKIP_VENDOR_PATTERNS = (
    "株式会社クリーン産業",
    "TEL",
    "FAX",
    "〒",
    "530-",
    "100-",
    "600-",
    "振込先",
    "登録番号",
    "大阪府",
    "東京都",
    "京都府",
)
SKIP_ROW_KEYWORDS = ("請求年月日", "今回御請求額", "今回取引額", "コード", "御中")


def classify_row(values: Sequence[str]) -> str:
    """Classify one positional row of a クリーン産業 sheet."""

    if not any(values):
        return RowKind.BLANK

    vendor_name = values[0] if values else ""
    item_name = values[4] if len(values) > 4 else ""

    if item_name.startswith("【") or vendor_name.startswith("【"):
        return RowKind.SUMMARY
    if vendor_name == "業者名" or item_name == "品名":
        return RowKind.HEADER
    if any(pattern in vendor_name for pattern in SKIP_VENDOR_PATTERNS):
        return RowKind.HEADER
    if sum(1 for v in values if v) <= 2:
        return RowKind.HEADER
    text = "|".join(values)
    if any(keyword in text for keyword in SKIP_ROW_KEYWORDS):
        return RowKind.HEADER
    return RowKind.DATA


def is_import_layout(rows: Sequence[RawRow], headers: Sequence[str] = ()) -> bool:
    """True when the file already carries at least three import-layout columns."""

    columns = list(headers) or (row_keys(rows[0]) if rows else [])
    return sum(1 for column in IMPORT_LAYOUT_COLUMNS if column in columns) >= 3


class CleanIndustryExtractor(BaseExtractor):
    vendor = VENDOR

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        if is_import_layout(rows, headers):
            logger.warning("%s file is already in the import layout", self.vendor)
            raise AlreadyConvertedError(self.vendor)

        header_project_id = find_header_project_id(
            rows,
            PROJECT_ID_KEYWORDS,
            excluded=("請求", "株式会社", "ALLAGI", "TEL", "FAX"),
            next_row_excluded=("請求", "株式会社"),
        )
        if not header_project_id:
            logger.warning("No project id in the %s letterhead; falling back to per-row or site ids", self.vendor)

        data_start = self.locate_data_start(rows, headers, HEADER_TOKENS, FALLBACK_DATA_START, min_matches=3)

        invoice_date = self._invoice_date(rows, data_start)
        logger.info("%s invoice date %s", self.vendor, invoice_date)

        items: List[ItemDescriptor] = []
        for index in range(data_start, len(rows)):
            row = rows[index]
            values = row_values(row)
            kind = classify_row(values)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            padded = values + [""] * (11 - len(values))
            vendor_name, site, _, sales_no, item_name, quantity, unit, unit_price, subtotal, _, total = padded[:11]

            if len(item_name) < 2:
                self.skip(index, "no item name")
                continue
            if item_name == vendor_name or VENDOR in item_name:
                self.skip(index, "item is the company name")
                continue

            amount = clean_number(subtotal) or clean_number(total)
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            qty = clean_number(quantity) or "1"
            price = clean_number(unit_price) or unit_price_from(amount, qty) or amount

            project_id = row_project_id(row) or header_project_id
            if not project_id:
                project_id = re.sub(r"\s+", "_", f"SITE_{site}")
                logger.warning("Row %s has no project id; using site-based id %s", index, project_id)

            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=site or CLIENT_NAME,
                    date=invoice_date,
                    item=item_name,
                    qty=qty,
                    unit=unit or "式",
                    price=price,
                    amount=amount,
                    work_no=sales_no,
                    remarks=vendor_name if vendor_name != CLIENT_NAME else "",
                    project_id=project_id,
                ),
            )
        return items

    def _invoice_date(self, rows: Sequence[RawRow], data_start: int) -> str:
        """Pick the invoice date: keyword-flagged date, else latest header date, else latest line date."""

        header_dates: List[str] = []
        for index, row in enumerate(rows[: min(15, data_start)]):
            text = row_text(row)
            if any(keyword in text for keyword in INVOICE_DATE_KEYWORDS):
                if index + 1 < len(rows):
                    match = EMBEDDED_DATE.search(row_text(rows[index + 1]))
                    if match:
                        return zero_padded_date(match)
                match = EMBEDDED_DATE.search(text)
                if match:
                    return zero_padded_date(match)
            header_dates.extend(zero_padded_date(m) for m in EMBEDDED_DATE.finditer(text))

        if header_dates:
            return max(header_dates)

        line_dates: List[str] = []
        for row in rows[data_start:]:
            values = row_values(row) + ["", "", "", "", ""]
            date_text, item_name = values[2], values[4]
            if item_name.startswith("【"):
                continue
            if re.match(r"^\d{1,2}/\d{1,2}$", date_text):
                month, day = date_text.split("/")
                line_dates.append(f"{self.today.year}/{int(month):02d}/{int(day):02d}")
            elif FULL_DATE.match(date_text):
                year, month, day = date_text.split("/")
                line_dates.append(f"{year}/{int(month):02d}/{int(day):02d}")
        if line_dates:
            return max(line_dates)

        logger.warning("No invoice date found in %s file; using today", self.vendor)
        return self.today.strftime("%Y/%m/%d")
