"""Extractor for オメガジャパン invoices.

Two layouts exist. The itemized CSV has real column names (品名, 金額, ...)
and positional rows grouped under section headings. The invoice layout is
header-less: a billing period line, a 納品日/現場名 header row and one row
per site whose last non-zero number is the tax-inclusive amount.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount, tax_exclusive, unit_price_from
from billing_import.ingestion.common import (
    RowKind,
    find_header_project_id,
    missing_project_id,
    parse_month_day,
    parse_period,
    row_get,
    row_keys,
    row_values,
)
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)

CLIENT_NAME = "ALLAGI株式会社"
PROPER_COLUMN_TOKENS = ("品名", "金額", "単価", "数量")
UNIT_TOKEN = re.compile(r"^[箱本缶個枚式セットボトル㎥]$")
FALLBACK_CSV_START = 15
FALLBACK_INVOICE_START = 10


def has_item_columns(keys: Sequence[str]) -> bool:
    """True for the itemized CSV layout (meaningful column names)."""

    meaningful = any(
        key and len(key) > 2 and not key.startswith("_") and not re.match(r"^[一二三四五六七八九]+$", key)
        for key in keys
    )
    proper = any(token in key for key in keys for token in PROPER_COLUMN_TOKENS)
    return meaningful and proper


def classify_row(values: Sequence[str]) -> str:
    """Classify a positional row of the itemized CSV layout."""

    if not any(values):
        return RowKind.BLANK
    col_a = values[0] if values else ""
    col_b = values[1] if len(values) > 1 else ""
    if "工事部" in col_a or "オプション" in col_a or col_a == "内訳":
        return RowKind.SECTION
    if (
        "ALLAGI" in col_a
        or "御中" in col_a
        or "請求書" in col_a
        or "合計" in col_a
        or "オメガジャパン" in col_b
    ):
        return RowKind.HEADER
    return RowKind.DATA


def classify_invoice_row(delivery: str, site: str) -> str:
    """Classify a row of the header-less invoice layout by its first two values."""

    if not delivery:
        return RowKind.BLANK
    if "納品日" in delivery or "現場名" in site:
        return RowKind.HEADER
    if "合計" in delivery or "請求" in delivery:
        return RowKind.SUMMARY
    if not site:
        return RowKind.BLANK
    return RowKind.DATA


class OmegaJapanExtractor(BaseExtractor):
    vendor = "オメガジャパン"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        keys = headers or (row_keys(rows[0]) if rows else [])
        if has_item_columns(keys):
            logger.info("%s: itemized CSV layout", self.vendor)
            return self.parse_itemized(rows)
        logger.info("%s: invoice layout", self.vendor)
        return self.parse_invoice(rows)

    def parse_itemized(self, rows: List[RawRow]) -> List[ItemDescriptor]:
        header_project_id = find_header_project_id(
            rows,
            max_rows=30,
            excluded=("請求", "株式会社", "ALLAGI"),
            check_next_row=False,
            column_keys=("案件管理ID",),
        )
        if not header_project_id:
            logger.warning("No project id in the %s header", self.vendor)

        data_start = FALLBACK_CSV_START
        for index, row in enumerate(rows[:30]):
            values = row_values(row)
            text = "|".join(values)
            if any(UNIT_TOKEN.match(v) for v in values) or "外断熱" in text or "塗装工事" in text:
                data_start = index
                break
        metadata = self.extract_metadata(rows, max_rows=data_start)
        site = metadata.site_name

        items: List[ItemDescriptor] = []
        section = ""
        for index in range(data_start, len(rows)):
            row = rows[index]
            values = row_values(row)
            kind = classify_row(values)
            if kind == RowKind.SECTION:
                section = values[0]
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            col = values + [""] * 9
            item_name = col[1] or col[0]
            specs = " ".join(v for v in col[2:5] if v)
            unit, quantity, unit_price, amount = col[5], col[6], col[7], clean_number(col[8])

            if not item_name:
                self.skip(index, "no item name")
                continue
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            full_name = f"{item_name} {specs}".strip()
            remarks = [f"工事区分:{section}" if section else ""]
            if "値引" in full_name or "割引" in full_name:
                remarks.append("値引")
            if "送料" in full_name:
                remarks.append("配送料")

            qty = clean_number(quantity) or "1"
            project_id = (
                row_get(row, "案件管理ID", "工事番号", "現場No")
                or header_project_id
                or missing_project_id(site, index)
            )
            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=site or CLIENT_NAME,
                    date=metadata.invoice_date,
                    item=full_name,
                    qty=qty,
                    unit=unit or "式",
                    price=clean_number(unit_price) or unit_price_from(amount, qty),
                    amount=amount,
                    remarks=" ".join(r for r in remarks if r),
                    project_id=project_id,
                ),
            )
        return items

    def parse_invoice(self, rows: List[RawRow]) -> List[ItemDescriptor]:
        year, month = self.today.year, self.today.month
        header_project_id = ""
        data_start = -1
        keys_text = "|".join(row_keys(rows[0])) if rows else ""
        period = parse_period(keys_text)
        if period:
            year, month = period
        if "納品日" in keys_text and "現場名" in keys_text:
            data_start = 0
        for index, row in enumerate(rows[:15] if data_start == -1 else []):
            values = row_values(row)
            text = "|".join(values)
            period = parse_period(text)
            if period:
                year, month = period
            if not header_project_id and any(k in text for k in ("案件管理ID", "工事番号", "現場No")):
                header_project_id = find_header_project_id(
                    [row], ("案件管理ID", "工事番号", "現場No"), max_rows=1, excluded=("請求",), check_next_row=False
                )
            if "納品日" in text and "現場名" in text:
                data_start = index + 1
                break
        if data_start == -1:
            logger.warning("%s header row not found; assuming data starts at row %s", self.vendor, FALLBACK_INVOICE_START)
            data_start = FALLBACK_INVOICE_START

        items: List[ItemDescriptor] = []
        for index in range(data_start, len(rows)):
            row = rows[index]
            values = [v for v in row_values(row) if v]
            delivery = values[0] if values else ""
            site = values[1] if len(values) > 1 else ""
            kind = classify_invoice_row(delivery, site)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            gross = next((clean_number(v) for v in reversed(values) if is_nonzero_amount(v)), "")
            if not gross:
                self.skip(index, "no amount")
                continue

            net = tax_exclusive(gross)
            project_id = row_get(row, "案件管理ID", "工事番号") or header_project_id or missing_project_id(site, index)
            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=site,
                    date=parse_month_day(delivery, year) or f"{year}/{month}/1",
                    item=f"{site} 工事",
                    qty="1",
                    unit="式",
                    price=net,
                    amount=net,
                    remarks="追加工事" if "追加" in delivery else "",
                    project_id=project_id,
                ),
            )
        return items

