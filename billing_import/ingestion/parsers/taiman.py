"""Extractor for 大萬 purchase ledgers (headered, one row per shipped product)."""
from __future__ import annotations

import logging
from typing import List

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount
from billing_import.ingestion.common import (
    PROJECT_ID_KEYWORDS,
    RowKind,
    find_header_project_id,
    missing_project_id,
    row_get,
    row_project_id,
)
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)

PROJECT_ID_COLUMNS = ("案件管理ID", "工事番号", "伝票番号", "現場No", "物件No")


def classify_row(product_name: str) -> str:
    if not product_name:
        return RowKind.BLANK
    if "商品名" in product_name:
        return RowKind.HEADER
    if "合計" in product_name:
        return RowKind.SUMMARY
    return RowKind.DATA


class TaimanExtractor(BaseExtractor):
    vendor = "大萬"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        header_project_id = find_header_project_id(
            rows,
            PROJECT_ID_KEYWORDS + ("伝票番号",),
            column_keys=("案件管理ID", "工事番号"),
        )
        if not header_project_id:
            logger.warning("No project id in the %s header; checking each row", self.vendor)

        items: List[ItemDescriptor] = []
        for index, row in enumerate(rows):
            product_name = row_get(row, "商品名")
            kind = classify_row(product_name)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            amount = clean_number(row_get(row, "仕入金額"))
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            project_id = (
                row_project_id(row, PROJECT_ID_COLUMNS)
                or header_project_id
                or missing_project_id("TAIMAN", index)
            )
            billed_to = row_get(row, "請求先名")
            remarks = row_get(row, "備考")
            if billed_to and billed_to != self.vendor:
                remarks = f"{remarks} 請求先:{billed_to}".strip()

            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    date=row_get(row, "出荷日"),
                    item=product_name,
                    qty=clean_number(row_get(row, "数量")) or "1",
                    unit=row_get(row, "単位") or "個",
                    price=clean_number(row_get(row, "仕入単価")),
                    amount=amount,
                    work_no=row_get(row, "商品コード"),
                    remarks=remarks,
                    project_id=project_id,
                ),
            )
        return items
