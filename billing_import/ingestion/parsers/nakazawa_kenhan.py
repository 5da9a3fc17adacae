"""Extractor for ナカザワ建販 sales detail exports (headered, one row per sale)."""
from __future__ import annotations

import logging
from typing import List

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount, unit_price_from
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

PROJECT_ID_COLUMNS = ("案件管理ID", "工事番号", "現場コード", "現場No", "物件No")


def classify_row(site: str, product_name: str) -> str:
    if not site and not product_name:
        return RowKind.BLANK
    if "現場名" in site or "商品名" in product_name:
        return RowKind.HEADER
    return RowKind.DATA


def describe_item(row: RawRow) -> str:
    """``メーカー 商品名 [規格] (商品コード)``, omitting empty parts."""

    description = row_get(row, "商品名")
    maker = row_get(row, "メーカー名")
    variant = row_get(row, "規格")
    code = row_get(row, "商品コード")
    if maker:
        description = f"{maker} {description}"
    if variant:
        description += f" [{variant}]"
    if code:
        description += f" ({code})"
    return description.strip()


class NakazawaKenhanExtractor(BaseExtractor):
    vendor = "ナカザワ建販"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        header_project_id = find_header_project_id(
            rows,
            PROJECT_ID_KEYWORDS + ("現場コード",),
            column_keys=("案件管理ID", "工事番号"),
        )
        if not header_project_id:
            logger.warning("No project id in the %s header; checking each row", self.vendor)

        items: List[ItemDescriptor] = []
        for index, row in enumerate(rows):
            site = row_get(row, "現場名")
            kind = classify_row(site, row_get(row, "商品名"))
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            amount = clean_number(row_get(row, "売上金額"))
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            quantity = clean_number(row_get(row, "数量"))
            qty = quantity or clean_number(row_get(row, "個数")) or "1"
            price = clean_number(row_get(row, "売上単価")) or unit_price_from(amount, quantity or "1")

            pack_size = row_get(row, "入数")
            remarks = [
                f"伝票:{row_get(row, '売上Ｎｏ')}" if row_get(row, "売上Ｎｏ") else "",
                f"区分:{row_get(row, '区分名')}" if row_get(row, "区分名") else "",
                f"担当:{row_get(row, '担当者名')}" if row_get(row, "担当者名") else "",
                f"入数:{pack_size}" if pack_size and pack_size != "0" else "",
                row_get(row, "備考"),
            ]

            project_id = (
                row_project_id(row, PROJECT_ID_COLUMNS)
                or header_project_id
                or missing_project_id(site or "UNKNOWN", index)
            )
            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=site,
                    date=row_get(row, "売上日"),
                    item=describe_item(row),
                    qty=qty,
                    unit=row_get(row, "売上単価単位名") or "個",
                    price=price,
                    amount=amount,
                    work_no=row_get(row, "商品コード", "売上Ｎｏ"),
                    remarks=" ".join(r for r in remarks if r),
                    project_id=project_id,
                ),
            )
        return items
