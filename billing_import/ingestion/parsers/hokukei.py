"""Extractor for 北恵株式会社 sales exports (one headered row per product line)."""
from __future__ import annotations

from typing import List

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount
from billing_import.ingestion.common import RowKind, row_get
from billing_import.ingestion.parsers.base import BaseExtractor


def classify_row(product_name: str) -> str:
    if not product_name:
        return RowKind.BLANK
    if "品名" in product_name:
        return RowKind.HEADER
    if "合計" in product_name:
        return RowKind.SUMMARY
    return RowKind.DATA


class HokukeiExtractor(BaseExtractor):
    vendor = "北恵株式会社"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        items: List[ItemDescriptor] = []
        for index, row in enumerate(rows):
            product_name = row_get(row, "品名")
            kind = classify_row(product_name)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            amount = clean_number(row_get(row, "売上金額"))
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            maker = row_get(row, "メーカー名")
            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=row_get(row, "下店名3"),
                    date=row_get(row, "伝票日付"),
                    item=f"{maker} {product_name}".strip(),
                    qty=clean_number(row_get(row, "数量")) or "1",
                    unit=row_get(row, "単位名"),
                    price=clean_number(row_get(row, "単価")),
                    amount=amount,
                    work_no=row_get(row, "品番"),
                    remarks=maker,
                ),
            )
        return items
