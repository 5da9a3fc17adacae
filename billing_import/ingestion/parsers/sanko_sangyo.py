"""Extractor for 三高産業 delivery statements.

Positional columns after the header row: 日付, 伝票No, 備考, 商品名, 数量,
単価, 金額.
"""
from __future__ import annotations

from typing import List, Sequence

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount
from billing_import.ingestion.common import RowKind, row_values
from billing_import.ingestion.parsers.base import BaseExtractor

HEADER_TOKENS = ("日付", "商品名")
FALLBACK_DATA_START = 10


def classify_row(values: Sequence[str]) -> str:
    date_text = values[0] if values else ""
    item_name = values[3] if len(values) > 3 else ""
    if not item_name:
        return RowKind.BLANK
    if "合計" in date_text or "合計" in item_name:
        return RowKind.SUMMARY
    return RowKind.DATA


class SankoSangyoExtractor(BaseExtractor):
    vendor = "三高産業"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        data_start = self.locate_data_start(rows, headers, HEADER_TOKENS, FALLBACK_DATA_START, max_rows=15)
        metadata = self.extract_metadata(rows, max_rows=min(data_start, 10))

        items: List[ItemDescriptor] = []
        for index in range(data_start, len(rows)):
            values = row_values(rows[index]) + [""] * 7
            kind = classify_row(values)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            amount = clean_number(values[6])
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=metadata.project_name,
                    date=values[0],
                    item=values[3],
                    qty=clean_number(values[4]),
                    price=clean_number(values[5]),
                    amount=amount,
                    work_no=values[1],
                    remarks=values[2],
                ),
            )
        return items
