"""Extractor for ナンセイ billing summaries (one row per billed customer account)."""
from __future__ import annotations

import logging
from typing import List

from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.core.money import clean_number, is_nonzero_amount
from billing_import.ingestion.common import (
    RowKind,
    find_header_project_id,
    missing_project_id,
    row_get,
    row_project_id,
)
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)


def classify_row(customer_name: str) -> str:
    if not customer_name:
        return RowKind.BLANK
    if "取引先名" in customer_name:
        return RowKind.HEADER
    return RowKind.DATA


class NanseiExtractor(BaseExtractor):
    vendor = "ナンセイ"

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        header_project_id = find_header_project_id(rows, column_keys=("案件管理ID", "工事番号"))
        if not header_project_id:
            logger.warning("No project id in the %s header; checking each row", self.vendor)

        items: List[ItemDescriptor] = []
        for index, row in enumerate(rows):
            customer_name = row_get(row, "取引先名")
            kind = classify_row(customer_name)
            if kind != RowKind.DATA:
                self.skip(index, kind)
                continue

            amount = clean_number(row_get(row, "今回取引額(税抜)", "今回取引額"))
            if not is_nonzero_amount(amount):
                self.skip(index, "no amount")
                continue

            project_id = row_project_id(row) or header_project_id or missing_project_id(customer_name, index)
            self.accept(
                items,
                ItemDescriptor(
                    vendor=self.vendor,
                    site=row_get(row, "振込銀行名"),
                    date=row_get(row, "請求日付"),
                    item="請求",
                    qty="1",
                    unit="式",
                    price=amount,
                    amount=amount,
                    work_no=row_get(row, "請求番号"),
                    remarks=" ".join(v for v in (customer_name, row_get(row, "取引先CD")) if v),
                    project_id=project_id,
                ),
            )
        return items
