"""Declarative column-map extractor used for vendors without custom logic."""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Mapping, Optional

from billing_import.core.errors import MappingConfigurationError
from billing_import.core.models import ItemDescriptor, RawRow, VendorMapping
from billing_import.ingestion.common import cell_text, row_keys, row_values
from billing_import.ingestion.parsers.base import BaseExtractor

logger = logging.getLogger(__name__)

# Target names accepted in a mapping's "map" values, resolved to descriptor fields.
TARGET_ALIASES: Dict[str, str] = {
    "請求納品明細名": "item",
    "description": "item",
    "item_name": "item",
    "数量": "qty",
    "quantity": "qty",
    "単位": "unit",
    "単価(税抜)": "price",
    "unit_price": "price",
    "unit_price_ex_tax": "price",
    "金額(税抜)": "amount",
    "line_amount": "amount",
    "line_amount_ex_tax": "amount",
    "amount_ex_tax": "amount",
    "納品実績日": "date",
    "delivery_date": "date",
    "案件管理ID": "project_id",
    "projectId": "project_id",
    "請求納品明細備考": "remarks",
    "workNo": "work_no",
    "現場名": "site",
}

DESCRIPTOR_FIELDS = ("site", "date", "item", "qty", "unit", "price", "amount", "work_no", "remarks", "project_id")


def resolve_target(target: str) -> Optional[str]:
    """Map a configured target column to an ``ItemDescriptor`` field name."""

    name = target.strip()
    for candidate in (name, "_".join(name.split())):
        if candidate in DESCRIPTOR_FIELDS:
            return candidate
        if candidate in TARGET_ALIASES:
            return TARGET_ALIASES[candidate]
    return None


class ColumnMapExtractor(BaseExtractor):
    """Copy configured source columns into descriptor fields row by row."""

    def __init__(self, mapping: VendorMapping, today: Optional[date] = None) -> None:
        super().__init__(today)
        self.mapping = mapping
        self.vendor = mapping.vendor
        self.targets: Dict[str, str] = {}
        for source, target in mapping.column_map.items():
            field_name = resolve_target(target)
            if field_name is None:
                logger.warning("Ignoring unknown target %r for column %r (%s)", target, source, mapping.vendor)
                continue
            self.targets[source] = field_name

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        available = headers or (row_keys(rows[0]) if rows else [])
        missing = [column for column in self.mapping.column_map if column not in available]
        if missing:
            logger.error("%s mapping is missing columns: %s", self.vendor, ", ".join(missing))
            raise MappingConfigurationError.for_missing_columns(missing)

        items: List[ItemDescriptor] = []
        for index, row in enumerate(rows):
            values = row_values(row)
            first = values[0] if values else ""
            if not first:
                self.skip(index, "first cell blank")
                continue
            first_non_empty = next((v for v in values if v), "")
            if any(pattern in first_non_empty for pattern in self.mapping.skip_rows):
                self.skip(index, f"skip pattern in {first_non_empty!r}")
                continue
            self.accept(items, self._descriptor(row, headers))
        return items

    def _descriptor(self, row: RawRow, headers: List[str]) -> ItemDescriptor:
        if isinstance(row, Mapping):
            lookup = row
        else:
            lookup = dict(zip(headers, row))

        fields: Dict[str, str] = {}
        for source, field_name in self.targets.items():
            value = cell_text(lookup.get(source))
            if value and not fields.get(field_name):
                fields[field_name] = value
        return ItemDescriptor(vendor=self.vendor, **fields)
