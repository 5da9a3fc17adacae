"""Shared behaviour for vendor extractors."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from billing_import.core.errors import ExtractionError
from billing_import.core.models import ItemDescriptor, RawRow
from billing_import.ingestion.common import EMBEDDED_DATE, row_keys, row_text, row_values

logger = logging.getLogger(__name__)

MONTH_DAY_TEXT = re.compile(r"\d+月\d+日")


@dataclass
class InvoiceMetadata:
    site_name: str = ""
    project_name: str = ""
    invoice_date: str = ""


class BaseExtractor:
    """Turn raw rows into ``ItemDescriptor`` objects for one vendor shape.

    Subclasses implement ``parse``; ``extract`` wraps it with logging, row
    counters and the "nothing extracted" check.
    """

    vendor = ""

    def __init__(self, today: Optional[date] = None) -> None:
        self.today = today or date.today()
        self.processed_count = 0
        self.skipped_count = 0

    def extract(self, rows: Sequence[RawRow], headers: Sequence[str] = ()) -> List[ItemDescriptor]:
        self.processed_count = 0
        self.skipped_count = 0
        logger.info("%s extractor start: %s input rows", self.vendor, len(rows))
        items = self.parse(list(rows), list(headers))
        logger.info(
            "%s extractor complete: %s processed, %s skipped, %s items",
            self.vendor,
            self.processed_count,
            self.skipped_count,
            len(items),
        )
        self.validate_results(items)
        return items

    def parse(self, rows: List[RawRow], headers: List[str]) -> List[ItemDescriptor]:
        raise NotImplementedError

    def accept(self, items: List[ItemDescriptor], item: ItemDescriptor) -> None:
        items.append(item)
        self.processed_count += 1
        logger.debug("Accepted %s / %s: %s", item.site or "-", item.item, item.amount)

    def skip(self, index: int, reason: str) -> None:
        self.skipped_count += 1
        logger.debug("Skipping row %s: %s", index, reason)

    def validate_results(self, items: Sequence[ItemDescriptor]) -> None:
        if not items:
            raise ExtractionError.no_rows(self.vendor)

    @staticmethod
    def find_data_start(
        rows: Sequence[RawRow],
        tokens: Sequence[str],
        max_rows: int = 20,
        min_matches: int = 2,
        include_keys: bool = True,
    ) -> int:
        """Return the index after the first row naming ``min_matches`` header tokens, or -1."""

        for index, row in enumerate(rows[:max_rows]):
            text = row_text(row, include_keys=include_keys)
            if sum(1 for token in tokens if token in text) >= min_matches:
                logger.debug("Header row found at %s", index)
                return index + 1
        return -1

    def locate_data_start(
        self,
        rows: Sequence[RawRow],
        headers: Sequence[str],
        tokens: Sequence[str],
        fallback: int,
        max_rows: int = 20,
        min_matches: int = 2,
    ) -> int:
        """Find where line items begin.

        A header row inside the sheet wins; a file whose column names already
        are that header starts at row 0; otherwise ``fallback`` is used.
        """

        start = self.find_data_start(rows, tokens, max_rows, min_matches, include_keys=False)
        if start != -1:
            return start
        columns = "|".join(headers or (row_keys(rows[0]) if rows else []))
        if sum(1 for token in tokens if token in columns) >= min_matches:
            return 0
        logger.warning("%s header row not found; assuming data starts at row %s", self.vendor, fallback)
        return fallback

    @staticmethod
    def extract_metadata(rows: Sequence[RawRow], max_rows: int = 15) -> InvoiceMetadata:
        """Scan the letterhead for the site name and an invoice date.

        The first match wins; pass the data start as ``max_rows`` so line
        items such as ``取付工事費`` are never read as the site.
        """

        metadata = InvoiceMetadata()
        for row in rows[:max_rows]:
            values = row_values(row)
            first = values[0] if values else ""

            if not metadata.site_name and ("様邸" in first or "工事" in first):
                metadata.site_name = first
                metadata.project_name = first

            if not metadata.invoice_date:
                for value in values:
                    if EMBEDDED_DATE.search(value) or MONTH_DAY_TEXT.search(value):
                        metadata.invoice_date = value
                        break
        return metadata
