"""Per-vendor numeric adjustments applied after normalization."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from billing_import.core.models import LineItem
from billing_import.core.money import clean_number, format_amount, round_half_up, tax_inclusive, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PercentageDiscount:
    """Multiply prices, amounts and invoice totals by ``1 - rate``.

    Each value is rounded half-up to a whole yen and the tax-inclusive
    counterpart is recomputed from the rounded value. A record carrying the
    rule's name in ``applied_rules`` is left alone.
    """

    name: str
    rate: Decimal
    note: str

    def discount(self, raw: str) -> str:
        if not clean_number(raw):
            return raw
        return format_amount(round_half_up(to_decimal(raw) * (Decimal(1) - self.rate)))

    def apply(self, item: LineItem) -> bool:
        if self.name in item.applied_rules:
            return False

        item.unit_price_ex_tax = self.discount(item.unit_price_ex_tax)
        item.unit_price_inc_tax = tax_inclusive(item.unit_price_ex_tax)
        item.amount_ex_tax = self.discount(item.amount_ex_tax)
        item.amount_inc_tax = tax_inclusive(item.amount_ex_tax)
        if item.invoice_total_ex_tax:
            item.invoice_total_ex_tax = self.discount(item.invoice_total_ex_tax)
            item.invoice_total_inc_tax = tax_inclusive(item.invoice_total_ex_tax)
        item.append_remark(self.note)
        item.applied_rules = item.applied_rules + (self.name,)
        return True


VENDOR_RULES: Dict[str, Tuple[PercentageDiscount, ...]] = {
    "大萬": (PercentageDiscount("taiman-1pct", Decimal("0.01"), "[1%割引適用]"),),
}


def apply_vendor_rules(items: Sequence[LineItem], vendor: str) -> List[LineItem]:
    """Apply the rules registered for ``vendor`` (exact name) to ``items`` in place."""

    rules = VENDOR_RULES.get(vendor, ())
    if not rules:
        return list(items)

    applied = 0
    for item in items:
        for rule in rules:
            if rule.apply(item):
                applied += 1
    if applied:
        logger.info("Applied %s vendor rule adjustments for %s", applied, vendor)
    return list(items)


def apply_rules_by_vendor(items: Iterable[LineItem]) -> List[LineItem]:
    """Group ``items`` by vendor and apply each group's rules, keeping input order."""

    ordered = list(items)
    groups: Dict[str, List[LineItem]] = {}
    for item in ordered:
        groups.setdefault(item.vendor, []).append(item)
    for vendor, members in groups.items():
        apply_vendor_rules(members, vendor)
    return ordered
