"""Two-phase aggregation of line items into one row per project id.

Phase A stamps per (vendor, site) invoice totals onto every member; phase B
collapses rows sharing a project id into a single ``ConsolidatedInvoice``.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from billing_import.core.context import JobContext
from billing_import.core.models import WHOLE_INVOICE_UNIT, ConsolidatedInvoice, LineItem
from billing_import.core.money import format_amount, round_half_up, to_decimal
from billing_import.processing.normalizer import invoice_name

logger = logging.getLogger(__name__)

DEFAULT_SITE = "default"


def _sum(values: Iterable[str]) -> str:
    total = sum((to_decimal(v) for v in values), Decimal(0))
    return format_amount(round_half_up(total))


def stamp_invoice_totals(items: Sequence[LineItem]) -> List[LineItem]:
    """Set each item's invoice totals to the sum over its (vendor, site) group."""

    groups: Dict[Tuple[str, str], List[LineItem]] = {}
    for item in items:
        groups.setdefault((item.vendor, item.site or DEFAULT_SITE), []).append(item)

    for (vendor, site), members in groups.items():
        total_ex = _sum(m.amount_ex_tax for m in members)
        total_inc = _sum(m.amount_inc_tax for m in members)
        logger.info("%s / %s: %s rows, total %s (tax excluded)", vendor, site, len(members), total_ex)
        for member in members:
            member.invoice_total_ex_tax = total_ex
            member.invoice_total_inc_tax = total_inc
    return list(items)


def _unique(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def merge_group(project_id: str, members: Sequence[LineItem], ctx: JobContext) -> ConsolidatedInvoice:
    first = members[0]
    total_ex = _sum(m.amount_ex_tax for m in members)
    total_inc = _sum(m.amount_inc_tax for m in members)
    applied: Tuple[str, ...] = tuple(_unique(rule for m in members for rule in m.applied_rules))

    merged = ConsolidatedInvoice(
        management_id=ctx.next_consolidated_id(),
        counterparty_id=first.counterparty_id,
        deal_type=first.deal_type,
        staff_id=first.staff_id,
        invoice_name=invoice_name(first.vendor, first.delivery_date, ctx.today),
        project_id=project_id,
        invoice_total_ex_tax=first.invoice_total_ex_tax,
        invoice_total_inc_tax=first.invoice_total_inc_tax,
        supervisor_id=first.supervisor_id,
        delivery_date=first.delivery_date,
        due_date=first.due_date,
        quantity="1",
        unit=WHOLE_INVOICE_UNIT,
        unit_price_ex_tax=total_ex,
        unit_price_inc_tax=total_inc,
        amount_ex_tax=total_ex,
        amount_inc_tax=total_inc,
        construction_type=first.construction_type,
        tax_flag=first.tax_flag,
        remarks="; ".join(_unique(m.remarks for m in members)),
        result=first.result,
        vendor=first.vendor,
        site=first.site,
        item_name=", ".join(_unique(m.item_name for m in members)),
        applied_rules=applied,
        quality_issues=_unique(issue for m in members for issue in m.quality_issues),
        member_count=sum(getattr(m, "member_count", 0) or 1 for m in members),
        member_management_ids=tuple(m.management_id for m in members),
    )
    logger.info("Project %s: %s items consolidated, total %s (tax excluded)", project_id, len(members), total_ex)
    return merged


def consolidate_by_project(items: Sequence[LineItem], ctx: JobContext) -> List[ConsolidatedInvoice]:
    """Collapse items sharing a project id, in order of first appearance."""

    groups: Dict[str, List[LineItem]] = {}
    for item in items:
        groups.setdefault(item.project_id, []).append(item)
    logger.info("Consolidating %s rows into %s project ids", len(items), len(groups))
    return [merge_group(project_id, members, ctx) for project_id, members in groups.items()]


def consolidate(items: Sequence[LineItem], ctx: JobContext) -> List[ConsolidatedInvoice]:
    """Stamp invoice totals, then merge by project id."""

    if not items:
        return []
    stamped = stamp_invoice_totals(items)
    return consolidate_by_project(stamped, ctx)
