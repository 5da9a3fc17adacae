"""Data-quality checks run on consolidated invoices before export."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from billing_import.core.context import JobContext
from billing_import.core.errors import TotalsMismatchError
from billing_import.core.models import LineItem
from billing_import.core.money import format_amount, to_decimal
from billing_import.processing.consolidation import DEFAULT_SITE
from billing_import.processing.normalizer import is_mapped_vendor

logger = logging.getLogger(__name__)

SENTINEL_PREFIXES = ("MISSING_ID_", "SITE_")

MISMATCH_ISSUE = "invoice total differs from line total"


def is_sentinel_project_id(project_id: str) -> bool:
    if not project_id:
        return True
    if project_id.startswith(SENTINEL_PREFIXES):
        return True
    return project_id.startswith("CUST") and "_PLACE" in project_id


def totals_diverge(invoice_total_raw: str, line_total: Decimal, tolerance: float) -> bool:
    """True when invoice and line totals differ by more than ``tolerance`` (a fraction)."""

    invoice_total = to_decimal(invoice_total_raw)
    if invoice_total == 0:
        return line_total != 0 and bool(invoice_total_raw)
    return abs(invoice_total - line_total) / abs(invoice_total) > Decimal(str(tolerance))


def invoice_groups(invoices: Iterable[LineItem]) -> Dict[Tuple[str, str], List[LineItem]]:
    """Group records the way invoice totals are stamped: by (vendor, site)."""

    groups: Dict[Tuple[str, str], List[LineItem]] = {}
    for item in invoices:
        groups.setdefault((item.vendor, item.site or DEFAULT_SITE), []).append(item)
    return groups


def mismatched_groups(
    invoices: Sequence[LineItem], tolerance: float = 0.01
) -> Dict[Tuple[str, str], Tuple[str, str]]:
    """Return ``(vendor, site) -> (invoice total, line total)`` for diverging groups.

    The stamped invoice total of a group is compared with the sum of the line
    totals of that group's records, so a site split over several projects is
    consistent as long as its rows add up.
    """

    mismatches: Dict[Tuple[str, str], Tuple[str, str]] = {}
    for key, members in invoice_groups(invoices).items():
        invoice_total = members[0].invoice_total_ex_tax
        line_total = sum((to_decimal(m.amount_ex_tax) for m in members), Decimal(0))
        if totals_diverge(invoice_total, line_total, tolerance):
            mismatches[key] = (invoice_total, format_amount(line_total))
    return mismatches


def validate_line_item(item: LineItem) -> List[str]:
    """Return the per-record quality issues (project id and vendor mapping)."""

    issues: List[str] = []
    if is_sentinel_project_id(item.project_id):
        issues.append(f"project id not recovered from source ({item.project_id or 'empty'})")
    if item.vendor and not is_mapped_vendor(item.vendor):
        issues.append(f"unmapped vendor {item.vendor}")
    return issues


def apply_quality_checks(invoices: Iterable[LineItem], ctx: JobContext) -> List[LineItem]:
    """Annotate records with their issues, log them and collect alerts on ``ctx``.

    With ``strict_totals`` enabled a totals mismatch raises instead.
    """

    settings = ctx.settings
    checked = list(invoices)
    mismatches = mismatched_groups(checked, settings.mismatch_tolerance)
    for (vendor, site), (invoice_total, line_total) in mismatches.items():
        if settings.strict_totals:
            raise TotalsMismatchError(
                f"Invoice total {invoice_total} and line total {line_total} diverge for {vendor} / {site}",
                f"{vendor} / {site} の請求金額と明細金額が一致しません",
                {"vendor": vendor, "site": site, "invoiceTotal": invoice_total, "lineTotal": line_total},
            )
        logger.warning("Totals mismatch for %s / %s: invoice %s, lines %s", vendor, site, invoice_total, line_total)

    for item in checked:
        issues = validate_line_item(item)
        if (item.vendor, item.site or DEFAULT_SITE) in mismatches:
            issues.append(MISMATCH_ISSUE)
        for issue in issues:
            if issue not in item.quality_issues:
                item.quality_issues.append(issue)
        if issues:
            note = "; ".join(issues)
            logger.warning("Quality issues for %s (%s): %s", item.management_id, item.project_id, note)
            ctx.record_alert(f"{item.management_id} {item.project_id}: {note}")
    return checked
