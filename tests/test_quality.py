"""Data-quality checks on consolidated invoices."""
from datetime import date

import pytest

from billing_import.core.config import Settings
from billing_import.core.context import JobContext
from billing_import.core.errors import TotalsMismatchError
from billing_import.core.models import ConsolidatedInvoice
from billing_import.processing.quality import (
    MISMATCH_ISSUE,
    apply_quality_checks,
    is_sentinel_project_id,
    mismatched_groups,
    validate_line_item,
)


def _invoice(**overrides) -> ConsolidatedInvoice:
    values = {
        "management_id": "20251104001",
        "vendor": "ナカザワ建販",
        "project_id": "P-1001",
        "invoice_total_ex_tax": "1000",
        "amount_ex_tax": "1000",
    }
    values.update(overrides)
    return ConsolidatedInvoice(**values)


def test_clean_invoice_has_no_issues():
    assert validate_line_item(_invoice()) == []


@pytest.mark.parametrize(
    "project_id",
    ["", "MISSING_ID_TAIMAN_ROW0", "SITE_田中様邸", "CUST12_PLACE3"],
)
def test_sentinel_project_ids_are_flagged(project_id):
    assert is_sentinel_project_id(project_id)
    issues = validate_line_item(_invoice(project_id=project_id))
    assert any("project id" in issue for issue in issues)


def test_generated_and_real_ids_are_not_sentinels():
    assert not is_sentinel_project_id("PRJ-20251104-001")
    assert not is_sentinel_project_id("CUSTOM-7")


def test_unmapped_vendor_is_flagged():
    issues = validate_line_item(_invoice(vendor="関西建材"))

    assert issues == ["unmapped vendor 関西建材"]


def test_totals_within_tolerance_pass():
    assert mismatched_groups([_invoice(invoice_total_ex_tax="1000", amount_ex_tax="1010")]) == {}


def test_totals_beyond_tolerance_are_flagged():
    mismatches = mismatched_groups([_invoice(invoice_total_ex_tax="1000", amount_ex_tax="1011")])

    assert mismatches == {("ナカザワ建販", "default"): ("1000", "1011")}


def test_apply_quality_checks_logs_and_collects_alerts(ctx, caplog):
    caplog.set_level("WARNING")
    invoice = _invoice(project_id="MISSING_ID_TAIMAN_ROW0")

    checked = apply_quality_checks([invoice], ctx)

    assert checked == [invoice]
    assert invoice.quality_issues
    assert "Quality issues for 20251104001" in caplog.text
    assert len(ctx.alerts) == 1
    assert "MISSING_ID_TAIMAN_ROW0" in ctx.alerts[0]


def test_apply_quality_checks_does_not_duplicate_issues(ctx):
    invoice = _invoice(vendor="関西建材")

    apply_quality_checks([invoice], ctx)
    apply_quality_checks([invoice], ctx)

    assert invoice.quality_issues == ["unmapped vendor 関西建材"]


def test_mismatch_is_a_warning_by_default(ctx):
    invoice = _invoice(invoice_total_ex_tax="3000", amount_ex_tax="1000")

    apply_quality_checks([invoice], ctx)

    assert MISMATCH_ISSUE in invoice.quality_issues


def test_strict_mode_raises_on_mismatch():
    strict = JobContext(today=date(2025, 11, 4), settings=Settings(strict_totals=True))
    invoice = _invoice(invoice_total_ex_tax="3000", amount_ex_tax="1000")

    with pytest.raises(TotalsMismatchError) as excinfo:
        apply_quality_checks([invoice], strict)

    assert excinfo.value.to_dict()["classification"] == "data_quality"
    assert excinfo.value.details == {
        "vendor": "ナカザワ建販",
        "site": "default",
        "invoiceTotal": "3000",
        "lineTotal": "1000",
    }


def test_tolerance_comes_from_settings():
    loose = JobContext(today=date(2025, 11, 4), settings=Settings(mismatch_tolerance=0.5))
    invoice = _invoice(invoice_total_ex_tax="3000", amount_ex_tax="2000")

    apply_quality_checks([invoice], loose)

    assert invoice.quality_issues == []


def _site_with_two_projects():
    shared = {"site": "山田邸", "invoice_total_ex_tax": "2000", "amount_ex_tax": "1000"}
    return [
        _invoice(management_id="20251104001", project_id="A", **shared),
        _invoice(management_id="20251104002", project_id="B", **shared),
    ]


def test_site_split_over_projects_is_consistent(ctx):
    invoices = _site_with_two_projects()

    assert mismatched_groups(invoices) == {}
    apply_quality_checks(invoices, ctx)

    assert [invoice.quality_issues for invoice in invoices] == [[], []]
    assert ctx.alerts == []


def test_site_split_over_projects_passes_strict_mode():
    strict = JobContext(today=date(2025, 11, 4), settings=Settings(strict_totals=True))

    checked = apply_quality_checks(_site_with_two_projects(), strict)

    assert len(checked) == 2


def test_mismatch_flags_every_record_of_the_group_only(ctx):
    consistent = _site_with_two_projects()
    drifted = _invoice(management_id="20251104003", site="佐藤邸", invoice_total_ex_tax="5000", amount_ex_tax="4000")

    apply_quality_checks(consistent + [drifted], ctx)

    assert drifted.quality_issues == [MISMATCH_ISSUE]
    assert all(invoice.quality_issues == [] for invoice in consistent)
