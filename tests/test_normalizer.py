"""Building canonical line items from extracted descriptors."""
from datetime import date

import pytest

from billing_import.core.config import Settings
from billing_import.core.context import JobContext
from billing_import.core.money import clean_number, tax_inclusive, unit_price_from
from billing_import.ingestion.common import format_date, payment_due_date, trailing_numbers
from billing_import.processing.normalizer import (
    build_line_item,
    build_line_items,
    construction_type,
    invoice_name,
    vendor_system_id,
)


def test_line_item_fields_from_descriptor(ctx, descriptor):
    item = build_line_item(descriptor(project_id="P-1", work_no="10001", remarks="追加分"), ctx)

    assert item.management_id == "20251104001"
    assert item.counterparty_id == "566232"
    assert item.invoice_name == "202510ナカザワ建販_請求書"
    assert item.description == item.invoice_name
    assert item.project_id == "P-1"
    assert item.delivery_date == "2025/10/3"
    assert item.due_date == "2025/11/30"
    assert (item.quantity, item.unit) == ("2", "枚")
    assert (item.unit_price_ex_tax, item.unit_price_inc_tax) == ("500", "550")
    assert (item.amount_ex_tax, item.amount_inc_tax) == ("1000", "1100")
    assert item.remarks == "10001 追加分"
    assert (item.deal_type, item.staff_id, item.supervisor_id, item.tax_flag) == ("紙発注", "925646", "925646", "課税")


def test_defaults_for_quantity_and_unit(ctx, descriptor):
    item = build_line_item(descriptor(qty="", unit=""), ctx)

    assert item.quantity == "1"
    assert item.unit == "式"


def test_management_ids_are_sequential_per_job(descriptor):
    first_job = JobContext(today=date(2025, 11, 4))
    items = build_line_items([descriptor(), descriptor()], first_job)
    assert [item.management_id for item in items] == ["20251104001", "20251104002"]

    second_job = JobContext(today=date(2025, 11, 4))
    assert build_line_item(descriptor(), second_job).management_id == "20251104001"


def test_site_project_id_is_memoized_within_a_job(ctx, descriptor):
    first = build_line_item(descriptor(site="山田邸"), ctx)
    second = build_line_item(descriptor(site="山田邸"), ctx)
    other = build_line_item(descriptor(site="佐藤邸"), ctx)

    assert first.project_id == second.project_id == "PRJ-20251104-001"
    assert other.project_id == "PRJ-20251104-002"


def test_settings_override_defaults(descriptor):
    job = JobContext(today=date(2025, 11, 4), settings=Settings(deal_type="電子発注", tax_flag="非課税"))

    item = build_line_item(descriptor(), job)

    assert item.deal_type == "電子発注"
    assert item.tax_flag == "非課税"


def test_unknown_vendor_passes_through_with_warning(caplog):
    caplog.set_level("WARNING")

    assert vendor_system_id("関西建材") == "関西建材"
    assert "関西建材" in caplog.text
    assert vendor_system_id("大萬") == "564361"


def test_invoice_name_falls_back_to_today():
    assert invoice_name("大萬", "2025/8/12") == "202508大萬_請求書"
    assert invoice_name("大萬", "", date(2025, 11, 4)) == "202511大萬_請求書"


@pytest.mark.parametrize(
    "item, vendor, expected",
    [
        ("配送料", "", "その他"),
        ("石膏ボード", "", "建材関係"),
        ("床材 送料込", "", "その他"),
        ("事務用品", "", "その他"),
        ("運搬手数料", "ナカザワ建販", "建材関係"),
    ],
)
def test_construction_type(item, vendor, expected):
    assert construction_type(item, vendor) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025/10/3", "2025/10/3"),
        ("2025-10-03", "2025/10/3"),
        ("20251003", "2025/10/3"),
        ("45933", "2025/10/3"),
        ("10/3", "2025/10/3"),
        ("令和7年10月", "令和7年10月"),
        ("", ""),
    ],
)
def test_format_date(raw, expected):
    assert format_date(raw, date(2025, 11, 4)) == expected


@pytest.mark.parametrize(
    "invoice_date, expected",
    [
        ("2025/1/31", "2025/2/28"),
        ("2024/1/15", "2024/2/29"),
        ("2025/12/5", "2026/1/31"),
        ("2025/10/3", "2025/11/30"),
        ("unknown", ""),
    ],
)
def test_payment_due_date_is_end_of_next_month(invoice_date, expected):
    assert payment_due_date(invoice_date) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("１０００", "1000"), ("１，２３４円", "1234"), ("1e3", "1000"), ("－５００", "-500"), ("1500.50", "1500.5"), ("NaN", "")],
)
def test_clean_number_always_gives_plain_ascii_digits(raw, expected):
    assert clean_number(raw) == expected


def test_money_helpers():
    assert clean_number("¥1,234円") == "1234"
    assert clean_number("abc") == ""
    assert clean_number(1500.0) == "1500"
    assert tax_inclusive("995") == "1095"
    assert tax_inclusive("5") == "6"
    assert tax_inclusive("") == ""
    assert unit_price_from("1000", "3") == "333"
    assert unit_price_from("1000", "0") == "1000"
    assert unit_price_from("1000", "-2") == ""


def test_trailing_numbers_reads_last_three_nonzero_values():
    assert trailing_numbers(["品名", "2", "0", "500", "1,000"]) == ("2", "500", "1000")


def test_tax_inclusive_invariant_holds_for_every_item(ctx, descriptor):
    amounts = ["1", "5", "15", "995", "1234", "99999"]
    items = build_line_items([descriptor(amount=a, price=a) for a in amounts], ctx)

    for item in items:
        assert item.amount_inc_tax == tax_inclusive(item.amount_ex_tax)
        assert item.description == item.invoice_name
