"""Vendor-specific adjustments applied after normalization."""
from decimal import Decimal

from billing_import.core.models import LineItem
from billing_import.processing.rules import PercentageDiscount, apply_rules_by_vendor, apply_vendor_rules


def _item(vendor: str = "大萬", amount: str = "1000", price: str = "1000", **extra) -> LineItem:
    return LineItem(
        vendor=vendor,
        unit_price_ex_tax=price,
        unit_price_inc_tax="",
        amount_ex_tax=amount,
        amount_inc_tax="",
        **extra,
    )


def test_taiman_discount_rounds_to_nearest_yen():
    """1% off 1000 is 990 (rounded, not truncated)."""

    item = _item()

    apply_vendor_rules([item], "大萬")

    assert item.amount_ex_tax == "990"
    assert item.amount_inc_tax == "1089"
    assert item.unit_price_ex_tax == "990"
    assert item.remarks == "[1%割引適用]"


def test_discount_rounds_half_up():
    item = _item(amount="1050", price="150")

    apply_vendor_rules([item], "大萬")

    # 1050 * 0.99 = 1039.5, 150 * 0.99 = 148.5
    assert item.amount_ex_tax == "1040"
    assert item.unit_price_ex_tax == "149"


def test_discount_updates_invoice_totals_only_when_present():
    stamped = _item(invoice_total_ex_tax="3000", invoice_total_inc_tax="3300")
    unstamped = _item()

    apply_vendor_rules([stamped, unstamped], "大萬")

    assert (stamped.invoice_total_ex_tax, stamped.invoice_total_inc_tax) == ("2970", "3267")
    assert unstamped.invoice_total_ex_tax == ""


def test_rules_are_applied_once():
    item = _item(remarks="T-501")

    apply_vendor_rules([item], "大萬")
    apply_vendor_rules([item], "大萬")

    assert item.amount_ex_tax == "990"
    assert item.remarks == "T-501 [1%割引適用]"
    assert item.applied_rules == ("taiman-1pct",)


def test_unknown_vendor_is_a_no_op():
    item = _item(vendor="ナカザワ建販")

    apply_vendor_rules([item], "ナカザワ建販")

    assert item.amount_ex_tax == "1000"
    assert item.remarks == ""


def test_vendor_lookup_is_exact():
    item = _item(vendor="大萬商事")

    apply_rules_by_vendor([item])

    assert item.amount_ex_tax == "1000"


def test_rules_by_vendor_groups_and_keeps_order():
    taiman = _item()
    other = _item(vendor="ナカザワ建販")
    taiman_again = _item(amount="2000", price="2000")

    result = apply_rules_by_vendor([taiman, other, taiman_again])

    assert result == [taiman, other, taiman_again]
    assert [item.amount_ex_tax for item in result] == ["990", "1000", "1980"]


def test_percentage_discount_leaves_blank_values():
    rule = PercentageDiscount("ten", Decimal("0.1"), "[10%]")
    item = _item(vendor="X", amount="", price="500")

    assert rule.apply(item)
    assert item.amount_ex_tax == ""
    assert item.amount_inc_tax == ""
    assert item.unit_price_ex_tax == "450"
