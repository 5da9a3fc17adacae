"""Invoice-total stamping and per-project consolidation."""
from billing_import.core.models import ConsolidatedInvoice
from billing_import.core.money import to_decimal
from billing_import.processing.consolidation import consolidate, stamp_invoice_totals
from billing_import.processing.normalizer import build_line_items


def test_two_items_with_one_project_collapse_into_one_invoice(ctx, descriptor):
    items = build_line_items(
        [descriptor(project_id="P1", amount="1000"), descriptor(project_id="P1", amount="2000")], ctx
    )

    invoices = consolidate(items, ctx)

    assert len(invoices) == 1
    invoice = invoices[0]
    assert isinstance(invoice, ConsolidatedInvoice)
    assert invoice.amount_ex_tax == "3000"
    assert invoice.amount_inc_tax == "3300"
    assert invoice.unit_price_ex_tax == "3000"
    assert invoice.quantity == "1"
    assert invoice.unit == "式"
    assert invoice.member_count == 2
    assert invoice.member_management_ids == ("20251104001", "20251104002")


def test_row_count_equals_distinct_project_ids_in_first_seen_order(ctx, descriptor):
    items = build_line_items(
        [
            descriptor(project_id="B"),
            descriptor(project_id="A"),
            descriptor(project_id="B"),
            descriptor(project_id="C"),
        ],
        ctx,
    )

    invoices = consolidate(items, ctx)

    assert [invoice.project_id for invoice in invoices] == ["B", "A", "C"]


def test_consolidated_ids_use_a_fresh_sequence(ctx, descriptor):
    items = build_line_items([descriptor(project_id="A"), descriptor(project_id="B")], ctx)

    invoices = consolidate(items, ctx)

    assert [invoice.management_id for invoice in invoices] == ["20251104001", "20251104002"]


def test_invoice_totals_are_summed_per_vendor_and_site(ctx, descriptor):
    items = build_line_items(
        [
            descriptor(site="山田邸", project_id="A", amount="1000"),
            descriptor(site="山田邸", project_id="B", amount="500"),
            descriptor(site="佐藤邸", project_id="C", amount="700"),
        ],
        ctx,
    )

    stamp_invoice_totals(items)

    assert [item.invoice_total_ex_tax for item in items] == ["1500", "1500", "700"]
    assert [item.invoice_total_inc_tax for item in items] == ["1650", "1650", "770"]


def test_items_without_site_share_the_default_group(ctx, descriptor):
    items = build_line_items([descriptor(site="", project_id="A"), descriptor(site="", project_id="B")], ctx)

    stamp_invoice_totals(items)

    assert {item.invoice_total_ex_tax for item in items} == {"2000"}


def test_remarks_are_deduplicated_and_joined(ctx, descriptor):
    items = build_line_items(
        [
            descriptor(project_id="P1", remarks="伝票:1"),
            descriptor(project_id="P1", remarks="伝票:1"),
            descriptor(project_id="P1", remarks=""),
            descriptor(project_id="P1", remarks="追加分"),
        ],
        ctx,
    )

    invoice = consolidate(items, ctx)[0]

    assert invoice.remarks == "伝票:1; 追加分"


def test_invoice_name_is_regenerated_and_matches_description(ctx, descriptor):
    items = build_line_items(
        [descriptor(project_id="P1", date="2025/9/28"), descriptor(project_id="P1", date="2025/10/2")], ctx
    )
    items[0].invoice_name = "edited"

    invoice = consolidate(items, ctx)[0]

    assert invoice.invoice_name == "202509ナカザワ建販_請求書"
    assert invoice.description == invoice.invoice_name


def test_consolidated_amount_equals_member_sum(ctx, descriptor):
    amounts = ["1", "15", "995", "1234", "-200"]
    items = build_line_items([descriptor(project_id="P1", amount=a) for a in amounts], ctx)
    expected = sum(to_decimal(item.amount_ex_tax) for item in items)

    invoice = consolidate(items, ctx)[0]

    assert to_decimal(invoice.amount_ex_tax) == expected


def test_applied_rules_carry_over(ctx, descriptor):
    items = build_line_items([descriptor(project_id="P1"), descriptor(project_id="P1")], ctx)
    items[0].applied_rules = ("taiman-1pct",)

    invoice = consolidate(items, ctx)[0]

    assert invoice.applied_rules == ("taiman-1pct",)


def test_empty_input_gives_no_invoices(ctx):
    assert consolidate([], ctx) == []
