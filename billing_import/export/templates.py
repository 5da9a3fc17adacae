"""Column layout of the billing import template."""
from typing import Any, Dict, Iterable, List

from billing_import.core.models import LineItem

MASTER_COLUMNS = [
    "請求管理ID",
    "取引先",
    "取引設定",
    "担当者(発注側)",
    "請求名",
    "案件管理ID",
    "請求納品金額(税抜)",
    "請求納品金額(税込)",
    "現場監督",
    "納品実績日",
    "支払予定日",
    "請求納品明細名",
    "数量",
    "単位",
    "単価(税抜)",
    "単価(税込)",
    "金額(税抜)",
    "金額(税込)",
    "工事種類",
    "課税フラグ",
    "請求納品明細備考",
    "結果",
]

# Template column -> LineItem attribute.
COLUMN_FIELDS: Dict[str, str] = {
    "請求管理ID": "management_id",
    "取引先": "counterparty_id",
    "取引設定": "deal_type",
    "担当者(発注側)": "staff_id",
    "請求名": "invoice_name",
    "案件管理ID": "project_id",
    "請求納品金額(税抜)": "invoice_total_ex_tax",
    "請求納品金額(税込)": "invoice_total_inc_tax",
    "現場監督": "supervisor_id",
    "納品実績日": "delivery_date",
    "支払予定日": "due_date",
    "請求納品明細名": "description",
    "数量": "quantity",
    "単位": "unit",
    "単価(税抜)": "unit_price_ex_tax",
    "単価(税込)": "unit_price_inc_tax",
    "金額(税抜)": "amount_ex_tax",
    "金額(税込)": "amount_inc_tax",
    "工事種類": "construction_type",
    "課税フラグ": "tax_flag",
    "請求納品明細備考": "remarks",
    "結果": "result",
}


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return " ".join(str(value).split())


def record_to_template_row(record: LineItem) -> Dict[str, str]:
    """Convert a record into the template dictionary, keyed by column name."""

    return {column: _clean_text(getattr(record, COLUMN_FIELDS[column])) for column in MASTER_COLUMNS}


def records_to_template_rows(records: Iterable[LineItem]) -> List[Dict[str, str]]:
    return [record_to_template_row(record) for record in records]
