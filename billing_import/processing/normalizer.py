"""Build canonical billing-import line items from extracted descriptors."""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, List, Optional

from billing_import.core.context import JobContext
from billing_import.core.models import WHOLE_INVOICE_UNIT, ItemDescriptor, LineItem
from billing_import.core.money import clean_number, tax_inclusive
from billing_import.ingestion.common import format_date, payment_due_date

logger = logging.getLogger(__name__)

VENDOR_SYSTEM_IDS = {
    "クリーン産業": "599239",
    "三高産業": "563866",
    "北恵株式会社": "563913",
    "ナンセイ": "563829",
    "大萬": "564361",
    "髙菱管理": "調整中",
    "高菱管理": "調整中",
    "オメガジャパン": "598454",
    "ナカザワ建販": "566232",
    "トキワシステム": "598417",
    "ALLAGI株式会社": "ALLAGI01",
    "ALLAGI": "ALLAGI01",
    "ＡＬＬＡＧＩ㈱": "ALLAGI01",
}

BUILDING_MATERIALS = "建材関係"
OTHER = "その他"

BUILDING_MATERIAL_KEYWORDS = (
    "建材",
    "資材",
    "木材",
    "鋼材",
    "断熱",
    "ボード",
    "テープ",
    "塗料",
    "塗装",
    "コンクリート",
    "セメント",
    "石膏",
    "サイディング",
    "防水",
    "屋根",
    "外壁",
    "床",
    "壁",
    "天井",
    "クロス",
    "タイル",
    "配管",
    "パイプ",
    "電線",
    "ケーブル",
    "金物",
    "ビス",
    "ネジ",
    "接着剤",
    "シール",
    "コーキング",
    "シート",
    "ダンパー",
    "工事",
    "材料",
    "部材",
    "廃棄物",
    "収集運搬",
    "処理費",
    "アスベスト",
    "石綿",
)

OTHER_KEYWORDS = ("送料", "配送", "運賃", "値引", "割引", "手数料", "サービス")

# Vendors whose every line is booked as building materials regardless of wording.
FORCED_CONSTRUCTION_TYPES = {
    "クリーン産業": BUILDING_MATERIALS,
    "ナカザワ建販": BUILDING_MATERIALS,
    "北恵株式会社": BUILDING_MATERIALS,
}

_YEAR_MONTH = re.compile(r"(\d{4})[/-](\d{1,2})")


def vendor_system_id(vendor: str) -> str:
    """Return the counterparty id for ``vendor``; unknown names pass through."""

    system_id = VENDOR_SYSTEM_IDS.get(vendor)
    if system_id is None:
        logger.warning("No system id for vendor %s; using the vendor name", vendor)
        return vendor
    return system_id


def is_mapped_vendor(vendor: str) -> bool:
    return vendor in VENDOR_SYSTEM_IDS


def invoice_name(vendor: str, invoice_date: str = "", today: Optional[date] = None) -> str:
    """``YYYYMM<vendor>_請求書`` using the invoice date's year/month, else today's."""

    match = _YEAR_MONTH.search(invoice_date or "")
    if match:
        year, month = match.group(1), int(match.group(2))
    else:
        current = today or date.today()
        year, month = str(current.year), current.month
    return f"{year}{month:02d}{vendor}_請求書"


def construction_type(item_name: str, vendor: str = "") -> str:
    forced = FORCED_CONSTRUCTION_TYPES.get(vendor)
    if forced:
        return forced
    lowered = item_name.lower()
    if any(keyword in lowered for keyword in OTHER_KEYWORDS):
        return OTHER
    if any(keyword in lowered for keyword in BUILDING_MATERIAL_KEYWORDS):
        return BUILDING_MATERIALS
    return OTHER


def build_line_item(descriptor: ItemDescriptor, ctx: JobContext) -> LineItem:
    """Create one ``LineItem`` from an extracted descriptor.

    Identifiers come from ``ctx`` so sequences stay unique per job; the
    project id is taken from the descriptor, else the (vendor, site) memo.
    """

    settings = ctx.settings
    vendor = descriptor.vendor.strip()
    site = descriptor.site.strip()
    delivery_date = format_date(descriptor.date, ctx.today)
    name = invoice_name(vendor, delivery_date, ctx.today)

    project_id = descriptor.project_id.strip() or ctx.project_id_for_site(vendor, site)

    remarks = descriptor.work_no.strip()
    if descriptor.remarks.strip():
        remarks = f"{remarks} {descriptor.remarks.strip()}" if remarks else descriptor.remarks.strip()

    amount = clean_number(descriptor.amount)
    unit_price = clean_number(descriptor.price)

    item = LineItem(
        management_id=ctx.next_management_id(),
        counterparty_id=vendor_system_id(vendor),
        deal_type=settings.deal_type,
        staff_id=settings.staff_id,
        invoice_name=name,
        project_id=project_id,
        supervisor_id=settings.supervisor_id,
        delivery_date=delivery_date,
        due_date=payment_due_date(delivery_date, ctx.today),
        quantity=clean_number(descriptor.qty) or "1",
        unit=descriptor.unit.strip() or WHOLE_INVOICE_UNIT,
        unit_price_ex_tax=unit_price,
        unit_price_inc_tax=tax_inclusive(unit_price),
        amount_ex_tax=amount,
        amount_inc_tax=tax_inclusive(amount),
        construction_type=construction_type(descriptor.item, vendor),
        tax_flag=settings.tax_flag,
        remarks=remarks,
        result="",
        vendor=vendor,
        site=site,
        item_name=descriptor.item,
    )
    logger.debug("Line item %s: %s %s", item.management_id, item.invoice_name, item.amount_ex_tax)
    return item


def build_line_items(descriptors: Iterable[ItemDescriptor], ctx: JobContext) -> List[LineItem]:
    items = [build_line_item(descriptor, ctx) for descriptor in descriptors]
    logger.info("Normalized %s line items", len(items))
    return items
