"""Data models shared by detection, extraction, consolidation and export."""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

# A source row: cell values in column order, or header -> cell value.
RawRow = Union[Sequence[Any], Mapping[str, Any]]

# Unit token meaning "the whole invoice" (one lump-sum line).
WHOLE_INVOICE_UNIT = "式"


@dataclass(frozen=True)
class VendorMapping:
    """Static descriptor for recognizing and parsing one vendor's invoices."""

    vendor: str
    file_patterns: Tuple[str, ...] = ()
    column_map: Dict[str, str] = field(default_factory=dict)
    skip_rows: Tuple[str, ...] = ()
    custom_parser: bool = False
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Optional[str] = None) -> "VendorMapping":
        """Build a mapping from its JSON form (``filePattern``, ``map``, ...)."""

        vendor = str(data.get("vendor") or "").strip()
        if not vendor:
            raise ValueError("vendor mapping requires a 'vendor' name")

        patterns = data.get("filePattern") or []
        if isinstance(patterns, str):
            patterns = [patterns]
        patterns = list(patterns) + list(data.get("alternatePatterns") or [])

        column_map = data.get("map") or {}
        if not isinstance(column_map, Mapping):
            raise ValueError(f"'map' for vendor {vendor} must be an object")

        return cls(
            vendor=vendor,
            file_patterns=tuple(str(p) for p in patterns if str(p).strip()),
            column_map={str(k): str(v) for k, v in column_map.items()},
            skip_rows=tuple(str(p) for p in data.get("skipRows") or []),
            custom_parser=bool(data.get("customParser", False)),
            source=source,
        )


@dataclass
class ItemDescriptor:
    """Partially normalized invoice line produced by an extractor."""

    vendor: str
    site: str = ""
    date: str = ""
    item: str = ""
    qty: str = ""
    unit: str = ""
    price: str = ""
    amount: str = ""
    work_no: str = ""
    remarks: str = ""
    project_id: str = ""


@dataclass
class LineItem:
    """One canonical billing-import row.

    ``description`` is derived from ``invoice_name`` so the invoice label and
    the line description can never disagree.
    """

    management_id: str = ""
    counterparty_id: str = ""
    deal_type: str = ""
    staff_id: str = ""
    invoice_name: str = ""
    project_id: str = ""
    invoice_total_ex_tax: str = ""
    invoice_total_inc_tax: str = ""
    supervisor_id: str = ""
    delivery_date: str = ""
    due_date: str = ""
    quantity: str = "1"
    unit: str = WHOLE_INVOICE_UNIT
    unit_price_ex_tax: str = ""
    unit_price_inc_tax: str = ""
    amount_ex_tax: str = ""
    amount_inc_tax: str = ""
    construction_type: str = ""
    tax_flag: str = ""
    remarks: str = ""
    result: str = ""
    # Working fields, never rendered.
    vendor: str = ""
    site: str = ""
    item_name: str = ""
    applied_rules: Tuple[str, ...] = ()
    quality_issues: List[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        return self.invoice_name

    def append_remark(self, note: str) -> None:
        note = note.strip()
        if not note:
            return
        self.remarks = f"{self.remarks} {note}" if self.remarks else note

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dictionary representation including the description."""

        data = asdict(self)
        data["description"] = self.description
        return data


@dataclass
class ConsolidatedInvoice(LineItem):
    """One output row per project identifier after merging line items."""

    member_count: int = 0
    member_management_ids: Tuple[str, ...] = ()
