"""Vendor invoice normalization and consolidation into the billing import layout."""
from billing_import.core import (
    ConsolidatedInvoice,
    ConversionError,
    JobContext,
    LineItem,
    Settings,
    VendorMapping,
    configure_logging,
    load_settings,
)
from billing_import.export import MASTER_COLUMNS, render
from billing_import.ingestion import detect_vendor, get_extractor, load_mappings, load_source
from billing_import.processing import (
    ConversionResult,
    consolidate,
    convert_batch,
    convert_file,
    new_context,
    run_pipeline,
)

__all__ = [
    "ConsolidatedInvoice",
    "ConversionError",
    "ConversionResult",
    "JobContext",
    "LineItem",
    "MASTER_COLUMNS",
    "Settings",
    "VendorMapping",
    "configure_logging",
    "consolidate",
    "convert_batch",
    "convert_file",
    "detect_vendor",
    "get_extractor",
    "load_mappings",
    "load_settings",
    "load_source",
    "new_context",
    "render",
    "run_pipeline",
]
