"""Normalization, vendor rules, consolidation and job orchestration."""
from billing_import.processing.consolidation import consolidate
from billing_import.processing.normalizer import build_line_item, build_line_items
from billing_import.processing.pipeline import (
    ConversionResult,
    convert_batch,
    convert_file,
    convert_source,
    new_context,
    run_pipeline,
)
from billing_import.processing.quality import apply_quality_checks
from billing_import.processing.rules import apply_rules_by_vendor, apply_vendor_rules

__all__ = [
    "ConversionResult",
    "apply_quality_checks",
    "apply_rules_by_vendor",
    "apply_vendor_rules",
    "build_line_item",
    "build_line_items",
    "consolidate",
    "convert_batch",
    "convert_file",
    "convert_source",
    "new_context",
    "run_pipeline",
]
