"""Conversion job orchestration for single files and batches."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence

from billing_import.core.config import Settings, load_settings
from billing_import.core.context import JobContext
from billing_import.core.errors import ConversionError, EmptyBatchError, VendorDetectionError
from billing_import.core.models import ConsolidatedInvoice, VendorMapping
from billing_import.export.sinks import render, write_output
from billing_import.ingestion.detector import detect_vendor
from billing_import.ingestion.loader import SourceFile, load_source
from billing_import.ingestion.mappings import load_mappings
from billing_import.ingestion.registry import get_extractor
from billing_import.processing.consolidation import consolidate
from billing_import.processing.normalizer import build_line_items
from billing_import.processing.quality import apply_quality_checks
from billing_import.processing.rules import apply_rules_by_vendor, apply_vendor_rules

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("output")


@dataclass
class ConversionResult:
    content: bytes
    row_count: int
    file_extension: str
    vendors: List[str] = field(default_factory=list)
    alerts: List[str] = field(default_factory=list)
    records: List[ConsolidatedInvoice] = field(default_factory=list)


def new_context(settings: Optional[Settings] = None, today: Optional[date] = None) -> JobContext:
    """Start a job with fresh counters and an empty site memo."""

    return JobContext(today=today or date.today(), settings=settings or load_settings())


def _mappings_for(ctx: JobContext, mappings: Optional[Sequence[VendorMapping]]) -> List[VendorMapping]:
    if mappings is not None:
        return list(mappings)
    return load_mappings(ctx.settings.mappings_dir)


def convert_source(
    source: SourceFile, ctx: JobContext, mappings: Sequence[VendorMapping]
) -> List[ConsolidatedInvoice]:
    """Run one decoded file through detection, extraction, rules and consolidation."""

    detection = detect_vendor(source.filename, source.headers, mappings)
    if not detection.detected or detection.mapping is None:
        logger.error("Vendor not detected for %s (headers: %s)", source.filename, detection.headers_sample)
        raise VendorDetectionError(source.filename, detection.headers_sample)

    mapping = detection.mapping
    logger.info("%s detected as %s by %s", source.filename, mapping.vendor, detection.method)
    descriptors = get_extractor(mapping, ctx.today).extract(source.rows, source.headers)
    items = build_line_items(descriptors, ctx)
    items = apply_vendor_rules(items, mapping.vendor)
    invoices = consolidate(items, ctx)
    invoices = apply_quality_checks(invoices, ctx)
    logger.info("%s: %s line items -> %s invoices", source.filename, len(items), len(invoices))
    return invoices


def _vendors(records: Sequence[ConsolidatedInvoice]) -> List[str]:
    vendors: List[str] = []
    for record in records:
        if record.vendor not in vendors:
            vendors.append(record.vendor)
    return vendors


def convert_file(
    source: SourceFile,
    output_format: str = "xlsx",
    ctx: Optional[JobContext] = None,
    mappings: Optional[Sequence[VendorMapping]] = None,
) -> ConversionResult:
    """Convert a single vendor file into rendered import bytes."""

    ctx = ctx or new_context()
    records = convert_source(source, ctx, _mappings_for(ctx, mappings))
    content = render(records, output_format)
    return ConversionResult(
        content=content,
        row_count=len(records),
        file_extension=output_format,
        vendors=_vendors(records),
        alerts=list(ctx.alerts),
        records=records,
    )


def convert_batch(
    sources: Sequence[SourceFile],
    output_format: str = "xlsx",
    ctx: Optional[JobContext] = None,
    mappings: Optional[Sequence[VendorMapping]] = None,
) -> ConversionResult:
    """Convert several files with one shared context and render them together.

    A file that fails conversion is logged and skipped; the job fails only
    when nothing could be converted.
    """

    ctx = ctx or new_context()
    mappings = _mappings_for(ctx, mappings)
    combined: List[ConsolidatedInvoice] = []
    skipped: List[str] = []
    for source in sources:
        try:
            combined.extend(convert_source(source, ctx, mappings))
        except ConversionError as exc:
            logger.error("Skipping %s: %s", source.filename, exc)
            skipped.append(source.filename)
            ctx.record_alert(f"{source.filename}: {exc.message_en}")

    if not combined:
        raise EmptyBatchError(skipped)

    combined = apply_rules_by_vendor(combined)
    logger.info(
        "Batch converted %s of %s files into %s rows", len(sources) - len(skipped), len(sources), len(combined)
    )
    return ConversionResult(
        content=render(combined, output_format),
        row_count=len(combined),
        file_extension=output_format,
        vendors=_vendors(combined),
        alerts=list(ctx.alerts),
        records=combined,
    )


def default_output_name(vendors: Sequence[str], output_format: str, now: Optional[datetime] = None) -> str:
    """``ANDPAD_<vendor>_<timestamp>`` for one vendor, ``ANDPAD_Combined_...`` otherwise."""

    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    label = vendors[0] if len(vendors) == 1 else "Combined"
    return f"ANDPAD_{label}_{stamp}.{output_format}"


def run_pipeline(
    paths: Sequence[Path],
    output_path: Optional[Path] = None,
    output_format: str = "xlsx",
    settings: Optional[Settings] = None,
) -> Path:
    """Load files from disk, convert them and write the import file."""

    if not paths:
        raise ValueError("At least one input file is required")

    logger.info("Pipeline starting for %s file(s)", len(paths))
    ctx = new_context(settings)
    mappings = load_mappings(ctx.settings.mappings_dir)
    sources = [load_source(Path(path)) for path in paths]
    if len(sources) == 1:
        result = convert_file(sources[0], output_format, ctx=ctx, mappings=mappings)
    else:
        result = convert_batch(sources, output_format, ctx=ctx, mappings=mappings)

    for alert in result.alerts:
        logger.warning("Alert: %s", alert)

    target = output_path or DEFAULT_OUTPUT_DIR / default_output_name(result.vendors, output_format)
    return write_output(result.content, Path(target))
