"""Ingestion layer: vendor mappings, detection, extraction and file loading."""
from billing_import.ingestion.detector import DetectionResult, detect_vendor
from billing_import.ingestion.loader import SourceFile, load_source
from billing_import.ingestion.mappings import load_mappings
from billing_import.ingestion.registry import get_extractor, has_custom_extractor

__all__ = [
    "DetectionResult",
    "SourceFile",
    "detect_vendor",
    "get_extractor",
    "has_custom_extractor",
    "load_mappings",
    "load_source",
]
