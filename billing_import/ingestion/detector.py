"""Identify the vendor of an uploaded invoice from its filename or headers."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from billing_import.core.models import VendorMapping

logger = logging.getLogger(__name__)

HEADER_MATCH_THRESHOLD = 0.5

_BRACKETS = re.compile(r"[()（）\[\]【】「」『』]")
_SEPARATORS = re.compile(r"[_\-・]")
_EXTENSIONS = re.compile(r"\.(csv|xlsx|xls)$")


@dataclass
class DetectionResult:
    detected: bool
    mapping: Optional[VendorMapping] = None
    method: Optional[str] = None
    headers_sample: List[str] = field(default_factory=list)


def normalize_name(name: str) -> str:
    """Lower-case and strip whitespace, brackets, separators and known extensions."""

    text = name.lower()
    text = re.sub(r"\s+", "", text)
    text = _EXTENSIONS.sub("", text)
    text = _BRACKETS.sub("", text)
    return _SEPARATORS.sub("", text)


def priority_order(mappings: Sequence[VendorMapping]) -> List[VendorMapping]:
    """Custom-parser vendors first, each group keeping load order."""

    return [m for m in mappings if m.custom_parser] + [m for m in mappings if not m.custom_parser]


def match_filename(filename: str, mappings: Sequence[VendorMapping]) -> Optional[VendorMapping]:
    normalized = normalize_name(filename)
    for mapping in priority_order(mappings):
        for pattern in mapping.file_patterns:
            needle = normalize_name(pattern)
            if needle and needle in normalized:
                logger.info("Vendor %s detected by filename (pattern %r)", mapping.vendor, pattern)
                return mapping
    return None


def header_score(mapping: VendorMapping, headers: Sequence[str]) -> float:
    """Share of the mapping's source columns found among ``headers``."""

    columns = list(mapping.column_map)
    if not columns:
        return 0.0
    observed = [h.strip().lower() for h in headers if h and h.strip()]
    matched = 0
    for column in columns:
        wanted = column.strip().lower()
        if any(h == wanted or wanted in h or h in wanted for h in observed):
            matched += 1
    return matched / len(columns)


def match_headers(headers: Sequence[str], mappings: Sequence[VendorMapping]) -> Optional[VendorMapping]:
    best: Optional[VendorMapping] = None
    best_score = 0.0
    for mapping in mappings:
        if not mapping.column_map:
            continue
        score = header_score(mapping, headers)
        logger.debug("Header score for %s: %.2f", mapping.vendor, score)
        if score > best_score:
            best, best_score = mapping, score
    if best is not None and best_score >= HEADER_MATCH_THRESHOLD:
        logger.info("Vendor %s detected by headers (score %.2f)", best.vendor, best_score)
        return best
    return None


def detect_vendor(filename: str, headers: Sequence[str], mappings: Sequence[VendorMapping]) -> DetectionResult:
    """Match a file to a vendor mapping: filename patterns first, then header overlap."""

    mapping = match_filename(filename, mappings)
    if mapping is not None:
        return DetectionResult(detected=True, mapping=mapping, method="filename")

    mapping = match_headers(headers, mappings)
    if mapping is not None:
        return DetectionResult(detected=True, mapping=mapping, method="headers")

    sample = [str(h) for h in list(headers)[:5]]
    logger.warning("No vendor matched %s (headers: %s)", filename, ", ".join(sample))
    return DetectionResult(detected=False, headers_sample=sample)
