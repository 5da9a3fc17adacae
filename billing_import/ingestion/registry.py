"""Vendor name -> extractor lookup."""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Type

from billing_import.core.errors import MappingConfigurationError
from billing_import.core.models import VendorMapping
from billing_import.ingestion.mapper import ColumnMapExtractor
from billing_import.ingestion.parsers import (
    BaseExtractor,
    CleanIndustryExtractor,
    HokukeiExtractor,
    NakazawaKenhanExtractor,
    NanseiExtractor,
    OmegaJapanExtractor,
    SankoSangyoExtractor,
    TaimanExtractor,
    TakabishiExtractor,
    TokiwaSystemExtractor,
)

logger = logging.getLogger(__name__)

EXTRACTOR_REGISTRY: Dict[str, Type[BaseExtractor]] = {
    "クリーン産業": CleanIndustryExtractor,
    "三高産業": SankoSangyoExtractor,
    "北恵株式会社": HokukeiExtractor,
    "ナンセイ": NanseiExtractor,
    "大萬": TaimanExtractor,
    "髙菱管理": TakabishiExtractor,
    "高菱管理": TakabishiExtractor,
    "オメガジャパン": OmegaJapanExtractor,
    "ナカザワ建販": NakazawaKenhanExtractor,
    "トキワシステム": TokiwaSystemExtractor,
}


def has_custom_extractor(vendor: str) -> bool:
    return vendor in EXTRACTOR_REGISTRY


def get_extractor(mapping: VendorMapping, today: Optional[date] = None) -> BaseExtractor:
    """Return the extractor for a mapping.

    Custom-parser mappings resolve through ``EXTRACTOR_REGISTRY``; every other
    mapping is handled by the declarative ``ColumnMapExtractor``.
    """

    if not mapping.custom_parser:
        return ColumnMapExtractor(mapping, today=today)

    extractor_cls = EXTRACTOR_REGISTRY.get(mapping.vendor)
    if extractor_cls is None:
        raise MappingConfigurationError(
            f"No custom extractor registered for vendor: {mapping.vendor}",
            f"カスタムパーサーが見つかりません: {mapping.vendor}",
        )
    logger.debug("Using %s for %s", extractor_cls.__name__, mapping.vendor)
    if extractor_cls is TakabishiExtractor:
        return TakabishiExtractor(today=today, vendor=mapping.vendor)
    return extractor_cls(today=today)
