"""Procedural extractors, one module per vendor invoice shape."""
from billing_import.ingestion.parsers.base import BaseExtractor, InvoiceMetadata
from billing_import.ingestion.parsers.clean_industry import CleanIndustryExtractor
from billing_import.ingestion.parsers.hokukei import HokukeiExtractor
from billing_import.ingestion.parsers.nakazawa_kenhan import NakazawaKenhanExtractor
from billing_import.ingestion.parsers.nansei import NanseiExtractor
from billing_import.ingestion.parsers.omega_japan import OmegaJapanExtractor
from billing_import.ingestion.parsers.sanko_sangyo import SankoSangyoExtractor
from billing_import.ingestion.parsers.taiman import TaimanExtractor
from billing_import.ingestion.parsers.takabishi import TakabishiExtractor
from billing_import.ingestion.parsers.tokiwa_system import TokiwaSystemExtractor

__all__ = [
    "BaseExtractor",
    "CleanIndustryExtractor",
    "HokukeiExtractor",
    "InvoiceMetadata",
    "NakazawaKenhanExtractor",
    "NanseiExtractor",
    "OmegaJapanExtractor",
    "SankoSangyoExtractor",
    "TaimanExtractor",
    "TakabishiExtractor",
    "TokiwaSystemExtractor",
]
