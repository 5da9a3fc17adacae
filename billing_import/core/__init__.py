"""Core building blocks for the billing import package."""
from billing_import.core.config import Settings, load_settings
from billing_import.core.context import JobContext
from billing_import.core.errors import (
    AlreadyConvertedError,
    ConversionError,
    EmptyBatchError,
    ExtractionError,
    MappingConfigurationError,
    TotalsMismatchError,
    VendorDetectionError,
)
from billing_import.core.logging import configure_logging
from billing_import.core.models import (
    WHOLE_INVOICE_UNIT,
    ConsolidatedInvoice,
    ItemDescriptor,
    LineItem,
    RawRow,
    VendorMapping,
)

__all__ = [
    "AlreadyConvertedError",
    "ConsolidatedInvoice",
    "ConversionError",
    "EmptyBatchError",
    "ExtractionError",
    "ItemDescriptor",
    "JobContext",
    "LineItem",
    "MappingConfigurationError",
    "RawRow",
    "Settings",
    "TotalsMismatchError",
    "VendorDetectionError",
    "VendorMapping",
    "WHOLE_INVOICE_UNIT",
    "configure_logging",
    "load_settings",
]
