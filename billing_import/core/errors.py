"""Failure types raised by conversion jobs.

Every fatal failure carries an English and a Japanese message plus a short
classification so callers can report it without inspecting the type.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class ConversionError(ValueError):
    """Base class for fatal conversion failures."""

    classification = "conversion"

    def __init__(
        self,
        message_en: str,
        message_ja: str | None = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message_en)
        self.message_en = message_en
        self.message_ja = message_ja or message_en
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Return the failure payload reported to callers."""

        payload: Dict[str, Any] = {
            "success": False,
            "message": {"en": self.message_en, "ja": self.message_ja},
            "classification": self.classification,
        }
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class MappingConfigurationError(ConversionError):
    """A declarative mapping does not fit the file (or has no extractor)."""

    classification = "configuration"

    def __init__(self, message_en: str, message_ja: str | None = None, missing_columns: Iterable[str] = ()) -> None:
        missing = list(missing_columns)
        super().__init__(message_en, message_ja, {"missing_columns": missing} if missing else None)
        self.missing_columns = missing

    @classmethod
    def for_missing_columns(cls, columns: Iterable[str]) -> "MappingConfigurationError":
        missing = list(columns)
        joined = ", ".join(missing)
        return cls(
            f"Missing columns: {joined}",
            f"必要な列がありません: {joined}",
            missing_columns=missing,
        )


class ExtractionError(ConversionError):
    """No usable rows could be extracted from a file."""

    classification = "extraction"

    @classmethod
    def no_rows(cls, vendor: str) -> "ExtractionError":
        return cls(
            f"No extractable rows found for {vendor}. Please check the file format.",
            "有効なデータ行が見つかりませんでした。ファイル形式を確認してください。",
            {"vendor": vendor},
        )


class AlreadyConvertedError(ExtractionError):
    """The uploaded file is already in the import layout."""

    def __init__(self, vendor: str) -> None:
        super().__init__(
            "This file has already been converted. Please upload the original vendor file.",
            "このファイルは既に変換済みです。元の業者ファイルをアップロードしてください。",
            {"vendor": vendor},
        )


class VendorDetectionError(ConversionError):
    """Neither the filename nor the headers identify a vendor."""

    classification = "detection"

    def __init__(self, filename: str, headers_sample: Iterable[str] = ()) -> None:
        sample = list(headers_sample)
        super().__init__(
            "Could not identify vendor",
            "業者を識別できませんでした",
            {"filename": filename, "headersSample": sample},
        )
        self.filename = filename
        self.headers_sample = sample


class EmptyBatchError(ConversionError):
    """Every file in a batch failed or produced nothing."""

    classification = "empty_batch"

    def __init__(self, skipped: Iterable[str] = ()) -> None:
        skipped_files = list(skipped)
        super().__init__(
            "No valid files could be processed",
            "有効なファイルが処理できませんでした",
            {"skippedFiles": skipped_files} if skipped_files else None,
        )
        self.skipped_files = skipped_files


class TotalsMismatchError(ConversionError):
    """Invoice-level and line-level totals diverge (strict mode only)."""

    classification = "data_quality"
