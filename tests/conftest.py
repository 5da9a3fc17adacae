"""Pytest configuration to make the local package importable without installation."""
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from billing_import.core.config import Settings
from billing_import.core.context import JobContext
from billing_import.core.models import ItemDescriptor
from billing_import.ingestion.loader import SourceFile
from billing_import.ingestion.mappings import load_mappings

JOB_DATE = date(2025, 11, 4)


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer env files and BILLING_IMPORT_* variables out of tests."""

    for key in list(os.environ):
        if key.startswith("BILLING_IMPORT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("BILLING_IMPORT_ENV_FILE", str(tmp_path / "absent.env"))


@pytest.fixture
def dummy_data_dir() -> Path:
    """Return the built-in dummy data directory for tests."""

    return ROOT / "dummy_data"


@pytest.fixture
def invoices_dir(dummy_data_dir: Path) -> Path:
    return dummy_data_dir / "invoices"


@pytest.fixture
def ctx() -> JobContext:
    """A job context pinned to a fixed date so generated ids are predictable."""

    return JobContext(today=JOB_DATE, settings=Settings())


@pytest.fixture
def mappings():
    return load_mappings()


@pytest.fixture
def make_source():
    """Build a ``SourceFile`` from header names and row value lists."""

    def _make(filename: str, headers: List[str], rows: List[List[Any]]) -> SourceFile:
        keyed: List[Dict[str, Any]] = [dict(zip(headers, row)) for row in rows]
        return SourceFile(filename=filename, headers=list(headers), rows=keyed)

    return _make


@pytest.fixture
def descriptor():
    """Factory for item descriptors with sensible defaults."""

    def _make(**overrides: Any) -> ItemDescriptor:
        values: Dict[str, Any] = {
            "vendor": "ナカザワ建販",
            "site": "山田邸",
            "date": "2025/10/3",
            "item": "石膏ボード",
            "qty": "2",
            "unit": "枚",
            "price": "500",
            "amount": "1000",
        }
        values.update(overrides)
        return ItemDescriptor(**values)

    return _make
