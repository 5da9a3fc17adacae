"""Logging coverage to ensure defects are surfaced without stopping the run."""
import logging

from billing_import.core.logging import configure_logging, resolve_level
from billing_import.processing.normalizer import build_line_items
from billing_import.processing.pipeline import convert_batch


def test_configure_logging_reads_env_level(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    configure_logging()

    assert root.level == logging.DEBUG


def test_resolve_level_falls_back_to_info(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    assert resolve_level("warning") == logging.WARNING
    assert resolve_level("loud") == logging.INFO
    assert resolve_level() == logging.INFO


def test_skipped_batch_file_is_logged_and_run_continues(ctx, make_source, mappings, caplog):
    broken = make_source("北恵_10月.csv", ["伝票日付", "品名", "売上金額"], [["2025/10/1", "", "0"]])
    good = make_source(
        "大萬_10月.csv",
        ["出荷日", "伝票番号", "商品名", "仕入金額"],
        [["2025/10/8", "T-1", "コンパネ", "1000"]],
    )

    caplog.set_level("ERROR")
    result = convert_batch([broken, good], "csv", ctx=ctx, mappings=mappings)

    assert result.row_count == 1
    assert "Skipping 北恵_10月.csv" in caplog.text


def test_generated_project_ids_are_logged(ctx, descriptor, caplog):
    caplog.set_level("INFO")

    build_line_items([descriptor(site="山田邸")], ctx)

    assert any("PRJ-20251104-001" in message for message in caplog.messages)


def test_missing_project_id_sentinel_is_logged(ctx, make_source, mappings, caplog):
    source = make_source("大萬_10月.csv", ["出荷日", "商品名", "仕入金額"], [["2025/10/8", "コンパネ", "1000"]])

    caplog.set_level("WARNING")
    convert_batch([source], "csv", ctx=ctx, mappings=mappings)

    assert "MISSING_ID_TAIMAN_ROW0" in caplog.text
    assert "Quality issues for" in caplog.text
