"""Integration-style tests that exercise the CLI entrypoint."""
import csv
import io
from pathlib import Path

import pytest
from openpyxl import load_workbook

from billing_import.cli import build_parser, main as cli_main


def test_cli_writes_csv_output(tmp_path: Path, invoices_dir: Path, capsys) -> None:
    output = tmp_path / "import.csv"

    status = cli_main([str(invoices_dir / "ナカザワ建販_売上明細_202510.csv"), "--output", str(output), "--format", "csv"])

    assert status == 0
    assert f"Wrote {output}" in capsys.readouterr().out
    rows = list(csv.DictReader(io.StringIO(output.read_bytes().decode("utf-8-sig"))))
    assert [row["案件管理ID"] for row in rows] == ["P-1001", "P-1002"]


def test_cli_writes_excel_batch(tmp_path: Path, invoices_dir: Path) -> None:
    output = tmp_path / "combined.xlsx"
    files = [str(path) for path in sorted(invoices_dir.glob("*.csv"))]

    status = cli_main([*files, "--output", str(output)])

    assert status == 0
    sheet = load_workbook(output).active
    assert sheet.title == "ANDPAD Import"
    assert sheet.max_row == 1 + 6


def test_cli_default_output_name(tmp_path: Path, invoices_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    status = cli_main([str(invoices_dir / "大萬_仕入明細_202510.csv"), "--format", "csv"])

    assert status == 0
    written = list((tmp_path / "output").glob("ANDPAD_大萬_*.csv"))
    assert len(written) == 1


def test_cli_reports_bilingual_error(tmp_path: Path, capsys) -> None:
    mystery = tmp_path / "mystery.csv"
    mystery.write_text("a,b\n1,2\n", encoding="utf-8")

    status = cli_main([str(mystery), "--output", str(tmp_path / "out.csv")])

    assert status == 1
    err = capsys.readouterr().err
    assert "Could not identify vendor" in err
    assert "業者を識別できませんでした" in err
    assert not (tmp_path / "out.csv").exists()


def test_cli_uses_mappings_dir_option(tmp_path: Path, invoices_dir: Path, capsys) -> None:
    empty_mappings = tmp_path / "mappings"
    empty_mappings.mkdir()

    status = cli_main(
        [str(invoices_dir / "大萬_仕入明細_202510.csv"), "--mappings-dir", str(empty_mappings), "--format", "csv",
         "--output", str(tmp_path / "out.csv")]
    )

    assert status == 1
    assert "Could not identify vendor" in capsys.readouterr().err


def test_cli_rejects_unknown_format() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["file.csv", "--format", "pdf"])
