"""Command line entry point for converting vendor invoices into import files."""
import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from billing_import.core.config import load_settings
from billing_import.core.errors import ConversionError
from billing_import.core.logging import configure_logging
from billing_import.export.sinks import OUTPUT_FORMATS
from billing_import.processing.pipeline import run_pipeline


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI entry point."""

    parser = argparse.ArgumentParser(description="Convert vendor invoice files into the billing import layout")
    parser.add_argument("files", nargs="+", type=Path, help="Vendor CSV or Excel files to convert")
    parser.add_argument(
        "--output",
        type=Path,
        help="File to write (defaults to output/ANDPAD_<vendor>_<timestamp>.<format>)",
    )
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default="xlsx", help="Output file format")
    parser.add_argument("--mappings-dir", type=Path, help="Directory holding vendor mapping JSON files")
    parser.add_argument("--log-level", help="Logging level (defaults to LOG_LEVEL or INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for running conversions from the command line."""

    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    settings = load_settings()
    if args.mappings_dir:
        settings = replace(settings, mappings_dir=args.mappings_dir)

    try:
        output_path = run_pipeline(args.files, args.output, output_format=args.format, settings=settings)
    except ConversionError as exc:
        print(f"Error: {exc.message_en}", file=sys.stderr)
        print(f"エラー: {exc.message_ja}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
