"""Export destinations for billing import records."""
from billing_import.export.sinks import OUTPUT_FORMATS, ensure_output_dir, render, render_csv, render_excel, write_output
from billing_import.export.templates import MASTER_COLUMNS, record_to_template_row

__all__ = [
    "MASTER_COLUMNS",
    "OUTPUT_FORMATS",
    "ensure_output_dir",
    "record_to_template_row",
    "render",
    "render_csv",
    "render_excel",
    "write_output",
]
