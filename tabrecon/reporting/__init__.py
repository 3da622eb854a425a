"""Report rendering."""

from .exports import ReportWriter, report_paths, summary_lines, schema_diff_lines, write_reports

__all__ = [
    "ReportWriter",
    "report_paths",
    "summary_lines",
    "schema_diff_lines",
    "write_reports",
]
