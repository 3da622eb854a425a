"""
Report export.
Single responsibility: render a ReconciliationResult into report files.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from ..core.key_resolver import render_key
from ..core.reconciler import ReconciliationResult
from ..utils.logger import get_logger


logger = get_logger()


REPORT_SUFFIXES = {
    "missing": "_missing_in_target.csv",
    "extra": "_extra_in_target.csv",
    "mismatches": "_mismatched_values.csv",
    "duplicates_source": "_duplicates_source.csv",
    "duplicates_target": "_duplicates_target.csv",
    "schema_diff": "_schema_diff.txt",
    "summary": "_summary.txt",
    "overview": "_overview.xlsx",
}

MISMATCH_COLUMNS_HEADER = ["key", "column_index", "column_name", "source_value",
                           "target_value", "is_numeric", "diff"]
MISMATCH_COLUMNS_NO_HEADER = ["key", "column_index", "source_value",
                              "target_value", "is_numeric", "diff"]

SCHEMA_HEADING = "SCHEMA CHECK"
SUMMARY_HEADING = "RECONCILIATION SUMMARY"
DIVIDER = "----"

# Report fields holding any of these are quoted
CSV_SPECIAL_CHARS = (",", '"', "\r", "\n")


def csv_field(value) -> str:
    """Quote a report field when it holds a comma, quote or line break."""
    text = str(value)
    if any(ch in text for ch in CSV_SPECIAL_CHARS):
        return '"' + text.replace('"', '""') + '"'
    return text


def report_paths(prefix: str) -> Dict[str, Path]:
    """All artifact paths for an output prefix."""
    return {name: Path(f"{prefix}{suffix}") for name, suffix in REPORT_SUFFIXES.items()}


def schema_diff_lines(result: ReconciliationResult) -> List[str]:
    """Lines of the schema diff report."""
    return [SCHEMA_HEADING] + list(result.schema_diff.notes)


def summary_lines(result: ReconciliationResult) -> List[str]:
    """Lines of the summary report, `label:value` after the heading."""
    cfg = result.config
    counts = result.summary
    return [
        SUMMARY_HEADING,
        f"Source file:{cfg.source}",
        f"Target file:{cfg.target}",
        f"Delimiter:{cfg.delimiter_label}",
        f"Header:{'yes' if cfg.has_header else 'no'}",
        f"Key spec:{cfg.key_spec}",
        f"Numeric tolerance:{cfg.tolerance_text}",
        DIVIDER,
        f"Keys only in source (missing in target):{counts.missing}",
        f"Keys only in target (extra in target):{counts.extra}",
        f"Duplicate keys in source:{counts.duplicate_source}",
        f"Duplicate keys in target:{counts.duplicate_target}",
        f"Common keys:{counts.common}",
        f"Mismatched values (non-key columns):{counts.mismatched}",
        f"Schema issues noted:{'yes' if counts.schema_issues else 'no'}",
    ]


def split_label(line: str) -> Tuple[str, str]:
    """
    Split a report line into two cells on the first colon.
    Headings and dividers stay in a single cell.
    """
    if line in (SCHEMA_HEADING, SUMMARY_HEADING) or set(line) == {"-"}:
        return line, ""
    if ":" not in line:
        return line, ""
    label, value = line.split(":", 1)
    return label.strip(), value.lstrip()


def mismatch_frame(result: ReconciliationResult) -> pd.DataFrame:
    """Mismatch outcomes as a report frame."""
    headered = result.config.has_header
    columns = MISMATCH_COLUMNS_HEADER if headered else MISMATCH_COLUMNS_NO_HEADER
    
    rows = []
    for outcome in result.mismatches:
        row = {
            "key": outcome.key_text,
            "column_index": outcome.column_index,
            "source_value": outcome.source_value,
            "target_value": outcome.target_value,
            "is_numeric": "1" if outcome.is_numeric else "0",
            "diff": outcome.diff_text,
        }
        if headered:
            row["column_name"] = outcome.column_name or ""
        rows.append(row)
    
    return pd.DataFrame(rows, columns=columns, dtype=object)


def key_frame(keys) -> pd.DataFrame:
    return pd.DataFrame({"key": [render_key(key) for key in keys]}, dtype=object)


def duplicate_frame(duplicates) -> pd.DataFrame:
    return pd.DataFrame(
        [(render_key(key), count) for key, count in duplicates],
        columns=["key", "count"],
        dtype=object,
    )


class ReportWriter:
    """
    Write the report artifacts of one run.
    
    Artifacts share a prefix, which may include a directory. Stale files
    with the same prefix are removed before new ones are written.
    """
    
    def __init__(self, prefix: str):
        """
        Initialize report writer.
        
        Args:
            prefix: Output file prefix, e.g. "reconcile" or "out/daily"
        """
        self.prefix = prefix
        self.paths = report_paths(prefix)
    
    def clear_previous(self):
        """Remove artifacts left by an earlier run with the same prefix."""
        removed = 0
        for path in self.paths.values():
            if path.is_file():
                path.unlink()
                removed += 1
        if removed:
            logger.debug("exports.cleared", prefix=self.prefix, files=removed)
    
    def write(self, result: ReconciliationResult) -> Dict[str, Path]:
        """
        Write every report for a result.
        
        Args:
            result: Completed reconciliation
            
        Returns:
            Artifact name -> written path
        """
        logger.info("exports.starting", prefix=self.prefix)
        
        parent = self.paths["summary"].parent
        parent.mkdir(parents=True, exist_ok=True)
        self.clear_previous()
        
        self._write_csv(key_frame(result.missing_in_target), self.paths["missing"])
        self._write_csv(key_frame(result.extra_in_target), self.paths["extra"])
        self._write_csv(duplicate_frame(result.duplicates_source),
                        self.paths["duplicates_source"])
        self._write_csv(duplicate_frame(result.duplicates_target),
                        self.paths["duplicates_target"])
        self._write_csv(mismatch_frame(result), self.paths["mismatches"])
        
        schema_lines = schema_diff_lines(result)
        report_lines = summary_lines(result)
        self._write_text(schema_lines, self.paths["schema_diff"])
        self._write_text(report_lines, self.paths["summary"])
        self._write_overview(schema_lines, report_lines, self.paths["overview"])
        
        logger.info("exports.complete",
                   prefix=self.prefix,
                   files=len(self.paths))
        
        return dict(self.paths)
    
    def _write_csv(self, frame: pd.DataFrame, path: Path):
        """
        Write a report frame as comma-separated text with LF line endings.
        
        Fields are quoted through csv_field, so a lone carriage return is
        quoted like any other line break.
        """
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(",".join(csv_field(col) for col in frame.columns) + "\n")
            for row in frame.itertuples(index=False, name=None):
                f.write(",".join(csv_field(value) for value in row) + "\n")
        logger.debug("exports.csv.written", path=str(path), rows=len(frame))
    
    def _write_text(self, lines: List[str], path: Path):
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.debug("exports.text.written", path=str(path), lines=len(lines))
    
    def _write_overview(self, schema_lines: List[str], report_lines: List[str],
                        path: Path):
        """Workbook with the schema diff and summary, one line per row."""
        sheets = {
            "Schema_Diff": schema_lines,
            "Summary": report_lines,
        }
        with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
            for sheet_name, lines in sheets.items():
                frame = pd.DataFrame([split_label(line) for line in lines],
                                     columns=["label", "value"])
                frame.to_excel(writer, sheet_name=sheet_name, index=False, header=False)
                
                worksheet = writer.sheets[sheet_name]
                label_width = max((len(label) for label, _ in frame.itertuples(index=False)),
                                  default=10)
                worksheet.set_column(0, 0, min(label_width + 2, 60))
                worksheet.set_column(1, 1, 40)
        
        logger.debug("exports.overview.written", path=str(path))


def write_reports(result: ReconciliationResult,
                  prefix: Optional[str] = None) -> Dict[str, Path]:
    """Write all artifacts of a result using its configured prefix."""
    return ReportWriter(prefix or result.config.prefix).write(result)
