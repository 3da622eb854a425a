"""
Schema loading and schema-level comparison.
Single responsibility: describe each file's columns and report differences
between the two descriptions, independent of row data.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from ..adapters.file_reader import DelimitedFileReader
from ..utils.logger import get_logger
from ..utils.normalizers import trim, normalize_column_name


logger = get_logger()


MISSING_COLUMN = "<missing>"


@dataclass(frozen=True)
class SchemaInfo:
    """Column count and, in header mode, header names of one file."""
    
    column_count: int
    headers: Optional[List[str]] = None
    
    @property
    def has_header(self) -> bool:
        return self.headers is not None
    
    @property
    def header_index(self) -> Dict[str, int]:
        """Case-insensitive header name -> 1-based position (last one wins)."""
        index: Dict[str, int] = {}
        for position, name in enumerate(self.headers or [], start=1):
            index[normalize_column_name(name)] = position
        return index
    
    def column_name(self, position: int) -> Optional[str]:
        """Header name at a 1-based position, None if there is none."""
        if self.headers is None or not 1 <= position <= len(self.headers):
            return None
        return self.headers[position - 1]
    
    def with_observed_width(self, width: int) -> "SchemaInfo":
        """Copy with the column count raised to an observed row width."""
        return replace(self, column_count=max(self.column_count, width))


class SchemaLoader:
    """Build SchemaInfo from the first line of a file."""
    
    def load(self, reader: DelimitedFileReader, has_header: bool) -> SchemaInfo:
        """
        Read the schema of an open file.
        
        In header mode the first row is consumed and trimmed. In headerless
        mode nothing is consumed and the column count starts at zero; it is
        raised to the widest data row after ingestion.
        
        Args:
            reader: Open reader positioned at the first row
            has_header: Whether the first row holds column names
            
        Returns:
            Schema of the file
        """
        if not has_header:
            return SchemaInfo(column_count=0)
        
        headers = [trim(name) for name in reader.read_header()]
        
        logger.debug("schema.header.loaded",
                    file=str(reader.file_path),
                    columns=len(headers))
        
        return SchemaInfo(column_count=len(headers), headers=headers)


@dataclass
class SchemaDiffReport:
    """Informational notes produced by SchemaDiff."""
    
    notes: List[str] = field(default_factory=list)
    issues: int = 0
    
    @property
    def has_issues(self) -> bool:
        return self.issues > 0
    
    def add_issue(self, note: str):
        self.notes.append(note)
        self.issues += 1


class SchemaDiff:
    """
    Compare the schemas of source and target.
    Never raises for mismatches; every difference becomes a note.
    """
    
    def compare(self, source: SchemaInfo, target: SchemaInfo) -> SchemaDiffReport:
        """
        Compare column counts and, in header mode, header names.
        
        Args:
            source: Source file schema
            target: Target file schema
            
        Returns:
            Report with one note per difference
        """
        report = SchemaDiffReport()
        
        if source.column_count != target.column_count:
            report.add_issue(
                f"Different column counts (source={source.column_count}, "
                f"target={target.column_count})"
            )
        
        if source.has_header:
            max_columns = max(len(source.headers), len(target.headers or []))
            for position in range(1, max_columns + 1):
                source_name = source.column_name(position)
                target_name = target.column_name(position)
                source_name = MISSING_COLUMN if source_name is None else source_name
                target_name = MISSING_COLUMN if target_name is None else target_name
                if source_name != target_name:
                    report.add_issue(
                        f'Col {position} differs: source="{source_name}" '
                        f'vs target="{target_name}"'
                    )
            if not report.has_issues:
                report.notes.append("Headers match.")
        elif not report.has_issues:
            report.notes.append(f"No header; both have {source.column_count} columns.")
        
        logger.info("schema.diff.complete",
                   issues=report.issues,
                   source_columns=source.column_count,
                   target_columns=target.column_count)
        
        return report
