"""
Reconciliation run orchestration and report assembly.
Single responsibility: drive one run from configuration to a structured result.
"""

from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import duckdb

from .comparator import ComparisonOutcome, KeySetComparator, ValueComparator
from .ingester import CompositeKey, IngestedSet, RecordIngester
from .key_resolver import KeyResolver, KeySpec
from .schema import SchemaDiff, SchemaDiffReport, SchemaInfo, SchemaLoader
from ..adapters.file_reader import DelimitedFileReader
from ..config.manager import ReconcileConfig
from ..utils.logger import get_logger


logger = get_logger()


@dataclass
class SummaryCounts:
    """Counts reported in the run summary."""
    
    missing: int = 0
    extra: int = 0
    duplicate_source: int = 0
    duplicate_target: int = 0
    common: int = 0
    mismatched: int = 0
    schema_issues: bool = False
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "missing_in_target": self.missing,
            "extra_in_target": self.extra,
            "duplicate_keys_source": self.duplicate_source,
            "duplicate_keys_target": self.duplicate_target,
            "common_keys": self.common,
            "mismatched_values": self.mismatched,
            "schema_issues": self.schema_issues,
        }


@dataclass
class ReconciliationResult:
    """Everything a report writer needs from one run."""
    
    config: ReconcileConfig
    key_spec: KeySpec
    source_schema: SchemaInfo
    target_schema: SchemaInfo
    schema_diff: SchemaDiffReport
    missing_in_target: List[CompositeKey] = field(default_factory=list)
    extra_in_target: List[CompositeKey] = field(default_factory=list)
    duplicates_source: List[Tuple[CompositeKey, int]] = field(default_factory=list)
    duplicates_target: List[Tuple[CompositeKey, int]] = field(default_factory=list)
    mismatches: List[ComparisonOutcome] = field(default_factory=list)
    summary: SummaryCounts = field(default_factory=SummaryCounts)
    
    @property
    def has_differences(self) -> bool:
        s = self.summary
        return bool(s.missing or s.extra or s.mismatched
                    or s.duplicate_source or s.duplicate_target)


class Reconciler:
    """
    Reconcile a source file against a target file.
    
    Steps: load both schemas, resolve the key specification against the
    source header, ingest each file once, diff the schemas, split the key
    sets, compare the common keys and assemble the result. Configuration
    errors surface before any row is ingested.
    """
    
    def __init__(self, config: ReconcileConfig, progress=None):
        """
        Initialize reconciler.
        
        Args:
            config: Validated run configuration
            progress: Optional progress monitor (see ui.progress)
        """
        self.config = config
        self.progress = progress
        self.schema_loader = SchemaLoader()
        self.key_resolver = KeyResolver()
        self.ingester = RecordIngester(progress=progress)
        self.schema_diff = SchemaDiff()
        self.value_comparator = ValueComparator(config.tolerance)
    
    def _reader(self, path: str) -> DelimitedFileReader:
        return DelimitedFileReader(path, delimiter=self.config.delimiter,
                                   encoding=self.config.encoding)
    
    def run(self) -> ReconciliationResult:
        """
        Run the reconciliation.
        
        Returns:
            Structured result of the run
            
        Raises:
            ConfigError: Unreadable input file
            KeyResolutionError: Key specification cannot be resolved
        """
        cfg = self.config
        logger.info("reconciler.starting",
                   source=cfg.source,
                   target=cfg.target,
                   keys=cfg.key_spec,
                   delimiter=cfg.delimiter_label,
                   header=cfg.has_header,
                   tolerance=str(cfg.tolerance))
        
        with ExitStack() as stack:
            source_reader = stack.enter_context(self._reader(cfg.source))
            target_reader = stack.enter_context(self._reader(cfg.target))
            
            source_schema = self.schema_loader.load(source_reader, cfg.has_header)
            target_schema = self.schema_loader.load(target_reader, cfg.has_header)
            
            key_spec = self.key_resolver.resolve(
                cfg.key_spec, cfg.has_header, source_schema.header_index
            )
            
            source_set = self.ingester.ingest(source_reader, key_spec, "source")
            target_set = self.ingester.ingest(target_reader, key_spec, "target")
        
        if not cfg.has_header:
            source_schema = source_schema.with_observed_width(source_set.max_width)
            target_schema = target_schema.with_observed_width(target_set.max_width)
        
        schema_report = self.schema_diff.compare(source_schema, target_schema)
        
        result = self._assemble(key_spec, source_schema, target_schema,
                                schema_report, source_set, target_set)
        
        logger.info("reconciler.complete", **result.summary.to_dict())
        return result
    
    def _assemble(self, key_spec: KeySpec, source_schema: SchemaInfo,
                  target_schema: SchemaInfo, schema_report: SchemaDiffReport,
                  source_set: IngestedSet, target_set: IngestedSet
                  ) -> ReconciliationResult:
        """Split key sets, compare values and build the result."""
        con = duckdb.connect(":memory:")
        try:
            key_sets = KeySetComparator(con).compare(source_set, target_set, key_spec)
        finally:
            con.close()
        
        if self.progress is not None:
            with self.progress.task("Comparing values", total=len(key_sets.common)) as task:
                mismatches = self.value_comparator.compare(
                    source_set, target_set, key_sets.common, key_spec,
                    source_schema.headers
                )
                task.advance(len(key_sets.common))
        else:
            mismatches = self.value_comparator.compare(
                source_set, target_set, key_sets.common, key_spec,
                source_schema.headers
            )
        
        duplicates_source = source_set.duplicates()
        duplicates_target = target_set.duplicates()
        
        summary = SummaryCounts(
            missing=len(key_sets.missing_in_target),
            extra=len(key_sets.extra_in_target),
            duplicate_source=len(duplicates_source),
            duplicate_target=len(duplicates_target),
            common=len(key_sets.common),
            mismatched=len(mismatches),
            schema_issues=schema_report.has_issues,
        )
        
        return ReconciliationResult(
            config=self.config,
            key_spec=key_spec,
            source_schema=source_schema,
            target_schema=target_schema,
            schema_diff=schema_report,
            missing_in_target=key_sets.missing_in_target,
            extra_in_target=key_sets.extra_in_target,
            duplicates_source=duplicates_source,
            duplicates_target=duplicates_target,
            mismatches=mismatches,
            summary=summary,
        )


def reconcile(config: ReconcileConfig, progress=None) -> ReconciliationResult:
    """Convenience wrapper: run one reconciliation."""
    return Reconciler(config, progress=progress).run()
