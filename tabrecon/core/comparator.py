"""
Core reconciliation comparison logic.
Single responsibility: compare two keyed sets and identify differences.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, Overflow, localcontext
from enum import Enum
from typing import List, Optional, Sequence

import duckdb
import pandas as pd

from .ingester import CompositeKey, IngestedSet, Record
from .key_resolver import KeySpec, render_key
from ..utils.logger import get_logger
from ..utils.normalizers import is_numeric, to_decimal, format_decimal


logger = get_logger()


def qident(name: str) -> str:
    """
    Quote SQL identifiers for safe usage in DuckDB queries.
    
    Args:
        name: SQL identifier (table name, column name, etc.)
        
    Returns:
        Quoted identifier safe for SQL usage
    """
    if not name:
        return name
    return '"' + name.replace('"', '""') + '"'


class ComparisonMode(Enum):
    """How a pair of values is compared."""
    
    NUMERIC = "numeric"
    TEXTUAL = "textual"


def classify(source_value: str, target_value: str) -> ComparisonMode:
    """
    Classify a value pair.
    The pair is numeric only when both values are numeric literals.
    """
    if is_numeric(source_value) and is_numeric(target_value):
        return ComparisonMode.NUMERIC
    return ComparisonMode.TEXTUAL


def numeric_difference(source_value: str, target_value: str) -> Optional[Decimal]:
    """
    Signed difference source - target.
    
    Returns None when either side is empty or does not parse, so a
    mismatch can be reported without a diff value. A difference beyond
    the Decimal exponent range becomes a signed Infinity.
    """
    if source_value == "" or target_value == "":
        return None
    source_number = to_decimal(source_value)
    target_number = to_decimal(target_value)
    if source_number is None or target_number is None:
        return None
    with localcontext() as ctx:
        ctx.traps[Overflow] = False
        ctx.traps[InvalidOperation] = False
        return source_number - target_number


@dataclass
class ComparisonOutcome:
    """One unequal (key, column) pair."""
    
    key: CompositeKey
    column_index: int
    source_value: str
    target_value: str
    mode: ComparisonMode
    diff: Optional[Decimal] = None
    column_name: Optional[str] = None
    
    @property
    def is_numeric(self) -> bool:
        return self.mode is ComparisonMode.NUMERIC
    
    @property
    def key_text(self) -> str:
        return render_key(self.key)
    
    @property
    def diff_text(self) -> str:
        return "" if self.diff is None else format_decimal(self.diff)


class ValueComparator:
    """
    Tolerance-aware comparison of the non-key columns of common keys.
    """
    
    def __init__(self, tolerance: Decimal = Decimal("0")):
        """
        Initialize comparator.
        
        Args:
            tolerance: Largest absolute difference treated as equal
                       for numeric pairs
        """
        if tolerance < 0:
            raise ValueError("Tolerance must be non-negative")
        self.tolerance = Decimal(tolerance)
    
    def values_equal(self, source_value: str, target_value: str,
                     mode: ComparisonMode) -> bool:
        """Compare a classified value pair."""
        if mode is ComparisonMode.TEXTUAL:
            return source_value == target_value
        
        difference = numeric_difference(source_value, target_value)
        if difference is None:
            return source_value == target_value
        return difference.copy_abs() <= self.tolerance
    
    def compare_records(self, key: CompositeKey, source: Record, target: Record,
                        key_spec: KeySpec,
                        column_names: Optional[Sequence[str]] = None
                        ) -> List[ComparisonOutcome]:
        """
        Compare two rows sharing a key, column by column.
        
        Args:
            key: Composite key of both rows
            source: Stored source row
            target: Stored target row
            key_spec: Key positions, which are skipped
            column_names: Source header names in header mode
            
        Returns:
            One outcome per unequal column
        """
        outcomes = []
        source_width = len(source)
        target_width = len(target)
        
        for position in range(1, max(source_width, target_width) + 1):
            if position in key_spec:
                continue
            
            source_value = source[position - 1] if position <= source_width else ""
            target_value = target[position - 1] if position <= target_width else ""
            
            mode = classify(source_value, target_value)
            if self.values_equal(source_value, target_value, mode):
                continue
            
            diff = None
            if mode is ComparisonMode.NUMERIC:
                diff = numeric_difference(source_value, target_value)
            
            column_name = None
            if column_names is not None:
                column_name = column_names[position - 1] if position <= len(column_names) else ""
            
            outcomes.append(ComparisonOutcome(
                key=key,
                column_index=position,
                source_value=source_value,
                target_value=target_value,
                mode=mode,
                diff=diff,
                column_name=column_name,
            ))
        
        return outcomes
    
    def compare(self, source: IngestedSet, target: IngestedSet,
                common_keys: Sequence[CompositeKey], key_spec: KeySpec,
                column_names: Optional[Sequence[str]] = None
                ) -> List[ComparisonOutcome]:
        """
        Compare the stored rows of every common key.
        
        Returns:
            All mismatches, grouped by key in the order of common_keys
        """
        logger.info("comparator.values.starting",
                   common_keys=len(common_keys),
                   tolerance=str(self.tolerance))
        
        mismatches: List[ComparisonOutcome] = []
        for key in common_keys:
            mismatches.extend(self.compare_records(
                key, source.get(key), target.get(key), key_spec, column_names
            ))
        
        logger.info("comparator.values.complete",
                   mismatches=len(mismatches),
                   numeric=sum(1 for m in mismatches if m.is_numeric))
        
        return mismatches


@dataclass
class KeySetComparison:
    """Keys split by presence in source and target."""
    
    missing_in_target: List[CompositeKey] = field(default_factory=list)
    extra_in_target: List[CompositeKey] = field(default_factory=list)
    common: List[CompositeKey] = field(default_factory=list)


class KeySetComparator:
    """
    Split the key sets of two files with DuckDB joins.
    Each key component becomes one VARCHAR column (k_1 .. k_n).
    """
    
    def __init__(self, con: duckdb.DuckDBPyConnection):
        """
        Initialize comparator.
        
        Args:
            con: DuckDB connection
        """
        self.con = con
    
    def _stage_keys(self, table: str, ingested: IngestedSet,
                    columns: List[str]):
        """Load the distinct keys of one set into a temporary table."""
        frame = pd.DataFrame(list(ingested), columns=columns, dtype=object)
        frame_name = f"{table}_frame"
        self.con.register(frame_name, frame)
        try:
            select_list = ", ".join(
                f"TRY_CAST({qident(col)} AS VARCHAR) AS {qident(col)}" for col in columns
            )
            self.con.execute(
                f"CREATE OR REPLACE TEMP TABLE {qident(table)} AS "
                f"SELECT {select_list} FROM {qident(frame_name)}"
            )
        finally:
            self.con.unregister(frame_name)
        
        logger.debug("comparator.keys.staged", table=table, rows=len(frame))
    
    def _fetch_keys(self, sql: str) -> List[CompositeKey]:
        logger.debug("comparator.sql", sql=sql.strip())
        return [tuple(row) for row in self.con.execute(sql).fetchall()]
    
    def compare(self, source: IngestedSet, target: IngestedSet,
                key_spec: KeySpec) -> KeySetComparison:
        """
        Find keys only in source, only in target, and in both.
        
        Args:
            source: Keyed source rows
            target: Keyed target rows
            key_spec: Key positions (defines the number of components)
            
        Returns:
            Ordered key lists
        """
        columns = [f"k_{i}" for i in range(1, len(key_spec) + 1)]
        self._stage_keys("source_keys", source, columns)
        self._stage_keys("target_keys", target, columns)
        
        key_join = " AND ".join(f"s.{qident(c)} = t.{qident(c)}" for c in columns)
        first = qident(columns[0])
        
        def select(alias: str) -> str:
            return ", ".join(f"{alias}.{qident(c)}" for c in columns)
        
        result = KeySetComparison()
        result.missing_in_target = self._fetch_keys(f"""
            SELECT {select('s')}
            FROM source_keys s
            LEFT JOIN target_keys t ON {key_join}
            WHERE t.{first} IS NULL
            ORDER BY {select('s')}
        """)
        result.extra_in_target = self._fetch_keys(f"""
            SELECT {select('t')}
            FROM target_keys t
            LEFT JOIN source_keys s ON {key_join}
            WHERE s.{first} IS NULL
            ORDER BY {select('t')}
        """)
        result.common = self._fetch_keys(f"""
            SELECT {select('s')}
            FROM source_keys s
            INNER JOIN target_keys t ON {key_join}
            ORDER BY {select('s')}
        """)
        
        logger.info("comparator.keys.complete",
                   missing=len(result.missing_in_target),
                   extra=len(result.extra_in_target),
                   common=len(result.common))
        
        return result
