"""Reconciliation engine."""

from .schema import SchemaInfo, SchemaLoader, SchemaDiff, SchemaDiffReport
from .key_resolver import KeySpec, KeyResolver, KeyResolutionError, render_key
from .ingester import IngestedSet, RecordIngester
from .comparator import (
    ComparisonMode,
    ComparisonOutcome,
    ValueComparator,
    KeySetComparator,
    KeySetComparison,
    classify,
)
from .reconciler import Reconciler, ReconciliationResult, SummaryCounts, reconcile

__all__ = [
    "SchemaInfo",
    "SchemaLoader",
    "SchemaDiff",
    "SchemaDiffReport",
    "KeySpec",
    "KeyResolver",
    "KeyResolutionError",
    "render_key",
    "IngestedSet",
    "RecordIngester",
    "ComparisonMode",
    "ComparisonOutcome",
    "ValueComparator",
    "KeySetComparator",
    "KeySetComparison",
    "classify",
    "Reconciler",
    "ReconciliationResult",
    "SummaryCounts",
    "reconcile",
]
