"""Utility functions and helpers."""

from .logger import get_logger, configure_logger, StructuredLogger
from .normalizers import (
    trim,
    is_numeric,
    to_decimal,
    format_decimal,
    normalize_column_name
)

__all__ = [
    "get_logger",
    "configure_logger",
    "StructuredLogger",
    "trim",
    "is_numeric",
    "to_decimal",
    "format_decimal",
    "normalize_column_name",
]
