"""Input adapters."""

from .file_reader import DelimitedFileReader

__all__ = ["DelimitedFileReader"]
