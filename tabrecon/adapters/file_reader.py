"""
Streaming reader for delimited text files.
Single responsibility: yield raw rows of one input file exactly once.
"""

from pathlib import Path
from typing import Iterator, List, Optional

from ..config.manager import ConfigError
from ..utils.logger import get_logger


logger = get_logger()


class DelimitedFileReader:
    """
    Reads a delimited file row by row.
    
    Each line is split on the delimiter only. Quote characters are kept
    as ordinary text, so a stray quote never spans lines. The first row
    can be taken separately with ``read_header()``; iterating the reader
    afterwards yields the remaining rows. Blank lines are skipped.
    Undecodable bytes are replaced rather than raised so malformed input
    never aborts a run.
    
    Example:
        with DelimitedFileReader(path, delimiter="|") as reader:
            header = reader.read_header()
            for row in reader:
                ...
    """
    
    def __init__(self, file_path: Path, delimiter: str = ",",
                 encoding: str = "utf-8-sig"):
        """
        Initialize file reader.
        
        Args:
            file_path: Path to the delimited file
            delimiter: Single-character field delimiter
            encoding: Text encoding of the file
        """
        self.file_path = Path(file_path)
        self.delimiter = delimiter
        self.encoding = encoding
        self.rows_read = 0
        self._handle = None
        self._rows: Optional[Iterator[List[str]]] = None
    
    def open(self) -> "DelimitedFileReader":
        """Open the underlying file for streaming."""
        logger.debug("file_reader.opening",
                    file=str(self.file_path),
                    delimiter=self.delimiter,
                    encoding=self.encoding)
        
        try:
            self._handle = open(self.file_path, "r", encoding=self.encoding,
                                errors="replace", newline="\n")
        except (OSError, LookupError) as e:
            logger.error("file_reader.open_failed", file=str(self.file_path), error=str(e))
            raise ConfigError(
                f"[CONFIG ERROR] Cannot read '{self.file_path}': {e}"
            ) from e
        self._rows = (self._split(line) for line in self._handle)
        return self
    
    def close(self):
        """Close the underlying file."""
        if self._handle is not None:
            self._handle.close()
            logger.debug("file_reader.closed",
                        file=str(self.file_path),
                        rows=self.rows_read)
        self._handle = None
        self._rows = None
    
    def __enter__(self) -> "DelimitedFileReader":
        return self.open()
    
    def __exit__(self, exc_type, exc, tb):
        self.close()
    
    def read_header(self) -> List[str]:
        """
        Consume and return the first row.
        
        Returns:
            Raw header fields, or an empty list for an empty file
        """
        if self._rows is None:
            raise RuntimeError(f"Reader for {self.file_path} is not open")
        header = next(self._rows, [])
        return [] if header == [""] else header
    
    def __iter__(self) -> Iterator[List[str]]:
        if self._rows is None:
            raise RuntimeError(f"Reader for {self.file_path} is not open")
        for row in self._rows:
            if row == [""]:
                continue
            self.rows_read += 1
            yield row
    
    def _split(self, line: str) -> List[str]:
        """Fields of one line, without its line terminator."""
        line = line.rstrip("\n")
        if line.endswith("\r"):
            line = line[:-1]
        return line.split(self.delimiter)
