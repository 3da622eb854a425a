"""
Record ingestion.
Single responsibility: stream the rows of one file once into a keyed set,
counting duplicate keys.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .key_resolver import KeySpec
from ..utils.logger import get_logger
from ..utils.normalizers import trim


logger = get_logger()


CompositeKey = Tuple[str, ...]
Record = Tuple[str, ...]


class IngestedSet:
    """
    Keyed rows of one file.
    
    Each key maps to the last row seen for it (last-write-wins) and to the
    number of rows that carried it. Earlier rows with the same key are
    counted but not kept.
    """
    
    def __init__(self, label: str):
        """
        Args:
            label: Which file the rows came from ("source" or "target")
        """
        self.label = label
        self.records: Dict[CompositeKey, Record] = {}
        self.counts: Dict[CompositeKey, int] = {}
        self.rows_ingested = 0
        self.max_width = 0
    
    def add(self, key: CompositeKey, record: Record):
        """Store a row under its key, replacing any earlier row."""
        self.counts[key] = self.counts.get(key, 0) + 1
        self.records[key] = record
        self.rows_ingested += 1
        if len(record) > self.max_width:
            self.max_width = len(record)
    
    def __contains__(self, key: CompositeKey) -> bool:
        return key in self.records
    
    def __len__(self) -> int:
        return len(self.records)
    
    def __iter__(self) -> Iterator[CompositeKey]:
        return iter(self.records)
    
    def get(self, key: CompositeKey) -> Record:
        return self.records[key]
    
    def occurrences(self, key: CompositeKey) -> int:
        return self.counts.get(key, 0)
    
    def duplicates(self) -> List[Tuple[CompositeKey, int]]:
        """Keys seen more than once with their counts, ordered by key."""
        return sorted((key, count) for key, count in self.counts.items() if count > 1)


class RecordIngester:
    """
    Build an IngestedSet from a stream of raw rows.
    """
    
    def __init__(self, progress=None, progress_every: int = 10000):
        """
        Initialize ingester.
        
        Args:
            progress: Optional progress monitor (see ui.progress)
            progress_every: Rows between progress updates
        """
        self.progress = progress
        self.progress_every = progress_every
    
    def ingest(self, rows: Iterable[Sequence[str]], key_spec: KeySpec,
               label: str) -> IngestedSet:
        """
        Ingest rows into a new keyed set.
        
        Malformed rows never fail ingestion: short rows get empty key
        components and are stored as they are.
        
        Args:
            rows: Raw rows, header already consumed
            key_spec: Resolved key positions
            label: "source" or "target"
            
        Returns:
            Keyed rows of the file
        """
        ingested = IngestedSet(label)
        
        logger.info("ingester.starting", label=label, key_positions=list(key_spec.positions))
        
        if self.progress is not None:
            with self.progress.task(f"Ingesting {label}") as task:
                self._consume(rows, key_spec, ingested, task)
        else:
            self._consume(rows, key_spec, ingested, None)
        
        logger.info("ingester.complete",
                   label=label,
                   rows=ingested.rows_ingested,
                   distinct_keys=len(ingested),
                   duplicate_keys=len(ingested.duplicates()),
                   max_width=ingested.max_width)
        
        return ingested
    
    def _consume(self, rows: Iterable[Sequence[str]], key_spec: KeySpec,
                 ingested: IngestedSet, task: Optional[object]):
        pending = 0
        for row in rows:
            record = tuple(trim(value) for value in row)
            ingested.add(key_spec.build_key(record), record)
            
            pending += 1
            if task is not None and pending >= self.progress_every:
                task.advance(pending)
                pending = 0
        
        if task is not None and pending:
            task.advance(pending)
