"""
Key column resolution.
Single responsibility: turn a user key specification into column positions.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..config.manager import ConfigError
from ..utils.logger import get_logger
from ..utils.normalizers import trim, normalize_column_name


logger = get_logger()


# Separator used when a composite key is written to a report
KEY_DISPLAY_SEPARATOR = "|"


class KeyResolutionError(ConfigError):
    """Exception raised when a key column cannot be resolved."""
    pass


@dataclass(frozen=True)
class KeySpec:
    """Ordered 1-based key column positions shared by both files."""
    
    positions: Tuple[int, ...]
    tokens: Tuple[str, ...] = ()
    
    def __contains__(self, position: int) -> bool:
        return position in self.positions
    
    def __len__(self) -> int:
        return len(self.positions)
    
    def build_key(self, record: Sequence[str]) -> Tuple[str, ...]:
        """
        Composite key of a record.
        Positions beyond the record width contribute an empty string.
        """
        width = len(record)
        return tuple(record[pos - 1] if pos <= width else "" for pos in self.positions)


def render_key(key: Tuple[str, ...]) -> str:
    """Join key components for display."""
    return KEY_DISPLAY_SEPARATOR.join(key)


def split_key_spec(spec: str) -> List[str]:
    """Split a comma-separated key specification, trimming each token."""
    return [trim(token) for token in spec.split(",")]


class KeyResolver:
    """
    Resolve key specifications against the source file.
    
    Positions are resolved once, against the source header (or as literal
    indexes in headerless mode), and the same positions are then applied to
    the target file without looking at its header.
    """
    
    def resolve(self, spec: str, has_header: bool,
                header_index: Optional[Dict[str, int]] = None) -> KeySpec:
        """
        Resolve a key specification.
        
        Args:
            spec: Comma-separated names (header mode) or 1-based indexes
            has_header: Whether names or indexes are expected
            header_index: Case-insensitive name -> position map of the source
            
        Returns:
            Resolved KeySpec
            
        Raises:
            KeyResolutionError: If any token cannot be resolved
        """
        tokens = split_key_spec(spec)
        
        logger.debug("key_resolver.resolving",
                    tokens=tokens,
                    has_header=has_header)
        
        if has_header:
            positions = self._resolve_names(tokens, header_index or {})
        else:
            positions = self._resolve_indexes(tokens)
        
        key_spec = KeySpec(positions=tuple(positions), tokens=tuple(tokens))
        
        logger.info("key_resolver.resolved",
                   spec=spec,
                   positions=list(key_spec.positions))
        
        return key_spec
    
    def _resolve_names(self, tokens: List[str],
                       header_index: Dict[str, int]) -> List[int]:
        positions = []
        for token in tokens:
            position = header_index.get(normalize_column_name(token)) if token else None
            if position is None:
                logger.error("key_resolver.name_not_found",
                            key=token,
                            available=sorted(header_index))
                raise KeyResolutionError(
                    f'[KEY ERROR] Key column name "{token}" not found in header. '
                    f"Suggestion: check the spelling against the source file header."
                )
            positions.append(position)
        return positions
    
    def _resolve_indexes(self, tokens: List[str]) -> List[int]:
        positions = []
        for token in tokens:
            if not (token.isascii() and token.isdigit()) or int(token) < 1:
                logger.error("key_resolver.invalid_index", key=token)
                raise KeyResolutionError(
                    f'[KEY ERROR] Non-numeric key "{token}" with -H 0. '
                    f"Suggestion: use 1-based column indexes when there is no header."
                )
            positions.append(int(token))
        return positions
