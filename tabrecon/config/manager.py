"""
Run configuration management.
Single responsibility: load, validate and merge reconciliation settings.
"""

import os
import yaml
from dataclasses import dataclass, asdict, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from ..utils.logger import get_logger


logger = get_logger()


DELIMITER_ALIASES = {"\\t": "\t", "tab": "\t", "TAB": "\t"}

TRUE_FLAGS = {"1", "yes", "y", "true", "t"}
FALSE_FLAGS = {"0", "no", "n", "false", "f"}


class ConfigError(Exception):
    """Exception raised when run configuration is missing or invalid."""
    pass


def parse_delimiter(value: Any) -> str:
    """
    Normalize a delimiter setting to a single character.
    
    Args:
        value: Raw delimiter ("," or "|", "\\t" / "tab" for TAB)
        
    Returns:
        Single-character delimiter
        
    Raises:
        ConfigError: If the delimiter is not exactly one usable character
    """
    delimiter = DELIMITER_ALIASES.get(value, value)
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ConfigError(
            f"[CONFIG ERROR] Delimiter must be a single character, got {value!r}. "
            f"Suggestion: use ',' '|' ';' or '\\t' for TAB."
        )
    if delimiter in ('"', "\r", "\n"):
        raise ConfigError(
            f"[CONFIG ERROR] {delimiter!r} cannot be used as a field delimiter."
        )
    return delimiter


def parse_header_flag(value: Any) -> bool:
    """
    Interpret the header-present flag (1/0, yes/no, true/false).
    
    Raises:
        ConfigError: If the flag is not recognised
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_FLAGS:
        return True
    if text in FALSE_FLAGS:
        return False
    raise ConfigError(
        f"[CONFIG ERROR] Header flag must be 1 or 0, got {value!r}."
    )


def parse_tolerance(value: Any) -> Decimal:
    """
    Parse the numeric tolerance as a non-negative Decimal.
    
    Raises:
        ConfigError: If the tolerance is not a finite, non-negative number
    """
    try:
        tolerance = Decimal(str(value).strip())
    except InvalidOperation:
        raise ConfigError(
            f"[CONFIG ERROR] Tolerance must be a number, got {value!r}."
        ) from None
    if not tolerance.is_finite() or tolerance < 0:
        raise ConfigError(
            f"[CONFIG ERROR] Tolerance must be a non-negative number, got {value!r}."
        )
    return tolerance


@dataclass
class ReconcileConfig:
    """Settings for one reconciliation run."""
    
    source: str
    target: str
    key_spec: str
    delimiter: str = ","
    has_header: bool = True
    tolerance: Decimal = Decimal("0.0")
    prefix: str = "reconcile"
    encoding: str = "utf-8-sig"
    tolerance_text: str = field(default="", init=False, repr=False)
    
    def __post_init__(self):
        """Validate and normalize configuration after initialization."""
        if not self.source or not self.target or not self.key_spec:
            raise ConfigError(
                "[CONFIG ERROR] Source (-s), target (-t) and key columns (-k) are required."
            )
        if not str(self.key_spec).strip():
            raise ConfigError("[CONFIG ERROR] Key column specification is empty.")
        self.source = str(self.source)
        self.target = str(self.target)
        self.key_spec = str(self.key_spec)
        self.delimiter = parse_delimiter(self.delimiter)
        self.has_header = parse_header_flag(self.has_header)
        self.tolerance_text = str(self.tolerance).strip()
        self.tolerance = parse_tolerance(self.tolerance)
        if not self.prefix:
            raise ConfigError("[CONFIG ERROR] Output prefix cannot be empty.")
        self.prefix = str(self.prefix)
    
    @property
    def delimiter_label(self) -> str:
        """Delimiter as shown in reports."""
        return "TAB" if self.delimiter == "\t" else self.delimiter
    
    def check_inputs(self):
        """
        Verify that both input files exist and are readable.
        
        Raises:
            ConfigError: If either file is missing or unreadable
        """
        for role, path in (("source", self.source), ("target", self.target)):
            file_path = Path(path)
            if not file_path.is_file():
                logger.error("config.input.missing", role=role, path=path)
                raise ConfigError(f"[CONFIG ERROR] {role} file '{path}' not found.")
            if not os.access(file_path, os.R_OK):
                logger.error("config.input.unreadable", role=role, path=path)
                raise ConfigError(f"[CONFIG ERROR] {role} file '{path}' is not readable.")


# YAML key -> ReconcileConfig field
FILE_KEYS = {
    "source": "source",
    "target": "target",
    "keys": "key_spec",
    "delimiter": "delimiter",
    "header": "has_header",
    "tolerance": "tolerance",
    "prefix": "prefix",
    "encoding": "encoding",
}


class ConfigManager:
    """
    Load optional YAML settings and merge command-line overrides.
    """
    
    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.
        
        Args:
            config_path: Path to a YAML run configuration (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        self.config: Dict[str, Any] = {}
    
    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file, if one was given.
        
        Returns:
            Settings keyed by ReconcileConfig field name
            
        Raises:
            ConfigError: If the file is missing, not YAML, or has unknown keys
        """
        if self.config_path is None:
            return {}
        
        if not self.config_path.exists():
            raise ConfigError(f"[CONFIG ERROR] Config not found: {self.config_path}")
        
        logger.info("config.loading", file=str(self.config_path))
        
        try:
            with open(self.config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"[CONFIG ERROR] Invalid YAML in {self.config_path}: {e}"
            ) from e
        
        if not isinstance(raw, dict):
            raise ConfigError(
                f"[CONFIG ERROR] {self.config_path} must contain a mapping of settings."
            )
        
        unknown = sorted(set(raw) - set(FILE_KEYS))
        if unknown:
            raise ConfigError(
                f"[CONFIG ERROR] Unknown settings in {self.config_path}: {', '.join(unknown)}. "
                f"Suggestion: valid keys are {', '.join(FILE_KEYS)}."
            )
        
        self.config = {FILE_KEYS[key]: value for key, value in raw.items()
                       if value is not None}
        
        logger.info("config.loaded", settings=sorted(self.config))
        return self.config
    
    def build(self, overrides: Optional[Dict[str, Any]] = None,
              check_inputs: bool = True) -> ReconcileConfig:
        """
        Merge file settings with overrides and validate the result.
        
        Args:
            overrides: Settings from the command line; None values are ignored
            check_inputs: Verify the input files exist and are readable
            
        Returns:
            Validated run configuration
        """
        settings = dict(self.config)
        for key, value in (overrides or {}).items():
            if value is not None:
                settings[key] = value
        
        try:
            config = ReconcileConfig(
                source=settings.get("source", ""),
                target=settings.get("target", ""),
                key_spec=settings.get("key_spec", ""),
                delimiter=settings.get("delimiter", ","),
                has_header=settings.get("has_header", True),
                tolerance=settings.get("tolerance", "0.0"),
                prefix=settings.get("prefix", "reconcile"),
                encoding=settings.get("encoding", "utf-8-sig"),
            )
        except ConfigError as e:
            logger.error("config.invalid", error=str(e))
            raise
        
        if check_inputs:
            config.check_inputs()
        return config
    
    def save(self, config: ReconcileConfig, path: Optional[Path] = None):
        """
        Save a run configuration as YAML.
        
        Args:
            config: Configuration to write
            path: Output path (uses the loaded path if not specified)
        """
        output_path = Path(path) if path else self.config_path
        if output_path is None:
            raise ConfigError("[CONFIG ERROR] No path given to save configuration.")
        
        logger.info("config.saving", file=str(output_path))
        
        values = asdict(config)
        fields_to_keys = {field_name: key for key, field_name in FILE_KEYS.items()}
        config_dict = {fields_to_keys[name]: value for name, value in values.items()
                       if name in fields_to_keys}
        config_dict["tolerance"] = config.tolerance_text
        config_dict["header"] = 1 if config.has_header else 0
        
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)
        
        logger.info("config.saved", file=str(output_path))


def create_sample_config(output_path: Path):
    """
    Create a sample configuration file.
    
    Args:
        output_path: Where to save the config
    """
    sample_config = """# tabrecon run configuration
# ==========================
# Command-line flags override any value set here.

source: "data/source.csv"
target: "data/target.csv"
keys: "id"            # header names (header: 1) or 1-based indexes (header: 0)
delimiter: ","        # use "\\t" for TAB
header: 1
tolerance: 0.0        # maximum absolute difference for numeric values
prefix: "reconcile"   # may include a directory, e.g. "reports/daily"
encoding: "utf-8-sig"
"""
    
    Path(output_path).write_text(sample_config, encoding="utf-8")
    print(f"Sample configuration created: {output_path}")
