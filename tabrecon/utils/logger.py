"""
Structured logging utility.
Single responsibility: provide consistent logging across the reconciler.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import json


LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40, "CRITICAL": 50}


class StructuredLogger:
    """
    Structured logger emitting dotted event names with keyword context.
    """
    
    def __init__(self, name: str = "tabrecon",
                 log_file: Optional[Path] = None,
                 min_level: str = "INFO"):
        """
        Initialize logger.
        
        Args:
            name: Logger name
            log_file: Optional file path for JSON lines output
            min_level: Lowest level written to the console
        """
        self.name = name
        self.log_file = Path(log_file) if log_file else None
        self.min_level = min_level
        
    def _format_message(self, level: str, message: str, 
                       **kwargs) -> Dict[str, Any]:
        """
        Format log message with metadata.
        
        Args:
            level: Log level (INFO, DEBUG, ERROR, etc.)
            message: Dotted event name
            **kwargs: Additional context fields
            
        Returns:
            Formatted log entry
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "logger": self.name,
            "message": message
        }
        
        if kwargs:
            entry["context"] = kwargs
            
        return entry
    
    def _output(self, entry: Dict[str, Any]):
        """
        Output log entry to stderr and optionally the JSON log file.
        
        Args:
            entry: Log entry dictionary
        """
        if LEVELS[entry["level"]] >= LEVELS[self.min_level]:
            timestamp = entry["timestamp"].split("T")[1][:8]
            level = entry["level"]
            msg = entry["message"]
            
            print(f"[{timestamp}] {level:5} | {msg}", file=sys.stderr)
            
            if "context" in entry:
                for key, value in entry["context"].items():
                    print(f"  {key}={value}", file=sys.stderr)
        
        # The file receives every level
        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
    
    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._output(self._format_message("DEBUG", message, **kwargs))
    
    def info(self, message: str, **kwargs):
        """Log info message."""
        self._output(self._format_message("INFO", message, **kwargs))
    
    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._output(self._format_message("WARN", message, **kwargs))
    
    def error(self, message: str, **kwargs):
        """Log error message."""
        self._output(self._format_message("ERROR", message, **kwargs))
    
    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._output(self._format_message("CRITICAL", message, **kwargs))


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "tabrecon") -> StructuredLogger:
    """
    Get or create logger instance.
    
    Args:
        name: Logger name
        
    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = StructuredLogger(name)
    return _logger


def configure_logger(verbose: bool = False,
                     log_file: Optional[Path] = None) -> StructuredLogger:
    """
    Adjust the shared logger for a CLI run.
    
    Args:
        verbose: Show DEBUG events on the console
        log_file: Append JSON lines to this file
        
    Returns:
        The shared logger instance
    """
    logger = get_logger()
    logger.min_level = "DEBUG" if verbose else "INFO"
    logger.log_file = Path(log_file) if log_file else None
    return logger
