"""
tabrecon - keyed reconciliation of delimited datasets.
"""

__version__ = "1.0.0"

from .config.manager import ConfigManager, ConfigError, ReconcileConfig
from .core.key_resolver import KeyResolutionError
from .core.reconciler import Reconciler, ReconciliationResult, reconcile
from .reporting.exports import ReportWriter, write_reports
from .ui.progress import ProgressMonitor, get_progress_monitor
from .utils.logger import get_logger

__all__ = [
    "ConfigManager",
    "ConfigError",
    "ReconcileConfig",
    "KeyResolutionError",
    "Reconciler",
    "ReconciliationResult",
    "reconcile",
    "ReportWriter",
    "write_reports",
    "ProgressMonitor",
    "get_progress_monitor",
    "get_logger",
]
