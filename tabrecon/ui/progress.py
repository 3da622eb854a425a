"""
Progress monitoring and console output.
Single responsibility: provide user feedback during a reconciliation run.
"""

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from rich import box
from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    MofNCompleteColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ..utils.logger import get_logger


logger = get_logger()


def summary_rows(summary) -> list:
    """(label, value) pairs shown at the end of a run."""
    return [
        ("Missing in target", summary.missing),
        ("Extra in target", summary.extra),
        ("Duplicate keys in source", summary.duplicate_source),
        ("Duplicate keys in target", summary.duplicate_target),
        ("Common keys", summary.common),
        ("Mismatched values", summary.mismatched),
    ]


class ProgressMonitor:
    """
    Simple progress monitoring for console output.
    """
    
    def __init__(self, verbose: bool = True, stream=None):
        """
        Initialize progress monitor.
        
        Args:
            verbose: Whether to show progress at all
            stream: Output stream (defaults to stderr)
        """
        self.verbose = verbose
        self.stream = stream or sys.stderr
        self.current_task = None
        self.total = None
        self.current = 0
        self.start_time = None
    
    def start_task(self, task_name: str, total: Optional[int] = None):
        """
        Start a new task.
        
        Args:
            task_name: Name of task
            total: Total items to process (optional)
        """
        self.current_task = task_name
        self.total = total
        self.current = 0
        self.start_time = time.time()
        
        if self.verbose:
            print(f"[START] {task_name}", file=self.stream)
    
    def advance(self, count: int = 1):
        """
        Record processed items.
        
        Args:
            count: Items processed since the last call
        """
        self.current += count
        
        if self.verbose:
            elapsed = time.time() - self.start_time
            if self.total:
                percent = (self.current / self.total) * 100
                status = f"  [{percent:5.1f}%] {self.current:,}/{self.total:,}"
            else:
                status = f"  Processing: {self.current:,} rows"
            status += f" - Elapsed: {self._format_time(elapsed)}"
            print(f"\r{status}", end="", file=self.stream, flush=True)
    
    def complete_task(self, message: Optional[str] = None):
        """
        Mark current task as complete.
        
        Args:
            message: Optional completion message
        """
        if self.verbose and self.current_task:
            elapsed = time.time() - self.start_time
            if self.current:
                print(file=self.stream)
            
            status = f"[DONE] {self.current_task} - Time: {self._format_time(elapsed)}"
            if message:
                status += f" - {message}"
            print(status, file=self.stream)
        
        self.current_task = None
        self.start_time = None
    
    @contextmanager
    def task(self, task_name: str, total: Optional[int] = None) -> Iterator["ProgressMonitor"]:
        """
        Context manager for task progress.
        
        Example:
            with progress.task("Ingesting source") as task:
                task.advance(10000)
        """
        self.start_task(task_name, total)
        try:
            yield self
        finally:
            self.complete_task()
    
    def error(self, message: str):
        """Show error message."""
        print(f"[ERROR] {message}", file=sys.stderr)
    
    def show_summary(self, summary):
        """Print the run counts."""
        if not self.verbose:
            return
        print("=" * 50)
        for label, value in summary_rows(summary):
            print(f"{label:<28}{value:>12,}")
        print("=" * 50)
    
    def show_reports(self, paths: Dict[str, Path]):
        """List the written artifacts."""
        print("Done.")
        print("Reports:")
        for path in paths.values():
            print(f"  {path}")
    
    def _format_time(self, seconds: float) -> str:
        """
        Format time duration.
        
        Args:
            seconds: Time in seconds
            
        Returns:
            Formatted time string
        """
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            return f"{seconds / 60:.1f}m"
        else:
            return f"{seconds / 3600:.1f}h"


class _RichTask:
    """Handle yielded by RichProgressMonitor.task()."""
    
    def __init__(self, progress: Progress, task_id):
        self.progress = progress
        self.task_id = task_id
    
    def advance(self, count: int = 1):
        self.progress.update(self.task_id, advance=count)


class RichProgressMonitor:
    """
    Progress monitor rendering Rich progress bars and result tables.
    """
    
    def __init__(self, console: Optional[Console] = None):
        """
        Initialize Rich progress monitor.
        
        Args:
            console: Console to draw on (defaults to stderr)
        """
        self.console = console or Console(stderr=True)
        self.out = Console()
    
    @contextmanager
    def task(self, task_name: str, total: Optional[int] = None) -> Iterator[_RichTask]:
        """
        Context manager showing one progress bar for the task.
        
        Args:
            task_name: Task description
            total: Total items (None for an indeterminate bar)
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=False,
        )
        with progress:
            task_id = progress.add_task(task_name, total=total)
            handle = _RichTask(progress, task_id)
            yield handle
            finished = progress.tasks[0].completed or 1
            progress.update(task_id, total=finished, completed=finished,
                            description=f"✓ {task_name}")
        
        logger.debug("rich_progress.task.completed", name=task_name)
    
    def error(self, message: str):
        """Show error message."""
        self.console.print(f"[bold red]ERROR[/bold red] {message}")
    
    def show_summary(self, summary):
        """
        Display the run counts in a formatted table.
        
        Args:
            summary: SummaryCounts of the run
        """
        table = Table(title="Reconciliation Results", box=box.ROUNDED)
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Value", style="magenta", justify="right")
        
        for label, value in summary_rows(summary):
            table.add_row(label, f"{value:,}")
        table.add_row("Schema issues", "yes" if summary.schema_issues else "no")
        
        self.out.print(table)
    
    def show_reports(self, paths: Dict[str, Path]):
        """List the written artifacts."""
        self.out.print("[bold green]Done.[/bold green]")
        self.out.print("Reports:")
        for path in paths.values():
            self.out.print(f"  {path}", highlight=False)


def get_progress_monitor(use_rich: bool = True, verbose: bool = True):
    """
    Get appropriate progress monitor.
    
    Args:
        use_rich: Use Rich progress bars
        verbose: Show progress (plain monitor only)
        
    Returns:
        Progress monitor instance
    """
    if use_rich:
        return RichProgressMonitor()
    return ProgressMonitor(verbose=verbose)
