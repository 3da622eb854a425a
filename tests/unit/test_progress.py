"""Tests for console progress output."""

import io

from rich.console import Console

from tabrecon.core.reconciler import SummaryCounts
from tabrecon.ui.progress import (
    ProgressMonitor,
    RichProgressMonitor,
    get_progress_monitor,
    summary_rows,
)


SUMMARY = SummaryCounts(missing=1, extra=2, duplicate_source=0, duplicate_target=3,
                        common=1200, mismatched=4, schema_issues=True)


class TestProgressMonitor:
    
    def test_task_lifecycle(self):
        stream = io.StringIO()
        monitor = ProgressMonitor(stream=stream)
        
        with monitor.task("Ingesting source") as task:
            task.advance(10)
            task.advance(5)
        
        text = stream.getvalue()
        assert "[START] Ingesting source" in text
        assert "Processing: 15 rows" in text
        assert "[DONE] Ingesting source" in text
        assert monitor.current_task is None
    
    def test_silent_when_not_verbose(self):
        stream = io.StringIO()
        monitor = ProgressMonitor(verbose=False, stream=stream)
        
        with monitor.task("Comparing values", total=10) as task:
            task.advance(10)
        
        assert stream.getvalue() == ""
    
    def test_summary(self, capsys):
        ProgressMonitor().show_summary(SUMMARY)
        
        out = capsys.readouterr().out
        assert "Common keys" in out
        assert "1,200" in out
    
    def test_format_time(self):
        monitor = ProgressMonitor()
        
        assert monitor._format_time(12.34) == "12.3s"
        assert monitor._format_time(90) == "1.5m"
        assert monitor._format_time(5400) == "1.5h"


class TestRichProgressMonitor:
    
    def test_task_and_summary_render(self):
        buffer = io.StringIO()
        console = Console(file=buffer, force_terminal=False, width=100)
        monitor = RichProgressMonitor(console=console)
        monitor.out = console
        
        with monitor.task("Ingesting target") as task:
            task.advance(3)
        monitor.show_summary(SUMMARY)
        
        text = buffer.getvalue()
        assert "Ingesting target" in text
        assert "Reconciliation Results" in text
        assert "Mismatched values" in text


def test_summary_rows_order():
    labels = [label for label, _ in summary_rows(SUMMARY)]
    
    assert labels[0] == "Missing in target"
    assert labels[-1] == "Mismatched values"


def test_monitor_factory():
    assert isinstance(get_progress_monitor(use_rich=False), ProgressMonitor)
    assert isinstance(get_progress_monitor(use_rich=True), RichProgressMonitor)
