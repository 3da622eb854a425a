"""Shared fixtures for the reconciliation tests."""

from pathlib import Path

import pytest

from tabrecon.config.manager import ReconcileConfig
from tabrecon.utils.logger import get_logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Keep the shared logger quiet and file-less between tests."""
    logger = get_logger()
    logger.min_level = "WARN"
    logger.log_file = None
    yield
    logger.min_level = "WARN"
    logger.log_file = None


@pytest.fixture
def write_file(tmp_path):
    """Write a text file under tmp_path and return its path."""
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def make_config(write_file, tmp_path):
    """Build a ReconcileConfig from inline source/target text."""
    def _make(source_text: str, target_text: str, **settings) -> ReconcileConfig:
        source = write_file("source.csv", source_text)
        target = write_file("target.csv", target_text)
        settings.setdefault("key_spec", "id")
        settings.setdefault("prefix", str(tmp_path / "reports" / "reconcile"))
        return ReconcileConfig(source=str(source), target=str(target), **settings)
    return _make
