"""Tests for the structured logger."""

import json

from tabrecon.utils.logger import StructuredLogger, configure_logger, get_logger


class TestStructuredLogger:
    
    def test_console_respects_min_level(self, capsys):
        logger = StructuredLogger(min_level="WARN")
        
        logger.info("ingest.started", label="source")
        logger.warning("schema.diff.issues", issues=2)
        
        err = capsys.readouterr().err
        assert "ingest.started" not in err
        assert "WARN  | schema.diff.issues" in err
        assert "  issues=2" in err
    
    def test_file_receives_every_level(self, tmp_path, capsys):
        log_file = tmp_path / "events.log"
        logger = StructuredLogger(name="test", log_file=log_file, min_level="ERROR")
        
        logger.debug("one")
        logger.info("two", rows=3)
        
        entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert [e["level"] for e in entries] == ["DEBUG", "INFO"]
        assert entries[1]["context"] == {"rows": 3}
        assert entries[1]["logger"] == "test"
        assert capsys.readouterr().err == ""
    
    def test_non_json_context_is_stringified(self, tmp_path):
        log_file = tmp_path / "events.log"
        logger = StructuredLogger(log_file=log_file)
        
        logger.debug("path.seen", path=tmp_path)
        
        entry = json.loads(log_file.read_text(encoding="utf-8"))
        assert entry["context"]["path"] == str(tmp_path)


class TestConfigureLogger:
    
    def test_shared_instance(self, tmp_path):
        logger = configure_logger(verbose=True, log_file=tmp_path / "x.log")
        
        assert logger is get_logger()
        assert logger.min_level == "DEBUG"
        assert logger.log_file == tmp_path / "x.log"
    
    def test_default_level(self):
        logger = configure_logger()
        
        assert logger.min_level == "INFO"
        assert logger.log_file is None
