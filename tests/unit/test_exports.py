"""
Unit tests for report rendering.
"""

import csv
import zipfile
from decimal import Decimal

from tabrecon.core.reconciler import Reconciler
from tabrecon.reporting.exports import (
    ReportWriter,
    report_paths,
    schema_diff_lines,
    split_label,
    summary_lines,
)


SOURCE = "id,amt,note\n1,10.00,ok\n2,5.00,x\n2,6.00,y\n"
TARGET = 'id,amt,note\n1,10.02,say "hi"\n3,5.00,z\n'


class TestReportWriter:
    
    def setup_method(self):
        self.expected_names = {
            "missing", "extra", "mismatches", "duplicates_source",
            "duplicates_target", "schema_diff", "summary", "overview",
        }
    
    def _run(self, make_config, source=SOURCE, target=TARGET, **settings):
        config = make_config(source, target, **settings)
        result = Reconciler(config).run()
        paths = ReportWriter(config.prefix).write(result)
        return result, paths
    
    def test_writes_every_artifact(self, make_config):
        _, paths = self._run(make_config)
        
        assert set(paths) == self.expected_names
        for path in paths.values():
            assert path.is_file(), path
    
    def test_key_reports(self, make_config):
        _, paths = self._run(make_config)
        
        assert paths["missing"].read_text() == "key\n2\n"
        assert paths["extra"].read_text() == "key\n3\n"
        assert paths["duplicates_source"].read_text() == "key,count\n2,2\n"
        assert paths["duplicates_target"].read_text() == "key,count\n"
    
    def test_mismatch_report_quotes_fields(self, make_config):
        _, paths = self._run(make_config)
        
        lines = paths["mismatches"].read_text().splitlines()
        
        assert lines[0] == "key,column_index,column_name,source_value,target_value,is_numeric,diff"
        assert lines[1] == "1,2,amt,10.00,10.02,1,-0.02"
        assert lines[2] == '1,3,note,ok,"say ""hi""",0,'
    
    def test_values_with_commas_are_quoted(self, make_config):
        _, paths = self._run(make_config, "id|note\n1|a\n", "id|note\n1|fine, thanks\n",
                             delimiter="|")
        
        lines = paths["mismatches"].read_text().splitlines()
        
        assert lines[1] == '1,2,note,a,"fine, thanks",0,'
    
    def test_carriage_return_values_are_quoted(self, make_config):
        _, paths = self._run(make_config, "id,v\n1,a\rb\n", "id,v\n1,c\n")
        
        data = paths["mismatches"].read_bytes()
        
        assert b'"a\rb"' in data
        assert data.endswith(b",0,\n")
    
    def test_headerless_mismatch_layout(self, make_config):
        _, paths = self._run(make_config, "1|a\"b\n", "1|c\n",
                             key_spec="1", delimiter="|", has_header=False)
        
        with open(paths["mismatches"], newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        
        assert rows[0] == ["key", "column_index", "source_value", "target_value", "is_numeric", "diff"]
        assert rows[1] == ["1", "2", 'a"b', "c", "0", ""]
        assert '"a""b"' in paths["mismatches"].read_text()
    
    def test_text_reports(self, make_config):
        result, paths = self._run(make_config)
        
        assert paths["schema_diff"].read_text().splitlines() == ["SCHEMA CHECK", "Headers match."]
        summary = paths["summary"].read_text().splitlines()
        assert summary == summary_lines(result)
        assert summary[0] == "RECONCILIATION SUMMARY"
        assert "Keys only in source (missing in target):1" in summary
        assert "Duplicate keys in source:1" in summary
        assert "Mismatched values (non-key columns):2" in summary
        assert "Schema issues noted:no" in summary
    
    def test_overview_workbook_has_both_sheets(self, make_config):
        _, paths = self._run(make_config)
        
        with zipfile.ZipFile(paths["overview"]) as archive:
            workbook = archive.read("xl/workbook.xml").decode("utf-8")
            strings = archive.read("xl/sharedStrings.xml").decode("utf-8")
        
        assert 'name="Schema_Diff"' in workbook
        assert 'name="Summary"' in workbook
        assert "Numeric tolerance" in strings
        assert "RECONCILIATION SUMMARY" in strings
    
    def test_stale_reports_are_removed(self, make_config, tmp_path):
        prefix = str(tmp_path / "reports" / "reconcile")
        stale = report_paths(prefix)["missing"]
        stale.parent.mkdir(parents=True)
        stale.write_text("key\nold\n")
        
        _, paths = self._run(make_config, prefix=prefix)
        
        assert "old" not in paths["missing"].read_text()
    
    def test_prefix_directory_is_created(self, make_config, tmp_path):
        _, paths = self._run(make_config, prefix=str(tmp_path / "a" / "b" / "run"))
        
        assert paths["summary"] == tmp_path / "a" / "b" / "run_summary.txt"
        assert paths["summary"].is_file()


class TestReportLines:
    
    def test_split_label_on_first_colon(self):
        assert split_label("Source file:C:\\data\\in.csv") == ("Source file", "C:\\data\\in.csv")
        assert split_label("Common keys:4") == ("Common keys", "4")
    
    def test_headings_and_dividers_stay_whole(self):
        assert split_label("RECONCILIATION SUMMARY") == ("RECONCILIATION SUMMARY", "")
        assert split_label("----") == ("----", "")
        assert split_label("Headers match.") == ("Headers match.", "")
    
    def test_summary_echoes_configuration(self, make_config):
        config = make_config("1\n", "1\n", key_spec="1", delimiter="\t",
                             has_header=False, tolerance="0.25")
        result = Reconciler(config).run()
        
        lines = summary_lines(result)
        
        assert f"Source file:{config.source}" in lines
        assert "Delimiter:TAB" in lines
        assert "Header:no" in lines
        assert "Key spec:1" in lines
        assert "Numeric tolerance:0.25" in lines
        assert schema_diff_lines(result) == ["SCHEMA CHECK", "No header; both have 1 columns."]
    
    def test_tolerance_is_echoed_as_given(self, make_config):
        config = make_config("id\n1\n", "id\n1\n", tolerance="1e-2")
        
        lines = summary_lines(Reconciler(config).run())
        
        assert config.tolerance == Decimal("0.01")
        assert "Numeric tolerance:1e-2" in lines
