"""
Unit tests for SchemaLoader and SchemaDiff.
"""

from tabrecon.adapters.file_reader import DelimitedFileReader
from tabrecon.core.schema import SchemaDiff, SchemaInfo, SchemaLoader


class TestSchemaLoader:
    
    def setup_method(self):
        self.loader = SchemaLoader()
    
    def test_header_is_trimmed_and_indexed_case_insensitively(self, write_file):
        path = write_file("data.csv", " ID ,Name\t,amount\n1,a,2\n")
        
        with DelimitedFileReader(path) as reader:
            schema = self.loader.load(reader, has_header=True)
            remaining = list(reader)
        
        assert schema.headers == ["ID", "Name", "amount"]
        assert schema.column_count == 3
        assert schema.header_index == {"id": 1, "name": 2, "amount": 3}
        assert remaining == [["1", "a", "2"]]
    
    def test_headerless_mode_consumes_nothing(self, write_file):
        path = write_file("data.csv", "1,a\n2,b,c\n")
        
        with DelimitedFileReader(path) as reader:
            schema = self.loader.load(reader, has_header=False)
            remaining = list(reader)
        
        assert schema.headers is None
        assert schema.column_count == 0
        assert len(remaining) == 2
    
    def test_empty_file_has_empty_header(self, write_file):
        path = write_file("empty.csv", "")
        
        with DelimitedFileReader(path) as reader:
            schema = self.loader.load(reader, has_header=True)
        
        assert schema.headers == []
        assert schema.column_count == 0
        assert schema.header_index == {}
    
    def test_duplicate_header_names_resolve_to_last_position(self):
        schema = SchemaInfo(column_count=2, headers=["id", "ID"])
        
        assert schema.header_index == {"id": 2}
    
    def test_observed_width_only_grows(self):
        schema = SchemaInfo(column_count=4)
        
        assert schema.with_observed_width(3).column_count == 4
        assert schema.with_observed_width(6).column_count == 6


class TestSchemaDiff:
    
    def setup_method(self):
        self.diff = SchemaDiff()
    
    def test_matching_headers(self):
        schema = SchemaInfo(column_count=2, headers=["id", "amt"])
        
        report = self.diff.compare(schema, schema)
        
        assert report.notes == ["Headers match."]
        assert not report.has_issues
    
    def test_count_and_name_differences(self):
        source = SchemaInfo(column_count=2, headers=["id", "Amt"])
        target = SchemaInfo(column_count=3, headers=["id", "amt", "extra"])
        
        report = self.diff.compare(source, target)
        
        assert report.notes == [
            "Different column counts (source=2, target=3)",
            'Col 2 differs: source="Amt" vs target="amt"',
            'Col 3 differs: source="<missing>" vs target="extra"',
        ]
        assert report.issues == 3
    
    def test_headerless_widths_match(self):
        report = self.diff.compare(SchemaInfo(column_count=3), SchemaInfo(column_count=3))
        
        assert report.notes == ["No header; both have 3 columns."]
        assert not report.has_issues
    
    def test_headerless_widths_differ(self):
        report = self.diff.compare(SchemaInfo(column_count=3), SchemaInfo(column_count=5))
        
        assert report.notes == ["Different column counts (source=3, target=5)"]
        assert report.has_issues
