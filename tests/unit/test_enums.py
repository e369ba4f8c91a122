"""Tests for the enums module."""

from quoteflow.enums import AggregateOperation, DataType, DatePeriod, ExportFormat, FileStatus, SourceKind


class TestSourceKind:
    def test_values(self):
        assert {k.value for k in SourceKind} == {"spreadsheet", "delimited-text", "free-text"}

    def test_comparison_with_string(self):
        """Values round-trip through JSON and the database as plain strings."""
        assert SourceKind.FREE_TEXT == "free-text"
        assert SourceKind("delimited-text") is SourceKind.DELIMITED_TEXT
        assert f"{SourceKind.SPREADSHEET}" == "spreadsheet"


class TestFileStatus:
    def test_all_statuses_defined(self):
        assert {s.value for s in FileStatus} == {"pending", "processing", "completed", "failed"}


class TestOtherEnums:
    def test_data_types(self):
        assert {t.value for t in DataType} == {"string", "number", "date"}

    def test_export_formats_match_tabular_source_kinds(self):
        assert {f.value for f in ExportFormat} == {
            SourceKind.SPREADSHEET.value,
            SourceKind.DELIMITED_TEXT.value,
        }

    def test_analytics_enums(self):
        assert {o.value for o in AggregateOperation} == {"sum", "average", "min", "max", "count"}
        assert {p.value for p in DatePeriod} == {"day", "week", "month"}
