"""Tests for mapping specification validation and result models."""

import json

import pytest
from pydantic import ValidationError

from quoteflow.enums import DataType, SourceKind
from quoteflow.exceptions import InvalidMappingSpecification
from quoteflow.services.mapping import FieldMapping, MappingSpecification, RowOutcome


class TestMappingSpecificationFromJson:
    """Tests for parsing the canonical JSON form."""

    def test_canonical_form(self):
        spec = MappingSpecification.from_json(
            {
                "sourceKind": "spreadsheet",
                "skipRows": 1,
                "fieldMappings": [
                    {"fieldName": "quotationId", "sourceLocator": "A", "required": True, "dataType": "string"}
                ],
                "textPatterns": {},
            }
        )

        assert spec.source_kind == SourceKind.SPREADSHEET
        assert spec.skip_rows == 1
        assert spec.field_mappings == [
            FieldMapping(field_name="quotationId", source_locator="A", required=True)
        ]

    def test_json_string_input(self):
        payload = json.dumps({"sourceKind": "delimited-text", "fieldMappings": []})

        assert MappingSpecification.from_json(payload).source_kind == SourceKind.DELIMITED_TEXT

    def test_legacy_layout(self):
        spec = MappingSpecification.from_json(
            {
                "fileType": "pdf",
                "columns": [
                    {"name": "total", "sourceColumn": "", "required": True, "dataType": "number"},
                    {"name": "customer"},
                ],
                "pdfSettings": {"patterns": {"total": r"Total:\s*(\d+)"}},
            }
        )

        assert spec.source_kind == SourceKind.FREE_TEXT
        assert spec.field_names == ["total", "customer"]
        assert spec.field_mappings[0].data_type == DataType.NUMBER
        assert spec.text_patterns == {"total": r"Total:\s*(\d+)"}

    def test_round_trip(self):
        original = {
            "sourceKind": "free-text",
            "skipRows": 0,
            "fieldMappings": [
                {"fieldName": "total", "sourceLocator": "", "required": True, "dataType": "number"}
            ],
            "textPatterns": {"total": r"Total:\s*(\d+)"},
        }

        assert MappingSpecification.from_json(original).to_json() == original

    def test_to_json_excludes_persistence_fields(self):
        spec = MappingSpecification.from_json(
            {"id": "7b4a3c56-7f0e-4c77-9d4f-2d7f3c9f2a10", "name": "Vendor A", "sourceKind": "spreadsheet"}
        )

        assert spec.name == "Vendor A"
        assert set(spec.to_json()) == {"sourceKind", "skipRows", "fieldMappings", "textPatterns"}


class TestMappingSpecificationValidation:
    """Structural problems are rejected when the specification is built."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"fieldMappings": []},
            {"sourceKind": "word"},
            {"sourceKind": "spreadsheet", "skipRows": -1},
            {"sourceKind": "spreadsheet", "fieldMappings": [{"fieldName": "", "sourceLocator": "A"}]},
            {"sourceKind": "spreadsheet", "fieldMappings": [{"fieldName": "x", "sourceLocator": "A1"}]},
            {"sourceKind": "delimited-text", "fieldMappings": [{"fieldName": "x"}]},
            {
                "sourceKind": "spreadsheet",
                "fieldMappings": [
                    {"fieldName": "x", "sourceLocator": "A"},
                    {"fieldName": "x", "sourceLocator": "B"},
                ],
            },
            {"sourceKind": "free-text", "fieldMappings": [{"fieldName": "total", "required": True}]},
            {"sourceKind": "free-text", "textPatterns": {"total": "(unclosed"}},
            {"sourceKind": "spreadsheet", "fieldMappings": [{"fieldName": "x", "sourceLocator": "A", "dataType": "money"}]},
            {"fileType": "csv", "columns": ["x"]},
            {"fileType": "csv", "columns": "x"},
            {"fileType": "pdf", "pdfSettings": "x"},
            {"fileType": ["csv"]},
        ],
    )
    def test_invalid_payloads(self, payload):
        with pytest.raises(InvalidMappingSpecification):
            MappingSpecification.from_json(payload)

    def test_malformed_json_string(self):
        with pytest.raises(InvalidMappingSpecification):
            MappingSpecification.from_json("{not json")

    def test_optional_free_text_field_may_lack_pattern(self):
        spec = MappingSpecification.from_json(
            {"sourceKind": "free-text", "fieldMappings": [{"fieldName": "note"}]}
        )

        assert spec.text_patterns == {}

    def test_specification_is_immutable(self):
        spec = MappingSpecification(source_kind=SourceKind.SPREADSHEET)

        with pytest.raises(ValidationError):
            spec.skip_rows = 3


class TestRowOutcome:
    """Tests for the per-row accumulator."""

    def test_merge_returns_new_value(self):
        left = RowOutcome.value("a", 1)
        right = RowOutcome.error("boom")

        merged = left.merge(right)

        assert merged.fields == {"a": 1}
        assert merged.errors == ("boom",)
        assert not merged.ok
        assert left.ok
        assert left.errors == ()
        assert right.fields == {}
