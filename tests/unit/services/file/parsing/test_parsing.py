"""Tests for the document parsers."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from quoteflow.enums import SourceKind
from quoteflow.exceptions import ParseFailure, UnsupportedFormat
from quoteflow.services.file.parsing import (
    FREE_TEXT_KEY,
    DelimitedTextParser,
    DocumentParser,
    NormalizedDocument,
    PDFParser,
    SpreadsheetParser,
)


def mock_pdf(*pages_words: list[str]) -> MagicMock:
    """A pdfplumber document whose pages yield the given word fragments."""
    pages = []
    for words in pages_words:
        page = MagicMock()
        page.extract_words.return_value = [{"text": w} for w in words]
        pages.append(page)
    pdf = MagicMock()
    pdf.pages = pages
    pdf.__enter__.return_value = pdf
    pdf.__exit__.return_value = False
    return pdf


class TestSpreadsheetParser:
    """Tests for Excel parsing."""

    def test_raw_grid_without_header_assumption(self, make_workbook):
        content = make_workbook([["Quote ID", "Amount"], ["Q-1", 10], ["Q-2", 12.5]], title="Quotes")

        doc = SpreadsheetParser().parse(content, "quotes.xlsx")

        assert doc.source_kind == SourceKind.SPREADSHEET
        assert doc.rows == (("Quote ID", "Amount"), ("Q-1", 10), ("Q-2", 12.5))
        assert doc.headers == ("A", "B")
        assert doc.metadata == {"file_name": "quotes.xlsx", "sheet_name": "Quotes"}

    def test_trailing_empty_rows_and_cells_are_dropped(self, make_workbook):
        content = make_workbook([["a", None, "c", None], [None, "b"], [None, None]])

        doc = SpreadsheetParser().parse(content)

        assert doc.rows == (("a", None, "c"), (None, "b"))
        assert doc.headers == ("A", "B", "C")

    def test_date_cells_come_back_as_datetimes(self, make_workbook):
        content = make_workbook([[datetime(2024, 2, 29, 12, 0)]])

        doc = SpreadsheetParser().parse(content)

        assert doc.rows[0][0] == datetime(2024, 2, 29, 12, 0)

    def test_invalid_bytes_raise_parse_failure(self):
        with pytest.raises(ParseFailure) as exc_info:
            SpreadsheetParser().parse(b"definitely not a zip archive")

        assert exc_info.value.__cause__ is not None


class TestDelimitedTextParser:
    """Tests for CSV parsing."""

    def test_header_row_and_trimmed_values(self):
        content = b"id, price ,note\n1, 10.5 ,first\n2,20,\n"

        doc = DelimitedTextParser().parse(content)

        assert doc.source_kind == SourceKind.DELIMITED_TEXT
        assert doc.headers == ("id", "price", "note")
        assert doc.rows == (
            {"id": "1", "price": "10.5", "note": "first"},
            {"id": "2", "price": "20", "note": ""},
        )

    def test_blank_lines_are_skipped(self):
        doc = DelimitedTextParser().parse(b"id\n\n1\n   \n2\n")

        assert [row["id"] for row in doc.rows] == ["1", "2"]

    def test_row_of_empty_cells_is_kept(self):
        doc = DelimitedTextParser().parse(b"id,price\n1,5\n,\n2,6\n")

        assert doc.rows == (
            {"id": "1", "price": "5"},
            {"id": "", "price": ""},
            {"id": "2", "price": "6"},
        )

    def test_short_rows_lack_trailing_keys(self):
        doc = DelimitedTextParser().parse(b"a,b,c\n1\n")

        assert doc.rows == ({"a": "1"},)

    def test_byte_order_mark_is_tolerated(self):
        doc = DelimitedTextParser().parse(b"\xef\xbb\xbfname\nAcme\n")

        assert doc.headers == ("name",)

    def test_quoted_fields(self):
        doc = DelimitedTextParser().parse(b'name,address\n"Acme, Inc.","1 Main St"\n')

        assert doc.rows == ({"name": "Acme, Inc.", "address": "1 Main St"},)

    def test_empty_input(self):
        doc = DelimitedTextParser().parse(b"")

        assert doc.headers == ()
        assert doc.rows == ()

    def test_undecodable_bytes_raise_parse_failure(self):
        with pytest.raises(ParseFailure) as exc_info:
            DelimitedTextParser().parse(b"\xff\xfe\xfa")

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


class TestPDFParser:
    """Tests for PDF text extraction."""

    def test_pages_joined_by_newline(self):
        pdf = mock_pdf(["Quote", " ", "Total:", "4200"], ["Page", "two"])

        with patch("quoteflow.services.file.parsing.pdf.pdfplumber.open", return_value=pdf):
            doc = PDFParser().parse(b"%PDF-1.4", "quote.pdf")

        assert doc.source_kind == SourceKind.FREE_TEXT
        assert doc.text == "Quote Total: 4200\nPage two"
        assert doc.rows == ({FREE_TEXT_KEY: "Quote Total: 4200\nPage two"},)
        assert doc.metadata["page_count"] == 2

    def test_unreadable_pdf_raises_parse_failure(self):
        with patch(
            "quoteflow.services.file.parsing.pdf.pdfplumber.open",
            side_effect=ValueError("no PDF header"),
        ):
            with pytest.raises(ParseFailure) as exc_info:
                PDFParser().parse(b"garbage")

        assert isinstance(exc_info.value.__cause__, ValueError)


class TestDocumentParser:
    """Tests for kind detection and dispatch."""

    @pytest.mark.parametrize(
        "declared,expected",
        [
            (SourceKind.FREE_TEXT, SourceKind.FREE_TEXT),
            ("spreadsheet", SourceKind.SPREADSHEET),
            ("delimited-text", SourceKind.DELIMITED_TEXT),
            ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", SourceKind.SPREADSHEET),
            ("text/csv; charset=utf-8", SourceKind.DELIMITED_TEXT),
            ("application/pdf", SourceKind.FREE_TEXT),
            (".xlsm", SourceKind.SPREADSHEET),
            ("Quote March.CSV", SourceKind.DELIMITED_TEXT),
            ("scan.pdf", SourceKind.FREE_TEXT),
        ],
    )
    def test_detect_source_kind(self, declared, expected):
        assert DocumentParser().detect_source_kind(declared) == expected

    @pytest.mark.parametrize("declared", [None, "", "application/msword", "quote.docx", "quote.xls", "image/png"])
    def test_unsupported_kinds(self, declared):
        parser = DocumentParser()

        assert not parser.is_supported(declared)
        with pytest.raises(UnsupportedFormat):
            parser.detect_source_kind(declared)

    def test_parse_dispatches_on_kind(self, make_workbook):
        parser = DocumentParser()

        assert parser.parse(b"id\n1\n", "text/csv").source_kind == SourceKind.DELIMITED_TEXT
        assert parser.parse(make_workbook([["x"]]), "q.xlsx").source_kind == SourceKind.SPREADSHEET

    def test_parse_unsupported_kind_raises(self):
        with pytest.raises(UnsupportedFormat):
            DocumentParser().parse(b"data", "notes.txt")

    def test_parse_path_uses_extension(self, tmp_path):
        path = tmp_path / "quotes.csv"
        path.write_bytes(b"id\n7\n")

        doc = DocumentParser().parse_path(path)

        assert doc.rows == ({"id": "7"},)
        assert doc.metadata["file_name"] == "quotes.csv"


class TestNormalizedDocument:
    def test_text_is_only_for_free_text(self):
        with pytest.raises(TypeError):
            NormalizedDocument.delimited(["a"], []).text

    def test_documents_are_immutable(self):
        doc = NormalizedDocument.free_text("hello")

        with pytest.raises(AttributeError):
            doc.rows = ()
