"""Unified document parsing service for multiple file types."""

import logging
from pathlib import Path

from quoteflow.enums import SourceKind
from quoteflow.exceptions import UnsupportedFormat
from quoteflow.services.file.parsing.delimited import DelimitedTextParser
from quoteflow.services.file.parsing.models import NormalizedDocument
from quoteflow.services.file.parsing.pdf import PDFParser
from quoteflow.services.file.parsing.spreadsheet import SpreadsheetParser

logger = logging.getLogger(__name__)


class DocumentParser:
    """Turn uploaded bytes into a NormalizedDocument, dispatching on source kind."""

    SPREADSHEET_MIMETYPES = {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
        "application/vnd.ms-excel.sheet.macroEnabled.12",  # .xlsm
    }

    DELIMITED_MIMETYPES = {
        "text/csv",
        "application/csv",
    }

    PDF_MIMETYPES = {
        "application/pdf",
    }

    EXTENSIONS = {
        ".xlsx": SourceKind.SPREADSHEET,
        ".xlsm": SourceKind.SPREADSHEET,
        ".csv": SourceKind.DELIMITED_TEXT,
        ".pdf": SourceKind.FREE_TEXT,
    }

    def __init__(self):
        self.spreadsheet_parser = SpreadsheetParser()
        self.delimited_parser = DelimitedTextParser()
        self.pdf_parser = PDFParser()

    def detect_source_kind(self, declared: SourceKind | str | None) -> SourceKind:
        """
        Resolve a declared kind, MIME type, extension or file name to a SourceKind.

        Args:
            declared: e.g. "spreadsheet", "text/csv", ".pdf" or "quote.xlsx"

        Returns:
            The matching SourceKind

        Raises:
            UnsupportedFormat: If nothing matches
        """
        if isinstance(declared, SourceKind):
            return declared
        if not declared:
            raise UnsupportedFormat(declared)

        value = declared.split(";")[0].strip().lower()
        if value in {kind.value for kind in SourceKind}:
            return SourceKind(value)
        if value in self.SPREADSHEET_MIMETYPES:
            return SourceKind.SPREADSHEET
        if value in self.DELIMITED_MIMETYPES:
            return SourceKind.DELIMITED_TEXT
        if value in self.PDF_MIMETYPES:
            return SourceKind.FREE_TEXT

        extension = value if value.startswith(".") else Path(value).suffix
        if extension in self.EXTENSIONS:
            return self.EXTENSIONS[extension]

        raise UnsupportedFormat(declared)

    def is_supported(self, declared: SourceKind | str | None) -> bool:
        """Check if a declared kind, MIME type or file name can be parsed."""
        try:
            self.detect_source_kind(declared)
        except UnsupportedFormat:
            return False
        return True

    def parse(
        self,
        content: bytes,
        declared_kind: SourceKind | str | None,
        file_name: str | None = None,
    ) -> NormalizedDocument:
        """
        Parse raw file bytes as the declared kind.

        Args:
            content: Raw file bytes
            declared_kind: SourceKind, MIME type, extension or file name
            file_name: Optional original file name for metadata

        Returns:
            NormalizedDocument tagged with the resolved source kind

        Raises:
            UnsupportedFormat: If the kind is not spreadsheet, delimited or free text
            ParseFailure: If the bytes cannot be decoded as that kind
        """
        kind = self.detect_source_kind(declared_kind)
        logger.info(f"Parsing {file_name or 'upload'} ({len(content)} bytes) as {kind}")

        if kind == SourceKind.SPREADSHEET:
            return self.spreadsheet_parser.parse(content, file_name)
        if kind == SourceKind.DELIMITED_TEXT:
            return self.delimited_parser.parse(content, file_name)
        return self.pdf_parser.parse(content, file_name)

    def parse_path(
        self, path: str | Path, declared_kind: SourceKind | str | None = None
    ) -> NormalizedDocument:
        """Read and parse a file, using its extension when no kind is declared."""
        path = Path(path)
        return self.parse(path.read_bytes(), declared_kind or path.name, path.name)
