"""Document parsing services."""

from quoteflow.services.file.parsing.delimited import DelimitedTextParser
from quoteflow.services.file.parsing.models import FREE_TEXT_KEY, NormalizedDocument
from quoteflow.services.file.parsing.pdf import PDFParser
from quoteflow.services.file.parsing.service import DocumentParser
from quoteflow.services.file.parsing.spreadsheet import SpreadsheetParser

__all__ = [
    "DelimitedTextParser",
    "DocumentParser",
    "FREE_TEXT_KEY",
    "NormalizedDocument",
    "PDFParser",
    "SpreadsheetParser",
]
