"""Delimited text (CSV) parsing."""

import csv
import io
import logging

from quoteflow.exceptions import ParseFailure
from quoteflow.services.file.parsing.models import NormalizedDocument

logger = logging.getLogger(__name__)


class DelimitedTextParser:
    """Parse CSV files using the first line as the header row."""

    def __init__(self, encoding: str = "utf-8-sig"):
        self.encoding = encoding

    def parse(self, content: bytes, file_name: str | None = None) -> NormalizedDocument:
        """
        Parse CSV bytes into header-keyed records.

        Blank lines are skipped, but a line of empty cells (",,") is a row.
        Headers and values are trimmed. Rows shorter than the header simply
        lack the trailing keys.

        Args:
            content: Raw CSV bytes
            file_name: Optional file name for metadata

        Returns:
            NormalizedDocument with one dict per data line

        Raises:
            ParseFailure: If the bytes cannot be decoded or parsed as CSV
        """
        try:
            text = content.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise ParseFailure(f"CSV is not valid {self.encoding} text") from e

        try:
            lines = [
                [cell.strip() for cell in row]
                for row in csv.reader(io.StringIO(text, newline=""), strict=True)
            ]
        except csv.Error as e:
            raise ParseFailure(f"Malformed CSV: {e}") from e

        lines = [row for row in lines if row not in ([], [""])]
        if not lines:
            return NormalizedDocument.delimited([], [], file_name=file_name)

        headers, *data = lines
        records = [
            {header: value for header, value in zip(headers, row, strict=False) if header}
            for row in data
        ]

        logger.debug(f"Parsed {len(records)} CSV records with {len(headers)} columns")
        return NormalizedDocument.delimited(headers, records, file_name=file_name)
