"""Spreadsheet (Excel) parsing using openpyxl."""

import io
import logging

from openpyxl import load_workbook

from quoteflow.exceptions import ParseFailure
from quoteflow.services.file.parsing.models import NormalizedDocument

logger = logging.getLogger(__name__)


class SpreadsheetParser:
    """Read the first sheet of an Excel workbook (.xlsx, .xlsm) as a raw cell grid."""

    def parse(self, content: bytes, file_name: str | None = None) -> NormalizedDocument:
        """
        Parse a workbook into a spreadsheet document.

        No header row is assumed: row 0 of the result is the sheet's first
        row. Trailing rows with no values are dropped and trailing empty
        cells are trimmed from each row.

        Args:
            content: Raw bytes of the Excel file
            file_name: Optional file name for metadata

        Returns:
            NormalizedDocument with one tuple of cell values per row

        Raises:
            ParseFailure: If the bytes are not a readable workbook
        """
        try:
            workbook = load_workbook(
                filename=io.BytesIO(content),
                read_only=True,
                data_only=True,  # Get calculated values, not formulas
            )
        except Exception as e:
            logger.error(f"Failed to load spreadsheet {file_name or ''}: {e}")
            raise ParseFailure(f"Could not read spreadsheet: {e}") from e

        try:
            sheet = workbook.worksheets[0]
            sheet_name = sheet.title
            grid = [self._trim_row(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

        while grid and not grid[-1]:
            grid.pop()

        logger.debug(f"Parsed sheet '{sheet_name}' with {len(grid)} rows")
        return NormalizedDocument.spreadsheet(
            grid,
            file_name=file_name,
            sheet_name=sheet_name,
        )

    @staticmethod
    def _trim_row(row: tuple) -> list:
        cells = list(row)
        while cells and (cells[-1] is None or cells[-1] == ""):
            cells.pop()
        return cells
