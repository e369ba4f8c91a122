"""Serialize stored flat records to spreadsheet or CSV bytes for download."""

import csv
import io
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from openpyxl import Workbook

from quoteflow.enums import ExportFormat

logger = logging.getLogger(__name__)

SHEET_TITLE = "Quotes"

MEDIA_TYPES = {
    ExportFormat.SPREADSHEET: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.DELIMITED_TEXT: "text/csv; charset=utf-8",
}

FILE_EXTENSIONS = {
    ExportFormat.SPREADSHEET: ".xlsx",
    ExportFormat.DELIMITED_TEXT: ".csv",
}


def collect_columns(records: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of record keys in first-seen order."""
    columns: dict[str, None] = {}
    for record in records:
        for key in record:
            columns.setdefault(key, None)
    return list(columns)


def export_records(
    records: Sequence[Mapping[str, Any]],
    fmt: ExportFormat | str,
    columns: Sequence[str] | None = None,
) -> bytes:
    """
    Write records to a spreadsheet or CSV file.

    Values are written as stored; no coercion is applied. ``None`` becomes an
    empty cell. A header line is always written, even with no records.

    Args:
        records: Flat mappings of field name to primitive value
        fmt: Target format (spreadsheet or delimited-text)
        columns: Explicit column order (defaults to the union of record keys)

    Returns:
        File content as bytes
    """
    export_format = ExportFormat(fmt)
    header = list(columns) if columns is not None else collect_columns(records)

    if export_format == ExportFormat.SPREADSHEET:
        content = _to_spreadsheet(records, header)
    else:
        content = _to_delimited(records, header)

    logger.info(f"Exported {len(records)} records as {export_format} ({len(content)} bytes)")
    return content


def _to_spreadsheet(records: Sequence[Mapping[str, Any]], header: list[str]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    _append_row(sheet, header)
    for record in records:
        _append_row(sheet, [record.get(column) for column in header])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _append_row(sheet, values: list[Any]) -> None:
    """Append a row, keeping strings that start with '=' as text rather than formulas."""
    sheet.append(values)
    for cell in sheet[sheet.max_row]:
        if isinstance(cell.value, str):
            cell.data_type = "s"


def _to_delimited(records: Sequence[Mapping[str, Any]], header: list[str]) -> bytes:
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, lineterminator="\r\n")

    writer.writerow(header)
    for record in records:
        writer.writerow(["" if record.get(c) is None else record.get(c) for c in header])

    return buffer.getvalue().encode("utf-8")


def media_type_for(fmt: ExportFormat | str) -> str:
    return MEDIA_TYPES[ExportFormat(fmt)]


def file_extension_for(fmt: ExportFormat | str) -> str:
    return FILE_EXTENSIONS[ExportFormat(fmt)]
