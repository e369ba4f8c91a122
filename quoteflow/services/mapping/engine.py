"""Template-driven extraction of mapped records from parsed documents."""

import logging
import re
from collections.abc import Iterable
from typing import Any

from quoteflow.enums import SourceKind
from quoteflow.exceptions import CoercionError, IncompatibleTemplate, InvalidMappingSpecification
from quoteflow.services.file.parsing.models import NormalizedDocument
from quoteflow.services.mapping.coercion import coerce
from quoteflow.services.mapping.columns import column_letter_to_index
from quoteflow.services.mapping.models import (
    ExtractionResult,
    ExtractionTotals,
    FieldMapping,
    MappingSpecification,
    RowError,
    RowOutcome,
)

logger = logging.getLogger(__name__)

# Row index reported for the single synthetic row of a free-text document
FREE_TEXT_ROW_INDEX = 1


def apply_template(doc: NormalizedDocument, spec: MappingSpecification) -> ExtractionResult:
    """
    Apply a mapping specification to a parsed document.

    Rows are all-or-nothing: a row with any error contributes no record and
    one or more entries in ``row_errors``. Row-level problems never raise.

    Args:
        doc: Parsed document (not modified)
        spec: Mapping specification (not modified)

    Returns:
        ExtractionResult with mapped rows, row errors and totals

    Raises:
        IncompatibleTemplate: If the document kind differs from the template's
        InvalidMappingSpecification: If a text pattern cannot be compiled
    """
    if doc.source_kind != spec.source_kind:
        raise IncompatibleTemplate(doc.source_kind, spec.source_kind)

    if spec.source_kind == SourceKind.FREE_TEXT:
        outcomes = [(FREE_TEXT_ROW_INDEX, _map_free_text(doc.text, spec))]
    else:
        outcomes = [
            (row_index, _map_row(row, spec))
            for row_index, row in _data_rows(doc, spec.skip_rows)
        ]

    result = _collect(spec, outcomes)
    logger.info(
        f"Applied template '{spec.name or spec.id or 'unnamed'}' to {doc.source_kind} document: "
        f"{result.totals.mapped_rows}/{result.totals.total_rows} rows mapped, "
        f"{result.totals.error_rows} with errors"
    )
    return result


def _data_rows(doc: NormalizedDocument, skip_rows: int) -> Iterable[tuple[int, Any]]:
    """Yield (1-based row number, row) pairs after the skipped leading rows."""
    for index in range(skip_rows, len(doc.rows)):
        yield index + 1, doc.rows[index]


def _map_row(row: Any, spec: MappingSpecification) -> RowOutcome:
    outcome = RowOutcome()
    for mapping in spec.field_mappings:
        raw = _resolve(row, mapping, spec.source_kind)
        outcome = outcome.merge(_map_value(raw, mapping))
    return outcome


def _resolve(row: Any, mapping: FieldMapping, source_kind: SourceKind) -> Any:
    """Locate a field's raw value in a tabular row; None when absent."""
    if source_kind == SourceKind.SPREADSHEET:
        index = column_letter_to_index(mapping.source_locator)
        return row[index] if index < len(row) else None
    return row.get(mapping.source_locator)


def _map_value(raw: Any, mapping: FieldMapping) -> RowOutcome:
    """Check required-ness, then coerce. Optional fields without a value are omitted."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if mapping.required:
            return RowOutcome.error(f"required field '{mapping.field_name}' has no value")
        return RowOutcome()

    try:
        return RowOutcome.value(mapping.field_name, coerce(raw, mapping.data_type))
    except CoercionError as e:
        return RowOutcome.error(f"field '{mapping.field_name}': {e}")


def _map_free_text(text: str, spec: MappingSpecification) -> RowOutcome:
    outcome = RowOutcome()
    for mapping in spec.field_mappings:
        pattern = spec.text_patterns.get(mapping.field_name)
        if pattern is None:
            if mapping.required:
                outcome = outcome.merge(
                    RowOutcome.error(f"required field '{mapping.field_name}' has no text pattern")
                )
            continue

        outcome = outcome.merge(_map_value(_search(pattern, text, mapping), mapping))
    return outcome


def _search(pattern: str, text: str, mapping: FieldMapping) -> str | None:
    """Return the first capture group of a case-insensitive search, or None."""
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise InvalidMappingSpecification(
            f"Invalid pattern for '{mapping.field_name}': {e}"
        ) from e

    match = regex.search(text)
    if match is None:
        return None
    value = match.group(1) if regex.groups else match.group(0)
    return value or None


def _collect(
    spec: MappingSpecification, outcomes: list[tuple[int, RowOutcome]]
) -> ExtractionResult:
    mapped_rows = []
    row_errors = []
    error_rows = 0

    for row_index, outcome in outcomes:
        if outcome.ok:
            mapped_rows.append(outcome.fields)
            continue

        error_rows += 1
        row_errors.extend(RowError(row_index, message) for message in outcome.errors)
        logger.debug(f"Row {row_index} excluded: {'; '.join(outcome.errors)}")

    return ExtractionResult(
        result_headers=tuple(spec.field_names),
        mapped_rows=tuple(mapped_rows),
        row_errors=tuple(row_errors),
        totals=ExtractionTotals(
            total_rows=len(outcomes),
            mapped_rows=len(mapped_rows),
            error_rows=error_rows,
        ),
    )
