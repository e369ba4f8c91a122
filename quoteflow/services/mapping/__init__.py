"""Template mapping: specifications, type coercion and the extraction engine."""

from quoteflow.services.mapping.coercion import coerce
from quoteflow.services.mapping.columns import column_letter_to_index, index_to_column_letter
from quoteflow.services.mapping.engine import apply_template
from quoteflow.services.mapping.models import (
    ExtractionResult,
    ExtractionTotals,
    FieldMapping,
    MappingSpecification,
    RowError,
    RowOutcome,
)

__all__ = [
    "ExtractionResult",
    "ExtractionTotals",
    "FieldMapping",
    "MappingSpecification",
    "RowError",
    "RowOutcome",
    "apply_template",
    "coerce",
    "column_letter_to_index",
    "index_to_column_letter",
]
