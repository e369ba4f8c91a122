"""Data models for mapping templates and extraction results."""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from quoteflow.enums import DataType, SourceKind
from quoteflow.exceptions import InvalidMappingSpecification
from quoteflow.services.mapping.columns import is_column_letter

# File-type names used by older template exports
LEGACY_FILE_TYPES = {
    "excel": SourceKind.SPREADSHEET,
    "csv": SourceKind.DELIMITED_TEXT,
    "pdf": SourceKind.FREE_TEXT,
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class FieldMapping(_CamelModel):
    """Where one destination field comes from and what type it must have."""

    field_name: str = Field(min_length=1)
    source_locator: str = ""
    required: bool = False
    data_type: DataType = DataType.STRING

    @field_validator("field_name", "source_locator")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()


def _upper_locator(mapping: Any) -> Any:
    """Column letters are stored upper-case."""
    if isinstance(mapping, FieldMapping):
        return mapping.model_copy(update={"source_locator": mapping.source_locator.upper()})
    if isinstance(mapping, dict):
        for key in ("sourceLocator", "source_locator"):
            if isinstance(mapping.get(key), str):
                return {**mapping, key: mapping[key].upper()}
    return mapping


class MappingSpecification(_CamelModel):
    """A reusable template describing how to pull fields out of a document.

    Instances are immutable; the engine only ever reads them.
    """

    id: uuid.UUID | None = None
    name: str | None = None
    created_at: datetime | None = None
    source_kind: SourceKind
    skip_rows: int = Field(default=0, ge=0)
    field_mappings: list[FieldMapping] = Field(default_factory=list)
    text_patterns: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_layout(cls, data: Any) -> Any:
        """Accept templates saved with fileType/columns/pdfSettings keys."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        file_type = data.pop("fileType", None)
        if file_type is not None and "sourceKind" not in data and "source_kind" not in data:
            if not isinstance(file_type, str):
                raise ValueError(f"fileType must be a string, got {file_type!r}")
            data["sourceKind"] = LEGACY_FILE_TYPES.get(file_type, file_type)

        columns = data.pop("columns", None)
        if columns is not None and "fieldMappings" not in data and "field_mappings" not in data:
            if not isinstance(columns, list) or not all(isinstance(c, dict) for c in columns):
                raise ValueError("columns must be a list of objects")
            data["fieldMappings"] = [
                {
                    "fieldName": col.get("name", ""),
                    "sourceLocator": col.get("sourceColumn", ""),
                    "required": col.get("required", False),
                    "dataType": col.get("dataType", DataType.STRING),
                }
                for col in columns
            ]

        pdf_settings = data.pop("pdfSettings", None)
        if pdf_settings and "textPatterns" not in data and "text_patterns" not in data:
            if not isinstance(pdf_settings, dict):
                raise ValueError("pdfSettings must be an object")
            data["textPatterns"] = pdf_settings.get("patterns", {})

        kind = data.get("sourceKind", data.get("source_kind"))
        key = "fieldMappings" if "fieldMappings" in data else "field_mappings"
        if kind == SourceKind.SPREADSHEET and isinstance(data.get(key), list):
            data[key] = [_upper_locator(m) for m in data[key]]

        return data

    @model_validator(mode="after")
    def check_consistency(self) -> "MappingSpecification":
        names = [m.field_name for m in self.field_mappings]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names: {', '.join(duplicates)}")

        if self.source_kind == SourceKind.SPREADSHEET:
            for mapping in self.field_mappings:
                if not is_column_letter(mapping.source_locator.upper()):
                    raise ValueError(
                        f"Field '{mapping.field_name}' needs a column letter, "
                        f"got {mapping.source_locator!r}"
                    )
        elif self.source_kind == SourceKind.DELIMITED_TEXT:
            for mapping in self.field_mappings:
                if not mapping.source_locator:
                    raise ValueError(f"Field '{mapping.field_name}' needs a column name")
        else:
            for mapping in self.field_mappings:
                if mapping.required and mapping.field_name not in self.text_patterns:
                    raise ValueError(
                        f"Required field '{mapping.field_name}' has no text pattern"
                    )
            for name, pattern in self.text_patterns.items():
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise ValueError(f"Invalid pattern for '{name}': {e}") from None

        return self

    @property
    def field_names(self) -> list[str]:
        return [m.field_name for m in self.field_mappings]

    @classmethod
    def from_json(cls, payload: dict | str) -> "MappingSpecification":
        """
        Build a specification from its canonical JSON form.

        Args:
            payload: Decoded JSON object or a JSON string

        Returns:
            Validated MappingSpecification

        Raises:
            InvalidMappingSpecification: If the payload is malformed
        """
        try:
            if isinstance(payload, str):
                return cls.model_validate_json(payload)
            return cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidMappingSpecification(str(e)) from e

    def to_json(self) -> dict:
        """Canonical JSON form, as persisted and exchanged."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id", "name", "created_at"},
        )


@dataclass(frozen=True)
class RowError:
    """A recoverable problem scoped to one row."""

    row_index: int
    message: str

    def to_dict(self) -> dict:
        return {"row": self.row_index, "message": self.message}


@dataclass(frozen=True)
class RowOutcome:
    """Fields and errors collected for one source row.

    A row contributes a record only when it finished with zero errors.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    errors: tuple[str, ...] = ()

    @classmethod
    def value(cls, field_name: str, value: Any) -> "RowOutcome":
        return cls(fields={field_name: value})

    @classmethod
    def error(cls, message: str) -> "RowOutcome":
        return cls(errors=(message,))

    @property
    def ok(self) -> bool:
        return not self.errors

    def merge(self, other: "RowOutcome") -> "RowOutcome":
        """Combine two outcomes without mutating either."""
        return RowOutcome(
            fields={**self.fields, **other.fields},
            errors=self.errors + other.errors,
        )


@dataclass(frozen=True)
class ExtractionTotals:
    total_rows: int
    mapped_rows: int
    error_rows: int

    def to_dict(self) -> dict:
        return {
            "totalRows": self.total_rows,
            "mappedRows": self.mapped_rows,
            "errorRows": self.error_rows,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Mapped records plus per-row diagnostics for one document."""

    result_headers: tuple[str, ...]
    mapped_rows: tuple[dict[str, Any], ...]
    row_errors: tuple[RowError, ...]
    totals: ExtractionTotals

    def to_dict(self) -> dict:
        return {
            "resultHeaders": list(self.result_headers),
            "mappedRows": [dict(row) for row in self.mapped_rows],
            "rowErrors": [e.to_dict() for e in self.row_errors],
            "totals": self.totals.to_dict(),
        }
