"""Data models returned by the storage layer.

Plain records, independent of the ORM, so the in-memory and SQL stores
hand identical shapes to callers.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from quoteflow.services.mapping.models import MappingSpecification


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class ColumnRecord:
    id: uuid.UUID
    name: str
    data_type: str
    required: bool = False
    default_value: str | None = None
    created_at: datetime | None = None


@dataclass
class TemplateRecord:
    id: uuid.UUID
    name: str
    mapping_data: dict
    created_at: datetime
    updated_at: datetime

    @property
    def specification(self) -> MappingSpecification:
        """The stored mapping data as a validated MappingSpecification."""
        return MappingSpecification.from_json(
            {
                **self.mapping_data,
                "id": str(self.id),
                "name": self.name,
                "createdAt": self.created_at.isoformat(),
            }
        )


@dataclass
class FileRecord:
    id: uuid.UUID
    filename: str
    stored_name: str
    source_kind: str
    size: int
    status: str
    uploaded_at: datetime
    content_type: str | None = None
    template_id: uuid.UUID | None = None
    error: str | None = None


@dataclass
class QuoteRecord:
    id: uuid.UUID
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime
    file_id: uuid.UUID | None = None
    template_id: uuid.UUID | None = None
    version: int = 1


@dataclass
class QuoteFilter:
    """Criteria for listing quotes. Dates are inclusive bounds on created_at."""

    template_id: uuid.UUID | None = None
    file_id: uuid.UUID | None = None
    keyword: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    ids: list[uuid.UUID] | None = field(default=None)

    def matches_keyword(self, data: dict) -> bool:
        """Case-insensitive substring match over the serialized quote data."""
        if not self.keyword:
            return True
        haystack = json.dumps(data, ensure_ascii=False, default=str).lower()
        return self.keyword.lower() in haystack

    def matches(self, quote: QuoteRecord) -> bool:
        if self.template_id is not None and quote.template_id != self.template_id:
            return False
        if self.file_id is not None and quote.file_id != self.file_id:
            return False
        if self.ids is not None and quote.id not in self.ids:
            return False
        if self.start is not None and as_utc(quote.created_at) < as_utc(self.start):
            return False
        if self.end is not None and as_utc(quote.created_at) > as_utc(self.end):
            return False
        return self.matches_keyword(quote.data)
