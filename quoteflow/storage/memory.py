"""In-memory QuoteStore for tests and local tooling."""

import copy
import uuid
from dataclasses import replace
from typing import Any

from quoteflow.enums import FileStatus
from quoteflow.exceptions import NotFoundError
from quoteflow.storage.models import (
    ColumnRecord,
    FileRecord,
    QuoteFilter,
    QuoteRecord,
    TemplateRecord,
)
from quoteflow.utils import utcnow


class InMemoryQuoteStore:
    """Dict-backed store. Returned records are copies; callers cannot mutate state."""

    COLUMN_FIELDS = {"name", "data_type", "required", "default_value"}
    FILE_FIELDS = {"status", "template_id", "error"}

    def __init__(self):
        self.columns: dict[uuid.UUID, ColumnRecord] = {}
        self.templates: dict[uuid.UUID, TemplateRecord] = {}
        self.files: dict[uuid.UUID, FileRecord] = {}
        self.quotes: dict[uuid.UUID, QuoteRecord] = {}

    # Columns

    async def list_columns(self) -> list[ColumnRecord]:
        return [copy.deepcopy(c) for c in self.columns.values()]

    async def create_column(
        self,
        name: str,
        data_type: str,
        required: bool = False,
        default_value: str | None = None,
    ) -> ColumnRecord:
        column = ColumnRecord(
            id=uuid.uuid4(),
            name=name,
            data_type=data_type,
            required=required,
            default_value=default_value,
            created_at=utcnow(),
        )
        self.columns[column.id] = column
        return copy.deepcopy(column)

    async def update_column(self, column_id: uuid.UUID, **changes: Any) -> ColumnRecord:
        column = self._require(self.columns, column_id, "Column")
        updated = replace(column, **_pick(changes, self.COLUMN_FIELDS))
        self.columns[column_id] = updated
        return copy.deepcopy(updated)

    async def delete_column(self, column_id: uuid.UUID) -> None:
        self._require(self.columns, column_id, "Column")
        del self.columns[column_id]

    # Templates

    async def list_templates(self) -> list[TemplateRecord]:
        return sorted(
            (copy.deepcopy(t) for t in self.templates.values()),
            key=lambda t: t.created_at,
        )

    async def get_template(self, template_id: uuid.UUID) -> TemplateRecord | None:
        template = self.templates.get(template_id)
        return copy.deepcopy(template) if template else None

    async def create_template(self, name: str, mapping_data: dict) -> TemplateRecord:
        now = utcnow()
        template = TemplateRecord(
            id=uuid.uuid4(),
            name=name,
            mapping_data=copy.deepcopy(mapping_data),
            created_at=now,
            updated_at=now,
        )
        self.templates[template.id] = template
        return copy.deepcopy(template)

    async def update_template(
        self,
        template_id: uuid.UUID,
        name: str | None = None,
        mapping_data: dict | None = None,
    ) -> TemplateRecord:
        template = self._require(self.templates, template_id, "Template")
        updated = replace(
            template,
            name=name if name is not None else template.name,
            mapping_data=copy.deepcopy(mapping_data)
            if mapping_data is not None
            else template.mapping_data,
            updated_at=utcnow(),
        )
        self.templates[template_id] = updated
        return copy.deepcopy(updated)

    async def delete_template(self, template_id: uuid.UUID) -> None:
        self._require(self.templates, template_id, "Template")
        del self.templates[template_id]
        # Mirror ON DELETE SET NULL
        for key, file in self.files.items():
            if file.template_id == template_id:
                self.files[key] = replace(file, template_id=None)
        for key, quote in self.quotes.items():
            if quote.template_id == template_id:
                self.quotes[key] = replace(quote, template_id=None)

    # Uploaded files

    async def list_files(self) -> list[FileRecord]:
        return sorted(
            (copy.deepcopy(f) for f in self.files.values()),
            key=lambda f: f.uploaded_at,
            reverse=True,
        )

    async def get_file(self, file_id: uuid.UUID) -> FileRecord | None:
        file = self.files.get(file_id)
        return copy.deepcopy(file) if file else None

    async def create_file(
        self,
        filename: str,
        stored_name: str,
        source_kind: str,
        size: int,
        content_type: str | None = None,
    ) -> FileRecord:
        file = FileRecord(
            id=uuid.uuid4(),
            filename=filename,
            stored_name=stored_name,
            source_kind=source_kind,
            size=size,
            status=FileStatus.PENDING,
            uploaded_at=utcnow(),
            content_type=content_type,
        )
        self.files[file.id] = file
        return copy.deepcopy(file)

    async def update_file(self, file_id: uuid.UUID, **changes: Any) -> FileRecord:
        file = self._require(self.files, file_id, "File")
        updated = replace(file, **_pick(changes, self.FILE_FIELDS))
        self.files[file_id] = updated
        return copy.deepcopy(updated)

    async def delete_file(self, file_id: uuid.UUID) -> None:
        self._require(self.files, file_id, "File")
        del self.files[file_id]
        for key, quote in self.quotes.items():
            if quote.file_id == file_id:
                self.quotes[key] = replace(quote, file_id=None)

    # Quotes

    async def list_quotes(
        self,
        criteria: QuoteFilter | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[QuoteRecord]:
        criteria = criteria or QuoteFilter()
        # Newest first; ties keep the most recently inserted first
        ordered = sorted(
            reversed(list(self.quotes.values())),
            key=lambda q: q.created_at,
            reverse=True,
        )
        matching = [copy.deepcopy(q) for q in ordered if criteria.matches(q)]
        end = None if limit is None else offset + limit
        return matching[offset:end]

    async def count_quotes(self, criteria: QuoteFilter | None = None) -> int:
        criteria = criteria or QuoteFilter()
        return sum(1 for q in self.quotes.values() if criteria.matches(q))

    async def get_quote(self, quote_id: uuid.UUID) -> QuoteRecord | None:
        quote = self.quotes.get(quote_id)
        return copy.deepcopy(quote) if quote else None

    async def save_quotes(
        self,
        file_id: uuid.UUID | None,
        template_id: uuid.UUID | None,
        records: list[dict[str, Any]],
    ) -> list[QuoteRecord]:
        now = utcnow()
        saved = [
            QuoteRecord(
                id=uuid.uuid4(),
                data=copy.deepcopy(record),
                created_at=now,
                updated_at=now,
                file_id=file_id,
                template_id=template_id,
            )
            for record in records
        ]
        self.quotes.update((q.id, q) for q in saved)
        return [copy.deepcopy(q) for q in saved]

    async def update_quote(self, quote_id: uuid.UUID, data: dict[str, Any]) -> QuoteRecord:
        quote = self._require(self.quotes, quote_id, "Quote")
        updated = replace(
            quote,
            data=copy.deepcopy(data),
            version=quote.version + 1,
            updated_at=utcnow(),
        )
        self.quotes[quote_id] = updated
        return copy.deepcopy(updated)

    async def delete_quote(self, quote_id: uuid.UUID) -> None:
        self._require(self.quotes, quote_id, "Quote")
        del self.quotes[quote_id]

    @staticmethod
    def _require(table: dict, key: uuid.UUID, entity: str):
        if key not in table:
            raise NotFoundError(entity, key)
        return table[key]


def _pick(changes: dict[str, Any], allowed: set[str]) -> dict[str, Any]:
    unknown = set(changes) - allowed
    if unknown:
        raise TypeError(f"Unknown fields: {', '.join(sorted(unknown))}")
    return changes
