"""SQLAlchemy-backed QuoteStore."""

import logging
import uuid
from typing import Any

from fastapi import Depends
from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quoteflow.database import get_db
from quoteflow.exceptions import NotFoundError
from quoteflow.models import ColumnDefinition, Quote, Template, UploadedFile
from quoteflow.storage.models import (
    ColumnRecord,
    FileRecord,
    QuoteFilter,
    QuoteRecord,
    TemplateRecord,
    as_utc,
)
from quoteflow.utils import utcnow

logger = logging.getLogger(__name__)


class SqlQuoteStore:
    """QuoteStore over an AsyncSession.

    The store flushes but never commits; the session owner (``get_db``)
    commits or rolls back the whole request.
    """

    COLUMN_FIELDS = {"name", "data_type", "required", "default_value"}
    FILE_FIELDS = {"status", "template_id", "error"}

    def __init__(self, session: AsyncSession):
        self.session = session

    # Columns

    async def list_columns(self) -> list[ColumnRecord]:
        result = await self.session.execute(
            select(ColumnDefinition).order_by(ColumnDefinition.created_at)
        )
        return [_column_record(c) for c in result.scalars().all()]

    async def create_column(
        self,
        name: str,
        data_type: str,
        required: bool = False,
        default_value: str | None = None,
    ) -> ColumnRecord:
        column = ColumnDefinition(
            name=name,
            data_type=data_type,
            required=required,
            default_value=default_value,
        )
        self.session.add(column)
        await self.session.flush()
        return _column_record(column)

    async def update_column(self, column_id: uuid.UUID, **changes: Any) -> ColumnRecord:
        column = await self._require(ColumnDefinition, column_id, "Column")
        for key, value in _pick(changes, self.COLUMN_FIELDS).items():
            setattr(column, key, value)
        await self.session.flush()
        return _column_record(column)

    async def delete_column(self, column_id: uuid.UUID) -> None:
        column = await self._require(ColumnDefinition, column_id, "Column")
        await self.session.delete(column)
        await self.session.flush()

    # Templates

    async def list_templates(self) -> list[TemplateRecord]:
        result = await self.session.execute(select(Template).order_by(Template.created_at))
        return [_template_record(t) for t in result.scalars().all()]

    async def get_template(self, template_id: uuid.UUID) -> TemplateRecord | None:
        template = await self.session.get(Template, template_id)
        return _template_record(template) if template else None

    async def create_template(self, name: str, mapping_data: dict) -> TemplateRecord:
        template = Template(name=name, mapping_data=mapping_data)
        self.session.add(template)
        await self.session.flush()
        return _template_record(template)

    async def update_template(
        self,
        template_id: uuid.UUID,
        name: str | None = None,
        mapping_data: dict | None = None,
    ) -> TemplateRecord:
        template = await self._require(Template, template_id, "Template")
        if name is not None:
            template.name = name
        if mapping_data is not None:
            template.mapping_data = mapping_data
        template.updated_at = utcnow()
        await self.session.flush()
        return _template_record(template)

    async def delete_template(self, template_id: uuid.UUID) -> None:
        template = await self._require(Template, template_id, "Template")
        # Explicit SET NULL; SQLite does not enforce foreign keys by default
        await self.session.execute(
            update(UploadedFile)
            .where(UploadedFile.template_id == template_id)
            .values(template_id=None)
        )
        await self.session.execute(
            update(Quote).where(Quote.template_id == template_id).values(template_id=None)
        )
        await self.session.delete(template)
        await self.session.flush()

    # Uploaded files

    async def list_files(self) -> list[FileRecord]:
        result = await self.session.execute(
            select(UploadedFile).order_by(UploadedFile.uploaded_at.desc())
        )
        return [_file_record(f) for f in result.scalars().all()]

    async def get_file(self, file_id: uuid.UUID) -> FileRecord | None:
        file = await self.session.get(UploadedFile, file_id)
        return _file_record(file) if file else None

    async def create_file(
        self,
        filename: str,
        stored_name: str,
        source_kind: str,
        size: int,
        content_type: str | None = None,
    ) -> FileRecord:
        file = UploadedFile(
            filename=filename,
            stored_name=stored_name,
            source_kind=source_kind,
            size=size,
            content_type=content_type,
        )
        self.session.add(file)
        await self.session.flush()
        return _file_record(file)

    async def update_file(self, file_id: uuid.UUID, **changes: Any) -> FileRecord:
        file = await self._require(UploadedFile, file_id, "File")
        for key, value in _pick(changes, self.FILE_FIELDS).items():
            setattr(file, key, value)
        await self.session.flush()
        return _file_record(file)

    async def delete_file(self, file_id: uuid.UUID) -> None:
        file = await self._require(UploadedFile, file_id, "File")
        await self.session.execute(
            update(Quote).where(Quote.file_id == file_id).values(file_id=None)
        )
        await self.session.delete(file)
        await self.session.flush()

    # Quotes

    async def list_quotes(
        self,
        criteria: QuoteFilter | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[QuoteRecord]:
        criteria = criteria or QuoteFilter()
        stmt = _filtered(select(Quote), criteria).order_by(Quote.created_at.desc())

        if criteria.keyword:
            # Keyword matching runs over the decoded JSON, so paginate afterwards
            result = await self.session.execute(stmt)
            quotes = [q for q in result.scalars().all() if criteria.matches_keyword(q.data)]
            end = None if limit is None else offset + limit
            return [_quote_record(q) for q in quotes[offset:end]]

        stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [_quote_record(q) for q in result.scalars().all()]

    async def count_quotes(self, criteria: QuoteFilter | None = None) -> int:
        criteria = criteria or QuoteFilter()
        if criteria.keyword:
            return len(await self.list_quotes(criteria))

        result = await self.session.execute(
            _filtered(select(func.count()).select_from(Quote), criteria)
        )
        return result.scalar_one()

    async def get_quote(self, quote_id: uuid.UUID) -> QuoteRecord | None:
        quote = await self.session.get(Quote, quote_id)
        return _quote_record(quote) if quote else None

    async def save_quotes(
        self,
        file_id: uuid.UUID | None,
        template_id: uuid.UUID | None,
        records: list[dict[str, Any]],
    ) -> list[QuoteRecord]:
        now = utcnow()
        quotes = [
            Quote(
                file_id=file_id,
                template_id=template_id,
                data=record,
                created_at=now,
                updated_at=now,
            )
            for record in records
        ]
        self.session.add_all(quotes)
        await self.session.flush()
        logger.info(f"Saved {len(quotes)} quotes (file={file_id}, template={template_id})")
        return [_quote_record(q) for q in quotes]

    async def update_quote(self, quote_id: uuid.UUID, data: dict[str, Any]) -> QuoteRecord:
        quote = await self._require(Quote, quote_id, "Quote")
        quote.data = data
        quote.version = quote.version + 1
        quote.updated_at = utcnow()
        await self.session.flush()
        return _quote_record(quote)

    async def delete_quote(self, quote_id: uuid.UUID) -> None:
        quote = await self._require(Quote, quote_id, "Quote")
        await self.session.delete(quote)
        await self.session.flush()

    async def _require(self, model, key: uuid.UUID, entity: str):
        instance = await self.session.get(model, key)
        if instance is None:
            raise NotFoundError(entity, key)
        return instance


async def get_store(db: AsyncSession = Depends(get_db)) -> SqlQuoteStore:
    """FastAPI dependency providing the request-scoped store."""
    return SqlQuoteStore(db)


def _filtered(stmt: Select, criteria: QuoteFilter) -> Select:
    if criteria.template_id is not None:
        stmt = stmt.where(Quote.template_id == criteria.template_id)
    if criteria.file_id is not None:
        stmt = stmt.where(Quote.file_id == criteria.file_id)
    if criteria.ids is not None:
        stmt = stmt.where(Quote.id.in_(criteria.ids))
    if criteria.start is not None:
        stmt = stmt.where(Quote.created_at >= as_utc(criteria.start))
    if criteria.end is not None:
        stmt = stmt.where(Quote.created_at <= as_utc(criteria.end))
    return stmt


def _pick(changes: dict[str, Any], allowed: set[str]) -> dict[str, Any]:
    unknown = set(changes) - allowed
    if unknown:
        raise TypeError(f"Unknown fields: {', '.join(sorted(unknown))}")
    return changes


def _column_record(column: ColumnDefinition) -> ColumnRecord:
    return ColumnRecord(
        id=column.id,
        name=column.name,
        data_type=column.data_type,
        required=column.required,
        default_value=column.default_value,
        created_at=as_utc(column.created_at) if column.created_at else None,
    )


def _template_record(template: Template) -> TemplateRecord:
    return TemplateRecord(
        id=template.id,
        name=template.name,
        mapping_data=dict(template.mapping_data),
        created_at=as_utc(template.created_at),
        updated_at=as_utc(template.updated_at),
    )


def _file_record(file: UploadedFile) -> FileRecord:
    return FileRecord(
        id=file.id,
        filename=file.filename,
        stored_name=file.stored_name,
        source_kind=file.source_kind,
        size=file.size,
        status=file.status,
        uploaded_at=as_utc(file.uploaded_at),
        content_type=file.content_type,
        template_id=file.template_id,
        error=file.error,
    )


def _quote_record(quote: Quote) -> QuoteRecord:
    return QuoteRecord(
        id=quote.id,
        data=dict(quote.data),
        created_at=as_utc(quote.created_at),
        updated_at=as_utc(quote.updated_at),
        file_id=quote.file_id,
        template_id=quote.template_id,
        version=quote.version,
    )
