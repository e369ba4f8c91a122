"""Storage protocol defining the interface for templates, files and quotes.

Routes and services depend on this protocol only. ``SqlQuoteStore`` is the
primary implementation; ``InMemoryQuoteStore`` backs tests and local tools.
"""

import uuid
from typing import Any, Protocol, runtime_checkable

from quoteflow.storage.models import (
    ColumnRecord,
    FileRecord,
    QuoteFilter,
    QuoteRecord,
    TemplateRecord,
)


@runtime_checkable
class QuoteStore(Protocol):
    """Persistence capability handed to whatever composes the mapping core.

    Lookups return None for missing entities; updates and deletes raise
    NotFoundError.
    """

    # -------------------------------------------------------------------------
    # Columns
    # -------------------------------------------------------------------------

    async def list_columns(self) -> list[ColumnRecord]: ...

    async def create_column(
        self,
        name: str,
        data_type: str,
        required: bool = False,
        default_value: str | None = None,
    ) -> ColumnRecord: ...

    async def update_column(self, column_id: uuid.UUID, **changes: Any) -> ColumnRecord: ...

    async def delete_column(self, column_id: uuid.UUID) -> None: ...

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    async def list_templates(self) -> list[TemplateRecord]: ...

    async def get_template(self, template_id: uuid.UUID) -> TemplateRecord | None: ...

    async def create_template(self, name: str, mapping_data: dict) -> TemplateRecord: ...

    async def update_template(
        self,
        template_id: uuid.UUID,
        name: str | None = None,
        mapping_data: dict | None = None,
    ) -> TemplateRecord: ...

    async def delete_template(self, template_id: uuid.UUID) -> None: ...

    # -------------------------------------------------------------------------
    # Uploaded files
    # -------------------------------------------------------------------------

    async def list_files(self) -> list[FileRecord]: ...

    async def get_file(self, file_id: uuid.UUID) -> FileRecord | None: ...

    async def create_file(
        self,
        filename: str,
        stored_name: str,
        source_kind: str,
        size: int,
        content_type: str | None = None,
    ) -> FileRecord: ...

    async def update_file(self, file_id: uuid.UUID, **changes: Any) -> FileRecord: ...

    async def delete_file(self, file_id: uuid.UUID) -> None: ...

    # -------------------------------------------------------------------------
    # Quotes
    # -------------------------------------------------------------------------

    async def list_quotes(
        self,
        criteria: QuoteFilter | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[QuoteRecord]:
        """List quotes newest first, filtered by criteria."""
        ...

    async def count_quotes(self, criteria: QuoteFilter | None = None) -> int: ...

    async def get_quote(self, quote_id: uuid.UUID) -> QuoteRecord | None: ...

    async def save_quotes(
        self,
        file_id: uuid.UUID | None,
        template_id: uuid.UUID | None,
        records: list[dict[str, Any]],
    ) -> list[QuoteRecord]:
        """Persist all mapped records of one extraction in a single call."""
        ...

    async def update_quote(self, quote_id: uuid.UUID, data: dict[str, Any]) -> QuoteRecord:
        """Replace quote data and bump its version."""
        ...

    async def delete_quote(self, quote_id: uuid.UUID) -> None: ...
