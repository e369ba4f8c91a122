"""Runs uploaded files through templates and persists the mapped quotes."""

import logging
import uuid

from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from quoteflow.enums import FileStatus
from quoteflow.exceptions import NotFoundError, ParseFailure, QuoteflowError
from quoteflow.services.file.parsing import DocumentParser
from quoteflow.services.file.uploads import UploadDirectory, get_uploads
from quoteflow.services.mapping import ExtractionResult, MappingSpecification, apply_template
from quoteflow.storage import FileRecord, QuoteRecord, QuoteStore, get_store

logger = logging.getLogger(__name__)


class QuoteProcessor:
    """Composes the parser, the extraction engine and a QuoteStore.

    Parsing and extraction are synchronous; they run in the threadpool so
    large workbooks do not block the event loop.
    """

    def __init__(
        self,
        store: QuoteStore,
        uploads: UploadDirectory,
        parser: DocumentParser | None = None,
    ):
        self.store = store
        self.uploads = uploads
        self.parser = parser or DocumentParser()

    async def load(
        self, file_id: uuid.UUID, template_id: uuid.UUID
    ) -> tuple[FileRecord, MappingSpecification]:
        """Fetch a file record and the template's specification.

        Raises:
            NotFoundError: If either is missing
            InvalidMappingSpecification: If the stored template no longer validates
        """
        file = await self.store.get_file(file_id)
        if file is None:
            raise NotFoundError("File", file_id)
        template = await self.store.get_template(template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return file, template.specification

    async def extract(self, file: FileRecord, spec: MappingSpecification) -> ExtractionResult:
        """
        Parse a stored upload and apply a specification to it.

        Args:
            file: The uploaded file record
            spec: Validated mapping specification

        Returns:
            ExtractionResult for the whole document

        Raises:
            ParseFailure: If the stored bytes are missing or cannot be parsed
            IncompatibleTemplate: If the template targets another source kind
        """
        try:
            content = self.uploads.read(file.stored_name)
        except FileNotFoundError as e:
            raise ParseFailure(f"Stored upload for file {file.id} is missing") from e

        doc = await run_in_threadpool(self.parser.parse, content, file.source_kind, file.filename)
        return await run_in_threadpool(apply_template, doc, spec)

    async def preview(self, file_id: uuid.UUID, template_id: uuid.UUID) -> ExtractionResult:
        """Run an extraction without persisting anything."""
        file, spec = await self.load(file_id, template_id)
        return await self.extract(file, spec)

    async def apply(
        self, file_id: uuid.UUID, template_id: uuid.UUID
    ) -> tuple[ExtractionResult, list[QuoteRecord]]:
        """
        Run an extraction and save every mapped row as a quote.

        The file moves to ``processing`` and then to ``completed``, or to
        ``failed`` with the error message when extraction aborts.

        Returns:
            Tuple of (extraction result, saved quotes)
        """
        file, spec = await self.load(file_id, template_id)
        await self.store.update_file(
            file.id, status=FileStatus.PROCESSING, template_id=template_id, error=None
        )

        try:
            result = await self.extract(file, spec)
        except QuoteflowError as e:
            logger.error(f"Extraction failed for file {file.id} with template {template_id}: {e}")
            await self.store.update_file(file.id, status=FileStatus.FAILED, error=str(e))
            raise

        quotes = await self.store.save_quotes(file.id, template_id, list(result.mapped_rows))
        await self.store.update_file(file.id, status=FileStatus.COMPLETED)
        logger.info(
            f"Saved {len(quotes)} quotes from file {file.id} "
            f"({result.totals.error_rows} rows with errors)"
        )
        return result, quotes


async def get_processor(
    store: QuoteStore = Depends(get_store),
    uploads: UploadDirectory = Depends(get_uploads),
) -> QuoteProcessor:
    """FastAPI dependency composing the request's store with the upload directory."""
    return QuoteProcessor(store, uploads)
