"""Uploaded source documents."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from quoteflow.config import settings
from quoteflow.middleware import rate_limit_upload
from quoteflow.schemas import CamelModel
from quoteflow.services.file.parsing import DocumentParser
from quoteflow.services.file.uploads import UploadDirectory, get_uploads
from quoteflow.storage import FileRecord, QuoteStore, get_store
from quoteflow.utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()

parser = DocumentParser()


class FileResponse(CamelModel):
    id: str
    filename: str
    source_kind: str
    content_type: str | None = None
    size: int
    status: str
    template_id: str | None = None
    error: str | None = None
    uploaded_at: datetime


def _to_response(file: FileRecord) -> FileResponse:
    return FileResponse(
        id=str(file.id),
        filename=file.filename,
        source_kind=str(file.source_kind),
        content_type=file.content_type,
        size=file.size,
        status=str(file.status),
        template_id=str(file.template_id) if file.template_id else None,
        error=file.error,
        uploaded_at=file.uploaded_at,
    )


def _detect_kind(upload: UploadFile):
    """Resolve the source kind from the MIME type, falling back to the file name."""
    if parser.is_supported(upload.content_type):
        return parser.detect_source_kind(upload.content_type)
    return parser.detect_source_kind(upload.filename)


@router.post("", response_model=FileResponse, status_code=201)
@rate_limit_upload()
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    store: QuoteStore = Depends(get_store),
    uploads: UploadDirectory = Depends(get_uploads),
):
    """Store an uploaded spreadsheet, CSV or PDF for later mapping."""
    filename = file.filename or "upload"
    source_kind = _detect_kind(file)

    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds maximum size of {settings.max_upload_size_bytes} bytes",
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    stored_name = uploads.save(content, filename)
    record = await store.create_file(
        filename=filename,
        stored_name=stored_name,
        source_kind=source_kind,
        size=len(content),
        content_type=file.content_type,
    )
    logger.info(f"Uploaded {filename} as {source_kind} ({record.id})")
    return _to_response(record)


@router.get("", response_model=list[FileResponse])
async def list_files(store: QuoteStore = Depends(get_store)):
    """List uploaded files, newest first."""
    return [_to_response(f) for f in await store.list_files()]


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(file_id: str, store: QuoteStore = Depends(get_store)):
    file = await store.get_file(validate_uuid(file_id, "file ID"))
    if file is None:
        raise HTTPException(status_code=404, detail="File not found")
    return _to_response(file)


@router.delete("/{file_id}", status_code=204)
async def delete_file(
    file_id: str,
    store: QuoteStore = Depends(get_store),
    uploads: UploadDirectory = Depends(get_uploads),
):
    """Delete a file record and its stored bytes; its quotes are kept."""
    file = await store.get_file(validate_uuid(file_id, "file ID"))
    if file is None:
        raise HTTPException(status_code=404, detail="File not found")
    await store.delete_file(file.id)
    uploads.delete(file.stored_name)
