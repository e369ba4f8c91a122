"""Download saved quotes as a spreadsheet or CSV file."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from quoteflow.enums import ExportFormat
from quoteflow.schemas import CamelModel
from quoteflow.services.file import export_records, file_extension_for, media_type_for
from quoteflow.storage import QuoteFilter, QuoteStore, get_store
from quoteflow.utils import utcnow, validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


class ExportRequest(CamelModel):
    ids: list[str] | None = None
    format: ExportFormat = ExportFormat.SPREADSHEET
    template_id: str | None = None


@router.post("")
async def export_quotes(body: ExportRequest, store: QuoteStore = Depends(get_store)):
    """Export the selected quotes, or every quote when no ids are given."""
    criteria = QuoteFilter(
        ids=[validate_uuid(i, "quote ID") for i in body.ids] if body.ids is not None else None,
        template_id=validate_uuid(body.template_id, "template ID") if body.template_id else None,
    )
    quotes = await store.list_quotes(criteria)
    if not quotes:
        raise HTTPException(status_code=404, detail="No quotes to export")

    content = await run_in_threadpool(export_records, [q.data for q in quotes], body.format)
    filename = f"quotes_{utcnow():%Y%m%d_%H%M%S}{file_extension_for(body.format)}"
    logger.info(f"Exported {len(quotes)} quotes as {body.format}")
    return Response(
        content=content,
        media_type=media_type_for(body.format),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
