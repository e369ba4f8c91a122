"""Saved quotes: paginated listing, search, edit and delete."""

import logging
import math
import uuid
from datetime import UTC, datetime, time, timedelta
from typing import Any

from dateutil import parser as date_parser
from fastapi import APIRouter, Depends, HTTPException, Query

from quoteflow.config import settings
from quoteflow.schemas import CamelModel
from quoteflow.storage import QuoteFilter, QuoteRecord, QuoteStore, get_store
from quoteflow.utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


class QuoteResponse(CamelModel):
    id: str
    data: dict[str, Any]
    file_id: str | None = None
    template_id: str | None = None
    version: int
    created_at: datetime
    updated_at: datetime


class QuotePage(CamelModel):
    items: list[QuoteResponse]
    total: int
    page: int
    limit: int
    pages: int


class QuoteUpdate(CamelModel):
    data: dict[str, Any]


class QuoteSearch(CamelModel):
    keyword: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    template_id: str | None = None
    page: int = 1
    limit: int | None = None


def _to_response(quote: QuoteRecord) -> QuoteResponse:
    return QuoteResponse(
        id=str(quote.id),
        data=quote.data,
        file_id=str(quote.file_id) if quote.file_id else None,
        template_id=str(quote.template_id) if quote.template_id else None,
        version=quote.version,
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def _optional_uuid(value: str | None, name: str) -> uuid.UUID | None:
    return validate_uuid(value, name) if value else None


def parse_date_bound(value: str | None, end_of_day: bool = False) -> datetime | None:
    """Parse a search bound; a bare date as an upper bound covers the whole day.

    Raises:
        HTTPException: 400 if the value is not an ISO date or datetime
    """
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}") from None

    if end_of_day and len(value.strip()) == 10:
        parsed = datetime.combine(parsed.date(), time.min) + timedelta(days=1, microseconds=-1)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


async def _page(
    store: QuoteStore, criteria: QuoteFilter, page: int, limit: int | None
) -> QuotePage:
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    page = max(page, 1)
    total = await store.count_quotes(criteria)
    quotes = await store.list_quotes(criteria, offset=(page - 1) * limit, limit=limit)
    return QuotePage(
        items=[_to_response(q) for q in quotes],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.get("", response_model=QuotePage)
async def list_quotes(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    template_id: str | None = Query(None, alias="templateId"),
    file_id: str | None = Query(None, alias="fileId"),
    store: QuoteStore = Depends(get_store),
):
    """List quotes newest first, optionally narrowed to one template or file."""
    criteria = QuoteFilter(
        template_id=_optional_uuid(template_id, "template ID"),
        file_id=_optional_uuid(file_id, "file ID"),
    )
    return await _page(store, criteria, page, limit)


@router.post("/search", response_model=QuotePage)
async def search_quotes(body: QuoteSearch, store: QuoteStore = Depends(get_store)):
    """Keyword search over quote data, bounded by creation date."""
    criteria = QuoteFilter(
        template_id=_optional_uuid(body.template_id, "template ID"),
        keyword=body.keyword.strip() if body.keyword else None,
        start=parse_date_bound(body.start_date),
        end=parse_date_bound(body.end_date, end_of_day=True),
    )
    return await _page(store, criteria, body.page, body.limit)


@router.get("/{quote_id}", response_model=QuoteResponse)
async def get_quote(quote_id: str, store: QuoteStore = Depends(get_store)):
    quote = await store.get_quote(validate_uuid(quote_id, "quote ID"))
    if quote is None:
        raise HTTPException(status_code=404, detail="Quote not found")
    return _to_response(quote)


@router.put("/{quote_id}", response_model=QuoteResponse)
async def update_quote(
    quote_id: str,
    body: QuoteUpdate,
    store: QuoteStore = Depends(get_store),
):
    """Replace a quote's data; each edit bumps its version."""
    quote = await store.update_quote(validate_uuid(quote_id, "quote ID"), body.data)
    logger.info(f"Updated quote {quote.id} to version {quote.version}")
    return _to_response(quote)


@router.delete("/{quote_id}", status_code=204)
async def delete_quote(quote_id: str, store: QuoteStore = Depends(get_store)):
    await store.delete_quote(validate_uuid(quote_id, "quote ID"))
