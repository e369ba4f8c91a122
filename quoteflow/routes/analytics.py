"""Dashboard statistics and field-level analysis over saved quotes."""

import logging
from collections import Counter

from fastapi import APIRouter, Depends, Query

from quoteflow.enums import AggregateOperation, DatePeriod
from quoteflow.routes.quotes import parse_date_bound
from quoteflow.schemas import CamelModel
from quoteflow.services import analytics
from quoteflow.storage import QuoteFilter, QuoteStore, get_store
from quoteflow.utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


class FieldQuery(CamelModel):
    field: str
    template_id: str | None = None
    start_date: str | None = None
    end_date: str | None = None

    def criteria(self) -> QuoteFilter:
        return QuoteFilter(
            template_id=validate_uuid(self.template_id, "template ID") if self.template_id else None,
            start=parse_date_bound(self.start_date),
            end=parse_date_bound(self.end_date, end_of_day=True),
        )


class DataAnalysisRequest(FieldQuery):
    operation: AggregateOperation


class FieldDistributionRequest(FieldQuery):
    limit: int | None = None


@router.get("/summary")
async def summary(store: QuoteStore = Depends(get_store)):
    """Totals for quotes, templates and files, with files counted by status."""
    files = await store.list_files()
    return {
        "totalQuotes": await store.count_quotes(),
        "totalTemplates": len(await store.list_templates()),
        "totalFiles": len(files),
        "filesByStatus": dict(Counter(str(f.status) for f in files)),
    }


@router.get("/by-template")
async def by_template(store: QuoteStore = Depends(get_store)):
    """Quote counts per template, largest first."""
    templates = await store.list_templates()
    counts = [
        {
            "templateId": str(t.id),
            "templateName": t.name,
            "count": await store.count_quotes(QuoteFilter(template_id=t.id)),
        }
        for t in templates
    ]
    return sorted(counts, key=lambda item: -item["count"])


@router.get("/by-date")
async def by_date(
    period: DatePeriod = Query(DatePeriod.DAY),
    store: QuoteStore = Depends(get_store),
):
    """Quote counts per day, week or month of creation."""
    quotes = await store.list_quotes()
    buckets = analytics.bucket_by_date((q.created_at for q in quotes), period)
    return [{"period": bucket, "count": count} for bucket, count in buckets]


@router.post("/data-analysis")
async def data_analysis(body: DataAnalysisRequest, store: QuoteStore = Depends(get_store)):
    """Sum, average, min, max or count the numeric values of one field."""
    quotes = await store.list_quotes(body.criteria())
    outcome = analytics.aggregate([q.data for q in quotes], body.field, body.operation)
    return {
        "field": body.field,
        "operation": body.operation,
        "result": outcome.result,
        "sampleSize": outcome.sample_size,
    }


@router.post("/field-distribution")
async def field_distribution(
    body: FieldDistributionRequest, store: QuoteStore = Depends(get_store)
):
    """Most frequent values of one field."""
    quotes = await store.list_quotes(body.criteria())
    distribution = analytics.field_distribution([q.data for q in quotes], body.field)
    if body.limit:
        distribution = distribution[: body.limit]
    return [{"value": value, "count": count} for value, count in distribution]
