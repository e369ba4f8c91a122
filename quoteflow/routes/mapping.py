"""Apply templates to uploaded files."""

import logging

from fastapi import APIRouter, Depends

from quoteflow.exceptions import NotFoundError, QuoteflowError
from quoteflow.routes.errors import error_response
from quoteflow.schemas import CamelModel
from quoteflow.services.processing import QuoteProcessor, get_processor
from quoteflow.utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter()


class MappingRequest(CamelModel):
    file_id: str
    template_id: str


@router.post("/preview")
async def preview_mapping(
    body: MappingRequest,
    processor: QuoteProcessor = Depends(get_processor),
):
    """Run a template against a file and return the result without saving."""
    result = await processor.preview(
        validate_uuid(body.file_id, "file ID"),
        validate_uuid(body.template_id, "template ID"),
    )
    return result.to_dict()


@router.post("/apply")
async def apply_mapping(
    body: MappingRequest,
    processor: QuoteProcessor = Depends(get_processor),
):
    """Run a template against a file and save every mapped row as a quote."""
    file_id = validate_uuid(body.file_id, "file ID")
    template_id = validate_uuid(body.template_id, "template ID")
    try:
        result, quotes = await processor.apply(file_id, template_id)
    except NotFoundError:
        raise
    except QuoteflowError as e:
        # Returned rather than raised so the failed file status is committed
        return error_response(e)

    return {
        **result.to_dict(),
        "savedQuoteIds": [str(q.id) for q in quotes],
    }
