"""Translate domain exceptions into HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quoteflow.exceptions import (
    DocumentError,
    MappingError,
    NotFoundError,
    QuoteflowError,
    UnsupportedFormat,
)

logger = logging.getLogger(__name__)


def status_code_for(exc: QuoteflowError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, UnsupportedFormat):
        return 415
    if isinstance(exc, DocumentError | MappingError):
        return 422
    return 400


def error_response(exc: QuoteflowError) -> JSONResponse:
    """JSON error body for a domain exception."""
    return JSONResponse(status_code=status_code_for(exc), content={"detail": str(exc)})


async def quoteflow_error_handler(request: Request, exc: QuoteflowError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuoteflowError, quoteflow_error_handler)
