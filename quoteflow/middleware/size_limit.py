"""Request body size limit middleware."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from quoteflow.config import settings

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies over a size limit, based on Content-Length.

    Multipart requests (file uploads) get ``max_upload_size``; all other
    bodies (JSON templates, quote edits) get the smaller ``max_size``.
    """

    def __init__(
        self,
        app,
        max_size: int | None = None,
        max_upload_size: int | None = None,
    ):
        super().__init__(app)
        self.max_size = max_size or settings.max_request_size_bytes
        self.max_upload_size = max_upload_size or settings.max_upload_request_size_bytes

    def limit_for(self, request: Request) -> int:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("multipart/form-data"):
            return self.max_upload_size
        return self.max_size

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if not content_length or not content_length.isdigit():
            return await call_next(request)

        size = int(content_length)
        limit = self.limit_for(request)
        if size > limit:
            logger.warning(
                f"Rejected {request.method} {request.url.path}: {size} bytes (max: {limit})",
                extra={"content_length": size, "max_size": limit, "path": request.url.path},
            )
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request body exceeds maximum size of {limit} bytes"},
            )

        return await call_next(request)
