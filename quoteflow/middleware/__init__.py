"""Middleware components for request validation and protection."""

from quoteflow.middleware.rate_limit import get_client_key, limiter, rate_limit_upload
from quoteflow.middleware.size_limit import RequestSizeLimitMiddleware

__all__ = [
    "RequestSizeLimitMiddleware",
    "get_client_key",
    "limiter",
    "rate_limit_upload",
]
