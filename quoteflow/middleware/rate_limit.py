"""Rate limiting using SlowAPI."""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from quoteflow.config import settings

logger = logging.getLogger(__name__)


def get_client_key(request: Request) -> str:
    """Rate-limit key for a request (client IP address)."""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_key,
    storage_uri=settings.rate_limit_storage_uri,
    default_limits=[f"{settings.rate_limit_general_per_minute}/minute"],
    enabled=settings.rate_limit_enabled,
)


def rate_limit_upload():
    """Decorator for file upload rate limit."""
    return limiter.limit(f"{settings.rate_limit_upload_per_minute}/minute")
