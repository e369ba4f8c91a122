"""Shared utilities used across the application."""

import uuid
from datetime import UTC, datetime

from fastapi import HTTPException


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


def validate_uuid(value: str, name: str = "ID") -> uuid.UUID:
    """Validate and convert a string to UUID.

    Args:
        value: String to validate as UUID
        name: Human-readable name for error messages

    Returns:
        Validated UUID

    Raises:
        HTTPException: 400 if the string is not a valid UUID
    """
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from None
