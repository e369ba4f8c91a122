"""Tests for the utils module."""

import uuid

import pytest
from fastapi import HTTPException

from quoteflow.utils import utcnow, validate_uuid


class TestValidateUuid:
    """Tests for UUID validation utility."""

    def test_valid_uuid(self):
        valid = "550e8400-e29b-41d4-a716-446655440000"

        assert validate_uuid(valid) == uuid.UUID(valid)

    def test_invalid_uuid_raises_400(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_uuid("not-a-uuid")

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Invalid ID"

    def test_custom_name(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_uuid("550e8400-e29b-41d4", "template ID")

        assert exc_info.value.detail == "Invalid template ID"


class TestUtcnow:
    def test_is_timezone_aware(self):
        assert utcnow().utcoffset().total_seconds() == 0
