"""Shared fixtures: in-memory store, temporary upload directory, API client."""

import io
import os

import pytest
from httpx import ASGITransport, AsyncClient
from openpyxl import Workbook

# Override settings before importing app modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from main import app
from quoteflow.services.file.uploads import UploadDirectory, get_uploads
from quoteflow.storage import InMemoryQuoteStore, get_store


def build_workbook(rows: list[list], title: str = "Sheet1") -> bytes:
    """Serialize rows into .xlsx bytes."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    """Factory fixture for in-memory workbooks."""
    return build_workbook


@pytest.fixture
def store():
    return InMemoryQuoteStore()


@pytest.fixture
def uploads(tmp_path):
    return UploadDirectory(tmp_path / "uploads")


@pytest.fixture
def test_app(store, uploads):
    """The FastAPI app wired to the in-memory store and temporary uploads."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_uploads] = lambda: uploads
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url="http://test"
    ) as ac:
        yield ac
