"""Tests for request size limit middleware."""

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from quoteflow.middleware.size_limit import RequestSizeLimitMiddleware


async def echo_endpoint(request: Request) -> Response:
    body = await request.body()
    return JSONResponse({"size": len(body)})


@pytest.fixture
def client():
    """App with a 1KB JSON limit and a 4KB multipart limit."""
    app = Starlette(routes=[Route("/echo", echo_endpoint, methods=["POST"])])
    app.add_middleware(RequestSizeLimitMiddleware, max_size=1024, max_upload_size=4096)
    return TestClient(app, raise_server_exceptions=False)


class TestRequestSizeLimitMiddleware:
    """Tests for RequestSizeLimitMiddleware."""

    def test_allows_body_at_limit(self, client):
        response = client.post("/echo", content="x" * 1024)

        assert response.status_code == 200
        assert response.json()["size"] == 1024

    def test_rejects_json_body_over_limit(self, client):
        response = client.post(
            "/echo", content="x" * 2048, headers={"content-type": "application/json"}
        )

        assert response.status_code == 413
        assert response.json()["detail"] == "Request body exceeds maximum size of 1024 bytes"

    def test_uploads_get_the_larger_limit(self, client):
        response = client.post("/echo", files={"file": ("q.csv", b"x" * 2048, "text/csv")})

        assert response.status_code == 200

    def test_rejects_upload_over_limit(self, client):
        response = client.post("/echo", files={"file": ("q.csv", b"x" * 5000, "text/csv")})

        assert response.status_code == 413
        assert "4096" in response.json()["detail"]

    def test_empty_body_passes(self, client):
        response = client.post("/echo", content="")

        assert response.status_code == 200
        assert response.json()["size"] == 0


class TestRequestSizeLimitMiddlewareConfiguration:
    def test_defaults_come_from_settings(self):
        from quoteflow.config import settings

        middleware = RequestSizeLimitMiddleware(Starlette())

        assert middleware.max_size == settings.max_request_size_bytes
        assert middleware.max_upload_size == settings.max_upload_request_size_bytes
