"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    ConfigurationAppError,
    NotFoundAppError,
    UpstreamAppError,
    ValidationAppError,
)
from app.core.exception_handlers import (
    general_exception_handler,
    setup_exception_handlers,
    status_code_for,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


@pytest.mark.parametrize(
    ("error_cls", "expected_status"),
    [
        (ValidationAppError, 400),
        (NotFoundAppError, 404),
        (ConfigurationAppError, 500),
        (UpstreamAppError, 502),
        (AppError, 400),
    ],
)
def test_status_code_mapping(error_cls, expected_status):
    assert status_code_for(error_cls(code="x", message="y")) == expected_status


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(code="invalid_origin", message="Invalid submission origin.")

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "invalid_origin"
        assert data["error"]["message"] == "Invalid submission origin."
        assert "request_id" in data["error"]
        assert "details" not in data["error"]

    def test_not_found_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-not-found")
        async def endpoint():
            raise NotFoundAppError(
                code="content_not_found",
                message="Not found",
                details={"slug": "drafts"},
            )

        response = client.get("/test-not-found")

        assert response.status_code == 404
        assert response.json()["error"]["details"] == {"slug": "drafts"}

    def test_upstream_error_returns_502(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-upstream")
        async def endpoint():
            raise UpstreamAppError(code="formspree_rejected", message="Form not active")

        response = client.get("/test-upstream")

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "formspree_rejected"

    def test_str_of_error_is_its_message(self):
        assert str(ConfigurationAppError(code="c", message="not configured")) == "not configured"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers
        assert AppError in app_with_handlers.exception_handlers

    def test_general_exception_handler_hides_internals(self):
        request = AsyncMock()
        request.url.path = "/api/contact"
        request.method = "POST"

        exc = ValueError("database connection string leaked")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "database connection" not in data["error"]["message"]
        assert "ValueError" not in bytes(response.body).decode()
        assert "request_id" in data["error"]


def test_error_details_cover_the_keys_services_set():
    from app.core.errors import ErrorDetails

    assert set(ErrorDetails.__annotations__) == {"field", "slug", "http_status"}
