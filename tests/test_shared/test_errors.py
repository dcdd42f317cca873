"""Tests for shared error classes and exception handlers."""
from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hotbrew.shared.errors import (
    AppError,
    ConfigurationError,
    HotbrewError,
    ItemNotFoundError,
    NotFoundError,
    ParsingError,
    PayloadTooLargeError,
    RateLimitError,
    SourceFetchError,
    StoreError,
    ValidationError,
    register_exception_handlers,
)


class TestAppError:
    """Tests for the base AppError exception."""

    def test_default_status_code(self):
        err = AppError(detail="something broke")
        assert err.status_code == 500
        assert err.detail == "something broke"

    def test_str_is_detail(self):
        assert str(AppError(detail="human readable")) == "human readable"

    @pytest.mark.parametrize(
        "cls,status",
        [
            (ValidationError, 422),
            (NotFoundError, 404),
            (ParsingError, 400),
            (PayloadTooLargeError, 413),
            (RateLimitError, 429),
        ],
    )
    def test_status_codes(self, cls, status):
        err = cls()
        assert err.status_code == status
        assert isinstance(err, AppError)


class TestDomainErrors:
    def test_configuration_error_includes_path(self):
        err = ConfigurationError("invalid YAML", "/tmp/hotbrew.yaml")
        assert str(err) == "invalid YAML (/tmp/hotbrew.yaml)"
        assert err.path == "/tmp/hotbrew.yaml"

    def test_item_not_found_is_store_error(self):
        err = ItemNotFoundError("sha256:abc")
        assert isinstance(err, StoreError)
        assert isinstance(err, HotbrewError)
        assert "sha256:abc" in str(err)

    def test_source_fetch_error_message(self):
        err = SourceFetchError("Lobste.rs", "status 503")
        assert str(err) == "Lobste.rs: status 503"
        assert err.source_name == "Lobste.rs"
        assert err.reason == "status 503"


class TestExceptionHandlers:
    """Tests for register_exception_handlers integration with FastAPI."""

    @pytest.fixture
    def client(self) -> TestClient:
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/missing")
        async def missing():
            raise NotFoundError(detail="Invalid token")

        @app.get("/slow-down")
        async def slow_down():
            raise RateLimitError()

        return TestClient(app)

    def test_not_found_returns_json_detail(self, client: TestClient):
        response = client.get("/missing")
        assert response.status_code == 404
        assert response.json() == {"detail": "Invalid token"}

    def test_rate_limit_returns_429(self, client: TestClient):
        response = client.get("/slow-down")
        assert response.status_code == 429
        assert response.json()["detail"] == "Too many requests"
