import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from linkhub_app.config import settings
from linkhub_app.core.errors import (
    ApiError,
    NameGenerationError,
    NameUnavailableError,
    error_code_for,
    format_validation_errors,
    normalize_http_exception,
)
from linkhub_app.core.handlers import register_exception_handlers
from tests.conftest import assert_error_shape


@pytest.fixture
def error_app() -> FastAPI:
    """Tiny app whose routes only raise"""
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaput")

    @app.get("/taken")
    def taken():
        raise NameUnavailableError("This name is already taken")

    @app.get("/exhausted")
    def exhausted():
        raise NameGenerationError("Could not generate a unique name")

    @app.get("/teapot")
    def teapot():
        raise HTTPException(status_code=404, detail={"code": "NO_TEA", "message": "No tea here"})

    @app.get("/items/{item_id}")
    def item(item_id: int):
        return {"id": item_id}

    return app


class TestErrorHelpers:

    def test_error_codes(self):
        assert error_code_for(400) == "BAD_REQUEST"
        assert error_code_for(410) == "GONE"
        assert error_code_for(429) == "RATE_LIMITED"
        assert error_code_for(418) == "ERROR"

    def test_body_without_details(self):
        body = ApiError(code="NOT_FOUND", message="Nope").to_body()
        assert body == {"success": False, "error": {"code": "NOT_FOUND", "message": "Nope"}}

    def test_normalize_string_detail(self):
        error = normalize_http_exception(HTTPException(status_code=410, detail="URL has expired"))
        assert (error.code, error.message) == ("GONE", "URL has expired")

    def test_normalize_nested_detail(self):
        exc = HTTPException(status_code=400, detail={"error": {"code": "CUSTOM", "message": "custom message"}})
        error = normalize_http_exception(exc)
        assert (error.code, error.message) == ("CUSTOM", "custom message")

    def test_format_validation_errors(self):
        errors = [
            {"loc": ("body", "links", 0, "url"), "msg": "Value error, Invalid URL format"},
            {"loc": ("query", "limit"), "msg": "Input should be greater than or equal to 1"},
        ]
        assert format_validation_errors(errors) == [
            {"field": "links.0.url", "message": "Value error, Invalid URL format"},
            {"field": "limit", "message": "Input should be greater than or equal to 1"},
        ]


class TestErrorHandlers:
    """Every error leaves the app in one envelope"""

    def test_unhandled_exception_outside_production(self, error_app: FastAPI):
        client = TestClient(error_app, raise_server_exceptions=False)

        response = client.get("/boom")
        assert response.status_code == 500

        error = assert_error_shape(response, "INTERNAL_SERVER_ERROR")
        assert error["message"] == "Internal server error"
        assert error["details"]["error"] == "kaput"
        assert any("RuntimeError" in line for line in error["details"]["stack"])

    def test_unhandled_exception_in_production(self, error_app: FastAPI, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        client = TestClient(error_app, raise_server_exceptions=False)

        error = assert_error_shape(client.get("/boom"), "INTERNAL_SERVER_ERROR")
        assert "details" not in error

    def test_name_errors(self, error_app: FastAPI):
        client = TestClient(error_app)

        taken = client.get("/taken")
        assert taken.status_code == 409
        assert assert_error_shape(taken, "CONFLICT")["message"] == "This name is already taken"

        exhausted = client.get("/exhausted")
        assert exhausted.status_code == 500
        assert_error_shape(exhausted, "INTERNAL_SERVER_ERROR")

    def test_http_exception_with_code(self, error_app: FastAPI):
        response = TestClient(error_app).get("/teapot")
        assert response.status_code == 404
        assert assert_error_shape(response, "NO_TEA")["message"] == "No tea here"

    def test_unknown_route(self, error_app: FastAPI):
        response = TestClient(error_app).get("/nowhere")
        assert response.status_code == 404
        assert_error_shape(response, "NOT_FOUND")

    def test_validation_error_is_400(self, error_app: FastAPI):
        response = TestClient(error_app).get("/items/abc")
        assert response.status_code == 400

        error = assert_error_shape(response, "BAD_REQUEST")
        assert error["message"] == "Invalid input"
        assert error["details"][0]["field"] == "item_id"
