"""Tests for error handling and response envelopes.

Verifies:
- Error envelope shape is correct
- Every error code maps to correct HTTP status
- Unknown exceptions return E_INTERNAL with 500
- Malformed requests return E_INVALID_REQUEST
"""

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from corsguard import responses
from corsguard.errors import ERROR_CODE_TO_STATUS, ApiError, ApiErrorCode
from corsguard.logging import clear_request_context, set_request_context
from corsguard.responses import (
    api_error_handler,
    error_response,
    success_response,
    unhandled_exception_handler,
)


class TestErrorResponse:
    """Tests for error response envelope format."""

    def test_error_response_has_correct_shape(self):
        """Error response contains error object with code and message."""
        response = error_response(ApiErrorCode.E_NOT_FOUND, "Resource not found")

        assert response["error"]["code"] == "E_NOT_FOUND"
        assert response["error"]["message"] == "Resource not found"

    def test_error_response_code_is_string(self):
        """Error code in response is a string, not enum."""
        response = error_response(ApiErrorCode.E_INTERNAL, "Boom")

        assert isinstance(response["error"]["code"], str)

    def test_request_id_from_context(self):
        set_request_context("req-42")
        try:
            response = error_response(ApiErrorCode.E_INVALID_REQUEST, "Bad")
        finally:
            clear_request_context()

        assert response["error"]["request_id"] == "req-42"

    def test_request_id_omitted_without_context(self):
        clear_request_context()

        response = error_response(ApiErrorCode.E_INVALID_REQUEST, "Bad")

        assert "request_id" not in response["error"]


class TestSuccessResponse:
    """Tests for success response envelope format."""

    def test_success_response_has_data_key(self):
        response = success_response({"status": "ok"})

        assert response == {"data": {"status": "ok"}}

    def test_success_response_with_none(self):
        response = success_response(None)

        assert "data" in response
        assert response["data"] is None


class TestErrorCodeToStatus:
    """Tests for error code to HTTP status mapping."""

    def test_all_error_codes_have_status_mapping(self):
        for code in ApiErrorCode:
            assert code in ERROR_CODE_TO_STATUS, f"Missing status mapping for {code}"

    @pytest.mark.parametrize(
        "code,expected_status",
        [
            (ApiErrorCode.E_INVALID_REQUEST, 400),
            (ApiErrorCode.E_NOT_FOUND, 404),
            (ApiErrorCode.E_METHOD_NOT_ALLOWED, 405),
            (ApiErrorCode.E_INTERNAL, 500),
        ],
    )
    def test_error_code_maps_to_correct_status(self, code: ApiErrorCode, expected_status: int):
        assert ERROR_CODE_TO_STATUS[code] == expected_status


class TestApiErrorClass:
    """Tests for ApiError exception class."""

    def test_api_error_has_code_and_message(self):
        error = ApiError(ApiErrorCode.E_NOT_FOUND, "Item not found")

        assert error.code == ApiErrorCode.E_NOT_FOUND
        assert error.message == "Item not found"
        assert error.status_code == 404

    def test_api_error_handler(self):
        test_app = FastAPI()

        @test_app.get("/missing")
        def missing():
            raise ApiError(ApiErrorCode.E_NOT_FOUND, "No such thing")

        test_app.add_exception_handler(ApiError, api_error_handler)

        response = TestClient(test_app).get("/missing")

        assert response.status_code == 404
        assert response.json()["error"] == {"code": "E_NOT_FOUND", "message": "No such thing"}


class TestMalformedRequestHandling:
    """Tests for malformed request handling in the full app."""

    def test_post_to_get_only_route(self, client: TestClient):
        response = client.post(
            "/health",
            content="{invalid json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 405
        assert response.json()["error"]["code"] == "E_METHOD_NOT_ALLOWED"


class TestUnhandledExceptionHandling:
    """Tests for unhandled exception handling."""

    def test_unhandled_exception_returns_500_with_e_internal(self):
        test_app = FastAPI()

        @test_app.get("/crash")
        def crash_endpoint():
            raise RuntimeError("Unexpected error")

        test_app.add_exception_handler(Exception, unhandled_exception_handler)

        client = TestClient(test_app, raise_server_exceptions=False)
        response = client.get("/crash")

        assert response.status_code == 500
        data = response.json()
        assert data["error"]["code"] == "E_INTERNAL"
        assert "Internal server error" in data["error"]["message"]

    def test_unhandled_exception_does_not_leak_details(self):
        test_app = FastAPI()

        @test_app.get("/crash")
        def crash_endpoint():
            raise RuntimeError("SECRET_INTERNAL_DETAIL")

        test_app.add_exception_handler(Exception, unhandled_exception_handler)

        client = TestClient(test_app, raise_server_exceptions=False)
        response = client.get("/crash")

        assert "SECRET_INTERNAL_DETAIL" not in response.text

    def test_unhandled_exception_logged_as_event(self, log_sink, monkeypatch):
        monkeypatch.setattr(responses, "logger", structlog.get_logger())
        test_app = FastAPI()

        @test_app.get("/crash")
        def crash_endpoint():
            raise RuntimeError("disk on fire")

        test_app.add_exception_handler(Exception, unhandled_exception_handler)

        TestClient(test_app, raise_server_exceptions=False).get("/crash")

        events = [e for e in log_sink if e["event"] == "http.unhandled_exception"]
        assert len(events) == 1
        assert events[0]["error"] == "disk on fire"
        assert "positional_args" not in events[0]
