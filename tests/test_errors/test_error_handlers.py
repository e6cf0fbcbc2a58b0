from __future__ import annotations

import json
import pytest
from unittest.mock import Mock, patch
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from app.core.errors import (
    AppError,
    ConflictError,
    ErrorEnvelope,
    InternalError,
    InUseError,
    NotFoundError,
    ValidationError,
    _serialize_validation_errors,
    failure_boundary,
    register_exception_handlers,
)


def _mock_request(method: str = "GET", path: str = "/test"):
    request = Mock()
    request.state.correlation_id = "test-123"
    request.state.user_id = "user-1"
    request.url.path = path
    request.method = method
    return request


def _body(response) -> dict:
    return json.loads(response.body)


class TestErrorModels:
    """Test error classes and envelope."""

    def test_status_codes(self):
        assert ValidationError("x").status_code == HTTP_400_BAD_REQUEST
        assert NotFoundError("x").status_code == HTTP_404_NOT_FOUND
        assert ConflictError("x").status_code == HTTP_409_CONFLICT
        assert InternalError("x").status_code == HTTP_500_INTERNAL_SERVER_ERROR

    def test_in_use_is_conflict_reported_as_bad_request(self):
        exc = InUseError("busy", data={"books": []})
        assert isinstance(exc, ConflictError)
        assert exc.status_code == HTTP_400_BAD_REQUEST
        assert exc.data == {"books": []}

    def test_error_envelope_defaults(self):
        envelope = ErrorEnvelope(message="Test message")
        assert envelope.success is False
        assert envelope.data is None
        assert envelope.error is None


class TestFailureBoundary:
    """Test the per-handler failure boundary."""

    def test_passes_app_errors_through(self):
        logger = Mock()
        with pytest.raises(NotFoundError):
            with failure_boundary("Failed", logger):
                raise NotFoundError("Genre not found")
        logger.exception.assert_not_called()

    def test_passes_integrity_errors_through(self):
        with pytest.raises(IntegrityError):
            with failure_boundary("Failed", Mock()):
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    @pytest.mark.parametrize("raised", [NoResultFound(), StaleDataError("gone")])
    def test_vanished_rows_become_not_found(self, raised):
        with pytest.raises(NotFoundError, match="Book not found"):
            with failure_boundary("Failed to update book", Mock(), not_found="Book not found"):
                raise raised

    def test_unexpected_errors_become_internal(self):
        logger = Mock()
        with pytest.raises(InternalError) as exc_info:
            with failure_boundary("Failed to create transaction", logger):
                raise RuntimeError("connection reset")

        assert exc_info.value.message == "Failed to create transaction"
        assert exc_info.value.error == "connection reset"
        logger.exception.assert_called_once_with("Failed to create transaction")


class TestErrorHelpers:
    """Test error helper functions."""

    def test_serialize_validation_errors_empty(self):
        assert _serialize_validation_errors([]) == []

    def test_serialize_validation_errors_with_context(self):
        class CustomError:
            def __str__(self):
                return "Custom error message"

        error = {
            "loc": ["body", "price"],
            "msg": "error1",
            "type": "decimal_parsing",
            "ctx": {"error": CustomError(), "other": "value"},
        }

        result = _serialize_validation_errors([error])

        assert result[0]["ctx"]["other"] == "value"
        assert result[0]["ctx"]["error"] == "Custom error message"


class TestExceptionHandlers:
    """Test exception handler registration and execution."""

    def setup_method(self):
        self.app = FastAPI()
        register_exception_handlers(self.app)

    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_app_error_handler(self, mock_get_logger):
        mock_get_logger.return_value = Mock()
        handler = self.app.exception_handlers.get(AppError)

        response = await handler(
            _mock_request(), InUseError("in use", data={"active_books_count": 2})
        )

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert _body(response) == {
            "success": False,
            "message": "in use",
            "data": {"active_books_count": 2},
            "error": None,
        }

    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_internal_error_echoes_cause(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger
        handler = self.app.exception_handlers.get(AppError)

        response = await handler(_mock_request(), InternalError("Failed", error="db down"))

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert _body(response)["error"] == "db down"
        mock_logger.error.assert_called_once()

    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_http_exception_route_not_found(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger
        handler = self.app.exception_handlers.get(StarletteHTTPException)

        response = await handler(
            _mock_request(), StarletteHTTPException(status_code=HTTP_404_NOT_FOUND)
        )

        assert response.status_code == HTTP_404_NOT_FOUND
        assert _body(response)["message"] == "Route not found"
        mock_logger.warning.assert_called_once_with("HTTP error", extra={"status_code": HTTP_404_NOT_FOUND})

    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_http_exception_keeps_headers(self, mock_get_logger):
        mock_get_logger.return_value = Mock()
        handler = self.app.exception_handlers.get(StarletteHTTPException)

        exc = StarletteHTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
        response = await handler(_mock_request(), exc)

        assert response.status_code == HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert _body(response)["message"] == "Not authenticated"

    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_validation_exception_handler(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger
        errors = [
            {"loc": ["body", "price"], "msg": "error1", "type": "decimal_parsing"},
        ]

        handler = self.app.exception_handlers.get(RequestValidationError)
        response = await handler(_mock_request("POST"), RequestValidationError(errors))

        assert response.status_code == HTTP_400_BAD_REQUEST
        body = _body(response)
        assert body["success"] is False
        assert body["data"]["errors"][0]["loc"] == ["body", "price"]
        mock_logger.info.assert_called_once_with("Validation error")

    @pytest.mark.parametrize(
        "orig,status_code,message",
        [
            ("UNIQUE constraint failed: genres.name", HTTP_409_CONFLICT, "Resource already exists"),
            ("FOREIGN KEY constraint failed", HTTP_404_NOT_FOUND, "Referenced resource not found"),
            ('violates check constraint "books_stock_nonneg"', HTTP_400_BAD_REQUEST, "Invalid data value"),
            ("something else", HTTP_400_BAD_REQUEST, "Data integrity violation"),
        ],
    )
    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_integrity_error_handler(self, mock_get_logger, orig, status_code, message):
        mock_get_logger.return_value = Mock()
        handler = self.app.exception_handlers.get(IntegrityError)

        response = await handler(
            _mock_request("POST"), IntegrityError("INSERT ...", {}, Exception(orig))
        )

        assert response.status_code == status_code
        assert _body(response)["message"] == message

    @patch('app.core.errors.get_logger')
    @pytest.mark.asyncio
    async def test_unhandled_exception_handler(self, mock_get_logger):
        mock_logger = Mock()
        mock_get_logger.return_value = mock_logger
        handler = self.app.exception_handlers.get(Exception)

        response = await handler(_mock_request(), ValueError("boom"))

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert _body(response) == {
            "success": False,
            "message": "Internal Server Error",
            "data": None,
            "error": "boom",
        }
        mock_logger.exception.assert_called_once()


class TestRoutingErrors:
    """Envelope shape for framework-level failures."""

    def test_unknown_route(self, test_client):
        response = test_client.get("/does-not-exist")
        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json() == {
            "success": False,
            "message": "Route not found",
            "data": None,
            "error": None,
        }
