from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from logging import Logger, LoggerAdapter
from typing import Any, ClassVar, cast
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm.exc import StaleDataError

from app.core.logging import get_logger


class AppError(Exception):
    """Base class for failures reported to the caller with a specific status."""

    status_code: ClassVar[int] = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        data: object | None = None,
        error: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.data: object | None = data
        self.error: str | None = error


class ValidationError(AppError):
    status_code: ClassVar[int] = HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code: ClassVar[int] = HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    status_code: ClassVar[int] = HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code: ClassVar[int] = HTTP_409_CONFLICT


class InUseError(ConflictError):
    """Deletion refused because live records still reference the target."""

    status_code: ClassVar[int] = HTTP_400_BAD_REQUEST


class InternalError(AppError):
    status_code: ClassVar[int] = HTTP_500_INTERNAL_SERVER_ERROR


class ErrorEnvelope(BaseModel):
    """Structured error body."""
    success: bool = False
    message: str
    data: Any = None
    error: str | None = None


@contextmanager
def failure_boundary(
    message: str,
    logger: Logger | LoggerAdapter[Logger],
    not_found: str = "Record not found",
) -> Iterator[None]:
    """
    Scope a route handler body.
    Known failures pass through; vanished rows become NotFoundError;
    everything else is logged and surfaced as InternalError.
    """
    try:
        yield
    except (AppError, IntegrityError):
        raise
    except (NoResultFound, StaleDataError) as e:
        logger.warning("Record disappeared during mutation", extra={"error": str(e)})
        raise NotFoundError(not_found) from e
    except Exception as e:
        logger.exception(message)
        raise InternalError(message, error=str(e)) from e


def _render(status_code: int, body: ErrorEnvelope) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body.model_dump()))


def _serialize_validation_errors(errors: Sequence[Mapping[Any, Any]]) -> list[dict[str, object]]:
    """Serialize validation errors, handling non-serializable objects in context."""

    serialized_errors: list[dict[str, object]] = []

    for error in errors:
        serialized_error: dict[str, object] = dict(error)

        if "ctx" in serialized_error and isinstance(serialized_error["ctx"], dict):
            ctx: dict[str, object] = cast(dict[str, object], serialized_error["ctx"]).copy()

            if "error" in ctx:
                error_value = ctx["error"]

                if hasattr(error_value, "__str__"):
                    ctx["error"] = str(error_value)
            serialized_error["ctx"] = ctx
        serialized_errors.append(serialized_error)
    return serialized_errors


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        logger = get_logger(__name__, request)
        if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed", extra={"status_code": exc.status_code})
        else:
            logger.warning(exc.message, extra={"status_code": exc.status_code})
        body = ErrorEnvelope(message=exc.message, data=exc.data, error=exc.error)
        return _render(exc.status_code, body)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.warning("HTTP error", extra={"status_code": exc.status_code})
        if exc.status_code == HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = "Route not found"
        else:
            message = str(exc.detail) if exc.detail else "HTTP error"
        response = _render(exc.status_code, ErrorEnvelope(message=message))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.info("Validation error")
        body = ErrorEnvelope(
            message="Invalid request payload",
            data={"errors": _serialize_validation_errors(exc.errors())},
            error="validation_error",
        )
        return _render(HTTP_400_BAD_REQUEST, body)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.warning("Database integrity error", extra={"error": str(exc)})

        # Extract meaningful error message
        error_message = str(exc.orig) if hasattr(exc, 'orig') and exc.orig else str(exc)
        lowered = error_message.lower()

        if "unique" in lowered:
            status_code = HTTP_409_CONFLICT
            message = "Resource already exists"
        elif "foreign key" in lowered:
            status_code = HTTP_404_NOT_FOUND
            message = "Referenced resource not found"
        elif "check constraint" in lowered:
            status_code = HTTP_400_BAD_REQUEST
            message = "Invalid data value"
        else:
            status_code = HTTP_400_BAD_REQUEST
            message = "Data integrity violation"

        return _render(status_code, ErrorEnvelope(message=message, error=error_message))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger = get_logger(__name__, request)
        logger.exception("Unhandled server error", exc_info=exc)
        body = ErrorEnvelope(message="Internal Server Error", error=str(exc))
        return _render(HTTP_500_INTERNAL_SERVER_ERROR, body)
