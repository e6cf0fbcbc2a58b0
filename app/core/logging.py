import logging
import logging.config
from typing import Any, Final
from logging import LoggerAdapter, LogRecord
from typing_extensions import override
from fastapi import Request

# Keys every record carries, with their fallback when no request is in scope
REQUEST_FIELDS: Final[dict[str, str]] = {"request_id": "-", "user": "-"}

_LOG_FORMAT: Final[str] = (
    "%(asctime)s %(levelname)s %(name)s :: %(message)s "
    "[req=%(request_id)s user=%(user)s]"
)

# Loggers that get the app handler instead of their own
_ADOPTED: Final[tuple[str, ...]] = ("uvicorn", "uvicorn.error", "uvicorn.access", "alembic")


class RequestLogFilter(logging.Filter):
    """Fills request fields on records logged outside a request."""

    @override
    def filter(self, record: LogRecord) -> bool:
        for key, fallback in REQUEST_FIELDS.items():
            if not hasattr(record, key):
                setattr(record, key, fallback)
        return True


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Route the app, uvicorn and alembic loggers to one stdout handler.
    SQLAlchemy engine echo stays at WARNING unless the app runs at DEBUG.
    """
    if isinstance(level, str):
        level = level.upper()

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request": {"()": RequestLogFilter}},
        "formatters": {"request": {"format": _LOG_FORMAT}},
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "filters": ["request"],
                "formatter": "request",
                "level": level,
            }
        },
        "root": {"level": level, "handlers": ["stdout"]},
        "loggers": {
            name: {"level": level, "handlers": ["stdout"], "propagate": False}
            for name in _ADOPTED
        },
    }
    config["loggers"]["sqlalchemy.engine"] = {
        "level": "DEBUG" if level in ("DEBUG", logging.DEBUG) else "WARNING"
    }
    logging.config.dictConfig(config)


def get_logger(
    name: str,
    request: Request | None = None
) -> LoggerAdapter[logging.Logger]:
    """
    Logger bound to the request's correlation id and authenticated user.
    Usage: logger = get_logger(__name__, request)
    """
    context: dict[str, str] = {}
    if request is not None:
        context["request_id"] = getattr(request.state, "correlation_id", REQUEST_FIELDS["request_id"])
        context["user"] = str(getattr(request.state, "user_id", REQUEST_FIELDS["user"]))
    return LoggerAdapter(logging.getLogger(name), context)
