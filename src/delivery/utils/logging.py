"""Logging configuration for the delivery domain.

structlog renders on top of stdlib logging so that Protean's own loggers and
ours share handlers. Levels follow the deployment environment unless
LOG_LEVEL overrides them.

Every HTTP request is tagged with a request id (taken from the gateway's
X-Request-Id header or generated) and the caller's identity, so that a claim
race or a disputed deposit can be followed across log lines.
"""

import logging
import logging.handlers
import os
import sys
import uuid
from pathlib import Path

import structlog

REQUEST_ID_HEADER = "X-Request-Id"

_LEVEL_MAP = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVIRONMENTS = {"production", "staging"}
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


def get_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Get log level based on environment."""
    return os.getenv("LOG_LEVEL", _LEVEL_MAP.get(get_environment(), "INFO"))


def _rotating_handler(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | Path = "logs") -> None:
    """Console plus rotating files; errors are also kept in their own file."""
    log_level = get_log_level()

    log_dir = Path(log_dir)
    log_dir.mkdir(exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        console_handler,
        _rotating_handler(log_dir / "delivery.log", log_level),
        _rotating_handler(log_dir / "delivery_error.log", logging.ERROR),
    ]

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def setup_structlog() -> None:
    """Configure structlog: JSON in production, coloured console otherwise."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]

    if get_environment() in _JSON_ENVIRONMENTS:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=True,
                    max_frames=2,
                ),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs") -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging(log_dir)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(
    request_id: str | None = None,
    user_id: str | None = None,
    role: str | None = None,
    **extra,
) -> str:
    """Start a fresh logging context for one request and return its id.

    Anything left over from a previous request on the same worker is dropped.
    Identity fields the gateway did not send are left out rather than logged
    as null.
    """
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    context = {"request_id": request_id, "user_id": user_id, "role": role, **extra}
    structlog.contextvars.bind_contextvars(**{key: value for key, value in context.items() if value is not None})
    return request_id


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
