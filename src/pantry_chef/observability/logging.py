"""Logging configuration using Loguru.

This module provides:
- Structured JSON logging for production
- Human-readable colorized output for development
- Request ID correlation via context
- Intercept standard library logging
- Redaction of credential fields before request bodies are logged
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING

import orjson
from loguru import logger


if TYPE_CHECKING:
    from typing import Any


# Context variable for request-scoped data (request_id, method, path, ...)
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

REDACTED = "[REDACTED]"
SENSITIVE_FIELDS = frozenset({"password", "currentPassword", "newPassword"})


class InterceptHandler(logging.Handler):
    """Intercept standard library logging and redirect to Loguru.

    This allows third-party libraries using standard logging
    (uvicorn, asyncpg, httpx) to have their logs processed by Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record by forwarding to Loguru."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _format_record(record: dict[str, Any]) -> str:
    """Format log record with context variables for JSON serialization."""
    record["extra"].update(_log_context.get())

    serialize_fields = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        **record["extra"],
    }

    if record["exception"]:
        exc = record["exception"]
        serialize_fields["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    # Loguru treats the returned string as a template; braces must be escaped.
    line = orjson.dumps(serialize_fields, default=str).decode()
    return line.replace("{", "{{").replace("}", "}}") + "\n"


def _format_record_dev(record: dict[str, Any]) -> str:
    """Format log record for development (human-readable with context)."""
    context = _log_context.get()

    context_str = ""
    if context:
        context_parts = [f"{k}={v}" for k, v in context.items()]
        context_str = " | " + " ".join(context_parts).replace("{", "{{").replace(
            "}", "}}"
        )

    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
        f"{context_str} - "
        "<level>{message}</level>\n"
    )

    if record["exception"]:
        fmt += "{exception}\n"

    return fmt


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Send all logs to stdout through Loguru.

    JSON lines are written unless the format is "text" or the service runs in
    development, where colourised lines with tracebacks and locals are used.
    Standard library loggers are routed through the same sink.
    """
    logger.remove()

    use_json = log_format == "json" and not is_development

    if use_json:
        logger.add(
            sys.stdout,
            format=_format_record,
            level=log_level.upper(),
            colorize=False,
            backtrace=True,
            diagnose=False,  # Never render local variables in production
        )
    else:
        logger.add(
            sys.stdout,
            format=_format_record_dev,
            level=log_level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Reduce noise from third-party libraries
    for logger_name in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "asyncpg",
        "httpx",
        "httpcore",
        "asyncio",
    ]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> "logger":  # type: ignore[valid-type]
    """Get a logger instance bound to a name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A Loguru logger instance
    """
    return logger.bind(name=name)


def redact_sensitive(value: Any) -> Any:
    """Return a copy of ``value`` with credential fields masked.

    Mappings are walked recursively (including inside lists); any key in
    ``SENSITIVE_FIELDS`` has its value replaced by ``REDACTED``.
    """
    if isinstance(value, dict):
        return {
            key: REDACTED if key in SENSITIVE_FIELDS else redact_sensitive(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_sensitive(item) for item in value]
    return value


def bind_context(**kwargs: Any) -> None:
    """Bind context variables for structured logging.

    Context variables are automatically included in all subsequent
    log entries within the same async context (e.g., request lifecycle).

    Example:
        bind_context(request_id="abc-123", method="GET")
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def clear_context() -> None:
    """Clear all context variables.

    Should be called at the start of each request to ensure
    clean logging context.
    """
    _log_context.set({})


def get_context() -> dict[str, Any]:
    """Get the current logging context."""
    return _log_context.get().copy()


__all__ = [
    "REDACTED",
    "SENSITIVE_FIELDS",
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "redact_sensitive",
    "setup_logging",
]
