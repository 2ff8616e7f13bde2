"""Application entry point.

This module serves as the entry point for the FastAPI application.
It creates the application instance using the factory pattern.

Usage:
    # Development with auto-reload
    uvicorn pantry_chef.main:app --reload

    # Production
    python -m pantry_chef.main
"""

from __future__ import annotations

import asyncio
import os
import signal
import sys
from typing import TYPE_CHECKING, Any

from pantry_chef.core.config import get_settings
from pantry_chef.factory import create_app
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from types import TracebackType


logger = get_logger(__name__)

# Create the application instance
app = create_app()


def _log_uncaught_exception(
    exc_type: type[BaseException],
    exc: BaseException,
    tb: TracebackType | None,
) -> None:
    """Log a process-fatal exception and ask the server to shut down."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    logger.opt(exception=(exc_type, exc, tb)).critical(
        "Uncaught exception - shutting down", pid=os.getpid()
    )
    os.kill(os.getpid(), signal.SIGTERM)


def _log_unhandled_task_error(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    exc = context.get("exception")
    logger.opt(exception=exc).critical(
        "Unhandled error in background task - shutting down",
        message=context.get("message"),
    )
    os.kill(os.getpid(), signal.SIGTERM)


def run() -> None:
    """Serve the application with uvicorn.

    SIGTERM and SIGINT stop accepting connections and run the shutdown
    handlers; connections still open after the grace period are closed.
    """
    import uvicorn

    settings = get_settings()
    sys.excepthook = _log_uncaught_exception

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
        timeout_graceful_shutdown=settings.server.graceful_shutdown_timeout,
        proxy_headers=True,
    )
    server = uvicorn.Server(config)

    async def serve() -> None:
        asyncio.get_running_loop().set_exception_handler(_log_unhandled_task_error)
        await server.serve()

    asyncio.run(serve())


if __name__ == "__main__":
    run()
