"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Configures the FastAPI application with appropriate settings
- Sets up the request pipeline in the correct order
- Registers exception handlers
- Mounts API routers
- Configures metrics
"""

from __future__ import annotations

import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from pantry_chef.api.router import router as api_router
from pantry_chef.api.routes import health, root
from pantry_chef.core.config import Settings, get_settings
from pantry_chef.core.events import lifespan
from pantry_chef.core.exceptions import handle_exception, setup_exception_handlers
from pantry_chef.core.middleware import (
    ContentTypeMiddleware,
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
    SanitizeMiddleware,
    SecurityHeadersMiddleware,
    TimeoutMiddleware,
)
from pantry_chef.core.middleware.request_id import REQUEST_ID_HEADER
from pantry_chef.core.rate_limit import RateLimiter
from pantry_chef.observability.metrics import METRICS_ENDPOINT, setup_metrics
from pantry_chef.services.generation import RecipeGenerationError


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Recipe generation, search and rating API backed by Azure OpenAI",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        debug=settings.app.debug,
    )

    # Store settings in app state for access in routes and middleware
    app.state.settings = settings
    app.state.started_at = time.monotonic()

    # One limiter per application; its counters live as long as the app
    app.state.limiter = RateLimiter.from_settings(settings)

    setup_exception_handlers(app)
    app.add_exception_handler(RecipeGenerationError, handle_exception)

    _setup_middleware(app, settings)

    _setup_routers(app, settings)

    # After routes are mounted
    setup_metrics(app, settings)

    return app


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Middleware is executed in reverse order of addition:
    - Last added middleware runs first on request
    - First added middleware runs first on response

    Order from request perspective:
    1. SecurityHeadersMiddleware (adds security headers)
    2. CORSMiddleware (handles CORS)
    3. RequestIDMiddleware (adds request ID for tracing)
    4. LoggingMiddleware (logs requests/responses)
    5. TimeoutMiddleware (single 408 when the handler is too slow)
    6. SanitizeMiddleware (buffers the body, strips operator keys)
    7. ContentTypeMiddleware (415/400 for unsupported bodies)
    8. RateLimitMiddleware (429 per policy and client address)
    """
    debug = settings.is_development

    if settings.rate_limiting.enabled:
        app.add_middleware(RateLimitMiddleware, limiter=app.state.limiter, debug=debug)

    app.add_middleware(ContentTypeMiddleware, debug=debug)

    app.add_middleware(
        SanitizeMiddleware,
        max_body_bytes=settings.request.max_body_bytes,
        log_body=settings.is_development and settings.logging.log_request_body,
        debug=debug,
    )

    app.add_middleware(
        TimeoutMiddleware,
        default_ms=settings.timeouts.default_ms,
        overrides=settings.timeouts.overrides,
        debug=debug,
    )

    app.add_middleware(
        LoggingMiddleware,
        exclude_paths={"/health", METRICS_ENDPOINT, "/favicon.ico"},
    )

    app.add_middleware(RequestIDMiddleware)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
        )

    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)


def _setup_routers(app: FastAPI, settings: Settings) -> None:
    """Mount API routers.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """
    app.include_router(api_router, prefix=settings.api.prefix)

    # Top level, for load balancers and discovery
    app.include_router(root.router)
    app.include_router(health.router)
