"""Prometheus metrics instrumentation.

This module provides:
- FastAPI automatic request metrics
- Metrics endpoint configuration
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_fastapi_instrumentator import Instrumentator, metrics

from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI

    from pantry_chef.core.config import Settings

logger = get_logger(__name__)

METRICS_ENDPOINT = "/metrics"
METRIC_NAMESPACE = "pantry_chef"


def setup_metrics(app: FastAPI, settings: Settings) -> Instrumentator | None:
    """Configure Prometheus metrics instrumentation.

    Sets up automatic HTTP request metrics collection including:
    - Request count by method, path, and status code
    - Request duration histogram
    - Request/response size
    - Requests in progress gauge

    Args:
        app: The FastAPI application instance.
        settings: Application settings.

    Returns:
        Configured Instrumentator instance, or None when disabled.
    """
    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return None

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/health", METRICS_ENDPOINT, "/docs", "/openapi.json"],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )

    instrumentator.add(
        metrics.default(
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
            should_only_respect_2xx_for_highr=False,
        )
    )
    instrumentator.add(
        metrics.response_size(
            should_include_handler=True,
            should_include_method=True,
            should_include_status=True,
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
        )
    )

    instrumentator.instrument(app)
    instrumentator.expose(
        app,
        endpoint=METRICS_ENDPOINT,
        include_in_schema=False,
        tags=["Monitoring"],
    )

    logger.info("Prometheus metrics configured", endpoint=METRICS_ENDPOINT)
    return instrumentator


__all__ = ["METRICS_ENDPOINT", "setup_metrics"]
