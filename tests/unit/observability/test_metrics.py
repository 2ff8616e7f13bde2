"""Unit tests for Prometheus metrics setup.

Tests cover:
- Disabled metrics
- Metrics endpoint exposure
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI

from pantry_chef.core.config import Settings
from pantry_chef.observability.metrics import METRICS_ENDPOINT, setup_metrics


pytestmark = pytest.mark.unit


class TestSetupMetrics:
    """Tests for setup_metrics."""

    def test_returns_none_when_disabled(self) -> None:
        """Should not instrument the app when metrics are disabled."""
        app = FastAPI()
        settings = Settings(observability={"metrics": {"enabled": False}})

        assert setup_metrics(app, settings) is None
        assert METRICS_ENDPOINT not in {route.path for route in app.routes}

    def test_exposes_metrics_endpoint(self) -> None:
        """Should mount the metrics endpoint when enabled."""
        app = FastAPI()
        settings = Settings(observability={"metrics": {"enabled": True}})

        instrumentator = setup_metrics(app, settings)

        assert instrumentator is not None
        assert METRICS_ENDPOINT in {route.path for route in app.routes}
