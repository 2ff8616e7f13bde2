"""Health check and root endpoint schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from pantry_chef.schemas.base import APIResponse
from pantry_chef.schemas.enums import DependencyStatus, HealthStatus


class ServiceStatuses(APIResponse):
    """Status of each dependency."""

    api: DependencyStatus = DependencyStatus.RUNNING
    database: DependencyStatus
    ai: DependencyStatus


class SystemInfo(APIResponse):
    python: str
    platform: str
    pid: int
    environment: str
    version: str


class HealthCheckResponse(APIResponse):
    """Service health report returned by ``GET /health``."""

    status: HealthStatus = Field(..., description="Overall service health status")
    uptime: float = Field(..., description="Process uptime in seconds")
    timestamp: datetime
    services: ServiceStatuses
    system: SystemInfo


class RootResponse(APIResponse):
    """Service identity and entry points returned by ``GET /``."""

    message: str = Field(..., examples=["Welcome to Pantry Chef API"])
    version: str
    endpoints: dict[str, str]
