"""Health check endpoint.

Reports process uptime and the state of the database and the AI provider.
Load balancers treat any non-200 answer as unhealthy.
"""

from __future__ import annotations

import os
import platform
import time
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import ORJSONResponse

from pantry_chef.api.dependencies import get_app_settings
from pantry_chef.core.config import Settings
from pantry_chef.database.connection import check_database_health
from pantry_chef.schemas.enums import DependencyStatus, HealthStatus
from pantry_chef.schemas.health import HealthCheckResponse, ServiceStatuses, SystemInfo


router = APIRouter(tags=["Health"])


async def _ai_status(request: Request, settings: Settings, *, deep: bool) -> DependencyStatus:
    if not settings.ai_configured:
        return DependencyStatus.NOT_CONFIGURED
    if not deep:
        return DependencyStatus.CONFIGURED
    client = getattr(request.app.state, "llm_client", None)
    if client is not None and await client.check_connectivity():
        return DependencyStatus.REACHABLE
    return DependencyStatus.UNREACHABLE


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Service health",
    description=(
        "OK when the database is reachable and the AI provider is configured; "
        "DEGRADED (503) without AI; ERROR (503) without the database. "
        "With deep=true the AI provider is probed with a minimal completion."
    ),
    responses={503: {"description": "Service degraded or unavailable"}},
)
async def health_check(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    deep: Annotated[bool, Query(description="Probe the AI provider")] = False,
) -> ORJSONResponse:
    database_ok = await check_database_health()
    ai = await _ai_status(request, settings, deep=deep)

    if not database_ok:
        overall = HealthStatus.ERROR
    elif ai in (DependencyStatus.NOT_CONFIGURED, DependencyStatus.UNREACHABLE):
        overall = HealthStatus.DEGRADED
    else:
        overall = HealthStatus.OK

    report = HealthCheckResponse(
        status=overall,
        uptime=round(time.monotonic() - request.app.state.started_at, 3),
        timestamp=datetime.now(UTC),
        services=ServiceStatuses(
            database=DependencyStatus.CONNECTED if database_ok else DependencyStatus.DISCONNECTED,
            ai=ai,
        ),
        system=SystemInfo(
            python=platform.python_version(),
            platform=platform.platform(),
            pid=os.getpid(),
            environment=settings.APP_ENV,
            version=settings.app.version,
        ),
    )
    return ORJSONResponse(
        status_code=status.HTTP_200_OK
        if overall is HealthStatus.OK
        else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=report.model_dump(mode="json"),
    )
