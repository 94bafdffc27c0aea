# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Liveness and readiness probes.

``/health`` answers without touching PostgreSQL. ``/health/ready`` runs a
``SELECT 1`` and answers 503 until the database is reachable, so a load
balancer keeps traffic away from an instance that would only return
PERSISTENCE_UNAVAILABLE envelopes. Both paths skip authentication.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.core.config import get_settings
from src.infrastructure.database.connection import check_database_connection

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"

_started_at = time.monotonic()


class ComponentHealth(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    latency_ms: float | None = Field(None, description="Round trip of the probe query")


class HealthResponse(BaseModel):
    status: str = Field(description="Always healthy while the process serves requests")
    timestamp: datetime
    version: str
    environment: str
    uptime_seconds: int


class ReadinessResponse(BaseModel):
    ready: bool
    checks: dict[str, Any] = Field(description="Result per dependency")


async def probe_database() -> ComponentHealth:
    started = time.monotonic()
    if not await check_database_connection():
        logger.error("Readiness probe: database unreachable")
        return ComponentHealth(status="unhealthy")
    elapsed_ms = (time.monotonic() - started) * 1000
    return ComponentHealth(status="healthy", latency_ms=round(elapsed_ms, 2))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Report that the process is up."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=API_VERSION,
        environment=get_settings().environment,
        uptime_seconds=int(time.monotonic() - _started_at),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check() -> JSONResponse:
    """Report whether the database accepts queries (200) or not (503)."""
    database = await probe_database()
    body = ReadinessResponse(
        ready=database.status == "healthy",
        checks={"database": database.model_dump()},
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if body.ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )
