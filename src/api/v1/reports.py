# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Report API endpoints.

This module provides endpoints for branch reports:
- POST / - Generate and store a report
- GET / - List reports of the caller's branch
- GET /{report_id} - Get one report with its summary
- DELETE /{report_id} - Delete a report

Reports are immutable once generated.

Example:
    POST /api/v1/reports
    {
        "branch_id": "7d0e...",
        "report_type": "attendance_summary",
        "start_date": "2025-09-01",
        "end_date": "2025-09-30"
    }
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.middleware.rate_limit import RATE_LIMIT_EXPENSIVE, limiter
from src.api.responses import envelope_response
from src.domains.reporting import ReportingService
from src.models.common import Envelope
from src.models.report import ReportResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_reporting_service(db: AsyncSession, current_user: CurrentUser) -> ReportingService:
    return ReportingService(db, actor_id=current_user.id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[ReportResponse],
    summary="Generate report",
)
@limiter.limit(RATE_LIMIT_EXPENSIVE)
async def generate_report(
    request: Request,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Generate a report.

    Attendance summaries need ``start_date`` and ``end_date``.
    """
    logger.info(
        "Generating %s report for branch %s, by=%s",
        payload.get("report_type"),
        payload.get("branch_id"),
        current_user.id,
    )

    service = _get_reporting_service(db, current_user)
    result = await service.generate(payload, generated_by=current_user.id)
    return envelope_response(result, status.HTTP_201_CREATED)


@router.get("", response_model=Envelope[list[ReportResponse]], summary="List reports")
async def list_reports(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    branch_id: str | None = Query(None, description="Branch filter (SuperAdmin only)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_reporting_service(db, current_user)
    result = await service.list(
        page=page,
        limit=limit,
        branch_id=current_user.scope_branch(branch_id),
    )
    return envelope_response(result)


@router.get("/{report_id}", response_model=Envelope[ReportResponse], summary="Get report")
async def get_report(
    report_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_reporting_service(db, current_user)
    return envelope_response(await service.get(report_id))


@router.delete("/{report_id}", response_model=Envelope, summary="Delete report")
async def delete_report(
    report_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_reporting_service(db, current_user)
    return envelope_response(await service.delete(report_id))
