# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance API endpoints.

This module provides endpoints for attendance tracking:
- GET / - List attendance of the caller's branch, newest day first
- POST / - Mark one student (updates an existing mark for that day)
- POST /bulk - Mark many students of one course in one transaction
- GET /course/{course_id} - Attendance of a course, optionally for one day
"""

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.middleware.rate_limit import RATE_LIMIT_BULK, limiter
from src.api.responses import envelope_response
from src.domains.attendance import AttendanceService
from src.models.attendance import AttendanceRecord, AttendanceResponse
from src.models.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_attendance_service(db: AsyncSession, current_user: CurrentUser) -> AttendanceService:
    """Attendance marks are recorded as made by the calling user."""
    return AttendanceService(db, actor_id=current_user.id)


@router.get("", response_model=Envelope[list[AttendanceRecord]], summary="List attendance")
async def list_attendance(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    branch_id: str | None = Query(None, description="Branch filter (SuperAdmin only)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_attendance_service(db, current_user)
    result = await service.list(
        page=page,
        limit=limit,
        branch_id=current_user.scope_branch(branch_id),
    )
    return envelope_response(result)


@router.post("", response_model=Envelope[AttendanceResponse], summary="Mark attendance")
async def mark_attendance(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Mark one student's attendance.

    Without ``course_id`` the student's first enrollment is used.
    """
    service = _get_attendance_service(db, current_user)
    return envelope_response(await service.mark(payload))


@router.post("/bulk", response_model=Envelope[dict[str, Any]], summary="Bulk mark attendance")
@limiter.limit(RATE_LIMIT_BULK)
async def bulk_mark_attendance(
    request: Request,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    logger.info(
        "Bulk attendance for course %s on %s, by=%s",
        payload.get("course_id"),
        payload.get("date"),
        current_user.id,
    )

    service = _get_attendance_service(db, current_user)
    return envelope_response(await service.bulk_mark(payload))


@router.get(
    "/course/{course_id}",
    response_model=Envelope[list[AttendanceRecord]],
    summary="Course attendance",
)
async def get_course_attendance(
    course_id: str,
    day: date | None = Query(None, alias="date", description="Restrict to one day"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_attendance_service(db, current_user)
    return envelope_response(await service.by_course(course_id, day))
