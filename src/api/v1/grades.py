# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade API endpoints.

This module provides endpoints for grading:
- GET /course/{course_id} - Grades of a course
- POST / - Record one grade
- POST /bulk - Publish one assessment for many students
- PUT /{grade_id} - Correct a grade
- DELETE /{grade_id} - Delete a grade

The grading teacher is resolved from the authenticated user.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.middleware.rate_limit import RATE_LIMIT_BULK, limiter
from src.api.responses import envelope_response
from src.domains.grade import GradeService
from src.models.common import Envelope
from src.models.grade import GradeRecord, GradeResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_grade_service(db: AsyncSession, current_user: CurrentUser) -> GradeService:
    return GradeService(db, actor_id=current_user.id)


@router.get(
    "/course/{course_id}",
    response_model=Envelope[list[GradeRecord]],
    summary="Course grades",
)
async def get_course_grades(
    course_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_grade_service(db, current_user)
    return envelope_response(await service.by_course(course_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[GradeResponse],
    summary="Record grade",
)
async def record_grade(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_grade_service(db, current_user)
    return envelope_response(await service.record(payload), status.HTTP_201_CREATED)


@router.post("/bulk", response_model=Envelope[dict[str, Any]], summary="Publish grades")
@limiter.limit(RATE_LIMIT_BULK)
async def bulk_grades(
    request: Request,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Upsert one assessment's grades for many students.

    The caller must have a teacher profile.
    """
    logger.info(
        "Publishing %s grades for course %s, by=%s",
        payload.get("assessment_type"),
        payload.get("course_id"),
        current_user.id,
    )

    service = _get_grade_service(db, current_user)
    return envelope_response(await service.bulk_upsert(payload))


@router.put("/{grade_id}", response_model=Envelope[GradeResponse], summary="Update grade")
async def update_grade(
    grade_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_grade_service(db, current_user)
    return envelope_response(await service.update(grade_id, payload))


@router.delete("/{grade_id}", response_model=Envelope, summary="Delete grade")
async def delete_grade(
    grade_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_grade_service(db, current_user)
    return envelope_response(await service.delete(grade_id))
