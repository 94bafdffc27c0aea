# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints.

This module provides endpoints for student records:
- GET / - List students of the caller's branch
- GET /{student_id} - Get student details
- POST / - Create a student (optionally with a login account)
- PUT /{student_id} - Update student
- DELETE /{student_id} - Deactivate student
- GET /{student_id}/enrollments - Course enrollments
- GET /{student_id}/grades - Grades with course projections
- GET /{student_id}/attendance - Attendance history
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth
from src.api.middleware.auth import CurrentUser
from src.api.responses import envelope_response
from src.domains.student import StudentService
from src.models.attendance import AttendanceRecord
from src.models.common import Envelope
from src.models.course import StudentEnrollment
from src.models.grade import GradeRecord
from src.models.student import StudentDetail, StudentResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_student_service(db: AsyncSession, current_user: CurrentUser) -> StudentService:
    return StudentService(db, actor_id=current_user.id)


@router.get("", response_model=Envelope[list[StudentResponse]], summary="List students")
async def list_students(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    search: str | None = Query(None, description="Search names, contact, code or national ID"),
    branch_id: str | None = Query(None, description="Branch filter (SuperAdmin only)"),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    result = await service.list(
        page=page,
        limit=limit,
        search=search,
        branch_id=current_user.scope_branch(branch_id),
    )
    return envelope_response(result)


@router.get("/{student_id}", response_model=Envelope[StudentDetail], summary="Get student")
async def get_student(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    return envelope_response(await service.get(student_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[StudentResponse],
    summary="Create student",
)
async def create_student(
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Create a student.

    When ``username`` and ``password`` are both supplied, a login account
    with the Student role is created in the same transaction.
    """
    logger.info(
        "Creating student: code=%s, by=%s", payload.get("student_code"), current_user.id
    )

    service = _get_student_service(db, current_user)
    return envelope_response(await service.create(payload), status.HTTP_201_CREATED)


@router.put("/{student_id}", response_model=Envelope[StudentResponse], summary="Update student")
async def update_student(
    student_id: str,
    payload: dict[str, Any] = Body(...),
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    return envelope_response(await service.update(student_id, payload))


@router.delete("/{student_id}", response_model=Envelope, summary="Deactivate student")
async def delete_student(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    return envelope_response(await service.delete(student_id))


@router.get(
    "/{student_id}/enrollments",
    response_model=Envelope[list[StudentEnrollment]],
    summary="Student enrollments",
)
async def get_student_enrollments(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    return envelope_response(await service.enrollments(student_id))


@router.get(
    "/{student_id}/grades",
    response_model=Envelope[list[GradeRecord]],
    summary="Student grades",
)
async def get_student_grades(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    return envelope_response(await service.grades(student_id))


@router.get(
    "/{student_id}/attendance",
    response_model=Envelope[list[AttendanceRecord]],
    summary="Student attendance",
)
async def get_student_attendance(
    student_id: str,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    service = _get_student_service(db, current_user)
    return envelope_response(await service.attendance(student_id))
